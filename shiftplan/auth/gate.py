"""
Navigation / access gate.

Two session states: unauthenticated and authenticated. Protected views send an
unauthenticated caller to sign-in. Manager-only views send any other role,
including an unresolved one, to the calendar; an authenticated caller is never
sent back to sign-in because its role is unknown.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from shiftplan.auth.schemas import SessionContext
from shiftplan.core.enums import UserRole


class View(str, Enum):
    SIGN_IN = "sign-in"
    SIGN_UP = "sign-up"
    CALENDAR = "calendar"
    ASSOCIATES = "associates"
    LEAVES = "leaves"


PUBLIC_VIEWS = frozenset({View.SIGN_IN, View.SIGN_UP})
MANAGER_ONLY_VIEWS = frozenset({View.ASSOCIATES})
DEFAULT_VIEW = View.CALENDAR


class GateDecision(BaseModel):
    view: View
    allowed: bool
    redirect_to: Optional[View] = None


class MenuItem(BaseModel):
    view: View
    title: str
    path: str


_MENU = [
    MenuItem(view=View.CALENDAR, title="Schedule", path="/"),
    MenuItem(view=View.ASSOCIATES, title="Associates", path="/associates"),
    MenuItem(view=View.LEAVES, title="Leaves", path="/leaves"),
]


def resolve_view(view: View, ctx: SessionContext) -> GateDecision:
    if view in PUBLIC_VIEWS:
        return GateDecision(view=view, allowed=True)
    if not ctx.is_authenticated:
        return GateDecision(view=view, allowed=False, redirect_to=View.SIGN_IN)
    if view in MANAGER_ONLY_VIEWS and ctx.role != UserRole.MANAGER:
        return GateDecision(view=view, allowed=False, redirect_to=DEFAULT_VIEW)
    return GateDecision(view=view, allowed=True)


def menu_items(role: Optional[UserRole]) -> List[MenuItem]:
    return [
        item for item in _MENU
        if item.view not in MANAGER_ONLY_VIEWS or role == UserRole.MANAGER
    ]
