from typing import List

from fastapi import APIRouter, Depends

from shiftplan.auth.dependencies import get_optional_context
from shiftplan.auth.gate import GateDecision, MenuItem, View, menu_items, resolve_view
from shiftplan.auth.schemas import SessionContext

router = APIRouter(prefix="/api/v1/navigation", tags=["navigation"])


@router.get("/menu", response_model=List[MenuItem])
async def get_menu(
    ctx: SessionContext = Depends(get_optional_context),
) -> List[MenuItem]:
    """Menu entries for the caller; empty when signed out."""
    if not ctx.is_authenticated:
        return []
    return menu_items(ctx.role)


@router.get("/views/{view}", response_model=GateDecision)
async def check_view(
    view: View,
    ctx: SessionContext = Depends(get_optional_context),
) -> GateDecision:
    return resolve_view(view, ctx)
