"""
Resolve the caller's role and manager linkage from the profile store.

A session whose profile row is missing (sign-up not materialized yet) or whose
lookup fails keeps role=None; no role is guessed.
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shiftplan.auth.schemas import Session, SessionContext
from shiftplan.core.enums import UserRole
from shiftplan.core.models import User

logger = logging.getLogger(__name__)


async def resolve_role(db: AsyncSession, session: Optional[Session]) -> SessionContext:
    if session is None:
        return SessionContext()

    try:
        user = await db.get(User, session.user_id)
    except SQLAlchemyError:
        logger.exception("Profile lookup failed for %s", session.user_id)
        return SessionContext(user_id=session.user_id)

    if not user:
        logger.warning("No profile row for authenticated user %s", session.user_id)
        return SessionContext(user_id=session.user_id)

    try:
        role = UserRole(user.role)
    except ValueError:
        logger.warning("Unknown role %r on profile %s", user.role, user.id)
        return SessionContext(user_id=user.id)

    return SessionContext(user_id=user.id, role=role, manager_id=user.manager_id)
