from datetime import date
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from shiftplan.api.v1.leaves import service as leave_service
from shiftplan.api.v1.schedules import service as schedule_service
from shiftplan.auth.schemas import SessionContext
from shiftplan.core.calendar import build_month, month_bounds, shift_month
from shiftplan.core.config import settings
from shiftplan.core.exceptions import AuthorizationError, NotFoundError
from shiftplan.core.models import User

from .schemas import CalendarResponse, MonthRef


async def _resolve_target(db: AsyncSession, ctx: SessionContext, user_id: Optional[UUID]) -> UUID:
    """Own calendar by default; a manager may open one of their associates' calendars."""
    if user_id is None or user_id == ctx.user_id:
        return ctx.user_id
    if not ctx.is_manager:
        raise AuthorizationError("You can only view your own calendar")
    target = await db.get(User, user_id)
    if not target:
        raise NotFoundError("User not found")
    if target.manager_id != ctx.user_id:
        raise AuthorizationError("Associate is not on your team")
    return target.id


async def get_month_calendar(
    db: AsyncSession,
    ctx: SessionContext,
    year: int,
    month: int,
    user_id: Optional[UUID] = None,
) -> CalendarResponse:
    target_id = await _resolve_target(db, ctx, user_id)
    first, last = month_bounds(year, month)

    schedule = await schedule_service.get_schedule(db, target_id)
    leaves = await leave_service.list_leaves_between(db, target_id, first, last)
    days = build_month(
        year,
        month,
        schedule,
        leaves,
        show_rejected=settings.calendar_show_rejected_leaves,
    )

    prev_year, prev_month = shift_month(year, month, -1)
    next_year, next_month = shift_month(year, month, 1)
    return CalendarResponse(
        user_id=target_id,
        year=year,
        month=month,
        title=date(year, month, 1).strftime("%B %Y"),
        schedule_loaded=schedule is not None,
        days=days,
        previous=MonthRef(year=prev_year, month=prev_month),
        next=MonthRef(year=next_year, month=next_month),
    )
