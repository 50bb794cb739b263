from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from shiftplan.auth.dependencies import get_session_context
from shiftplan.auth.schemas import SessionContext
from shiftplan.core.exceptions import ServiceError
from shiftplan.db.session import get_db

from .schemas import CalendarResponse
from . import service

router = APIRouter(prefix="/api/v1/calendar", tags=["calendar"])


@router.get("", response_model=CalendarResponse)
async def get_calendar(
    year: Optional[int] = Query(None, ge=1, le=9999),
    month: Optional[int] = Query(None, ge=1, le=12),
    user_id: Optional[UUID] = Query(None, description="Associate to view (managers only); defaults to the caller"),
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
) -> CalendarResponse:
    """Month grid with a week-off / leave / working status per day. Defaults to the current month."""
    today = date.today()
    try:
        return await service.get_month_calendar(
            db,
            ctx,
            year or today.year,
            month or today.month,
            user_id=user_id,
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
