from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from shiftplan.auth.dependencies import get_session_context, require_manager
from shiftplan.auth.schemas import SessionContext
from shiftplan.core.exceptions import ServiceError
from shiftplan.db.session import get_db

from .schemas import AssociateResponse, ScheduleResponse, ScheduleUpsert
from . import service

router = APIRouter(prefix="/api/v1/schedules", tags=["schedules"])


@router.get("/me", response_model=Optional[ScheduleResponse])
async def get_my_schedule(
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
) -> Optional[ScheduleResponse]:
    """The caller's own schedule; null until a manager sets one."""
    return await service.get_schedule_response(db, ctx.user_id)


@router.get("/associates", response_model=List[AssociateResponse])
async def list_associates(
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(require_manager),
) -> List[AssociateResponse]:
    """Roster of the manager's associates with their schedules."""
    return await service.list_associates(db, ctx.user_id)


@router.put(
    "/associates/{associate_id}",
    response_model=ScheduleResponse,
    status_code=status.HTTP_200_OK,
)
async def upsert_schedule(
    associate_id: UUID,
    payload: ScheduleUpsert,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(require_manager),
) -> ScheduleResponse:
    """Create or fully replace an associate's schedule."""
    try:
        return await service.upsert_schedule(
            db,
            associate_id,
            payload.weekoff_1,
            payload.weekoff_2,
            payload.shift_start,
            payload.shift_end,
            ctx.user_id,
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
