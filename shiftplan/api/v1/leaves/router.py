from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from shiftplan.auth.dependencies import get_session_context
from shiftplan.auth.schemas import SessionContext
from shiftplan.core.enums import LeaveStatus
from shiftplan.core.exceptions import ServiceError
from shiftplan.db.session import get_db

from .schemas import LeaveResponse, LeaveStatusUpdate, LeaveSubmit, LeaveTypeListResponse
from . import service

router = APIRouter(prefix="/api/v1/leaves", tags=["leaves"])


@router.get("/types", response_model=LeaveTypeListResponse)
async def list_leave_types(
    ctx: SessionContext = Depends(get_session_context),
) -> LeaveTypeListResponse:
    """Leave types for the request form dropdown."""
    return LeaveTypeListResponse(leave_types=service.list_leave_types())


@router.post(
    "",
    response_model=LeaveResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_leave(
    payload: LeaveSubmit,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
) -> LeaveResponse:
    """Request leave for the signed-in associate. Starts as pending."""
    try:
        return await service.submit_leave(
            db,
            ctx.user_id,
            payload.leave_type,
            payload.start_date,
            payload.end_date,
            payload.comment,
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("", response_model=List[LeaveResponse])
async def list_leaves(
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
) -> List[LeaveResponse]:
    """Managers see their associates' requests; associates see their own."""
    try:
        return await service.list_leaves(db, ctx)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


async def _transition(db: AsyncSession, leave_id: UUID, new_status: str, ctx: SessionContext) -> LeaveResponse:
    try:
        return await service.transition_status(db, leave_id, new_status, ctx.user_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.put("/{leave_id}/status", response_model=LeaveResponse)
async def update_leave_status(
    leave_id: UUID,
    payload: LeaveStatusUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
) -> LeaveResponse:
    return await _transition(db, leave_id, payload.status, ctx)


@router.post("/{leave_id}/approve", response_model=LeaveResponse)
async def approve_leave(
    leave_id: UUID,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
) -> LeaveResponse:
    """Approve a pending leave. Only the associate's manager."""
    return await _transition(db, leave_id, LeaveStatus.APPROVED.value, ctx)


@router.post("/{leave_id}/reject", response_model=LeaveResponse)
async def reject_leave(
    leave_id: UUID,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
) -> LeaveResponse:
    """Reject a pending leave. Only the associate's manager."""
    return await _transition(db, leave_id, LeaveStatus.REJECTED.value, ctx)
