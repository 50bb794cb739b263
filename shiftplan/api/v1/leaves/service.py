"""Leave submit, list and approve/reject."""

import logging
from datetime import date, datetime
from typing import List, Optional, Union
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.orm.attributes import set_committed_value

from shiftplan.auth.schemas import SessionContext
from shiftplan.core.config import settings
from shiftplan.core.enums import LeaveStatus, LeaveType, UserRole
from shiftplan.core.exceptions import (
    AuthorizationError,
    NotFoundError,
    StateError,
    StoreError,
    ValidationError,
)
from shiftplan.core.models import Leave, User
from shiftplan.db.session import commit_or_raise

from .schemas import LeaveResponse

logger = logging.getLogger(__name__)

LEAVE_TYPES: List[str] = [t.value for t in LeaveType]
TRANSITION_TARGETS = (LeaveStatus.APPROVED.value, LeaveStatus.REJECTED.value)


def list_leave_types() -> List[str]:
    return list(LEAVE_TYPES)


def parse_date(value: Union[date, str, None], field: str) -> date:
    if isinstance(value, date):
        return value
    if not value or not isinstance(value, str):
        raise ValidationError(f"{field} is required (YYYY-MM-DD)")
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"{field} must be a valid date in YYYY-MM-DD format")


def _to_response(leave: Leave, owner: Optional[User] = None) -> LeaveResponse:
    owner = owner or leave.user
    return LeaveResponse(
        id=leave.id,
        user_id=leave.user_id,
        user_full_name=owner.full_name if owner else None,
        leave_type=leave.leave_type,
        start_date=leave.start_date,
        end_date=leave.end_date,
        status=leave.status,
        comment=leave.comment,
        created_at=leave.created_at,
    )


async def submit_leave(
    db: AsyncSession,
    user_id: UUID,
    leave_type: str,
    start_date: Union[date, str],
    end_date: Union[date, str],
    comment: Optional[str] = None,
) -> LeaveResponse:
    """Create a pending leave owned by user_id."""
    if leave_type not in LEAVE_TYPES:
        raise ValidationError(f"Invalid leave type '{leave_type}'. Allowed: {', '.join(LEAVE_TYPES)}")
    start = parse_date(start_date, "start_date")
    end = parse_date(end_date, "end_date")
    if settings.leave_require_ordered_dates and end < start:
        raise ValidationError("end_date must be on or after start_date")

    owner = await db.get(User, user_id)
    if not owner:
        raise AuthorizationError("No profile found for this account")
    if owner.role != UserRole.ASSOCIATE.value:
        raise AuthorizationError("Only associates can request leave")

    leave = Leave(
        user_id=user_id,
        leave_type=leave_type,
        start_date=start,
        end_date=end,
        status=LeaveStatus.PENDING.value,
        comment=comment.strip() if comment and comment.strip() else None,
    )
    db.add(leave)
    await commit_or_raise(db, "create leave request")
    logger.info("Leave %s (%s, %s..%s) submitted by %s", leave.id, leave_type, start, end, user_id)
    return _to_response(leave, owner)


async def get_leave(db: AsyncSession, leave_id: UUID) -> Optional[Leave]:
    return (await db.execute(
        select(Leave).options(selectinload(Leave.user)).where(Leave.id == leave_id)
    )).scalar_one_or_none()


async def transition_status(
    db: AsyncSession,
    leave_id: UUID,
    new_status: str,
    acting_user_id: UUID,
) -> LeaveResponse:
    """pending -> approved | rejected, by the owner's manager. Exactly one transition per leave."""
    if new_status not in TRANSITION_TARGETS:
        raise ValidationError("status must be one of: approved, rejected")

    leave = await get_leave(db, leave_id)
    if not leave:
        raise NotFoundError("Leave request not found")
    if leave.status != LeaveStatus.PENDING.value:
        raise StateError(f"Only pending leave can be {new_status}; this one is {leave.status}")

    actor = await db.get(User, acting_user_id)
    if not actor or actor.role != UserRole.MANAGER.value:
        raise AuthorizationError("Only managers can approve or reject leave")
    if not leave.user or leave.user.manager_id != actor.id:
        raise AuthorizationError("Leave belongs to an associate outside your team")

    # Conditional write: only one of two concurrent decisions can match the pending row
    try:
        result = await db.execute(
            update(Leave)
            .where(Leave.id == leave.id, Leave.status == LeaveStatus.PENDING.value)
            .values(status=new_status, updated_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Leave %s update failed", leave.id)
        raise StoreError(f"Failed to mark leave {new_status}") from e
    if result.rowcount == 0:
        await db.rollback()
        raise StateError("Only pending leave can be decided; this one was already decided")

    await commit_or_raise(db, f"mark leave {new_status}")
    set_committed_value(leave, "status", new_status)
    logger.info("Leave %s %s by %s", leave.id, new_status, acting_user_id)
    return _to_response(leave)


async def list_leaves(db: AsyncSession, ctx: SessionContext) -> List[LeaveResponse]:
    """Managers: their associates' leaves. Everyone else: their own. Newest first."""
    q = select(Leave).options(selectinload(Leave.user))
    if ctx.role == UserRole.MANAGER:
        q = q.join(User, Leave.user_id == User.id).where(User.manager_id == ctx.user_id)
    else:
        q = q.where(Leave.user_id == ctx.user_id)
    q = q.order_by(Leave.created_at.desc())
    result = await db.execute(q)
    return [_to_response(r) for r in result.scalars().all()]


async def list_leaves_between(
    db: AsyncSession,
    user_id: UUID,
    first: date,
    last: date,
) -> List[Leave]:
    """Leaves of one user whose [start_date, end_date] intersects [first, last], oldest first."""
    result = await db.execute(
        select(Leave)
        .where(
            Leave.user_id == user_id,
            Leave.start_date <= last,
            Leave.end_date >= first,
        )
        .order_by(Leave.created_at)
    )
    return list(result.scalars().all())
