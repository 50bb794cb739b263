import logging
from datetime import datetime, time
from typing import List, Optional, Union
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from shiftplan.core.config import settings
from shiftplan.core.enums import WEEKDAY_NAMES, UserRole
from shiftplan.core.exceptions import AuthorizationError, NotFoundError, StoreError, ValidationError
from shiftplan.core.models import Schedule, User
from shiftplan.db.session import commit_or_raise

from .schemas import AssociateResponse, ScheduleResponse

logger = logging.getLogger(__name__)


def parse_time_24(v: Union[str, time], field: str) -> time:
    """Parse 24-hour time string (HH:MM or HH:MM:SS) to time."""
    if isinstance(v, time):
        return v
    if isinstance(v, str):
        v = v.strip()
        fmt = "%H:%M" if len(v) == 5 else "%H:%M:%S"
        try:
            return datetime.strptime(v, fmt).time()
        except ValueError:
            pass
    raise ValidationError(f"{field} must be a 24-hour time string (e.g. 09:00)")


def validate_weekday(value: int, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 6:
        raise ValidationError(f"{field} must be a weekday index between 0 (Sunday) and 6 (Saturday)")
    return value


def _to_response(s: Schedule) -> ScheduleResponse:
    return ScheduleResponse(
        user_id=s.user_id,
        weekoff_1=s.weekoff_1,
        weekoff_2=s.weekoff_2,
        weekoff_days=[WEEKDAY_NAMES[s.weekoff_1], WEEKDAY_NAMES[s.weekoff_2]],
        shift_start=s.shift_start,
        shift_end=s.shift_end,
        updated_at=s.updated_at,
    )


def _apply(obj: Schedule, weekoff_1: int, weekoff_2: int, start: time, end: time) -> None:
    obj.weekoff_1 = weekoff_1
    obj.weekoff_2 = weekoff_2
    obj.shift_start = start
    obj.shift_end = end
    obj.updated_at = datetime.utcnow()


async def get_schedule(db: AsyncSession, user_id: UUID) -> Optional[Schedule]:
    result = await db.execute(select(Schedule).where(Schedule.user_id == user_id))
    return result.scalar_one_or_none()


async def get_schedule_response(db: AsyncSession, user_id: UUID) -> Optional[ScheduleResponse]:
    s = await get_schedule(db, user_id)
    return _to_response(s) if s else None


async def upsert_schedule(
    db: AsyncSession,
    associate_id: UUID,
    weekoff_1: int,
    weekoff_2: int,
    shift_start: Union[str, time],
    shift_end: Union[str, time],
    acting_user_id: UUID,
) -> ScheduleResponse:
    """Replace the associate's schedule (insert if none). Only that associate's manager may call this."""
    validate_weekday(weekoff_1, "weekoff_1")
    validate_weekday(weekoff_2, "weekoff_2")
    start = parse_time_24(shift_start, "shift_start")
    end = parse_time_24(shift_end, "shift_end")
    if weekoff_1 == weekoff_2:
        if settings.schedule_require_distinct_weekoffs:
            raise ValidationError("weekoff_1 and weekoff_2 must be different days")
        logger.warning(
            "Schedule for %s has the same week-off twice (%s)", associate_id, WEEKDAY_NAMES[weekoff_1]
        )

    actor = await db.get(User, acting_user_id)
    if not actor or actor.role != UserRole.MANAGER.value:
        raise AuthorizationError("Only managers can edit schedules")
    associate = await db.get(User, associate_id)
    if not associate or associate.role != UserRole.ASSOCIATE.value:
        raise NotFoundError("Associate not found")
    if associate.manager_id != actor.id:
        raise AuthorizationError("Associate is not on your team")

    obj = await get_schedule(db, associate_id)
    if obj is None:
        obj = Schedule(user_id=associate_id)
        db.add(obj)
        _apply(obj, weekoff_1, weekoff_2, start, end)
        try:
            await db.commit()
        except IntegrityError as e:
            # A concurrent first save created the row; overwrite it (last write wins)
            await db.rollback()
            logger.info("Schedule for %s created concurrently; updating it instead", associate_id)
            obj = await get_schedule(db, associate_id)
            if obj is None:
                logger.exception("Schedule insert for %s failed", associate_id)
                raise StoreError("Failed to save schedule") from e
            _apply(obj, weekoff_1, weekoff_2, start, end)
            await commit_or_raise(db, "save schedule")
        except SQLAlchemyError as e:
            await db.rollback()
            logger.exception("Schedule insert for %s failed", associate_id)
            raise StoreError("Failed to save schedule") from e
    else:
        _apply(obj, weekoff_1, weekoff_2, start, end)
        await commit_or_raise(db, "save schedule")
    logger.info(
        "Schedule for %s set by %s: off %s/%s, %s-%s",
        associate_id, acting_user_id, weekoff_1, weekoff_2, start, end,
    )
    return _to_response(obj)


async def list_associates(db: AsyncSession, manager_id: UUID) -> List[AssociateResponse]:
    """The manager's associates by name, each with their schedule (None when not set)."""
    result = await db.execute(
        select(User)
        .options(selectinload(User.schedule))
        .where(
            User.manager_id == manager_id,
            User.role == UserRole.ASSOCIATE.value,
        )
        .order_by(User.full_name)
    )
    return [
        AssociateResponse(
            id=u.id,
            full_name=u.full_name,
            email=u.email,
            schedule=_to_response(u.schedule) if u.schedule else None,
        )
        for u in result.scalars().all()
    ]
