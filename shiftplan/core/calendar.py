"""
Month grid derivation: one status per day from a recurring schedule and a set of leaves.

Classification order (first match wins):
  1. no schedule           -> unresolved
  2. weekday is a week-off -> week-off   (wins over a leave on the same date)
  3. inside a leave range  -> leave-approved / leave-pending, labelled with the leave type
  4. otherwise             -> working, labelled "HH:MM - HH:MM"

Weekdays are numbered 0=Sunday .. 6=Saturday, the numbering stored on schedules.
Pure: no I/O, same inputs give the same output.
"""

import calendar
from datetime import date, time, timedelta
from typing import Any, Iterable, List, Optional, Sequence, Tuple, Union

from pydantic import BaseModel

from shiftplan.core.enums import DayStatusType, LeaveStatus

UNRESOLVED_LABEL = "Loading..."
WEEK_OFF_LABEL = "Week Off"


class DayStatus(BaseModel):
    day: date
    weekday: int  # 0=Sunday .. 6=Saturday
    status: DayStatusType
    label: str


def weekday_index(d: date) -> int:
    """Python's Monday=0 weekday shifted to Sunday=0."""
    return (d.weekday() + 1) % 7


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    if not 1 <= month <= 12:
        raise ValueError("month must be between 1 and 12")
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    """(year, month) moved by delta months, e.g. shift_month(2024, 1, -1) == (2023, 12)."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def format_time(value: Union[time, str]) -> str:
    if isinstance(value, time):
        return value.strftime("%H:%M")
    return str(value)[:5]


def shift_label(schedule: Any) -> str:
    return f"{format_time(schedule.shift_start)} - {format_time(schedule.shift_end)}"


def _as_date(value: Union[date, str]) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def _status_value(leave: Any) -> str:
    s = leave.status
    return s.value if isinstance(s, LeaveStatus) else str(s)


def _marks_calendar(leave: Any, show_rejected: bool) -> bool:
    if _status_value(leave) == LeaveStatus.REJECTED.value:
        return show_rejected
    return True


def _leave_type_label(leave: Any) -> str:
    lt = leave.leave_type
    return lt.value if hasattr(lt, "value") else str(lt)


def classify_day(
    day: date,
    schedule: Optional[Any],
    leaves: Sequence[Any],
    show_rejected: bool = False,
) -> DayStatus:
    wd = weekday_index(day)
    if schedule is None:
        return DayStatus(day=day, weekday=wd, status=DayStatusType.UNRESOLVED, label=UNRESOLVED_LABEL)

    if wd == schedule.weekoff_1 or wd == schedule.weekoff_2:
        return DayStatus(day=day, weekday=wd, status=DayStatusType.WEEK_OFF, label=WEEK_OFF_LABEL)

    for leave in leaves:
        if not _marks_calendar(leave, show_rejected):
            continue
        if _as_date(leave.start_date) <= day <= _as_date(leave.end_date):
            status = (
                DayStatusType.LEAVE_APPROVED
                if _status_value(leave) == LeaveStatus.APPROVED.value
                else DayStatusType.LEAVE_PENDING
            )
            return DayStatus(day=day, weekday=wd, status=status, label=_leave_type_label(leave))

    return DayStatus(day=day, weekday=wd, status=DayStatusType.WORKING, label=shift_label(schedule))


def build_month(
    year: int,
    month: int,
    schedule: Optional[Any],
    leaves: Iterable[Any],
    show_rejected: bool = False,
) -> List[DayStatus]:
    """Classify every day of the month. schedule/leaves are duck-typed (ORM rows or schemas)."""
    first, last = month_bounds(year, month)
    leave_list = list(leaves)
    days: List[DayStatus] = []
    current = first
    while current <= last:
        days.append(classify_day(current, schedule, leave_list, show_rejected=show_rejected))
        current += timedelta(days=1)
    return days
