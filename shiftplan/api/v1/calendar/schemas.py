from typing import List
from uuid import UUID

from pydantic import BaseModel

from shiftplan.core.calendar import DayStatus


class MonthRef(BaseModel):
    year: int
    month: int


class CalendarResponse(BaseModel):
    user_id: UUID
    year: int
    month: int
    title: str  # e.g. "June 2024"
    # False until a schedule exists; every day is then "unresolved"
    schedule_loaded: bool
    days: List[DayStatus]
    previous: MonthRef
    next: MonthRef
