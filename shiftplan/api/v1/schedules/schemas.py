from datetime import datetime, time
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_serializer


class ScheduleUpsert(BaseModel):
    """Full replacement of an associate's recurring shift. Weekdays: 0=Sunday .. 6=Saturday."""

    weekoff_1: int = Field(0, description="0=Sunday .. 6=Saturday")
    weekoff_2: int = Field(6, description="0=Sunday .. 6=Saturday")
    shift_start: str = Field("09:00", description="24-hour format, e.g. 09:00")
    shift_end: str = Field("18:00", description="24-hour format, e.g. 18:00")


class ScheduleResponse(BaseModel):
    user_id: UUID
    weekoff_1: int
    weekoff_2: int
    weekoff_days: List[str]
    shift_start: time
    shift_end: time
    updated_at: datetime

    class Config:
        from_attributes = True

    @field_serializer("shift_start", "shift_end")
    def serialize_time_24(self, t: time) -> str:
        """Output as 24-hour string HH:MM (e.g. 09:00, 18:00)."""
        return t.strftime("%H:%M")


class AssociateResponse(BaseModel):
    id: UUID
    full_name: str
    email: EmailStr
    schedule: Optional[ScheduleResponse] = None
