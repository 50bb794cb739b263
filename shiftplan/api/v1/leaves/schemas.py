from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


# ----- Submit Leave -----
class LeaveSubmit(BaseModel):
    """Leave request from the signed-in associate. Dates are YYYY-MM-DD, both inclusive."""

    leave_type: str = Field(..., max_length=50)
    start_date: str = Field(..., description="YYYY-MM-DD")
    end_date: str = Field(..., description="YYYY-MM-DD")
    comment: Optional[str] = Field(None, max_length=2000)


# ----- Status transition -----
class LeaveStatusUpdate(BaseModel):
    status: str = Field(..., description="approved | rejected")


# ----- Leave Response -----
class LeaveResponse(BaseModel):
    id: UUID
    user_id: UUID
    user_full_name: Optional[str] = None
    leave_type: str
    start_date: date
    end_date: date
    status: str
    comment: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class LeaveTypeListResponse(BaseModel):
    leave_types: List[str]
