"""Recurring shift: two weekly days off and a daily start/end time. One row per associate."""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Time, Uuid
from sqlalchemy.orm import relationship

from shiftplan.db.session import Base


class Schedule(Base):
    __tablename__ = "schedules"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    weekoff_1 = Column(Integer, nullable=False)  # 0=Sunday .. 6=Saturday
    weekoff_2 = Column(Integer, nullable=False)
    shift_start = Column(Time, nullable=False)
    shift_end = Column(Time, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="schedule")
