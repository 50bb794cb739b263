import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import relationship

from shiftplan.db.session import Base


class User(Base):
    """Profile row: name, email, role and (for associates) the owning manager."""

    __tablename__ = "users"

    # Same value as identities.id
    id = Column(Uuid(as_uuid=True), ForeignKey("identities.id", ondelete="CASCADE"), primary_key=True)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    # manager | associate
    role = Column(String(20), nullable=False)
    # Null for managers
    manager_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    manager = relationship("User", remote_side=[id], backref="associates")
    schedule = relationship("Schedule", back_populates="user", uselist=False, cascade="all, delete-orphan")
