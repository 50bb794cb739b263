import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import relationship

from shiftplan.db.session import Base


class Identity(Base):
    """Sign-in credentials. The profile row in users shares this id once created."""

    __tablename__ = "identities"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # Stored lowercased; lookups are case-insensitive
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    sessions = relationship(
        "AuthSession", back_populates="identity", cascade="all, delete-orphan"
    )


class AuthSession(Base):
    """One signed-in session. Access tokens carry its id; revoking it signs the session out."""

    __tablename__ = "auth_sessions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    identity_id = Column(Uuid(as_uuid=True), ForeignKey("identities.id", ondelete="CASCADE"), nullable=False, index=True)
    refresh_token = Column(String(512), nullable=False, unique=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    revoked_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    identity = relationship("Identity", back_populates="sessions")
