"""Identity provider: sign-up, sign-in, token refresh, sign-out and session lookup."""

import logging
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shiftplan.auth.models import AuthSession, Identity
from shiftplan.auth.schemas import (
    ManagerOption,
    Session,
    SignInRequest,
    SignUpRequest,
    SignUpResponse,
    TokenResponse,
)
from shiftplan.auth.security import (
    create_access_token,
    create_refresh_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from shiftplan.core.enums import UserRole
from shiftplan.core.exceptions import (
    AuthenticationError,
    ConflictError,
    StoreError,
    ValidationError,
)
from shiftplan.core.models import User
from shiftplan.db.session import commit_or_raise

logger = logging.getLogger(__name__)

ALREADY_REGISTERED_MESSAGE = "User already registered. Please log in."


def _aware(dt: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone=True columns
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


async def _find_identity(db: AsyncSession, email: str) -> Optional[Identity]:
    result = await db.execute(
        select(Identity).where(func.lower(Identity.email) == email.strip().lower())
    )
    return result.scalar_one_or_none()


async def sign_up(db: AsyncSession, payload: SignUpRequest) -> SignUpResponse:
    # 1. Email must not be registered yet
    if await _find_identity(db, payload.email):
        raise ConflictError(ALREADY_REGISTERED_MESSAGE)

    # 2. Associates are linked to an existing manager
    manager_id: Optional[UUID] = None
    if payload.role == UserRole.ASSOCIATE:
        result = await db.execute(
            select(User).where(
                func.lower(User.email) == payload.manager_email.strip().lower(),
                User.role == UserRole.MANAGER.value,
            )
        )
        manager = result.scalar_one_or_none()
        if not manager:
            raise ValidationError(f"No manager found with email {payload.manager_email}")
        manager_id = manager.id

    # 3. Identity, then profile, in one transaction
    email = payload.email.strip().lower()
    identity = Identity(email=email, password_hash=hash_password(payload.password))
    db.add(identity)
    try:
        await db.flush()  # to populate identity.id
        profile = User(
            id=identity.id,
            full_name=payload.full_name.strip(),
            email=email,
            role=payload.role.value,
            manager_id=manager_id,
        )
        db.add(profile)
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        # Lost a race with a concurrent sign-up for the same email
        raise ConflictError(ALREADY_REGISTERED_MESSAGE) from e
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Sign-up failed for %s", email)
        raise StoreError("Failed to create account") from e

    logger.info("Signed up %s as %s", email, payload.role.value)
    return SignUpResponse(success=True, message="Account created successfully", user_id=identity.id)


async def _open_session(db: AsyncSession, identity_id: UUID) -> TokenResponse:
    refresh_token_str, refresh_expires_at = create_refresh_token()
    auth_session = AuthSession(
        identity_id=identity_id,
        refresh_token=refresh_token_str,
        expires_at=refresh_expires_at,
    )
    db.add(auth_session)
    await commit_or_raise(db, "persist authentication state")
    await db.refresh(auth_session)

    issued_at = datetime.now(timezone.utc)
    access_token = create_access_token(
        subject={
            "sub": str(identity_id),
            "sid": str(auth_session.id),
            "iat": int(issued_at.timestamp()),
        }
    )
    return TokenResponse(
        access_token=access_token,
        refresh_token=refresh_token_str,
        issued_at=issued_at,
    )


async def sign_in(db: AsyncSession, payload: SignInRequest) -> TokenResponse:
    identity = await _find_identity(db, payload.email)
    if not identity or not verify_password(payload.password, identity.password_hash):
        raise AuthenticationError("Invalid credentials")
    tokens = await _open_session(db, identity.id)
    logger.info("Signed in %s", identity.email)
    return tokens


async def refresh(db: AsyncSession, refresh_token: str) -> TokenResponse:
    """Exchange a live refresh token for a fresh access token (same session)."""
    result = await db.execute(
        select(AuthSession).where(AuthSession.refresh_token == refresh_token)
    )
    auth_session = result.scalar_one_or_none()
    if not auth_session or not _is_live(auth_session):
        raise AuthenticationError("Session expired. Please sign in again.")

    issued_at = datetime.now(timezone.utc)
    access_token = create_access_token(
        subject={
            "sub": str(auth_session.identity_id),
            "sid": str(auth_session.id),
            "iat": int(issued_at.timestamp()),
        }
    )
    return TokenResponse(
        access_token=access_token,
        refresh_token=auth_session.refresh_token,
        issued_at=issued_at,
    )


def _is_live(auth_session: AuthSession) -> bool:
    if auth_session.revoked_at is not None:
        return False
    return _aware(auth_session.expires_at) > datetime.now(timezone.utc)


async def sign_out(db: AsyncSession, session: Session) -> None:
    auth_session = await db.get(AuthSession, session.session_id)
    if not auth_session or auth_session.revoked_at is not None:
        return
    auth_session.revoked_at = datetime.now(timezone.utc)
    await commit_or_raise(db, "sign out")
    logger.info("Signed out session %s", session.session_id)


async def load_session(db: AsyncSession, token: str) -> Optional[Session]:
    """Session for a bearer token, or None when the token is invalid, expired or signed out."""
    payload = decode_access_token(token)
    if not payload:
        return None
    try:
        user_id = UUID(payload.get("sub") or "")
        session_id = UUID(payload.get("sid") or "")
    except ValueError:
        return None

    try:
        auth_session = await db.get(AuthSession, session_id)
    except SQLAlchemyError as e:
        logger.exception("Session lookup failed for %s", session_id)
        raise StoreError("Failed to load session") from e
    if not auth_session or auth_session.identity_id != user_id or not _is_live(auth_session):
        return None
    return Session(session_id=session_id, user_id=user_id)


async def list_managers(db: AsyncSession) -> List[ManagerOption]:
    """Managers an associate can pick at sign-up."""
    result = await db.execute(
        select(User).where(User.role == UserRole.MANAGER.value).order_by(User.full_name)
    )
    return [
        ManagerOption(id=m.id, full_name=m.full_name, email=m.email)
        for m in result.scalars().all()
    ]
