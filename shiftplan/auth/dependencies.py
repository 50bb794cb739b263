from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from shiftplan.auth.gate import DEFAULT_VIEW, View, resolve_view
from shiftplan.auth.resolver import resolve_role
from shiftplan.auth.schemas import Session, SessionContext
from shiftplan.auth.services import load_session
from shiftplan.core.exceptions import ServiceError
from shiftplan.db.session import get_db


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/sign-in-oauth", auto_error=False)


async def get_optional_session(
    token: Optional[str] = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> Optional[Session]:
    """Session for the bearer token, or None for an anonymous / signed-out caller."""
    if not token:
        return None
    try:
        return await load_session(db, token)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


async def get_current_session(
    session: Optional[Session] = Depends(get_optional_session),
) -> Session:
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer", "X-Redirect-To": View.SIGN_IN.value},
        )
    return session


async def get_optional_context(
    session: Optional[Session] = Depends(get_optional_session),
    db: AsyncSession = Depends(get_db),
) -> SessionContext:
    return await resolve_role(db, session)


async def get_session_context(
    session: Session = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
) -> SessionContext:
    """Authenticated caller with resolved role (role may still be None)."""
    return await resolve_role(db, session)


async def require_manager(
    ctx: SessionContext = Depends(get_session_context),
) -> SessionContext:
    """Gate for manager-only views. Unresolved role counts as not-manager."""
    decision = resolve_view(View.ASSOCIATES, ctx)
    if not decision.allowed:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only managers can access this resource",
            headers={"X-Redirect-To": DEFAULT_VIEW.value},
        )
    return ctx
