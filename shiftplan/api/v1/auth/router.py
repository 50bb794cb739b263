from fastapi import APIRouter, Depends, HTTPException
from fastapi import status as http_status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from shiftplan.auth import services
from shiftplan.auth.dependencies import get_current_session, get_optional_context
from shiftplan.auth.schemas import (
    ManagerListResponse,
    RefreshRequest,
    Session,
    SessionContext,
    SignInRequest,
    SignUpRequest,
    SignUpResponse,
    TokenResponse,
)
from shiftplan.core.exceptions import ServiceError
from shiftplan.db.session import get_db

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.post(
    "/sign-up",
    response_model=SignUpResponse,
    status_code=http_status.HTTP_201_CREATED,
)
async def sign_up(
    payload: SignUpRequest,
    db: AsyncSession = Depends(get_db),
) -> SignUpResponse:
    try:
        return await services.sign_up(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/managers", response_model=ManagerListResponse)
async def list_managers(
    db: AsyncSession = Depends(get_db),
) -> ManagerListResponse:
    """Managers an associate can choose when signing up."""
    return ManagerListResponse(managers=await services.list_managers(db))


@router.post("/sign-in", response_model=TokenResponse)
async def sign_in(
    payload: SignInRequest,
    db: AsyncSession = Depends(get_db),
) -> TokenResponse:
    try:
        return await services.sign_in(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post("/sign-in-oauth")
async def sign_in_oauth(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_db),
):
    payload = SignInRequest(
        email=form_data.username.strip(),
        password=form_data.password,
    )
    try:
        result = await services.sign_in(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return {
        "access_token": result.access_token,
        "token_type": "bearer",
    }


@router.post("/refresh", response_model=TokenResponse)
async def refresh(
    payload: RefreshRequest,
    db: AsyncSession = Depends(get_db),
) -> TokenResponse:
    try:
        return await services.refresh(db, payload.refresh_token)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post("/sign-out", status_code=http_status.HTTP_204_NO_CONTENT)
async def sign_out(
    session: Session = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
) -> None:
    try:
        await services.sign_out(db, session)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/session", response_model=SessionContext)
async def current_session(
    ctx: SessionContext = Depends(get_optional_context),
) -> SessionContext:
    """Role resolver output: {user_id, role, manager_id}, all null when signed out."""
    return ctx
