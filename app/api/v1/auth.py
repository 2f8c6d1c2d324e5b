"""
Authentication API endpoints.
Provides signup, login and token refresh.
"""
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, settings
from app.core.database import get_db
from app.core.rate_limit import limiter
from app.dependencies import get_settings
from app.schemas.auth import (
    AuthResponse,
    LoginRequest,
    RefreshRequest,
    SignupRequest,
    TokenResponse
)
from app.services.auth_service import AuthService

router = APIRouter()


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.auth_rate_limit)
async def signup(
    request: Request,
    signup_data: SignupRequest,
    config: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db)
):
    """
    Create an account and return a token pair.

    **Errors:**
    - 409: Email or username already taken
    - 422: Malformed body
    """
    service = AuthService(db, config)
    return await service.signup(
        email=signup_data.email,
        password=signup_data.password,
        username=signup_data.username,
        first_name=signup_data.first_name,
        last_name=signup_data.last_name,
    )


@router.post("/login", response_model=AuthResponse)
@limiter.limit(settings.auth_rate_limit)
async def login(
    request: Request,
    credentials: LoginRequest,
    config: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db)
):
    """
    Authenticate with email and password.

    **Errors:**
    - 401: Invalid credentials
    - 403: Account is disabled
    """
    service = AuthService(db, config)
    return await service.login(credentials.email, credentials.password)


@router.post("/refresh", response_model=TokenResponse)
async def refresh(
    refresh_data: RefreshRequest,
    config: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db)
):
    """Exchange a refresh token for a new token pair."""
    service = AuthService(db, config)
    return await service.refresh(refresh_data.refresh_token)
