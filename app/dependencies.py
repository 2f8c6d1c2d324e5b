"""
Dependency injection for FastAPI routes.
Provides reusable dependencies for authentication, database sessions, etc.
"""
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, settings
from app.core.database import get_db
from app.core.errors import ForbiddenError
from app.core.security import SecurityException, TokenService, extract_token_from_header
from app.models.user import User
from app.repositories.user_repo import UserRepository


def get_settings() -> Settings:
    """Dependency returning application settings (overridable in tests)."""
    return settings


def get_token_service(config: Settings = Depends(get_settings)) -> TokenService:
    return TokenService(config)


async def get_current_user(
    authorization: Optional[str] = Header(None),
    tokens: TokenService = Depends(get_token_service),
    db: AsyncSession = Depends(get_db)
) -> User:
    """
    Dependency to get the current authenticated user.

    Flow:
    1. Extract the bearer token from the Authorization header
    2. Verify it as an access token
    3. Load the user named by its ``user_id`` claim

    Args:
        authorization: Authorization header containing Bearer token
        tokens: Token verifier built from settings
        db: Database session

    Returns:
        The authenticated User

    Raises:
        SecurityException: 401 if the header is missing, the token is
            invalid, or the user no longer exists
        ForbiddenError: 403 if the account is disabled

    Example:
        ```python
        @router.get("/protected")
        async def protected_route(current_user: User = Depends(get_current_user)):
            return {"user_id": current_user.id}
        ```
    """
    token = extract_token_from_header(authorization)
    payload = tokens.decode_access_token(token)

    user = await UserRepository(db).get(payload["user_id"])
    if user is None:
        raise SecurityException("User not found")

    if not user.is_active:
        raise ForbiddenError("account is disabled")

    return user
