"""
Authentication service: signup, login and token refresh.
"""
import logging
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, settings as default_settings
from app.core.errors import ConflictError, ForbiddenError, UnauthorizedError
from app.core.security import TokenService, hash_password, verify_password
from app.models.user import User
from app.repositories.user_repo import UserRepository

logger = logging.getLogger(__name__)


class AuthService:
    """Service for account creation and credential checks."""

    def __init__(self, db: AsyncSession, config: Optional[Settings] = None):
        """
        Initialize auth service.

        Args:
            db: Database session
            config: Settings providing token secrets and lifetimes
        """
        self.db = db
        self.config = config or default_settings
        self.user_repo = UserRepository(db)
        self.tokens = TokenService(self.config)

    def issue_tokens(self, user: User) -> Dict[str, Any]:
        """
        Build an access/refresh token pair for a user.

        Returns:
            Dict matching TokenResponse
        """
        return {
            "access_token": self.tokens.create_access_token(user.id, user.email, user.username),
            "refresh_token": self.tokens.create_refresh_token(user.id, user.email),
            "token_type": "bearer",
            "expires_in": self.config.access_token_expire_minutes * 60,
        }

    async def signup(
        self,
        email: str,
        password: str,
        username: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Create an account and log it in.

        Args:
            email: Login email (stored lowercase)
            password: Plain text password
            username: Optional public handle
            first_name: Optional first name
            last_name: Optional last name

        Returns:
            Dict with tokens and the new ``user``

        Raises:
            ConflictError: Email or username already taken
        """
        email = email.lower()

        if await self.user_repo.get_by_email(email) is not None:
            raise ConflictError("email already registered")

        if username and await self.user_repo.get_by_username(username) is not None:
            raise ConflictError("username already taken")

        user = await self.user_repo.create(
            email=email,
            username=username,
            first_name=first_name,
            last_name=last_name,
            password_hash=hash_password(password),
        )
        await self.db.commit()

        logger.info("User %s signed up", user.id)
        return {**self.issue_tokens(user), "user": user}

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        """
        Check credentials and issue tokens.

        Raises:
            UnauthorizedError: Unknown email or wrong password
            ForbiddenError: Account is disabled
        """
        user = await self.user_repo.get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            raise UnauthorizedError("invalid credentials")

        if not user.is_active:
            raise ForbiddenError("account is disabled")

        await self.user_repo.update_last_login(user.id)
        await self.db.commit()

        logger.info("User %s logged in", user.id)
        return {**self.issue_tokens(user), "user": user}

    async def refresh(self, refresh_token: str) -> Dict[str, Any]:
        """
        Exchange a refresh token for a new token pair.

        Raises:
            UnauthorizedError: Token invalid/expired or user gone or disabled
        """
        payload = self.tokens.decode_refresh_token(refresh_token)

        user = await self.user_repo.get(payload["user_id"])
        if user is None or not user.is_active:
            raise UnauthorizedError("invalid credentials")

        return self.issue_tokens(user)
