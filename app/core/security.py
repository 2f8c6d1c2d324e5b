"""
Security utilities for authentication and authorization.
Handles password hashing and JWT access/refresh tokens.
"""
import jwt
from datetime import timedelta
from typing import Optional, Dict, Any
from passlib.context import CryptContext

from app.config import Settings, settings as default_settings
from app.core.errors import UnauthorizedError
from app.utils.datetime_utils import utc_now

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class SecurityException(UnauthorizedError):
    """Custom exception for security-related errors."""


class TokenService:
    """
    Issues and verifies JWTs.

    Secrets, algorithm and lifetimes come from the injected settings so
    tests and deployments can supply their own.
    """

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or default_settings

    def create_access_token(
        self,
        user_id: str,
        email: str,
        username: Optional[str] = None,
        expires_delta: Optional[timedelta] = None
    ) -> str:
        """
        Create JWT access token.

        Args:
            user_id: Subject user ID
            email: User email
            username: Optional username claim
            expires_delta: Optional expiration time delta

        Returns:
            Encoded JWT token

        Example:
            ```python
            token = tokens.create_access_token(user.id, user.email, user.username)
            ```
        """
        lifetime = expires_delta or timedelta(minutes=self.config.access_token_expire_minutes)
        claims = {"user_id": user_id, "email": email, "username": username}
        return self._encode(claims, ACCESS_TOKEN_TYPE, lifetime, self.config.jwt_secret)

    def create_refresh_token(
        self,
        user_id: str,
        email: str,
        expires_delta: Optional[timedelta] = None
    ) -> str:
        """Create JWT refresh token signed with the refresh secret."""
        lifetime = expires_delta or timedelta(days=self.config.refresh_token_expire_days)
        claims = {"user_id": user_id, "email": email}
        return self._encode(claims, REFRESH_TOKEN_TYPE, lifetime, self.config.jwt_refresh_secret)

    def decode_access_token(self, token: str) -> Dict[str, Any]:
        """
        Decode and validate an access token.

        Args:
            token: JWT token string

        Returns:
            Decoded token payload

        Raises:
            SecurityException: If token is invalid, expired, or not an access token
        """
        return self._decode(token, ACCESS_TOKEN_TYPE, self.config.jwt_secret)

    def decode_refresh_token(self, token: str) -> Dict[str, Any]:
        """Decode and validate a refresh token."""
        return self._decode(token, REFRESH_TOKEN_TYPE, self.config.jwt_refresh_secret)

    def _encode(self, claims: Dict[str, Any], token_type: str, lifetime: timedelta, secret: str) -> str:
        now = utc_now()
        to_encode = dict(claims)
        to_encode.update({"type": token_type, "exp": now + lifetime, "iat": now})
        return jwt.encode(to_encode, secret, algorithm=self.config.jwt_algorithm)

    def _decode(self, token: str, token_type: str, secret: str) -> Dict[str, Any]:
        try:
            payload = jwt.decode(token, secret, algorithms=[self.config.jwt_algorithm])
        except jwt.ExpiredSignatureError:
            raise SecurityException("Token has expired")
        except jwt.InvalidTokenError:
            raise SecurityException("Invalid token")

        if payload.get("type") != token_type or not payload.get("user_id"):
            raise SecurityException("Invalid token")
        return payload


def extract_token_from_header(authorization: str) -> str:
    """
    Extract JWT token from Authorization header.

    Args:
        authorization: Authorization header value (e.g., "Bearer <token>")

    Returns:
        Extracted token

    Raises:
        SecurityException: If header format is invalid

    Example:
        ```python
        token = extract_token_from_header("Bearer eyJhbG...")
        ```
    """
    if not authorization:
        raise SecurityException("Missing authorization header")

    parts = authorization.split()

    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise SecurityException("Invalid authorization header format")

    return parts[1]


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify password against hashed password.

    Args:
        plain_password: Plain text password
        hashed_password: Bcrypt hash

    Returns:
        True if password matches
    """
    return pwd_context.verify(plain_password, hashed_password)


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)
