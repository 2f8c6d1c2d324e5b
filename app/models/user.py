"""
User model.

Holds account credentials, public profile fields and the messaging
privacy setting consulted by the privacy gate.
"""
import enum
from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, UUIDMixin, TimestampMixin


class WhoCanMessage(str, enum.Enum):
    """Who may start a new conversation with a user."""
    EVERYONE = "everyone"
    FOLLOWERS = "followers"
    NONE = "none"


class User(Base, UUIDMixin, TimestampMixin):
    """User account."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        doc="Login email (unique)"
    )

    username: Mapped[str | None] = mapped_column(
        String(50),
        unique=True,
        nullable=True,
        doc="Public handle (unique when set)"
    )

    first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)

    avatar_url: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
        doc="Profile picture URL"
    )

    bio: Mapped[str | None] = mapped_column(Text, nullable=True)

    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        doc="Bcrypt password hash"
    )

    is_active: Mapped[bool] = mapped_column(
        default=True,
        nullable=False,
        doc="Disabled accounts cannot log in"
    )

    email_verified: Mapped[bool] = mapped_column(default=False, nullable=False)

    # Kept as a plain string: rows written before a value was retired
    # must still load, and the privacy gate treats unknown values as open.
    who_can_message: Mapped[str] = mapped_column(
        String(20),
        default=WhoCanMessage.EVERYONE.value,
        server_default=WhoCanMessage.EVERYONE.value,
        nullable=False,
        doc="Messaging privacy: 'everyone', 'followers' or 'none'"
    )

    last_login_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        doc="Last successful login"
    )

    @property
    def full_name(self) -> str | None:
        """First and last name joined, or None when both are empty."""
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) if parts else None

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, username={self.username})>"

