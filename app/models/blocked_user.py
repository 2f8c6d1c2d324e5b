"""
BlockedUser model for user blocking functionality.

A block is a directed edge, but the privacy gate checks it in both
directions: neither side can message the other while it exists.
"""
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, UUIDMixin
from app.utils.datetime_utils import utc_now


class BlockedUser(Base, UUIDMixin):
    """
    BlockedUser model - tracks which users have blocked each other.

    Blocking gates new messages only; existing history stays visible.
    """

    __tablename__ = "blocked_users"
    __table_args__ = (
        UniqueConstraint("blocker_id", "blocked_id", name="uq_blocked_users_pair"),
    )

    blocker_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        doc="User who is blocking"
    )

    blocked_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        doc="User who is being blocked"
    )

    reason: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
        doc="Optional reason supplied by the blocker"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        server_default=func.now(),
        nullable=False,
        doc="When the block was created"
    )

    def __repr__(self) -> str:
        return f"<BlockedUser(blocker_id={self.blocker_id}, blocked_id={self.blocked_id})>"


# Indexes for performance
Index("idx_blocked_users_blocker", BlockedUser.blocker_id)
Index("idx_blocked_users_blocked", BlockedUser.blocked_id)
