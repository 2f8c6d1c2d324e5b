"""
Helper functions for common operations.
Provides reusable utility functions.
"""
import math
from typing import Any, Dict, List, Optional


def truncate_text(text: str, max_length: int = 100, suffix: str = "...") -> str:
    """
    Truncate text to ``max_length`` characters and append a suffix.

    Args:
        text: Text to truncate
        max_length: Characters kept before the suffix
        suffix: Suffix to add if truncated

    Returns:
        Truncated text

    Example:
        >>> truncate_text("This is a long text", 7)
        'This is...'
    """
    if len(text) <= max_length:
        return text

    return text[:max_length] + suffix


def build_pagination(
    page: int,
    limit: int,
    total: int,
    **extra: Any
) -> Dict[str, Any]:
    """
    Build page-number pagination metadata.

    Args:
        page: Current page (1-based)
        limit: Page size
        total: Total matching items
        **extra: Additional keys (e.g. total_unread)

    Returns:
        Pagination dict

    Example:
        >>> build_pagination(1, 20, 45)
        {'page': 1, 'limit': 20, 'total': 45, 'total_pages': 3, 'has_more': True}
    """
    total_pages = math.ceil(total / limit) if limit > 0 else 0
    pagination = {
        "page": page,
        "limit": limit,
        "total": total,
        "total_pages": total_pages,
        "has_more": page < total_pages,
    }
    pagination.update(extra)
    return pagination


def first_attachment_filename(attachments: Optional[List[Dict[str, Any]]]) -> Optional[str]:
    """Return the display filename of the first attachment, if any."""
    if not attachments:
        return None
    first = attachments[0]
    return first.get("filename") or first.get("original_filename") or None


def build_user_basic_info(user: Any) -> Dict[str, Any]:
    """Public identity of a user (id, username, full name, avatar) for embedding in responses."""
    return {
        "id": user.id,
        "username": user.username,
        "full_name": user.full_name,
        "avatar_url": user.avatar_url,
    }
