"""
Validation utilities for input data.
Provides reusable validation functions.
"""
from typing import Any, Dict, List, Optional, Tuple

from app.core.errors import BadRequestError
from app.models.message import MessageType
from app.models.user import WhoCanMessage

MAX_MESSAGE_LENGTH = 10000
MAX_ATTACHMENTS = 5


def normalize_pagination(
    page: Optional[int],
    limit: Optional[int],
    default_limit: int,
    max_limit: int
) -> Tuple[int, int]:
    """
    Normalize page-number pagination parameters.

    Pages below 1 become 1. A limit below 1 falls back to the default and
    a limit above the maximum is clamped to the maximum.

    Args:
        page: Requested page
        limit: Requested page size
        default_limit: Size used when none (or a non-positive one) is given
        max_limit: Largest allowed page size

    Returns:
        Tuple of (page, limit)

    Example:
        >>> normalize_pagination(0, 500, 20, 50)
        (1, 50)
    """
    if page is None or page < 1:
        page = 1

    if limit is None or limit < 1:
        limit = default_limit
    elif limit > max_limit:
        limit = max_limit

    return page, limit


def validate_message_payload(
    message_type: str,
    content: Optional[str],
    attachments: Optional[List[Dict[str, Any]]]
) -> MessageType:
    """
    Validate a message before it is sent.

    Args:
        message_type: 'text', 'image' or 'file'
        content: Message text
        attachments: Attachment metadata list

    Returns:
        The parsed MessageType

    Raises:
        BadRequestError: If the payload is invalid for its type
    """
    try:
        parsed_type = MessageType(message_type)
    except ValueError:
        raise BadRequestError("invalid message type: must be text, image, or file")

    if parsed_type == MessageType.TEXT:
        if not content or not content.strip():
            raise BadRequestError("text message content cannot be empty")
        if len(content) > MAX_MESSAGE_LENGTH:
            raise BadRequestError("message content too long (max 10,000 characters)")
    else:
        if not attachments:
            raise BadRequestError(f"{parsed_type.value} message requires attachments")
        if content and len(content) > MAX_MESSAGE_LENGTH:
            raise BadRequestError("message content too long (max 10,000 characters)")

    if attachments and len(attachments) > MAX_ATTACHMENTS:
        raise BadRequestError("maximum 5 attachments per message")

    return parsed_type


def validate_who_can_message(value: str) -> str:
    """
    Validate a messaging privacy setting.

    Raises:
        BadRequestError: If the value is not a known setting
    """
    allowed = {option.value for option in WhoCanMessage}
    if value not in allowed:
        raise BadRequestError("who_can_message must be 'everyone', 'followers', or 'none'")
    return value
