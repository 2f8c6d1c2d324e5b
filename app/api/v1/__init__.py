"""
API v1 router exports.
Provides API endpoint routers.
"""
from app.api.v1 import auth, conversations, messages, users

__all__ = [
    "auth",
    "conversations",
    "messages",
    "users",
]
