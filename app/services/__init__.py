"""
Service layer exports.
Provides business logic for the application.
"""
from app.services.auth_service import AuthService
from app.services.follow_service import FollowService
from app.services.messaging_service import MessagingService
from app.services.privacy_service import PrivacyChecker
from app.services.profile_service import ProfileService

__all__ = [
    "AuthService",
    "FollowService",
    "MessagingService",
    "PrivacyChecker",
    "ProfileService",
]
