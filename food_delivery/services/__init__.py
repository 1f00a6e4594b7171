"""
Services layer for the food delivery backend.

Business logic as plain classes with their collaborators passed in, so the
API, scripts and tests share the same code.
"""

from .sms_service import SMSService
from .user_auth_service import AuthService, AuthTokens, AuthResult
from .staff_service import StaffService, StaffPage
from .profile_service import ProfileService

__all__ = [
    # Services
    "SMSService",
    "AuthService",
    "StaffService",
    "ProfileService",
    # Data classes
    "AuthTokens",
    "AuthResult",
    "StaffPage",
]
