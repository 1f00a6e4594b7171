"""
Authentication module for the food delivery backend.

Provides JWT-based authentication for two principal types (customers and
staff), bcrypt password hashing, JSON-file credential stores and the OTP
ledger used for phone verification.
"""

from .jwt_handler import JWTHandler, TokenPayload, TokenKind
from .password import PasswordHandler, normalize_phone, normalize_email
from .users import UserStore, User
from .staff import StaffStore, Staff
from .otp import OTPLedger, OTPRecord, generate_otp, is_otp_expired
from .roles import PrincipalType, StaffRole, has_any_role, role_set
from .principal import Principal, principal_from_payload
from .storage import DuplicateRecordError

__all__ = [
    "JWTHandler",
    "TokenPayload",
    "TokenKind",
    "PasswordHandler",
    "normalize_phone",
    "normalize_email",
    "UserStore",
    "User",
    "StaffStore",
    "Staff",
    "OTPLedger",
    "OTPRecord",
    "generate_otp",
    "is_otp_expired",
    "PrincipalType",
    "StaffRole",
    "has_any_role",
    "role_set",
    "Principal",
    "principal_from_payload",
    "DuplicateRecordError",
]
