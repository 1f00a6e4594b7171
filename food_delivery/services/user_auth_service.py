"""
Authentication service.

The only place plaintext credentials are compared against stored hashes and
the only place tokens are minted. Covers customer registration with phone
verification, customer and staff login, OTP resend and token refresh.

Every failure is raised as an AuthError subclass carrying its HTTP status.
"""

import logging
from typing import Optional
from dataclasses import dataclass

from ..auth import (
    JWTHandler,
    TokenPayload,
    PasswordHandler,
    UserStore,
    User,
    StaffStore,
    Staff,
    OTPLedger,
    DuplicateRecordError,
    normalize_email,
    normalize_phone,
)
from ..auth.password import BCRYPT_MAX_BYTES
from ..errors import (
    BadRequestError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    TokenError,
    UnauthorizedError,
    ValidationError,
)
from .sms_service import SMSService

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
PASSWORD_MIN_LENGTH = 6


@dataclass
class AuthTokens:
    """Authentication tokens response."""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = 900  # seconds

    def to_dict(self) -> dict:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "token_type": self.token_type,
            "expires_in": self.expires_in
        }


@dataclass
class AuthResult:
    """
    Authentication result.

    Either carries tokens plus the authenticated account, or (for customers
    whose phone is not yet verified) only the user id and
    requires_verification=True.
    """
    tokens: Optional[AuthTokens] = None
    user: Optional[User] = None
    staff: Optional[Staff] = None
    user_id: Optional[str] = None
    requires_verification: bool = False

    @classmethod
    def verification_required(cls, user_id: str) -> "AuthResult":
        return cls(user_id=user_id, requires_verification=True)


class AuthService:
    """
    Service for customer and staff authentication.

    Handles:
    - Customer registration (email + password + phone, OTP-verified)
    - OTP verification and resend
    - Customer login with password
    - Staff login with password
    - Access token refresh
    """

    def __init__(
        self,
        jwt_handler: JWTHandler,
        users: UserStore,
        staff: StaffStore,
        otps: OTPLedger,
        sms: SMSService,
        password_handler: Optional[PasswordHandler] = None,
        password_min_length: int = PASSWORD_MIN_LENGTH
    ):
        self.jwt = jwt_handler
        self.users = users
        self.staff = staff
        self.otps = otps
        self.sms = sms
        self.passwords = password_handler or users.password_handler
        self.password_min_length = password_min_length
        self._dummy_hash: Optional[str] = None

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _validate_password(self, password: str):
        if not password or len(password) < self.password_min_length:
            raise ValidationError(
                f"Password must be at least {self.password_min_length} characters"
            )
        if len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
            raise ValidationError(f"Password cannot be longer than {BCRYPT_MAX_BYTES} bytes")

    def _burn_password_check(self, password: str):
        """Spend a hash comparison when the account is unknown, so timing doesn't tell."""
        if self._dummy_hash is None:
            self._dummy_hash = self.passwords.hash("not-a-real-password")
        self.passwords.verify(password or "x", self._dummy_hash)

    def _upgrade_user_hash(self, user: User, password: str) -> User:
        """Re-hash with the configured work factor after a successful check."""
        if not self.passwords.needs_rehash(user.password_hash):
            return user
        user.password_hash = self.passwords.hash(password)
        logger.info(f"Upgraded password hash for user {user.user_id}")
        return self.users.update_user(user)

    def _upgrade_staff_hash(self, member: Staff, password: str) -> Staff:
        if not self.passwords.needs_rehash(member.password_hash):
            return member
        member.password_hash = self.passwords.hash(password)
        logger.info(f"Upgraded password hash for staff {member.staff_id}")
        return self.staff.update_staff(member)

    def _tokens_for(self, payload: TokenPayload) -> AuthTokens:
        access, refresh = self.jwt.issue_token_pair(payload)
        return AuthTokens(
            access_token=access,
            refresh_token=refresh,
            expires_in=self.jwt.policy.access_expires_in
        )

    def _is_phone_verified(self, user: User) -> bool:
        """
        Verified if the flag is set or the ledger holds a verified code.

        The second case means the process stopped between consuming the
        code and flagging the user; the flag is repaired here.
        """
        if user.is_phone_verified:
            return True
        if self.otps.has_verified(user.user_id):
            logger.warning(f"Repairing phone-verified flag for user {user.user_id}")
            self.users.mark_phone_verified(user.user_id)
            user.is_phone_verified = True
            return True
        return False

    def _send_otp(self, user: User):
        record = self.otps.issue(user.user_id, user.phone)
        if not self.sms.send_otp(user.phone, record.code):
            # Registration/resend still succeed; the user can ask again
            logger.warning(f"OTP dispatch failed for user {user.user_id}")

    # ------------------------------------------------------------------
    # Customer flows
    # ------------------------------------------------------------------

    def register_user(
        self,
        email: str,
        password: str,
        phone: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None
    ) -> AuthResult:
        """
        Register a new customer and send a verification code.

        Args:
            email: Email address
            password: Password
            phone: Phone number (required, codes are sent here)
            first_name: Optional first name
            last_name: Optional last name

        Returns:
            AuthResult with user_id and requires_verification=True

        Raises:
            ValidationError: Missing or malformed input
            ConflictError: Email or phone already registered
        """
        if not email or not password or not phone:
            raise ValidationError("Email, password, and phone are required")

        normalized_email = normalize_email(email)
        if not normalized_email:
            raise ValidationError("Invalid email address")

        normalized_phone = normalize_phone(phone)
        if not normalized_phone:
            raise ValidationError("Invalid phone number format")

        self._validate_password(password)

        if self.users.email_exists(normalized_email) or self.users.phone_exists(normalized_phone):
            raise ConflictError("User with this email or phone already exists")

        try:
            user = self.users.create_user(
                email=normalized_email,
                password=password,
                phone=normalized_phone,
                first_name=first_name,
                last_name=last_name,
                is_phone_verified=False
            )
        except DuplicateRecordError:
            raise ConflictError("User with this email or phone already exists")
        except ValueError as e:
            raise ValidationError(str(e))

        self._send_otp(user)

        logger.info(f"User registered: {user.email}, awaiting phone verification")
        return AuthResult.verification_required(user.user_id)

    def login_user(self, email: str, password: str) -> AuthResult:
        """
        Login with email and password.

        Returns:
            AuthResult with tokens, or requires_verification=True when the
            phone has not been verified yet

        Raises:
            ValidationError: Missing email or password
            UnauthorizedError: Unknown email or wrong password (same message)
            ForbiddenError: Account is deactivated
        """
        if not email or not password:
            raise ValidationError("Email and password are required")

        user = self.users.get_by_email(email)
        if not user:
            self._burn_password_check(password)
            logger.warning("Login failed: unknown email")
            raise UnauthorizedError(INVALID_CREDENTIALS)

        if not self.passwords.verify(password, user.password_hash):
            logger.warning(f"Login failed: wrong password for user {user.user_id}")
            raise UnauthorizedError(INVALID_CREDENTIALS)

        if not user.is_active:
            raise ForbiddenError("Your account has been deactivated")

        user = self._upgrade_user_hash(user, password)

        if not self._is_phone_verified(user):
            logger.info(f"Login requires phone verification: {user.user_id}")
            return AuthResult.verification_required(user.user_id)

        user = self.users.record_login(user.user_id) or user
        tokens = self._tokens_for(TokenPayload.for_user(user.user_id, user.email))

        logger.info(f"User logged in: {user.email}")
        return AuthResult(tokens=tokens, user=user, user_id=user.user_id)

    def verify_otp(self, user_id: str, code: str) -> AuthResult:
        """
        Verify a phone code and issue tokens.

        Raises:
            ValidationError: Missing user id or code
            InvalidOTPError: No pending code matches
            ExpiredError: The matching code has expired
            NotFoundError: The user no longer exists
        """
        if not user_id or not code:
            raise ValidationError("User ID and OTP code are required")

        self.otps.verify(user_id, code)

        try:
            user = self.users.mark_phone_verified(user_id)
        except ValueError:
            raise NotFoundError("User not found")

        tokens = self._tokens_for(TokenPayload.for_user(user.user_id, user.email))

        logger.info(f"Phone verified for user {user.user_id}")
        return AuthResult(tokens=tokens, user=user, user_id=user.user_id)

    def resend_otp(self, user_id: str):
        """
        Issue and dispatch a fresh code.

        Raises:
            ValidationError: Missing user id
            NotFoundError: Unknown user
            BadRequestError: Phone already verified, or no phone on file
        """
        if not user_id:
            raise ValidationError("User ID is required")

        user = self.users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")

        if self._is_phone_verified(user):
            raise BadRequestError("Phone already verified")

        if not user.phone:
            raise BadRequestError("No phone number on file")

        self._send_otp(user)
        logger.info(f"OTP resent for user {user.user_id}")

    # ------------------------------------------------------------------
    # Staff flows
    # ------------------------------------------------------------------

    def login_staff(self, email: str, password: str) -> AuthResult:
        """
        Login a staff member with email and password.

        Raises:
            ValidationError: Missing email or password
            UnauthorizedError: Unknown email or wrong password (same message)
            ForbiddenError: Account is deactivated
        """
        if not email or not password:
            raise ValidationError("Email and password are required")

        member = self.staff.get_by_email(email)
        if not member:
            self._burn_password_check(password)
            logger.warning("Staff login failed: unknown email")
            raise UnauthorizedError(INVALID_CREDENTIALS)

        if not self.passwords.verify(password, member.password_hash):
            logger.warning(f"Staff login failed: wrong password for {member.staff_id}")
            raise UnauthorizedError(INVALID_CREDENTIALS)

        if not member.is_active:
            logger.warning(f"Staff login refused: {member.staff_id} is deactivated")
            raise ForbiddenError("Your account has been deactivated")

        member = self._upgrade_staff_hash(member, password)

        member = self.staff.record_login(member.staff_id) or member
        tokens = self._tokens_for(
            TokenPayload.for_staff(member.staff_id, member.email, member.role)
        )

        logger.info(f"Staff logged in: {member.email} ({member.role.value})")
        return AuthResult(tokens=tokens, staff=member)

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    def refresh(self, refresh_token: str) -> str:
        """
        Mint a new access token from a refresh token.

        Works for both principal types; the identity claims are copied.

        Raises:
            ValidationError: Missing token
            UnauthorizedError: Token invalid or expired (not distinguished)
        """
        if not refresh_token:
            raise ValidationError("Refresh token is required")

        try:
            return self.jwt.refresh_access_token(refresh_token)
        except TokenError:
            raise UnauthorizedError("Invalid refresh token")
