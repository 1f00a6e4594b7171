"""
JWT token handler.

Signs and verifies identity tokens for the two principal types (customers
and staff). Access and refresh tokens are signed with different secrets, so
neither kind verifies as the other.
"""

import time
import logging
from enum import Enum
from typing import Optional
from dataclasses import dataclass

from jose import jwt, JWTError, ExpiredSignatureError

from ..config import TokenPolicy
from ..errors import InvalidTokenError, ExpiredTokenError
from .roles import PrincipalType, StaffRole

logger = logging.getLogger(__name__)


class TokenKind(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"


# Python attribute -> wire claim
_CLAIM_NAMES = {
    "user_id": "userId",
    "staff_id": "staffId",
    "email": "email",
    "type": "type",
    "role": "role",
    "exp": "exp",
    "iat": "iat",
}


@dataclass
class TokenPayload:
    """
    JWT token payload.

    Values are kept as decoded; `type` and `role` are plain strings here
    because a verified signature says nothing about whether they are
    meaningful. Interpreting them is the authorization layer's job.
    """
    type: str
    email: str
    user_id: Optional[str] = None
    staff_id: Optional[str] = None
    role: Optional[str] = None
    exp: Optional[int] = None
    iat: Optional[int] = None

    @classmethod
    def for_user(cls, user_id: str, email: str) -> "TokenPayload":
        return cls(type=PrincipalType.USER.value, email=email, user_id=user_id)

    @classmethod
    def for_staff(cls, staff_id: str, email: str, role: StaffRole) -> "TokenPayload":
        return cls(
            type=PrincipalType.STAFF.value,
            email=email,
            staff_id=staff_id,
            role=StaffRole(role).value
        )

    def identity(self) -> "TokenPayload":
        """Copy without the time claims, ready to be re-signed."""
        return TokenPayload(
            type=self.type,
            email=self.email,
            user_id=self.user_id,
            staff_id=self.staff_id,
            role=self.role
        )

    def to_claims(self) -> dict:
        return {
            claim: getattr(self, attr)
            for attr, claim in _CLAIM_NAMES.items()
            if getattr(self, attr) is not None
        }

    @classmethod
    def from_claims(cls, data: dict) -> "TokenPayload":
        return cls(**{attr: data.get(claim) for attr, claim in _CLAIM_NAMES.items()})


class JWTHandler:
    """
    Handles JWT token generation and validation.

    Supports:
    - Access tokens (short-lived, for API calls)
    - Refresh tokens (long-lived, for getting new access tokens)
    - User and staff payload shapes
    """

    def __init__(self, policy: Optional[TokenPolicy] = None):
        """
        Initialize JWT handler.

        Args:
            policy: Secrets and lifetimes. Falls back to environment/defaults.
        """
        self.policy = policy or TokenPolicy()

        if self.policy.uses_default_secrets():
            logger.warning(
                "Using default JWT secret key. "
                "Set JWT_SECRET and JWT_REFRESH_SECRET environment variables in production!"
            )

    def _secret(self, kind: TokenKind) -> str:
        if kind == TokenKind.REFRESH:
            return self.policy.refresh_secret
        return self.policy.access_secret

    def _lifetime(self, kind: TokenKind) -> int:
        if kind == TokenKind.REFRESH:
            return self.policy.refresh_expires_in
        return self.policy.access_expires_in

    def _issue(self, payload: TokenPayload, kind: TokenKind, expires_in: Optional[int]) -> str:
        now = int(time.time())
        lifetime = self._lifetime(kind) if expires_in is None else expires_in

        claims = payload.identity()
        claims.iat = now
        claims.exp = now + lifetime

        token = jwt.encode(claims.to_claims(), self._secret(kind), algorithm=self.policy.algorithm)
        logger.debug(f"Created {kind.value} token for {payload.type} {payload.email}, expires in {lifetime}s")
        return token

    def issue_access_token(self, payload: TokenPayload, expires_in: Optional[int] = None) -> str:
        """
        Create an access token.

        Args:
            payload: Principal payload (time claims are ignored)
            expires_in: Custom expiration in seconds (default: policy)

        Returns:
            Encoded JWT token string
        """
        return self._issue(payload, TokenKind.ACCESS, expires_in)

    def issue_refresh_token(self, payload: TokenPayload, expires_in: Optional[int] = None) -> str:
        """Create a refresh token, signed with the refresh secret."""
        return self._issue(payload, TokenKind.REFRESH, expires_in)

    def issue_token_pair(self, payload: TokenPayload) -> tuple[str, str]:
        """
        Create both access and refresh tokens.

        Returns:
            Tuple of (access_token, refresh_token)
        """
        return self.issue_access_token(payload), self.issue_refresh_token(payload)

    def verify(self, token: str, kind: TokenKind = TokenKind.ACCESS) -> TokenPayload:
        """
        Verify and decode a token.

        Args:
            token: JWT token string
            kind: Which secret the token must be signed with

        Returns:
            Decoded TokenPayload

        Raises:
            ExpiredTokenError: Signature is valid but the exp claim has passed
            InvalidTokenError: Anything else (bad signature, malformed token)
        """
        if not token:
            raise InvalidTokenError()

        try:
            data = jwt.decode(token, self._secret(kind), algorithms=[self.policy.algorithm])
        except ExpiredSignatureError:
            logger.debug(f"{kind.value} token expired")
            raise ExpiredTokenError()
        except JWTError as e:
            logger.debug(f"{kind.value} token verification failed: {e}")
            raise InvalidTokenError()

        return TokenPayload.from_claims(data)

    def refresh_access_token(self, refresh_token: str) -> str:
        """
        Create a new access token from a valid refresh token.

        The new token carries the same identity claims.

        Raises:
            TokenError: If the refresh token does not verify
        """
        payload = self.verify(refresh_token, TokenKind.REFRESH)
        return self.issue_access_token(payload)

