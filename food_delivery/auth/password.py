"""
Password and identifier handling utilities.

Uses bcrypt for salted, adaptive password hashing.
"""

import logging
import re
from typing import Optional

import bcrypt

logger = logging.getLogger(__name__)

# bcrypt work factor
BCRYPT_ROUNDS = 10

# bcrypt only looks at the first 72 bytes of its input
BCRYPT_MAX_BYTES = 72

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class PasswordHandler:
    """
    Handles password hashing and verification using bcrypt.

    Usage:
        handler = PasswordHandler()
        hashed = handler.hash("my_password")
        is_valid = handler.verify("my_password", hashed)
    """

    def __init__(self, rounds: int = BCRYPT_ROUNDS):
        """
        Initialize password handler.

        Args:
            rounds: bcrypt work factor (default: 10)
        """
        self.rounds = rounds

    def hash(self, password: str) -> str:
        """
        Hash a password using bcrypt.

        Args:
            password: Plain text password

        Returns:
            Hashed password string (includes salt)
        """
        if not password:
            raise ValueError("Password cannot be empty")
        if len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
            raise ValueError(f"Password cannot be longer than {BCRYPT_MAX_BYTES} bytes")

        salt = bcrypt.gensalt(rounds=self.rounds)
        hashed = bcrypt.hashpw(password.encode("utf-8"), salt)

        return hashed.decode("utf-8")

    def verify(self, password: str, hashed: str) -> bool:
        """
        Verify a password against a hash.

        Args:
            password: Plain text password to verify
            hashed: Previously hashed password

        Returns:
            True if password matches, False otherwise
        """
        if not password or not hashed:
            return False

        try:
            return bcrypt.checkpw(
                password.encode("utf-8"),
                hashed.encode("utf-8")
            )
        except ValueError as e:
            logger.warning(f"Password verification error: {e}")
            return False

    def needs_rehash(self, hashed: str) -> bool:
        """
        Check if a hash was produced with a different work factor.

        bcrypt hash format: $2b$rounds$salt+hash
        """
        parts = hashed.split("$")
        if len(parts) < 3 or not parts[2].isdigit():
            return True
        return int(parts[2]) != self.rounds


def normalize_phone(phone: str) -> Optional[str]:
    """
    Normalize a phone number to E.164.

    Removes spaces, dashes and parentheses. A leading "00" international
    prefix is rewritten to "+".

    Returns:
        Normalized phone number or None if invalid

    Examples:
        normalize_phone("+998 90 195-76-03") -> "+998901957603"
        normalize_phone("00998901957603") -> "+998901957603"
        normalize_phone("901957603") -> None
    """
    if not phone:
        return None

    cleaned = "".join(c for c in phone if c.isdigit() or c == "+")

    if cleaned.startswith("00"):
        cleaned = "+" + cleaned[2:]

    if not cleaned.startswith("+") or "+" in cleaned[1:]:
        return None

    # E.164 allows up to 15 digits; anything under 8 is not a full number
    digits = cleaned[1:]
    if not 8 <= len(digits) <= 15:
        return None

    return cleaned


def normalize_email(email: str) -> Optional[str]:
    """
    Lower-case and trim an email address.

    Returns:
        Normalized email or None if it is not shaped like an address
    """
    if not email:
        return None

    cleaned = email.strip().lower()
    if not _EMAIL_RE.match(cleaned):
        return None
    return cleaned
