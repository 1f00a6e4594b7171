"""
One-time password generation and ledger.

A record moves Pending -> Verified exactly once. Expiry is never written;
it is evaluated when a code is checked.
"""

import logging
import secrets
import uuid
from dataclasses import dataclass, asdict, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional, Callable, List

from ..errors import ExpiredError, InvalidOTPError
from .storage import JSONStore, utcnow

logger = logging.getLogger(__name__)

DEFAULT_OTP_FILE = Path(__file__).parent.parent.parent / "data" / "otps.json"

OTP_LENGTH = 6
OTP_TTL_MINUTES = 10


def generate_otp(length: int = OTP_LENGTH) -> str:
    """Return `length` digits, each drawn uniformly from 0-9."""
    if length < 1:
        raise ValueError("OTP length must be positive")
    return "".join(str(secrets.randbelow(10)) for _ in range(length))


def otp_expiry(now: datetime, minutes: int = OTP_TTL_MINUTES) -> datetime:
    return now + timedelta(minutes=minutes)


def is_otp_expired(expires_at: datetime, now: datetime) -> bool:
    """A code is expired strictly after its expiry instant."""
    return now > expires_at


@dataclass
class OTPRecord:
    """A code sent to a user's phone."""
    otp_id: str
    user_id: str
    phone: str
    code: str
    expires_at: str
    verified: bool = False
    created_at: str = field(default_factory=lambda: utcnow().isoformat())

    @property
    def expires_at_dt(self) -> datetime:
        return datetime.fromisoformat(self.expires_at)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "OTPRecord":
        return cls(**data)


class OTPLedger(JSONStore):
    """
    JSON-based OTP storage.

    Several pending codes may exist per user. Verification always targets
    the newest pending record carrying the submitted code.
    """

    def __init__(
        self,
        file_path: Optional[Path] = None,
        length: int = OTP_LENGTH,
        ttl_minutes: int = OTP_TTL_MINUTES,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Initialize the ledger.

        Args:
            file_path: Path to OTP JSON file (default: data/otps.json)
            length: Number of digits in generated codes
            ttl_minutes: Lifetime of a freshly issued code
            clock: Returns the current aware UTC datetime (default: utcnow)
        """
        super().__init__(file_path or DEFAULT_OTP_FILE)
        self.length = length
        self.ttl_minutes = ttl_minutes
        self.clock = clock or utcnow

    def generate(self) -> str:
        return generate_otp(self.length)

    def is_expired(self, expires_at: datetime) -> bool:
        return is_otp_expired(expires_at, self.clock())

    def issue(self, user_id: str, phone: str, ttl_minutes: Optional[int] = None) -> OTPRecord:
        """
        Create a new pending code for a user.

        Args:
            user_id: Owner of the code
            phone: Number the code is sent to
            ttl_minutes: Override for the configured lifetime

        Returns:
            The stored OTPRecord (caller dispatches record.code)
        """
        now = self.clock()
        record = OTPRecord(
            otp_id=str(uuid.uuid4()),
            user_id=user_id,
            phone=phone,
            code=self.generate(),
            expires_at=otp_expiry(now, self.ttl_minutes if ttl_minutes is None else ttl_minutes).isoformat(),
            created_at=now.isoformat()
        )

        with self._lock:
            records = self._load_all()
            records[record.otp_id] = record.to_dict()
            self._save_all(records)

        logger.info(f"Issued OTP for user {user_id}, expires at {record.expires_at}")
        return record

    def verify(self, user_id: str, code: str) -> OTPRecord:
        """
        Consume a pending code.

        Raises:
            InvalidOTPError: No pending record matches (user_id, code)
            ExpiredError: The newest matching record has expired

        Returns:
            The record, now marked verified
        """
        with self._lock:
            records = self._load_all()
            matches = [
                OTPRecord.from_dict(data) for data in records.values()
                if data["user_id"] == user_id
                and data["code"] == code
                and not data["verified"]
            ]

            if not matches:
                logger.warning(f"Invalid OTP submitted for user {user_id}")
                raise InvalidOTPError("Invalid OTP code")

            # Stable sort keeps insertion order for equal timestamps
            matches.sort(key=lambda r: datetime.fromisoformat(r.created_at))
            record = matches[-1]

            if self.is_expired(record.expires_at_dt):
                logger.info(f"Expired OTP submitted for user {user_id}")
                raise ExpiredError("OTP code has expired")

            record.verified = True
            records[record.otp_id] = record.to_dict()

            # The verified record is the only one kept for this user
            stale = [
                otp_id for otp_id, data in records.items()
                if data["user_id"] == user_id and otp_id != record.otp_id
            ]
            for otp_id in stale:
                del records[otp_id]
            self._save_all(records)

        logger.info(f"OTP verified for user {user_id}")
        return record

    def has_verified(self, user_id: str) -> bool:
        """True if any code for this user has been verified."""
        return any(
            data["user_id"] == user_id and data["verified"]
            for data in self._load_all().values()
        )

    def list_for_user(self, user_id: str) -> List[OTPRecord]:
        return [
            OTPRecord.from_dict(data) for data in self._load_all().values()
            if data["user_id"] == user_id
        ]
