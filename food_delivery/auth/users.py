"""
Customer account storage.

Users are stored in a JSON file keyed by user id. Email is unique;
phone is unique when present.
"""

import logging
import uuid
from dataclasses import dataclass, asdict, field
from pathlib import Path
from typing import Optional

from .password import PasswordHandler, normalize_email, normalize_phone
from .storage import DuplicateRecordError, JSONStore, utcnow

logger = logging.getLogger(__name__)

DEFAULT_USERS_FILE = Path(__file__).parent.parent.parent / "data" / "users.json"


@dataclass
class User:
    """Customer account."""
    user_id: str
    email: str
    password_hash: str
    phone: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    is_phone_verified: bool = False
    is_active: bool = True
    created_at: str = field(default_factory=lambda: utcnow().isoformat())
    updated_at: str = field(default_factory=lambda: utcnow().isoformat())
    last_login: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)

    def to_public_dict(self) -> dict:
        """Serializable view without the password hash."""
        data = self.to_dict()
        data.pop("password_hash")
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "User":
        return cls(
            user_id=data["user_id"],
            email=data["email"],
            password_hash=data["password_hash"],
            phone=data.get("phone"),
            first_name=data.get("first_name"),
            last_name=data.get("last_name"),
            is_phone_verified=data.get("is_phone_verified", False),
            is_active=data.get("is_active", True),
            created_at=data.get("created_at", utcnow().isoformat()),
            updated_at=data.get("updated_at", utcnow().isoformat()),
            last_login=data.get("last_login"),
        )


class UserStore(JSONStore):
    """JSON-based user storage, indexed by user id."""

    def __init__(
        self,
        file_path: Optional[Path] = None,
        password_handler: Optional[PasswordHandler] = None
    ):
        """
        Initialize user store.

        Args:
            file_path: Path to users JSON file (default: data/users.json)
            password_handler: Hasher used for new passwords
        """
        super().__init__(file_path or DEFAULT_USERS_FILE)
        self.password_handler = password_handler or PasswordHandler()

    def create_user(
        self,
        email: str,
        password: str,
        phone: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        is_phone_verified: bool = False
    ) -> User:
        """
        Create a new user.

        Args:
            email: Email address (will be normalized)
            password: Plain text password (hashed before storage)
            phone: Optional phone number (will be normalized)
            first_name: Optional first name
            last_name: Optional last name
            is_phone_verified: Initial verification state

        Returns:
            Created User object

        Raises:
            ValueError: If email/phone is invalid
            DuplicateRecordError: If email/phone is already taken
        """
        normalized_email = normalize_email(email)
        if not normalized_email:
            raise ValueError(f"Invalid email address: {email}")

        normalized_phone = None
        if phone:
            normalized_phone = normalize_phone(phone)
            if not normalized_phone:
                raise ValueError(f"Invalid phone number: {phone}")

        password_hash = self.password_handler.hash(password)

        with self._lock:
            users = self._load_all()

            for data in users.values():
                if data["email"] == normalized_email:
                    raise DuplicateRecordError(f"User with email {normalized_email} already exists")
                if normalized_phone and data.get("phone") == normalized_phone:
                    raise DuplicateRecordError(f"User with phone {normalized_phone} already exists")

            user = User(
                user_id=str(uuid.uuid4()),
                email=normalized_email,
                password_hash=password_hash,
                phone=normalized_phone,
                first_name=first_name,
                last_name=last_name,
                is_phone_verified=is_phone_verified
            )

            users[user.user_id] = user.to_dict()
            self._save_all(users)

        logger.info(f"Created user: {normalized_email}")
        return user

    def get_by_id(self, user_id: str) -> Optional[User]:
        """Get user by user ID."""
        data = self._load_all().get(user_id)
        return User.from_dict(data) if data else None

    def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email address."""
        normalized = normalize_email(email)
        if not normalized:
            return None

        for data in self._load_all().values():
            if data["email"] == normalized:
                return User.from_dict(data)
        return None

    def get_by_phone(self, phone: str) -> Optional[User]:
        """Get user by phone number."""
        normalized = normalize_phone(phone)
        if not normalized:
            return None

        for data in self._load_all().values():
            if data.get("phone") == normalized:
                return User.from_dict(data)
        return None

    def email_exists(self, email: str) -> bool:
        return self.get_by_email(email) is not None

    def phone_exists(self, phone: str) -> bool:
        return self.get_by_phone(phone) is not None

    def update_user(self, user: User) -> User:
        """
        Update an existing user.

        Raises:
            ValueError: If user doesn't exist
        """
        with self._lock:
            users = self._load_all()

            if user.user_id not in users:
                raise ValueError(f"User {user.user_id} not found")

            user.updated_at = utcnow().isoformat()
            users[user.user_id] = user.to_dict()
            self._save_all(users)

        logger.debug(f"Updated user: {user.user_id}")
        return user

    def mark_phone_verified(self, user_id: str) -> User:
        """
        Set the phone-verified flag. Idempotent.

        Raises:
            ValueError: If user doesn't exist
        """
        with self._lock:
            user = self.get_by_id(user_id)
            if not user:
                raise ValueError(f"User {user_id} not found")
            if user.is_phone_verified:
                return user
            user.is_phone_verified = True
            return self.update_user(user)

    def record_login(self, user_id: str) -> Optional[User]:
        """Stamp the last login time. Returns None if the user is gone."""
        with self._lock:
            user = self.get_by_id(user_id)
            if not user:
                return None
            user.last_login = utcnow().isoformat()
            return self.update_user(user)
