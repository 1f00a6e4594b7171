"""
Staff account storage.

Staff are created by an administrator and deactivated rather than removed.
"""

import logging
import uuid
from dataclasses import dataclass, asdict, field
from pathlib import Path
from typing import Optional, List

from .password import PasswordHandler, normalize_email, normalize_phone
from .roles import StaffRole, parse_role
from .storage import DuplicateRecordError, JSONStore, utcnow

logger = logging.getLogger(__name__)

DEFAULT_STAFF_FILE = Path(__file__).parent.parent.parent / "data" / "staff.json"


@dataclass
class Staff:
    """Staff account."""
    staff_id: str
    email: str
    password_hash: str
    role: StaffRole
    first_name: str = ""
    last_name: str = ""
    phone: Optional[str] = None
    location_id: Optional[str] = None
    is_active: bool = True
    created_at: str = field(default_factory=lambda: utcnow().isoformat())
    updated_at: str = field(default_factory=lambda: utcnow().isoformat())
    last_login: Optional[str] = None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["role"] = self.role.value
        return data

    def to_public_dict(self) -> dict:
        """Serializable view without the password hash."""
        data = self.to_dict()
        data.pop("password_hash")
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Staff":
        return cls(
            staff_id=data["staff_id"],
            email=data["email"],
            password_hash=data["password_hash"],
            role=parse_role(data["role"]),
            first_name=data.get("first_name", ""),
            last_name=data.get("last_name", ""),
            phone=data.get("phone"),
            location_id=data.get("location_id"),
            is_active=data.get("is_active", True),
            created_at=data.get("created_at", utcnow().isoformat()),
            updated_at=data.get("updated_at", utcnow().isoformat()),
            last_login=data.get("last_login"),
        )


class StaffStore(JSONStore):
    """JSON-based staff storage, indexed by staff id."""

    def __init__(
        self,
        file_path: Optional[Path] = None,
        password_handler: Optional[PasswordHandler] = None
    ):
        super().__init__(file_path or DEFAULT_STAFF_FILE)
        self.password_handler = password_handler or PasswordHandler()

    def create_staff(
        self,
        email: str,
        password: str,
        role: StaffRole,
        first_name: str = "",
        last_name: str = "",
        phone: Optional[str] = None,
        location_id: Optional[str] = None,
        is_active: bool = True
    ) -> Staff:
        """
        Create a new staff account.

        Raises:
            ValueError: If email/phone/role is invalid
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

        staff = Staff(
            staff_id=str(uuid.uuid4()),
            email=normalized_email,
            password_hash=self.password_handler.hash(password),
            role=parse_role(role),
            first_name=first_name,
            last_name=last_name,
            phone=normalized_phone,
            location_id=location_id,
            is_active=is_active
        )

        with self._lock:
            records = self._load_all()
            self._check_unique(records, staff)
            records[staff.staff_id] = staff.to_dict()
            self._save_all(records)

        logger.info(f"Created staff member: {normalized_email} ({staff.role.value})")
        return staff

    def _check_unique(self, records: dict, staff: Staff):
        for staff_id, data in records.items():
            if staff_id == staff.staff_id:
                continue
            if data["email"] == staff.email:
                raise DuplicateRecordError(f"Staff member with email {staff.email} already exists")
            if staff.phone and data.get("phone") == staff.phone:
                raise DuplicateRecordError(f"Staff member with phone {staff.phone} already exists")

    def get_by_id(self, staff_id: str) -> Optional[Staff]:
        data = self._load_all().get(staff_id)
        return Staff.from_dict(data) if data else None

    def get_by_email(self, email: str) -> Optional[Staff]:
        normalized = normalize_email(email)
        if not normalized:
            return None

        for data in self._load_all().values():
            if data["email"] == normalized:
                return Staff.from_dict(data)
        return None

    def get_by_phone(self, phone: str) -> Optional[Staff]:
        normalized = normalize_phone(phone)
        if not normalized:
            return None

        for data in self._load_all().values():
            if data.get("phone") == normalized:
                return Staff.from_dict(data)
        return None

    def update_staff(self, staff: Staff) -> Staff:
        """
        Persist changes to an existing staff account.

        Raises:
            ValueError: If the staff member doesn't exist
            DuplicateRecordError: If the new email/phone belongs to someone else
        """
        with self._lock:
            records = self._load_all()

            if staff.staff_id not in records:
                raise ValueError(f"Staff member {staff.staff_id} not found")

            self._check_unique(records, staff)
            staff.updated_at = utcnow().isoformat()
            records[staff.staff_id] = staff.to_dict()
            self._save_all(records)

        logger.debug(f"Updated staff member: {staff.staff_id}")
        return staff

    def set_password(self, staff: Staff, password: str) -> Staff:
        staff.password_hash = self.password_handler.hash(password)
        return staff

    def deactivate(self, staff_id: str) -> bool:
        """
        Soft delete a staff account.

        Returns:
            True if deactivated, False if not found
        """
        with self._lock:
            staff = self.get_by_id(staff_id)
            if not staff:
                return False
            staff.is_active = False
            self.update_staff(staff)

        logger.info(f"Deactivated staff member: {staff_id}")
        return True

    def record_login(self, staff_id: str) -> Optional[Staff]:
        with self._lock:
            staff = self.get_by_id(staff_id)
            if not staff:
                return None
            staff.last_login = utcnow().isoformat()
            return self.update_staff(staff)

    def list_staff(
        self,
        search: Optional[str] = None,
        role: Optional[StaffRole] = None,
        location_id: Optional[str] = None,
        is_active: Optional[bool] = None
    ) -> List[Staff]:
        """
        List staff accounts, newest first.

        Args:
            search: Case-insensitive substring over email, names and phone
            role: Only this role
            location_id: Only staff assigned to this location
            is_active: Only active (True) or inactive (False) staff
        """
        result = [Staff.from_dict(data) for data in self._load_all().values()]

        if search:
            term = search.lower()
            result = [
                s for s in result
                if any(term in (value or "").lower()
                       for value in (s.email, s.first_name, s.last_name, s.phone))
            ]
        if role is not None:
            result = [s for s in result if s.role == role]
        if location_id is not None:
            result = [s for s in result if s.location_id == location_id]
        if is_active is not None:
            result = [s for s in result if s.is_active == is_active]

        result.sort(key=lambda s: s.created_at, reverse=True)
        return result
