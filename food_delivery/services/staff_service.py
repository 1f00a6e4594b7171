"""
Staff administration service.

Create, list, inspect, update and deactivate staff accounts. Route access
is checked in the HTTP layer; this service enforces data rules (uniqueness,
required fields, no self-deactivation) and who may change a role.
"""

import logging
import math
from typing import Optional, List
from dataclasses import dataclass

from ..auth import StaffStore, Staff, StaffRole, DuplicateRecordError, normalize_email, normalize_phone
from ..auth.roles import parse_role
from ..errors import BadRequestError, ConflictError, ForbiddenError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

UPDATABLE_FIELDS = (
    "email",
    "password",
    "phone",
    "first_name",
    "last_name",
    "role",
    "location_id",
    "is_active",
)


@dataclass
class StaffPage:
    """One page of staff accounts."""
    items: List[Staff]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


class StaffService:
    """Service for staff account management."""

    def __init__(self, staff: StaffStore):
        self.staff = staff

    def _role(self, value) -> StaffRole:
        try:
            return parse_role(value)
        except ValueError:
            raise ValidationError(f"Invalid role: {value}")

    def list_staff(
        self,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
        search: Optional[str] = None,
        role: Optional[str] = None,
        location_id: Optional[str] = None,
        is_active: Optional[bool] = None
    ) -> StaffPage:
        """List staff with search, filters and pagination (newest first)."""
        if page < 1 or limit < 1 or limit > MAX_PAGE_SIZE:
            raise ValidationError(f"page must be >= 1 and limit between 1 and {MAX_PAGE_SIZE}")

        matches = self.staff.list_staff(
            search=search,
            role=self._role(role) if role else None,
            location_id=location_id,
            is_active=is_active
        )

        start = (page - 1) * limit
        return StaffPage(
            items=matches[start:start + limit],
            page=page,
            limit=limit,
            total=len(matches)
        )

    def get_staff(self, staff_id: str) -> Staff:
        member = self.staff.get_by_id(staff_id)
        if not member:
            raise NotFoundError("Staff member not found")
        return member

    def create_staff(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        role: str,
        phone: Optional[str] = None,
        location_id: Optional[str] = None,
        is_active: bool = True
    ) -> Staff:
        """
        Create a staff account.

        Raises:
            ValidationError: Missing required fields or bad values
            ConflictError: Email or phone already in use
        """
        if not email or not password or not first_name or not last_name or not role:
            raise ValidationError("Email, password, first name, last name, and role are required")

        staff_role = self._role(role)

        if self.staff.get_by_email(email):
            raise ConflictError("Staff member with this email already exists")
        if phone and self.staff.get_by_phone(phone):
            raise ConflictError("Staff member with this phone number already exists")

        try:
            member = self.staff.create_staff(
                email=email,
                password=password,
                role=staff_role,
                first_name=first_name,
                last_name=last_name,
                phone=phone or None,
                location_id=location_id or None,
                is_active=is_active
            )
        except DuplicateRecordError as e:
            raise ConflictError(str(e))
        except ValueError as e:
            raise ValidationError(str(e))

        return member

    def update_staff(
        self,
        staff_id: str,
        changes: dict,
        acting_staff_id: Optional[str] = None,
        acting_role: Optional[StaffRole] = None
    ) -> Staff:
        """
        Apply a partial update.

        Args:
            staff_id: Account to update
            changes: Subset of UPDATABLE_FIELDS; empty phone/location clears it
            acting_staff_id: Staff member performing the update, if any
            acting_role: Role of that staff member, if any

        Raises:
            NotFoundError: Unknown staff id
            ValidationError: Bad values
            ConflictError: New email or phone belongs to someone else
            BadRequestError: A staff member tried to deactivate itself
            ForbiddenError: A non super admin tried to change a role
        """
        unknown = set(changes) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown fields: {', '.join(sorted(unknown))}")

        member = self.get_staff(staff_id)

        if acting_staff_id and staff_id == acting_staff_id and changes.get("is_active") is False:
            raise BadRequestError("You cannot deactivate your own account")

        if changes.get("role") and acting_role is not None and acting_role != StaffRole.SUPER_ADMIN:
            if self._role(changes["role"]) != member.role:
                logger.warning(f"Role change on {staff_id} refused for {acting_role.value}")
                raise ForbiddenError("Only a super admin can change roles")

        try:
            if "email" in changes and changes["email"]:
                new_email = changes["email"]
                existing = self.staff.get_by_email(new_email)
                if existing and existing.staff_id != staff_id:
                    raise ConflictError("Email already in use")
                normalized_email = normalize_email(new_email)
                if not normalized_email:
                    raise ValidationError("Invalid email address")
                member.email = normalized_email

            if "phone" in changes:
                new_phone = changes["phone"] or None
                if new_phone:
                    existing = self.staff.get_by_phone(new_phone)
                    if existing and existing.staff_id != staff_id:
                        raise ConflictError("Phone number already in use")
                    normalized = normalize_phone(new_phone)
                    if not normalized:
                        raise ValidationError("Invalid phone number format")
                    new_phone = normalized
                member.phone = new_phone

            if "first_name" in changes:
                member.first_name = changes["first_name"] or ""
            if "last_name" in changes:
                member.last_name = changes["last_name"] or ""
            if "role" in changes and changes["role"]:
                member.role = self._role(changes["role"])
            if "location_id" in changes:
                member.location_id = changes["location_id"] or None
            if "is_active" in changes and changes["is_active"] is not None:
                member.is_active = bool(changes["is_active"])
            if changes.get("password"):
                self.staff.set_password(member, changes["password"])

            member = self.staff.update_staff(member)
        except DuplicateRecordError as e:
            raise ConflictError(str(e))
        except ValueError as e:
            raise ValidationError(str(e))

        logger.info(f"Updated staff member {staff_id}: {', '.join(sorted(changes))}")
        return member

    def deactivate_staff(self, staff_id: str, acting_staff_id: str):
        """
        Soft delete a staff account.

        Raises:
            NotFoundError: Unknown staff id
            BadRequestError: A staff member tried to deactivate itself
        """
        self.get_staff(staff_id)

        if staff_id == acting_staff_id:
            raise BadRequestError("You cannot delete your own account")

        self.staff.deactivate(staff_id)
