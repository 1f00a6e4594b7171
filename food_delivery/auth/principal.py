"""
Authenticated principal resolution.

Turns a verified token payload into a Principal. The payload's `type` decides
which id field must be present; disagreement means the token is rejected.
"""

from dataclasses import dataclass
from typing import Optional

from ..errors import UnauthorizedError
from .jwt_handler import TokenPayload
from .roles import PrincipalType, StaffRole


@dataclass(frozen=True)
class Principal:
    """Identity attached to a request after authentication."""
    type: PrincipalType
    email: str
    user_id: Optional[str] = None
    staff_id: Optional[str] = None
    role: Optional[StaffRole] = None

    @property
    def is_staff(self) -> bool:
        return self.type == PrincipalType.STAFF

    @property
    def is_user(self) -> bool:
        return self.type == PrincipalType.USER


def principal_from_payload(payload: TokenPayload) -> Principal:
    """
    Dispatch on the payload type.

    Raises:
        UnauthorizedError: Unknown type, or the id field (and role, for staff)
            required by the declared type is missing or invalid
    """
    if payload.type == PrincipalType.USER.value:
        if not payload.user_id:
            raise UnauthorizedError("Invalid token")
        return Principal(
            type=PrincipalType.USER,
            email=payload.email,
            user_id=payload.user_id
        )

    if payload.type == PrincipalType.STAFF.value:
        if not payload.staff_id:
            raise UnauthorizedError("Invalid token")
        try:
            role = StaffRole(payload.role)
        except ValueError:
            raise UnauthorizedError("Invalid token")
        return Principal(
            type=PrincipalType.STAFF,
            email=payload.email,
            staff_id=payload.staff_id,
            role=role
        )

    raise UnauthorizedError("Invalid token")
