"""
Principal types and staff roles.

Roles form a closed enumeration. Guards convert their arguments to
StaffRole up front, so a misspelled role fails when the guard is declared.
"""

from enum import Enum
from typing import Iterable, FrozenSet, Optional, Union


class PrincipalType(str, Enum):
    """Kind of authenticated principal a token speaks for."""
    USER = "user"
    STAFF = "staff"


class StaffRole(str, Enum):
    """Roles a staff account can hold."""
    SUPER_ADMIN = "SUPER_ADMIN"
    LOCATION_MANAGER = "LOCATION_MANAGER"
    CHEF = "CHEF"
    DELIVERY_DRIVER = "DELIVERY_DRIVER"
    CUSTOMER_SUPPORT = "CUSTOMER_SUPPORT"
    NUTRITIONIST = "NUTRITIONIST"


RoleLike = Union[StaffRole, str]


def parse_role(value: RoleLike) -> StaffRole:
    """
    Convert a string or StaffRole into a StaffRole.

    Raises:
        ValueError: If the value is not a known role
    """
    if isinstance(value, StaffRole):
        return value
    return StaffRole(value)


def role_set(roles: Iterable[RoleLike]) -> FrozenSet[StaffRole]:
    """Build an allowed-role set, rejecting unknown names and empty sets."""
    allowed = frozenset(parse_role(r) for r in roles)
    if not allowed:
        raise ValueError("At least one role is required")
    return allowed


def has_any_role(role: Optional[StaffRole], allowed: FrozenSet[StaffRole]) -> bool:
    """Pure role predicate used by the authorization guards."""
    return role is not None and role in allowed
