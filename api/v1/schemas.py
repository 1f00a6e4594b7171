"""
Shared request/response models.

Bodies are camelCase on the wire and snake_case in Python. Every success
response is wrapped as {"success": true, "message": ..., "data": ...}.
"""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from food_delivery.auth import User, Staff
from food_delivery.services import AuthTokens

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base model with camelCase aliases."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ApiResponse(CamelModel, Generic[T]):
    """Success envelope."""
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


class TokenResponse(CamelModel):
    """Token pair."""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int

    @classmethod
    def from_tokens(cls, tokens: AuthTokens) -> "TokenResponse":
        return cls(**tokens.to_dict())


class UserResponse(CamelModel):
    """Customer account, as shown to its owner."""
    id: str
    email: str
    phone: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    is_phone_verified: bool
    created_at: str
    last_login: Optional[str] = None

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.user_id,
            email=user.email,
            phone=user.phone,
            first_name=user.first_name,
            last_name=user.last_name,
            is_phone_verified=user.is_phone_verified,
            created_at=user.created_at,
            last_login=user.last_login
        )


class StaffResponse(CamelModel):
    """Staff account without credentials."""
    id: str
    email: str
    first_name: str
    last_name: str
    role: str
    phone: Optional[str] = None
    location_id: Optional[str] = None
    is_active: bool
    created_at: str
    updated_at: str
    last_login: Optional[str] = None

    @classmethod
    def from_staff(cls, staff: Staff) -> "StaffResponse":
        return cls(
            id=staff.staff_id,
            email=staff.email,
            first_name=staff.first_name,
            last_name=staff.last_name,
            role=staff.role.value,
            phone=staff.phone,
            location_id=staff.location_id,
            is_active=staff.is_active,
            created_at=staff.created_at,
            updated_at=staff.updated_at,
            last_login=staff.last_login
        )
