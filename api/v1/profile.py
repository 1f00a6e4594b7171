"""
Customer profile endpoints.

Only customer tokens are accepted; a staff token gets 403.
"""

import logging
from typing import Optional

from fastapi import APIRouter

from ..deps import ServicesDep, CurrentUser
from .schemas import ApiResponse, CamelModel, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter()


class ProfileUpdateRequest(CamelModel):
    """Fields a customer may change on their own account."""
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class ProfileData(CamelModel):
    user: UserResponse


@router.get("/me", response_model=ApiResponse[ProfileData])
async def get_me(user: CurrentUser, services: ServicesDep):
    """Get the current customer's profile."""
    profile = services.profiles.get_profile(user.user_id)
    return ApiResponse(data=ProfileData(user=UserResponse.from_user(profile)))


@router.put("/me", response_model=ApiResponse[ProfileData])
async def update_me(request: ProfileUpdateRequest, user: CurrentUser, services: ServicesDep):
    """Update first and last name."""
    profile = services.profiles.update_profile(
        user.user_id,
        request.model_dump(exclude_unset=True)
    )

    return ApiResponse(
        message="Profile updated successfully",
        data=ProfileData(user=UserResponse.from_user(profile))
    )
