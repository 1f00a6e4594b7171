"""
Staff management endpoints.

Every route requires a staff token. Listing, reading and updating are open
to SUPER_ADMIN and LOCATION_MANAGER; creating and deleting to SUPER_ADMIN.
"""

import logging
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import Field

from food_delivery.auth import Principal, StaffRole
from food_delivery.services.staff_service import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

from ..deps import ServicesDep, authenticate_staff_only, require_any_role, require_role
from .schemas import ApiResponse, CamelModel, StaffResponse

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(authenticate_staff_only)])

managers_only = require_any_role([StaffRole.SUPER_ADMIN, StaffRole.LOCATION_MANAGER])
super_admin_only = require_role(StaffRole.SUPER_ADMIN)

Manager = Annotated[Principal, Depends(managers_only)]
SuperAdmin = Annotated[Principal, Depends(super_admin_only)]


# Request/Response models

class StaffCreateRequest(CamelModel):
    """New staff account."""
    email: str
    password: str
    first_name: str
    last_name: str
    role: str = Field(..., description="One of the StaffRole values")
    phone: Optional[str] = None
    location_id: Optional[str] = None
    is_active: bool = True


class StaffUpdateRequest(CamelModel):
    """Partial update; only fields present in the body are changed."""
    email: Optional[str] = None
    password: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Optional[str] = None
    phone: Optional[str] = None
    location_id: Optional[str] = None
    is_active: Optional[bool] = None


class PaginationResponse(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int


class StaffListData(CamelModel):
    staff: List[StaffResponse]
    pagination: PaginationResponse


class StaffData(CamelModel):
    staff: StaffResponse


# Endpoints

@router.get("", response_model=ApiResponse[StaffListData])
async def list_staff(
    services: ServicesDep,
    _: Manager,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    search: Optional[str] = Query(None, description="Matches email, name or phone"),
    role: Optional[str] = Query(None),
    location_id: Optional[str] = Query(None, alias="locationId"),
    is_active: Optional[bool] = Query(None, alias="isActive")
):
    """List staff members, newest first."""
    result = services.staff_admin.list_staff(
        page=page,
        limit=limit,
        search=search,
        role=role,
        location_id=location_id,
        is_active=is_active
    )

    return ApiResponse(
        data=StaffListData(
            staff=[StaffResponse.from_staff(s) for s in result.items],
            pagination=PaginationResponse(
                page=result.page,
                limit=result.limit,
                total=result.total,
                total_pages=result.total_pages
            )
        )
    )


@router.get("/{staff_id}", response_model=ApiResponse[StaffData])
async def get_staff(staff_id: str, services: ServicesDep, _: Manager):
    """Get a staff member by id."""
    member = services.staff_admin.get_staff(staff_id)
    return ApiResponse(data=StaffData(staff=StaffResponse.from_staff(member)))


@router.post("", response_model=ApiResponse[StaffData], status_code=status.HTTP_201_CREATED)
async def create_staff(request: StaffCreateRequest, services: ServicesDep, admin: SuperAdmin):
    """Create a staff account."""
    member = services.staff_admin.create_staff(
        email=request.email,
        password=request.password,
        first_name=request.first_name,
        last_name=request.last_name,
        role=request.role,
        phone=request.phone,
        location_id=request.location_id,
        is_active=request.is_active
    )

    logger.info(f"Staff {member.staff_id} ({member.role.value}) created by {admin.staff_id}")
    return ApiResponse(
        message="Staff member created successfully",
        data=StaffData(staff=StaffResponse.from_staff(member))
    )


@router.put("/{staff_id}", response_model=ApiResponse[StaffData])
async def update_staff(
    staff_id: str,
    request: StaffUpdateRequest,
    services: ServicesDep,
    manager: Manager
):
    """Update a staff account. A new password is re-hashed."""
    member = services.staff_admin.update_staff(
        staff_id,
        request.model_dump(exclude_unset=True),
        acting_staff_id=manager.staff_id,
        acting_role=manager.role
    )

    return ApiResponse(
        message="Staff member updated successfully",
        data=StaffData(staff=StaffResponse.from_staff(member))
    )


@router.delete("/{staff_id}", response_model=ApiResponse[None])
async def delete_staff(staff_id: str, services: ServicesDep, admin: SuperAdmin):
    """Deactivate a staff account. The record is kept."""
    services.staff_admin.deactivate_staff(staff_id, acting_staff_id=admin.staff_id)
    return ApiResponse(message="Staff member deactivated successfully")
