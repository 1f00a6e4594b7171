"""
API router.

Aggregates all endpoints mounted under /api.
"""

from fastapi import APIRouter

from . import auth, staff, profile, system

router = APIRouter()

# Include all route modules
router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
router.include_router(staff.router, prefix="/staff", tags=["Staff"])
router.include_router(profile.router, prefix="/profile", tags=["Profile"])
router.include_router(system.router, tags=["System"])
