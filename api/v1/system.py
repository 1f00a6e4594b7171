"""
System endpoints.

Service status.
"""

from fastapi import APIRouter

from food_delivery import __version__

from ..deps import ServicesDep

router = APIRouter()


@router.get("/status")
async def get_status(services: ServicesDep):
    """
    Service status.

    Reports whether SMS delivery is configured, without exposing credentials.
    """
    return {
        "status": "healthy",
        "service": "food-delivery-api",
        "version": __version__,
        "environment": services.config.environment,
        "sms_configured": services.sms.is_configured()
    }
