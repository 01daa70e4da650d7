"""
API v1 router setup
"""
from fastapi import APIRouter

from salon_scheduling.api.v1 import appointments, notifications, reschedule, slots

api_v1_router = APIRouter()

api_v1_router.include_router(slots.router)
api_v1_router.include_router(appointments.router)
api_v1_router.include_router(reschedule.router)
api_v1_router.include_router(notifications.router)


@api_v1_router.get("/", tags=["Info"])
async def api_info():
    """API information and available endpoints."""
    return {
        "version": "1.0",
        "endpoints": {
            "slots": "/api/v1/slots",
            "appointments": "/api/v1/appointments",
            "reschedule": "/api/v1/reschedule",
            "notifications": "/api/v1/notifications",
        }
    }
