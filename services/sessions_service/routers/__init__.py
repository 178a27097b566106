"""Sessions service routers package."""

from services.sessions_service.routers.activities import router as activities_router
from services.sessions_service.routers.registrations import (
    router as registrations_router,
)
from services.sessions_service.routers.sessions import router as sessions_router

__all__ = ["activities_router", "registrations_router", "sessions_router"]
