"""Members service routers package."""

from services.members_service.routers.admin import router as admin_router
from services.members_service.routers.applications import (
    router as applications_router,
)
from services.members_service.routers.clubs import router as clubs_router
from services.members_service.routers.members import router as members_router

__all__ = [
    "admin_router",
    "applications_router",
    "clubs_router",
    "members_router",
]
