"""FastAPI application for the Sessions Service."""

from fastapi import FastAPI
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from services.sessions_service.routers import (
    activities_router,
    registrations_router,
    sessions_router,
)


def create_app() -> FastAPI:
    """Create and configure the Sessions Service FastAPI app."""
    app = FastAPI(
        title="Club Sessions Service",
        version="0.1.0",
        description="Activities, training sessions and activity registrations.",
    )
    add_exception_handlers(app)
    add_observability_middleware(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "sessions"}

    app.include_router(activities_router)
    app.include_router(sessions_router)
    app.include_router(registrations_router)

    return app


app = create_app()
