"""FastAPI application for the Members Service."""

from fastapi import FastAPI
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from libs.common.rate_limit import limiter, rate_limit_exceeded_handler
from services.members_service.routers import (
    admin_router,
    applications_router,
    clubs_router,
    members_router,
)
from slowapi.errors import RateLimitExceeded


def create_app() -> FastAPI:
    """Create and configure the Members Service FastAPI app."""
    app = FastAPI(
        title="Club Members Service",
        version="0.1.0",
        description="Clubs, coaches, membership applications and athletes.",
    )
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    add_exception_handlers(app)
    add_observability_middleware(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "members"}

    app.include_router(clubs_router)
    app.include_router(applications_router)
    app.include_router(members_router)
    app.include_router(admin_router)

    return app


app = create_app()
