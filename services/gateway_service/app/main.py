"""FastAPI application entrypoint for the club workflow gateway.

The gateway composes the members, sessions and attendance routers in one
process under ``/api/v1``; each service app can still be run on its own.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded

from libs.common.config import get_settings
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from libs.common.rate_limit import limiter, rate_limit_exceeded_handler
from services.attendance_service.routers import check_in_router
from services.members_service.routers import (
    admin_router,
    applications_router,
    clubs_router,
    members_router,
)
from services.sessions_service.routers import (
    activities_router,
    registrations_router,
    sessions_router,
)

API_PREFIX = "/api/v1"


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance."""
    settings = get_settings()
    app = FastAPI(
        title="Club Workflow Gateway",
        version="0.1.0",
        description="Membership approval, registrations and check-in.",
    )

    # Add rate limiter state to app
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add observability (structured logging + request tracing)
    add_observability_middleware(app)

    # Add global exception handlers for consistent error responses
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Simple readiness endpoint."""
        return {"status": "ok"}

    for router in (
        clubs_router,
        applications_router,
        members_router,
        admin_router,
        activities_router,
        sessions_router,
        registrations_router,
        check_in_router,
    ):
        app.include_router(router, prefix=API_PREFIX)

    return app


app = create_app()
