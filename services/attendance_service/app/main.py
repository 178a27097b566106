"""FastAPI application for the Attendance Service."""

from fastapi import FastAPI
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from libs.common.rate_limit import limiter, rate_limit_exceeded_handler
from services.attendance_service.routers import check_in_router
from slowapi.errors import RateLimitExceeded


def create_app() -> FastAPI:
    """Create and configure the Attendance Service FastAPI app."""
    app = FastAPI(
        title="Club Attendance Service",
        version="0.1.0",
        description="Activity and training session check-ins.",
    )
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    add_exception_handlers(app)
    add_observability_middleware(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "attendance"}

    app.include_router(check_in_router)

    return app


app = create_app()
