"""Global exception handlers for consistent error responses."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import InterfaceError, OperationalError

from libs.common.errors import DomainError
from libs.common.logging import get_logger, get_request_id

logger = get_logger(__name__)


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    logger.info(
        "Workflow error",
        extra={"extra_fields": {"code": exc.code, "detail": exc.message}},
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def storage_unavailable_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Storage unavailable", exc_info=exc)
    return JSONResponse(
        status_code=503,
        content={
            "detail": "Storage temporarily unavailable. Please try again.",
            "code": "STORAGE_UNAVAILABLE",
            "request_id": get_request_id(),
        },
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred.",
            "code": "INTERNAL_ERROR",
            "request_id": get_request_id(),
        },
    )


def add_exception_handlers(app: FastAPI) -> None:
    """Register workflow, storage and fallback handlers on ``app``."""
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(OperationalError, storage_unavailable_handler)
    app.add_exception_handler(InterfaceError, storage_unavailable_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
