"""Workflow error taxonomy.

Every error a workflow operation can surface to the caller is one of the
classes below. They are raised by the service layer and rendered by
``libs.common.error_handler``; routers never translate them.
"""

from datetime import datetime
from typing import Any, Optional


class DomainError(Exception):
    """Base class for recoverable, caller-facing workflow errors."""

    status_code: int = 400
    code: str = "DOMAIN_ERROR"

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"detail": self.message, "code": self.code}
        for key, value in self.extra.items():
            body[key] = value.isoformat() if isinstance(value, datetime) else value
        return body


class ValidationError(DomainError):
    """Missing or malformed input."""

    status_code = 422
    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None, **extra: Any):
        if field is not None:
            extra["field"] = field
        super().__init__(message, **extra)
        self.field = field


class AuthorizationError(DomainError):
    """The actor's scope excludes the target club or record."""

    status_code = 403
    code = "FORBIDDEN"


class NotFoundError(DomainError):
    status_code = 404
    code = "NOT_FOUND"


class ConflictError(DomainError):
    """An active record already exists for the key."""

    status_code = 409
    code = "CONFLICT"


class AlreadyCheckedInError(DomainError):
    status_code = 409
    code = "ALREADY_CHECKED_IN"

    def __init__(self, message: str, checked_in_at: datetime, **extra: Any):
        super().__init__(message, checked_in_at=checked_in_at, **extra)
        self.checked_in_at = checked_in_at


class ScopeMismatchError(DomainError):
    """Athlete and check-in target belong to different clubs."""

    status_code = 403
    code = "SCOPE_MISMATCH"


class InvalidTokenError(DomainError):
    status_code = 400
    code = "INVALID_TOKEN"


class AlreadyProcessedError(DomainError):
    """Lost the race on a transition out of a non-terminal state."""

    status_code = 409
    code = "ALREADY_PROCESSED"

    def __init__(self, message: str, current_status: Optional[str] = None, **extra):
        if current_status is not None:
            extra["current_status"] = current_status
        super().__init__(message, **extra)
        self.current_status = current_status
