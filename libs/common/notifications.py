"""Outbound lifecycle events for cache revalidation and user notifications.

The workflow calls ``dispatch_event`` after a transition has committed.
Delivery is best-effort: a failing dispatcher is logged and never fails the
transition that produced the event.

Usage:
    await dispatch_event(
        dispatcher,
        EventKind.APPLICATION_APPROVED,
        {"application_id": str(app.id), "profile_id": str(athlete.id)},
    )
"""

import enum
from typing import Any, Protocol

from libs.common.config import get_settings
from libs.common.logging import get_logger
from libs.common.service_client import internal_post

logger = get_logger(__name__)


class EventKind(str, enum.Enum):
    APPLICATION_SUBMITTED = "application_submitted"
    APPLICATION_APPROVED = "application_approved"
    APPLICATION_REJECTED = "application_rejected"
    APPLICATION_INFO_REQUESTED = "application_info_requested"
    REGISTRATION_CREATED = "registration_created"
    REGISTRATION_APPROVED = "registration_approved"
    REGISTRATION_REJECTED = "registration_rejected"
    REGISTRATION_CANCELLED = "registration_cancelled"
    REGISTRATION_REMOVED = "registration_removed"
    CHECK_IN_RECORDED = "check_in_recorded"


class NotificationDispatcher(Protocol):
    async def notify(self, event_kind: EventKind, payload: dict[str, Any]) -> None: ...


class LoggingDispatcher:
    """Records events in the log only."""

    async def notify(self, event_kind: EventKind, payload: dict[str, Any]) -> None:
        logger.info(
            "Event %s",
            event_kind.value,
            extra={"extra_fields": {"event": event_kind.value, "payload": payload}},
        )


class HttpNotificationDispatcher:
    """Posts events to the communications service's internal event sink."""

    def __init__(self, service_url: str, timeout: float):
        self.service_url = service_url
        self.timeout = timeout

    async def notify(self, event_kind: EventKind, payload: dict[str, Any]) -> None:
        response = await internal_post(
            service_url=self.service_url,
            path="/internal/events",
            calling_service="workflow",
            json={"kind": event_kind.value, "payload": payload},
            timeout=self.timeout,
        )
        response.raise_for_status()


def get_dispatcher() -> NotificationDispatcher:
    """FastAPI dependency returning the configured dispatcher."""
    settings = get_settings()
    if not settings.NOTIFICATIONS_ENABLED:
        return LoggingDispatcher()
    return HttpNotificationDispatcher(
        settings.COMMUNICATIONS_SERVICE_URL, settings.NOTIFICATION_TIMEOUT
    )


async def dispatch_event(
    dispatcher: NotificationDispatcher,
    event_kind: EventKind,
    payload: dict[str, Any],
) -> None:
    """Deliver one event; errors are logged, never raised."""
    try:
        await dispatcher.notify(event_kind, payload)
    except Exception as exc:
        logger.warning(
            "Event dispatch failed for %s: %s",
            event_kind.value,
            exc,
            extra={"extra_fields": {"event": event_kind.value}},
        )
