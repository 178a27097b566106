"""Enum definitions for sessions service models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class ActivityType(str, enum.Enum):
    TRAINING = "training"
    COMPETITION = "competition"
    PRACTICE = "practice"
    OTHER = "other"


class RegistrationStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self != RegistrationStatus.PENDING


# Registrations that hold a place on the activity.
SEAT_HOLDING_STATUSES = (RegistrationStatus.PENDING, RegistrationStatus.APPROVED)
