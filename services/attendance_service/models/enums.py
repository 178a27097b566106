"""Enum definitions for attendance service models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class CheckInStatus(str, enum.Enum):
    ON_TIME = "on_time"
    LATE = "late"


class CheckInMethod(str, enum.Enum):
    QR = "qr"
    MANUAL = "manual"


class CheckInTargetKind(str, enum.Enum):
    ACTIVITY = "activity"
    SESSION = "session"
