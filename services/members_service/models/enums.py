"""Enum definitions for members service models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class MembershipStatus(str, enum.Enum):
    """Global membership flag on a profile, derived from applications."""

    PENDING = "pending"
    ACTIVE = "active"
    REJECTED = "rejected"
    SUSPENDED = "suspended"


class ApplicationStatus(str, enum.Enum):
    PENDING = "pending"
    INFO_REQUESTED = "info_requested"
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self in (ApplicationStatus.APPROVED, ApplicationStatus.REJECTED)


# Statuses that count against the one-open-application-per-user rule.
ACTIVE_APPLICATION_STATUSES = (
    ApplicationStatus.PENDING,
    ApplicationStatus.INFO_REQUESTED,
)


class ReviewAction(str, enum.Enum):
    APPROVE = "approve"
    REJECT = "reject"
    REQUEST_INFO = "request_info"


class Gender(str, enum.Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class DocumentType(str, enum.Enum):
    ID_CARD = "id_card"
    HOUSE_REGISTRATION = "house_registration"
    BIRTH_CERTIFICATE = "birth_certificate"
