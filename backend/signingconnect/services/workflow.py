"""Status machines for applications and jobs.

Each status column is a closed set of values; handlers never compare raw
strings but go through ``parse_*`` and ``validate_*_transition`` here.
"""
from enum import Enum

from signingconnect.errors import InvalidTransition, ValidationFailed


class ApplicationStatus(str, Enum):
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    REJECTED = "rejected"


class JobStatus(str, Enum):
    OPEN = "open"
    FILLED = "filled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    HELD = "held"
    PAID = "paid"
    DISPUTED = "disputed"


# Terminal states only accept themselves, which re-stamps reviewer metadata.
APPLICATION_TRANSITIONS: dict[ApplicationStatus, set[ApplicationStatus]] = {
    ApplicationStatus.PENDING: {
        ApplicationStatus.PENDING,
        ApplicationStatus.UNDER_REVIEW,
        ApplicationStatus.APPROVED,
        ApplicationStatus.REJECTED,
    },
    ApplicationStatus.UNDER_REVIEW: {
        ApplicationStatus.PENDING,
        ApplicationStatus.UNDER_REVIEW,
        ApplicationStatus.APPROVED,
        ApplicationStatus.REJECTED,
    },
    ApplicationStatus.APPROVED: {ApplicationStatus.APPROVED},
    ApplicationStatus.REJECTED: {ApplicationStatus.REJECTED},
}

JOB_TRANSITIONS: dict[JobStatus, set[JobStatus]] = {
    JobStatus.OPEN: {JobStatus.FILLED, JobStatus.CANCELLED},
    JobStatus.FILLED: {JobStatus.OPEN, JobStatus.IN_PROGRESS, JobStatus.CANCELLED},
    JobStatus.IN_PROGRESS: {JobStatus.COMPLETED, JobStatus.CANCELLED},
    JobStatus.COMPLETED: set(),
    JobStatus.CANCELLED: set(),
}


def _parse(enum_cls, value, label: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationFailed(f"Invalid {label}. Must be one of: {allowed}")


def parse_application_status(value) -> ApplicationStatus:
    return _parse(ApplicationStatus, value, "status")


def parse_job_status(value) -> JobStatus:
    return _parse(JobStatus, value, "status")


def parse_payment_status(value) -> PaymentStatus:
    return _parse(PaymentStatus, value, "payment status")


def validate_application_transition(current: ApplicationStatus, target: ApplicationStatus) -> None:
    if target not in APPLICATION_TRANSITIONS[current]:
        raise InvalidTransition(
            f"Cannot move application from '{current.value}' to '{target.value}'"
        )


def validate_job_transition(current: JobStatus, target: JobStatus) -> None:
    if current == target:
        return
    if target not in JOB_TRANSITIONS[current]:
        raise InvalidTransition(f"Cannot move job from '{current.value}' to '{target.value}'")
