"""
Agreement status state machine.

Pure functions over the transition table; no model lifecycle involved.

    in process -> active
    active     -> terminated | suspended
    suspended  -> active
    terminated    (terminal)
"""

from django.db import models

from .exceptions import InvalidStatusTransition


class AgreementStatus(models.TextChoices):
    """Lifecycle states of an agreement."""

    IN_PROCESS = "in process", "In process"
    ACTIVE = "active", "Active"
    TERMINATED = "terminated", "Terminated"
    SUSPENDED = "suspended", "Suspended"


INITIAL_STATUS = AgreementStatus.IN_PROCESS.value

TRANSITIONS: dict[str, list[str]] = {
    AgreementStatus.IN_PROCESS.value: [AgreementStatus.ACTIVE.value],
    AgreementStatus.ACTIVE.value: [
        AgreementStatus.TERMINATED.value,
        AgreementStatus.SUSPENDED.value,
    ],
    AgreementStatus.SUSPENDED.value: [AgreementStatus.ACTIVE.value],
    AgreementStatus.TERMINATED.value: [],
}

TERMINAL_STATUSES = [AgreementStatus.TERMINATED.value]


def is_valid_status(status) -> bool:
    return status in AgreementStatus.values


def get_allowed_transitions(status: str) -> list[str]:
    """Statuses reachable in one step from ``status``."""
    return list(TRANSITIONS.get(status, []))


def check_transition(from_status: str, to_status: str) -> None:
    """
    Raise InvalidStatusTransition unless ``to_status`` is reachable.

    Re-asserting the current status is allowed and is a no-op for callers.
    """
    if from_status == to_status:
        return
    if to_status not in get_allowed_transitions(from_status):
        raise InvalidStatusTransition(from_status, to_status)
