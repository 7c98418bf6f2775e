from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .enums import PresenceState, PunchType


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidDateLabel(ValidationError):
    """Raised when a YYYY-MM-DD business-day label is malformed or out of range."""

    def __init__(self, label: object):
        super().__init__(f"Invalid date label: {label!r} (expected YYYY-MM-DD)")
        self.label = label


class PunchRejected(DomainError):
    """Raised when a requested punch is not a legal transition from the current state."""

    def __init__(self, state: "PresenceState", requested: "PunchType"):
        super().__init__(f"Cannot record {requested.value} while {state.value}")
        self.state = state
        self.requested = requested


class MissingProofOfPresence(DomainError):
    """Raised when a clock-in arrives without its photo reference."""


class StaleTimeline(DomainError):
    """Raised by a repository when the staff member's latest punch moved since it was read."""


class StorageUnavailable(DomainError):
    """Raised when the attendance log cannot be read or written."""
