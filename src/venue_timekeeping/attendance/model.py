from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import PresenceState, PunchType


@dataclass(frozen=True)
class PunchEvent:
    """Thực thể miền (domain): một lần chấm công."""

    punch_id: int
    staff_id: str
    store_id: str
    punch_type: PunchType
    timestamp: datetime
    is_companion: bool = False
    approved_at: Optional[datetime] = None
    approved_by: Optional[str] = None

    @property
    def is_approved(self) -> bool:
        return self.approved_at is not None


@dataclass(frozen=True)
class NewPunch:
    """A punch about to be written; ids are assigned by the repository."""

    punch_type: PunchType
    timestamp: datetime
    is_companion: bool = False


@dataclass(frozen=True)
class AttendancePhoto:
    photo_id: int
    punch_id: int
    store_id: str
    staff_id: str
    photo_url: str
    created_at: datetime


@dataclass(frozen=True)
class ActiveStaff:
    """Read-model for the terminal's "currently on shift" list."""

    staff_id: str
    state: PresenceState
    last_type: PunchType
    last_timestamp: datetime
