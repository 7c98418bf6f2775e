from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import AttendancePhoto, NewPunch, PunchEvent


class PunchRepository(Protocol):
    def get_last_for_staff(self, *, staff_id: str, store_id: str) -> Optional[PunchEvent]:
        raise NotImplementedError

    def append_punches(
        self,
        *,
        staff_id: str,
        store_id: str,
        expected_last_id: Optional[int],
        punches: Sequence[NewPunch],
        photo_url: Optional[str] = None,
    ) -> list[PunchEvent]:
        """Write `punches` atomically, in order.

        The staff member's latest punch is re-read under a lock first; if its
        id differs from `expected_last_id`, nothing is written and
        StaleTimeline is raised. `photo_url`, when given, is recorded against
        the CLOCK_IN in the same transaction.
        """

        raise NotImplementedError

    def list_in_range(
        self,
        *,
        store_id: str,
        start: datetime,
        end: datetime,
        staff_id: Optional[str] = None,
    ) -> Sequence[PunchEvent]:
        """Punches with start <= timestamp < end, oldest first."""

        raise NotImplementedError

    def list_latest_per_staff(self, *, store_id: str, since: datetime) -> Sequence[PunchEvent]:
        """Most recent punch of each staff member with activity since `since`."""

        raise NotImplementedError

    def get_photo(self, *, punch_id: int) -> Optional[AttendancePhoto]:
        raise NotImplementedError
