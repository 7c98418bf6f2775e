from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional, Union

from ..common.datetime_utils import to_utc, utc_now
from ..common.validators import require_non_empty, require_positive
from ..core.constants import DEFAULT_ACTIVE_STAFF_WINDOW_HOURS, DEFAULT_PUNCH_MAX_ATTEMPTS
from ..core.enums import PresenceState, PunchType
from ..core.exceptions import MissingProofOfPresence, PunchRejected, StaleTimeline
from .model import ActiveStaff, AttendancePhoto, NewPunch, PunchEvent
from .repository import PunchRepository
from .state_machine import derive_state, normalize_punch_type, plan_transition

logger = logging.getLogger(__name__)


class PunchService:
    """Use case: record terminal punches in a legal order."""

    def __init__(
        self,
        punches: PunchRepository,
        *,
        require_clock_in_photo: bool = True,
        active_window_hours: int = DEFAULT_ACTIVE_STAFF_WINDOW_HOURS,
        max_attempts: int = DEFAULT_PUNCH_MAX_ATTEMPTS,
    ):
        self._punches = punches
        self._require_photo = bool(require_clock_in_photo)
        self._active_window = timedelta(hours=require_positive(active_window_hours, "active_window_hours"))
        self._max_attempts = require_positive(max_attempts, "max_attempts")

    def presence(self, staff_id: str, store_id: str) -> PresenceState:
        last = self._punches.get_last_for_staff(staff_id=staff_id, store_id=store_id)
        return derive_state(last.punch_type if last else None)

    def punch(
        self,
        staff_id: str,
        store_id: str,
        requested_type: Union[str, PunchType],
        *,
        now: Optional[datetime] = None,
        is_companion: bool = False,
        photo_url: Optional[str] = None,
    ) -> list[PunchEvent]:
        staff_id = require_non_empty(staff_id, "staff_id")
        store_id = require_non_empty(store_id, "store_id")
        requested = normalize_punch_type(requested_type)
        now = to_utc(now) if now else utc_now()

        photo_url = (photo_url or "").strip() or None
        if requested is PunchType.CLOCK_IN and self._require_photo and not photo_url:
            raise MissingProofOfPresence("A photo is required to clock in")

        for attempt in range(1, self._max_attempts + 1):
            last = self._punches.get_last_for_staff(staff_id=staff_id, store_id=store_id)
            state = derive_state(last.punch_type if last else None)
            try:
                planned = plan_transition(state, requested)
            except PunchRejected:
                logger.warning("Rejected %s for staff %s at store %s (state=%s)", requested.value, staff_id, store_id, state.value)
                raise

            new_punches = [
                NewPunch(
                    punch_type=t,
                    timestamp=now,
                    is_companion=bool(is_companion) if t is PunchType.CLOCK_IN else False,
                )
                for t in planned
            ]
            try:
                created = self._punches.append_punches(
                    staff_id=staff_id,
                    store_id=store_id,
                    expected_last_id=last.punch_id if last else None,
                    punches=new_punches,
                    photo_url=photo_url if requested is PunchType.CLOCK_IN else None,
                )
            except StaleTimeline:
                logger.info("Concurrent punch for staff %s at store %s, retrying (attempt %d)", staff_id, store_id, attempt)
                continue

            logger.info(
                "Recorded %s for staff %s at store %s",
                ", ".join(p.punch_type.value for p in created),
                staff_id,
                store_id,
            )
            return created

        # Every attempt lost the race; report against the state as it is now.
        last = self._punches.get_last_for_staff(staff_id=staff_id, store_id=store_id)
        raise PunchRejected(derive_state(last.punch_type if last else None), requested)

    def active_staff(self, store_id: str, *, now: Optional[datetime] = None) -> list[ActiveStaff]:
        """Staff currently working or on break, working first."""
        store_id = require_non_empty(store_id, "store_id")
        now = to_utc(now) if now else utc_now()

        active: list[ActiveStaff] = []
        for last in self._punches.list_latest_per_staff(store_id=store_id, since=now - self._active_window):
            state = derive_state(last.punch_type)
            if state is PresenceState.OFF:
                continue
            active.append(
                ActiveStaff(
                    staff_id=last.staff_id,
                    state=state,
                    last_type=last.punch_type,
                    last_timestamp=last.timestamp,
                )
            )

        active.sort(key=lambda a: (a.state is not PresenceState.WORKING, a.staff_id))
        return active

    def clock_in_photo(self, punch_id: int) -> Optional[AttendancePhoto]:
        return self._punches.get_photo(punch_id=require_positive(punch_id, "punch_id"))
