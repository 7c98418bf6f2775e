from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from venue_timekeeping.attendance.model import AttendancePhoto, PunchEvent
from venue_timekeeping.attendance.service import PunchService
from venue_timekeeping.common.datetime_utils import JST
from venue_timekeeping.core.enums import PresenceState, PunchType
from venue_timekeeping.core.exceptions import (
    MissingProofOfPresence,
    PunchRejected,
    StaleTimeline,
    ValidationError,
)


class InMemoryPunches:
    def __init__(self):
        self.events: list[PunchEvent] = []
        self.photos: dict[int, str] = {}
        self._id = 0
        # Punches written "by another terminal" right before the next append.
        self.interleave: list[tuple[str, str, PunchType]] = []

    def _add(self, staff_id, store_id, punch_type, timestamp, is_companion=False) -> PunchEvent:
        self._id += 1
        ev = PunchEvent(
            punch_id=self._id,
            staff_id=staff_id,
            store_id=store_id,
            punch_type=punch_type,
            timestamp=timestamp,
            is_companion=is_companion,
        )
        self.events.append(ev)
        return ev

    def get_last_for_staff(self, *, staff_id: str, store_id: str) -> Optional[PunchEvent]:
        mine = [e for e in self.events if e.staff_id == staff_id and e.store_id == store_id]
        if not mine:
            return None
        return max(mine, key=lambda e: (e.timestamp, e.punch_id))

    def append_punches(self, *, staff_id, store_id, expected_last_id, punches, photo_url=None):
        while self.interleave:
            other_staff, other_store, other_type = self.interleave.pop(0)
            self._add(other_staff, other_store, other_type, punches[0].timestamp)

        last = self.get_last_for_staff(staff_id=staff_id, store_id=store_id)
        if (last.punch_id if last else None) != expected_last_id:
            raise StaleTimeline("moved")

        created = []
        for p in punches:
            ev = self._add(staff_id, store_id, p.punch_type, p.timestamp, p.is_companion)
            if photo_url and p.punch_type is PunchType.CLOCK_IN:
                self.photos[ev.punch_id] = photo_url
            created.append(ev)
        return created

    def get_photo(self, *, punch_id):
        if punch_id not in self.photos:
            return None
        ev = next(e for e in self.events if e.punch_id == punch_id)
        return AttendancePhoto(
            photo_id=punch_id,
            punch_id=punch_id,
            store_id=ev.store_id,
            staff_id=ev.staff_id,
            photo_url=self.photos[punch_id],
            created_at=ev.timestamp,
        )

    def list_in_range(self, *, store_id, start, end, staff_id=None):
        rows = [
            e
            for e in self.events
            if e.store_id == store_id and start <= e.timestamp < end and (staff_id is None or e.staff_id == staff_id)
        ]
        return sorted(rows, key=lambda e: (e.timestamp, e.punch_id))

    def list_latest_per_staff(self, *, store_id, since):
        latest: dict[str, PunchEvent] = {}
        for e in self.list_in_range(store_id=store_id, start=since, end=datetime.max.replace(tzinfo=timezone.utc)):
            latest[e.staff_id] = e
        return sorted(latest.values(), key=lambda e: e.staff_id)


def jst(y, m, d, hh=0, mm=0):
    return datetime(y, m, d, hh, mm, tzinfo=JST)


@pytest.fixture
def repo():
    return InMemoryPunches()


@pytest.fixture
def svc(repo):
    return PunchService(repo)


def test_clock_in_records_event_and_photo(svc, repo):
    created = svc.punch("A", "S1", "clock-in", now=jst(2024, 3, 1, 17, 55), is_companion=True, photo_url="p/a.jpg")

    assert [e.punch_type for e in created] == [PunchType.CLOCK_IN]
    assert created[0].is_companion is True
    assert created[0].timestamp == jst(2024, 3, 1, 17, 55)
    assert repo.photos == {created[0].punch_id: "p/a.jpg"}
    assert svc.presence("A", "S1") is PresenceState.WORKING


def test_clock_in_photo_lookup(svc):
    clock_in = svc.punch("A", "S1", "clock-in", now=jst(2024, 3, 1, 18, 0), photo_url="p/a.jpg")[0]
    brk = svc.punch("A", "S1", "break-start", now=jst(2024, 3, 1, 19, 0))[0]

    photo = svc.clock_in_photo(clock_in.punch_id)
    assert photo.photo_url == "p/a.jpg"
    assert photo.staff_id == "A"
    assert svc.clock_in_photo(brk.punch_id) is None


def test_clock_in_without_photo_is_a_distinct_error(svc, repo):
    with pytest.raises(MissingProofOfPresence):
        svc.punch("A", "S1", PunchType.CLOCK_IN, now=jst(2024, 3, 1, 18, 0))

    assert repo.events == []


def test_photo_requirement_can_be_disabled(repo):
    svc = PunchService(repo, require_clock_in_photo=False)

    created = svc.punch("A", "S1", PunchType.CLOCK_IN, now=jst(2024, 3, 1, 18, 0))

    assert len(created) == 1
    assert repo.photos == {}


def test_clock_out_during_break_injects_break_end(svc, repo):
    svc.punch("A", "S1", "clock-in", now=jst(2024, 3, 1, 18, 0), photo_url="p.jpg")
    svc.punch("A", "S1", "break-start", now=jst(2024, 3, 1, 20, 0))

    created = svc.punch("A", "S1", "clock-out", now=jst(2024, 3, 1, 23, 0))

    assert [e.punch_type for e in created] == [PunchType.BREAK_END, PunchType.CLOCK_OUT]
    assert created[0].timestamp == created[1].timestamp == jst(2024, 3, 1, 23, 0)
    assert created[0].punch_id < created[1].punch_id
    assert all(e.is_companion is False for e in created)
    assert svc.presence("A", "S1") is PresenceState.OFF


def test_double_clock_in_is_rejected(svc, repo):
    svc.punch("A", "S1", "clock-in", now=jst(2024, 3, 1, 18, 0), photo_url="p.jpg")

    with pytest.raises(PunchRejected) as exc_info:
        svc.punch("A", "S1", "clock-in", now=jst(2024, 3, 1, 18, 5), photo_url="p.jpg")

    assert exc_info.value.state is PresenceState.WORKING
    assert len(repo.events) == 1


def test_clock_out_from_off_is_rejected(svc, repo):
    with pytest.raises(PunchRejected) as exc_info:
        svc.punch("A", "S1", "clock-out", now=jst(2024, 3, 1, 18, 0))

    assert exc_info.value.state is PresenceState.OFF
    assert repo.events == []


def test_companion_flag_only_kept_on_clock_in(svc):
    svc.punch("A", "S1", "clock-in", now=jst(2024, 3, 1, 18, 0), photo_url="p.jpg")

    created = svc.punch("A", "S1", "break-start", now=jst(2024, 3, 1, 19, 0), is_companion=True)

    assert created[0].is_companion is False


def test_state_is_tracked_per_store(svc):
    svc.punch("A", "S1", "clock-in", now=jst(2024, 3, 1, 18, 0), photo_url="p.jpg")

    assert svc.presence("A", "S2") is PresenceState.OFF


def test_concurrent_clock_in_loses_with_punch_rejected(svc, repo):
    # Another terminal clocks A in between our read and our write.
    repo.interleave.append(("A", "S1", PunchType.CLOCK_IN))

    with pytest.raises(PunchRejected) as exc_info:
        svc.punch("A", "S1", "clock-in", now=jst(2024, 3, 1, 18, 0), photo_url="p.jpg")

    assert exc_info.value.state is PresenceState.WORKING
    assert [e.punch_type for e in repo.events] == [PunchType.CLOCK_IN]


def test_other_staff_activity_does_not_block(svc, repo):
    repo.interleave.append(("B", "S1", PunchType.CLOCK_IN))

    created = svc.punch("A", "S1", "clock-in", now=jst(2024, 3, 1, 18, 0), photo_url="p.jpg")

    assert created[0].staff_id == "A"


def test_unknown_type_and_missing_ids(svc):
    with pytest.raises(ValidationError):
        svc.punch("A", "S1", "nap", now=jst(2024, 3, 1, 18, 0))
    with pytest.raises(ValidationError):
        svc.punch(" ", "S1", "clock-in", now=jst(2024, 3, 1, 18, 0), photo_url="p.jpg")


def test_active_staff_lists_working_then_on_break(svc):
    now = jst(2024, 3, 1, 21, 0)
    svc.punch("C", "S1", "clock-in", now=now - timedelta(hours=3), photo_url="p.jpg")
    svc.punch("C", "S1", "break-start", now=now - timedelta(minutes=10))
    svc.punch("B", "S1", "clock-in", now=now - timedelta(hours=2), photo_url="p.jpg")
    svc.punch("A", "S1", "clock-in", now=now - timedelta(hours=2), photo_url="p.jpg")
    svc.punch("A", "S1", "clock-out", now=now - timedelta(hours=1))
    svc.punch("D", "S1", "clock-in", now=now - timedelta(hours=1), photo_url="p.jpg")

    active = svc.active_staff("S1", now=now)

    assert [(a.staff_id, a.state) for a in active] == [
        ("B", PresenceState.WORKING),
        ("D", PresenceState.WORKING),
        ("C", PresenceState.ON_BREAK),
    ]


def test_active_staff_ignores_punches_outside_window(svc):
    now = jst(2024, 3, 5, 21, 0)
    svc.punch("A", "S1", "clock-in", now=now - timedelta(hours=49), photo_url="p.jpg")

    assert svc.active_staff("S1", now=now) == []
