from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING, Iterable, Union

from ..common.datetime_utils import (
    format_date_label,
    local_date_at,
    local_datetime,
    parse_date_label,
    project,
    to_utc,
)
from ..common.validators import require_hour
from ..core.constants import (
    DEFAULT_BUSINESS_DAY_END_HOUR,
    DEFAULT_BUSINESS_DAY_GRACE_MINUTES,
    DEFAULT_BUSINESS_DAY_START_HOUR,
)
from ..core.exceptions import ValidationError

if TYPE_CHECKING:
    from ..attendance.model import PunchEvent

DateLabel = Union[str, date]


@dataclass(frozen=True)
class BusinessDayInterval:
    """Half-open [start, end) window of one operating day, in UTC."""

    start: datetime
    end: datetime

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def label(self) -> str:
        """Start civil day in JST, formatted YYYY-MM-DD."""
        return format_date_label(project(self.start).date)

    def contains(self, instant: datetime) -> bool:
        return self.start <= to_utc(instant) < self.end


class BusinessDayResolver:
    """Maps instants and calendar labels onto the venue's business days.

    A business day runs from `start_hour` on its label day to `end_hour` on
    the next civil day (JST). Punches up to `grace_minutes` after `end_hour`
    still belong to the business day that just ended. Punches in the closed
    mid-day gap are attributed to the previous business day as well, so every
    instant has exactly one key.
    """

    def __init__(
        self,
        *,
        start_hour: int = DEFAULT_BUSINESS_DAY_START_HOUR,
        end_hour: int = DEFAULT_BUSINESS_DAY_END_HOUR,
        grace_minutes: int = DEFAULT_BUSINESS_DAY_GRACE_MINUTES,
    ):
        self.start_hour = require_hour(start_hour, "start_hour")
        self.end_hour = require_hour(end_hour, "end_hour")
        if grace_minutes is None or int(grace_minutes) < 0:
            raise ValidationError("grace_minutes must not be negative")
        self.grace_minutes = int(grace_minutes)
        if self.start_hour <= self.end_hour:
            raise ValidationError("business day must run overnight (start_hour > end_hour)")
        if self.end_hour * 60 + self.grace_minutes >= self.start_hour * 60:
            raise ValidationError("grace_minutes must end before the next business day starts")

    def __repr__(self) -> str:
        return (
            f"BusinessDayResolver(start_hour={self.start_hour}, "
            f"end_hour={self.end_hour}, grace_minutes={self.grace_minutes})"
        )

    def _interval(self, y: int, m: int, d: int) -> BusinessDayInterval:
        return BusinessDayInterval(
            start=local_datetime(y, m, d, self.start_hour),
            end=local_datetime(y, m, d + 1, self.end_hour),
        )

    def range_containing(self, instant: datetime) -> BusinessDayInterval:
        instant = to_utc(instant)
        wall = project(instant)
        y, m, d = wall.year, wall.month, wall.day

        today_start = local_datetime(y, m, d, self.start_hour)
        today_end_with_grace = local_datetime(y, m, d, self.end_hour) + timedelta(minutes=self.grace_minutes)

        if instant < today_end_with_grace:
            return self._interval(y, m, d - 1)
        if instant >= today_start:
            return self._interval(y, m, d)
        # Closed hours between end+grace and start: previous business day.
        return self._interval(y, m, d - 1)

    def range_for_label(self, label: DateLabel) -> BusinessDayInterval:
        """Interval whose start day is `label`. No grace logic applies."""
        day = parse_date_label(label) if isinstance(label, str) else label
        return BusinessDayInterval(
            start=local_date_at(day, self.start_hour),
            end=local_date_at(day + timedelta(days=1), self.end_hour),
        )

    def key_for(self, instant: datetime) -> str:
        return self.range_containing(instant).label

    def in_closed_hours(self, instant: datetime) -> bool:
        """True between end+grace and start on the instant's civil day."""
        instant = to_utc(instant)
        wall = project(instant)
        closes = local_datetime(wall.year, wall.month, wall.day, self.end_hour) + timedelta(minutes=self.grace_minutes)
        opens = local_datetime(wall.year, wall.month, wall.day, self.start_hour)
        return closes <= instant < opens

    def labels_between(self, first: DateLabel, last: DateLabel) -> list[str]:
        """Business-day labels from `first` to `last`, inclusive."""
        first_day = parse_date_label(first) if isinstance(first, str) else first
        last_day = parse_date_label(last) if isinstance(last, str) else last
        if last_day < first_day:
            return []
        return [format_date_label(first_day + timedelta(days=i)) for i in range((last_day - first_day).days + 1)]

    def group_by_key(self, punches: Iterable["PunchEvent"]) -> dict[str, list["PunchEvent"]]:
        grouped: dict[str, list["PunchEvent"]] = defaultdict(list)
        for p in punches:
            grouped[self.key_for(p.timestamp)].append(p)
        return dict(grouped)
