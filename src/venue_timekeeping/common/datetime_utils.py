from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone

from ..core.constants import DATE_LABEL_FORMAT
from ..core.exceptions import InvalidDateLabel, ValidationError

# Japan Standard Time: fixed UTC+9, no daylight saving.
JST = timezone(timedelta(hours=9), "JST")

_LABEL_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True)
class WallClock:
    year: int
    month: int
    day: int
    hour: int
    minute: int
    second: int

    @property
    def date(self) -> date:
        return date(self.year, self.month, self.day)


def to_utc(value: datetime) -> datetime:
    """Normalize to an aware UTC datetime. Naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_now() -> datetime:
    """Current instant, as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def project(instant: datetime) -> WallClock:
    """Wall-clock reading of `instant` as observed in JST."""
    local = to_utc(instant).astimezone(JST)
    return WallClock(local.year, local.month, local.day, local.hour, local.minute, local.second)


def local_datetime(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> datetime:
    """UTC instant of a JST wall-clock reading.

    `day` may fall outside the month (0, 32, ...); it is normalized by date
    arithmetic so callers can step to the previous/next civil day freely.
    """
    base = datetime(year, month, 1, tzinfo=JST) + timedelta(days=day - 1, hours=hour, minutes=minute)
    return base.astimezone(timezone.utc)


def local_date_at(day: date, hour: int = 0, minute: int = 0) -> datetime:
    return local_datetime(day.year, day.month, day.day, hour, minute)


def parse_date_label(value: str) -> date:
    """Parse a strict YYYY-MM-DD label into a date."""
    if not isinstance(value, str) or not _LABEL_RE.match(value.strip()):
        raise InvalidDateLabel(value)
    try:
        return datetime.strptime(value.strip(), DATE_LABEL_FORMAT).date()
    except ValueError as exc:
        raise InvalidDateLabel(value) from exc


def format_date_label(value: date) -> str:
    return value.strftime(DATE_LABEL_FORMAT)


def month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    """JST wall-clock month as a half-open UTC interval."""
    if not 1 <= int(month) <= 12:
        raise ValidationError("month must be between 1 and 12")
    year = int(year)
    month = int(month)
    start = local_datetime(year, month, 1)
    end = local_datetime(year + 1, 1, 1) if month == 12 else local_datetime(year, month + 1, 1)
    return start, end
