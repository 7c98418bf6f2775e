from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from venue_timekeeping.common.datetime_utils import (
    JST,
    local_datetime,
    month_bounds,
    parse_date_label,
    project,
    to_utc,
)
from venue_timekeeping.core.exceptions import InvalidDateLabel, ValidationError


def test_project_adds_nine_hours():
    wall = project(datetime(2024, 2, 29, 15, 30, 5, tzinfo=timezone.utc))

    assert (wall.year, wall.month, wall.day, wall.hour, wall.minute, wall.second) == (2024, 3, 1, 0, 30, 5)
    assert wall.date == date(2024, 3, 1)


def test_local_datetime_normalizes_day_overflow():
    assert local_datetime(2024, 3, 0, 18) == datetime(2024, 2, 29, 18, tzinfo=JST)
    assert local_datetime(2024, 12, 32, 6) == datetime(2025, 1, 1, 6, tzinfo=JST)
    assert local_datetime(2024, 3, 1).tzinfo == timezone.utc


def test_to_utc():
    assert to_utc(datetime(2024, 1, 1, 9, 0)) == datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)
    assert to_utc(datetime(2024, 1, 1, 9, 0, tzinfo=JST)).hour == 0


def test_parse_date_label():
    assert parse_date_label("2024-02-29") == date(2024, 2, 29)
    with pytest.raises(InvalidDateLabel):
        parse_date_label("2023-02-29")
    with pytest.raises(InvalidDateLabel):
        parse_date_label(None)


def test_month_bounds():
    start, end = month_bounds(2024, 12)

    assert start == datetime(2024, 12, 1, tzinfo=JST)
    assert end == datetime(2025, 1, 1, tzinfo=JST)
    with pytest.raises(ValidationError):
        month_bounds(2024, 13)
