from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Iterable, Optional, Sequence

from ..attendance.model import PunchEvent
from ..attendance.repository import PunchRepository
from ..business_day.resolver import BusinessDayResolver
from ..common.datetime_utils import format_date_label, month_bounds, project, to_utc
from ..common.validators import require_non_empty, require_positive
from ..core.constants import DEFAULT_PAYROLL_ROUNDING_MINUTES
from ..core.enums import PunchType
from ..core.exceptions import ValidationError
from .calculator.base import ShiftCalculator
from .calculator.standard_calculator import StandardShiftCalculator


@dataclass(frozen=True)
class DailyTotal:
    staff_id: str
    business_day: str
    minutes: float
    rounded_minutes: int
    first_clock_in: Optional[datetime] = None
    last_clock_out: Optional[datetime] = None


@dataclass(frozen=True)
class PayrollSummary:
    total_minutes_unrounded: float
    total_minutes_rounded: int
    days: list[DailyTotal] = field(default_factory=list)

    @property
    def rounded_hours(self) -> int:
        return self.total_minutes_rounded // 60

    @property
    def rounded_remainder_minutes(self) -> int:
        return self.total_minutes_rounded % 60

    def as_dict(self) -> dict:
        return {
            "totalMinutes": self.total_minutes_unrounded,
            "roundedMinutes": self.total_minutes_rounded,
            "roundedHours": self.rounded_hours,
            "roundedRemainderMinutes": self.rounded_remainder_minutes,
        }


def round_up_worked(worked: timedelta, increment_minutes: int = DEFAULT_PAYROLL_ROUNDING_MINUTES) -> int:
    """Round worked time up to the next multiple of `increment_minutes`."""
    step = timedelta(minutes=require_positive(increment_minutes, "increment_minutes"))
    if worked <= timedelta(0):
        return 0
    return -(-worked // step) * int(increment_minutes)


def round_up_minutes(minutes: float, increment_minutes: int = DEFAULT_PAYROLL_ROUNDING_MINUTES) -> int:
    return round_up_worked(timedelta(minutes=minutes), increment_minutes)


def business_day_keys(ordered: Sequence[PunchEvent], resolver: BusinessDayResolver) -> list[str]:
    """Business-day key of each punch of one staff member, oldest first.

    Punches are keyed by `resolver.key_for`, except an early clock-in: a
    CLOCK_IN during closed hours whose shift carries on into the business day
    opening that same evening is counted with that business day.
    """
    keys = [resolver.key_for(p.timestamp) for p in ordered]

    for i, p in enumerate(ordered):
        if p.punch_type is not PunchType.CLOCK_IN or not resolver.in_closed_hours(p.timestamp):
            continue
        j = i + 1
        while j < len(ordered) and resolver.in_closed_hours(ordered[j].timestamp):
            if ordered[j].punch_type in (PunchType.CLOCK_IN, PunchType.CLOCK_OUT):
                break
            j += 1
        if j >= len(ordered) or ordered[j].punch_type is PunchType.CLOCK_IN:
            continue
        if resolver.in_closed_hours(ordered[j].timestamp):
            # Shift already closed before opening time.
            continue
        opening_label = format_date_label(project(p.timestamp).date)
        if keys[j] == opening_label:
            for k in range(i, j):
                keys[k] = opening_label

    return keys


def summarize_punches(
    punches: Iterable[PunchEvent],
    resolver: BusinessDayResolver,
    *,
    calculator: Optional[ShiftCalculator] = None,
    rounding_minutes: int = DEFAULT_PAYROLL_ROUNDING_MINUTES,
    first_day: Optional[date] = None,
    last_day: Optional[date] = None,
) -> PayrollSummary:
    """Per (staff, business day): worked time rounded up, then summed.

    Rounding happens per day, never on the total, so the day rows always add
    up to the reported month total. When `first_day` / `last_day` are given,
    only business days in that inclusive label range are reported; punches
    outside it still give the in-range days their full context.
    """
    first_label = format_date_label(first_day) if first_day else None
    last_label = format_date_label(last_day) if last_day else None
    calculator = calculator or StandardShiftCalculator()

    by_staff: dict[str, list[PunchEvent]] = defaultdict(list)
    for p in punches:
        by_staff[p.staff_id].append(p)

    groups: dict[tuple[str, str], list[PunchEvent]] = defaultdict(list)
    for staff_id, staff_punches in by_staff.items():
        ordered = sorted(staff_punches, key=lambda p: (to_utc(p.timestamp), p.punch_id))
        for p, key in zip(ordered, business_day_keys(ordered, resolver)):
            if (first_label and key < first_label) or (last_label and key > last_label):
                continue
            groups[(staff_id, key)].append(p)

    days: list[DailyTotal] = []
    total_worked = timedelta(0)
    total_rounded = 0
    for (staff_id, key) in sorted(groups, key=lambda k: (k[1], k[0])):
        shift = calculator.calculate(groups[(staff_id, key)])
        rounded = round_up_worked(shift.worked, rounding_minutes)
        total_worked += shift.worked
        total_rounded += rounded
        days.append(
            DailyTotal(
                staff_id=staff_id,
                business_day=key,
                minutes=shift.minutes,
                rounded_minutes=rounded,
                first_clock_in=shift.first_clock_in,
                last_clock_out=shift.last_clock_out,
            )
        )

    return PayrollSummary(
        total_minutes_unrounded=total_worked / timedelta(minutes=1),
        total_minutes_rounded=total_rounded,
        days=days,
    )


class PayrollSummaryService:
    def __init__(
        self,
        punches: PunchRepository,
        resolver: BusinessDayResolver,
        *,
        calculator: Optional[ShiftCalculator] = None,
        rounding_minutes: int = DEFAULT_PAYROLL_ROUNDING_MINUTES,
    ):
        self._punches = punches
        self._resolver = resolver
        self._calculator = calculator or StandardShiftCalculator()
        self._rounding = require_positive(rounding_minutes, "rounding_minutes")

    def monthly_summary(
        self,
        store_id: str,
        year: int,
        month: int,
        *,
        staff_id: Optional[str] = None,
    ) -> PayrollSummary:
        """Business days labelled inside the JST calendar month.

        Punches are read with one business day of margin on each side, so a
        shift crossing the month edge is paid in full to the month its
        business day belongs to.
        """
        start, end = month_bounds(year, month)
        first_day = project(start).date
        last_day = project(end).date - timedelta(days=1)

        store_id = require_non_empty(store_id, "store_id")
        if staff_id is not None:
            staff_id = require_non_empty(staff_id, "staff_id")

        window_start = self._resolver.range_for_label(first_day - timedelta(days=1)).start
        window_end = self._resolver.range_for_label(last_day + timedelta(days=1)).end + timedelta(
            minutes=self._resolver.grace_minutes
        )
        rows = self._punches.list_in_range(store_id=store_id, start=window_start, end=window_end, staff_id=staff_id)
        return summarize_punches(
            rows,
            self._resolver,
            calculator=self._calculator,
            rounding_minutes=self._rounding,
            first_day=first_day,
            last_day=last_day,
        )

    def range_summary(
        self,
        store_id: str,
        start: datetime,
        end: datetime,
        *,
        staff_id: Optional[str] = None,
    ) -> PayrollSummary:
        store_id = require_non_empty(store_id, "store_id")
        start, end = to_utc(start), to_utc(end)
        if end <= start:
            raise ValidationError("end must be after start")
        if staff_id is not None:
            staff_id = require_non_empty(staff_id, "staff_id")

        rows = self._punches.list_in_range(store_id=store_id, start=start, end=end, staff_id=staff_id)
        return summarize_punches(
            rows,
            self._resolver,
            calculator=self._calculator,
            rounding_minutes=self._rounding,
        )
