from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, Optional

from ...attendance.model import PunchEvent
from ...common.datetime_utils import to_utc
from ...core.enums import PunchType
from .base import ShiftCalculator, ShiftDuration


class StandardShiftCalculator(ShiftCalculator):
    """Standard rule: sum of clock-in/break-end -> break-start/clock-out spans.

    Negative spans (clock skew) count as zero. A span left open at the end of
    the day contributes nothing.
    """

    def calculate(self, punches: Iterable[PunchEvent]) -> ShiftDuration:
        ordered = sorted(punches, key=lambda p: (to_utc(p.timestamp), p.punch_id))

        worked = timedelta(0)
        current_start: Optional[datetime] = None
        in_break = False
        first_clock_in: Optional[datetime] = None
        last_clock_out: Optional[datetime] = None

        for p in ordered:
            ts = to_utc(p.timestamp)
            if p.punch_type is PunchType.CLOCK_IN:
                current_start = ts
                in_break = False
                if first_clock_in is None:
                    first_clock_in = ts
            elif p.punch_type is PunchType.BREAK_START:
                if current_start is not None and not in_break:
                    worked += _span(current_start, ts)
                    current_start = None
                in_break = True
            elif p.punch_type is PunchType.BREAK_END:
                if in_break:
                    current_start = ts
                    in_break = False
            elif p.punch_type is PunchType.CLOCK_OUT:
                if current_start is not None and not in_break:
                    worked += _span(current_start, ts)
                current_start = None
                last_clock_out = ts

        return ShiftDuration(worked=worked, first_clock_in=first_clock_in, last_clock_out=last_clock_out)


def _span(start: datetime, end: datetime) -> timedelta:
    return max(end - start, timedelta(0))
