from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Optional

from ...attendance.model import PunchEvent


@dataclass(frozen=True)
class ShiftDuration:
    worked: timedelta
    first_clock_in: Optional[datetime] = None
    last_clock_out: Optional[datetime] = None

    @property
    def minutes(self) -> float:
        """Unrounded worked minutes."""
        return self.worked / timedelta(minutes=1)


class ShiftCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def calculate(self, punches: Iterable[PunchEvent]) -> ShiftDuration:
        """Worked time of one staff member within one business day."""
        raise NotImplementedError
