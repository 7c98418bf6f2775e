from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import DayApproval


class ApprovalRepository(Protocol):
    def apply_day_approval(
        self,
        *,
        store_id: str,
        date_label: str,
        start: datetime,
        end: datetime,
        approved_at: Optional[datetime],
        approved_by: Optional[str],
    ) -> DayApproval:
        """Tag punches in [start, end) and upsert the day row in one transaction.

        `approved_at`/`approved_by` both set means approve, both None means
        unapprove.
        """

        raise NotImplementedError

    def get_day_approval(self, *, store_id: str, date_label: str) -> Optional[DayApproval]:
        raise NotImplementedError

    def list_between(self, *, store_id: str, first: date, last: date) -> Sequence[DayApproval]:
        """Day rows with first <= label <= last."""

        raise NotImplementedError
