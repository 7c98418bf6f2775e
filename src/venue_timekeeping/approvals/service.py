from __future__ import annotations

import calendar
import logging
from datetime import date, datetime
from typing import Optional, Union

from ..business_day.resolver import BusinessDayResolver
from ..common.datetime_utils import format_date_label, parse_date_label, to_utc, utc_now
from ..common.validators import require_non_empty
from ..core.exceptions import InvalidDateLabel, ValidationError
from .model import DayApproval
from .repository import ApprovalRepository

logger = logging.getLogger(__name__)


class DayApprovalService:
    """Use case: lock/unlock one business day for payroll."""

    def __init__(self, approvals: ApprovalRepository, resolver: BusinessDayResolver):
        self._approvals = approvals
        self._resolver = resolver

    @staticmethod
    def _label(value: Union[str, date]) -> str:
        if isinstance(value, str):
            return format_date_label(parse_date_label(value))
        if isinstance(value, date):
            return format_date_label(value)
        raise InvalidDateLabel(value)

    def set_day_approval(
        self,
        store_id: str,
        date_label: Union[str, date],
        approved: bool,
        approver_id: str,
        *,
        now: Optional[datetime] = None,
    ) -> DayApproval:
        store_id = require_non_empty(store_id, "store_id")
        label = self._label(date_label)
        approved = bool(approved)
        if approved:
            approver_id = require_non_empty(approver_id, "approver_id")

        interval = self._resolver.range_for_label(label)
        approved_at = (to_utc(now) if now else utc_now()) if approved else None

        result = self._approvals.apply_day_approval(
            store_id=store_id,
            date_label=label,
            start=interval.start,
            end=interval.end,
            approved_at=approved_at,
            approved_by=approver_id if approved else None,
        )
        logger.info(
            "Business day %s at store %s %s by %s",
            label,
            store_id,
            "approved" if approved else "unapproved",
            approver_id,
        )
        return result

    def get_day_approval(self, store_id: str, date_label: Union[str, date]) -> DayApproval:
        """Current lock state; a day never acted on is simply not approved."""
        store_id = require_non_empty(store_id, "store_id")
        label = self._label(date_label)
        found = self._approvals.get_day_approval(store_id=store_id, date_label=label)
        return found or DayApproval(store_id=store_id, date_label=label, is_approved=False)

    def is_locked(self, store_id: str, date_label: Union[str, date]) -> bool:
        return self.get_day_approval(store_id, date_label).is_approved

    def approvals_for_month(self, store_id: str, year: int, month: int) -> dict[str, DayApproval]:
        store_id = require_non_empty(store_id, "store_id")
        if not 1 <= int(month) <= 12:
            raise ValidationError("month must be between 1 and 12")
        first = date(int(year), int(month), 1)
        last = date(int(year), int(month), calendar.monthrange(int(year), int(month))[1])
        rows = self._approvals.list_between(store_id=store_id, first=first, last=last)
        return {r.date_label: r for r in rows}
