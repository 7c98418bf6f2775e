from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

from ..common.datetime_utils import format_date_label, parse_date_label
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_db_datetime, to_db_datetime
from .model import DayApproval
from .repository import ApprovalRepository


def _to_approval(r: Dict[str, Any]) -> DayApproval:
    return DayApproval(
        store_id=str(r["store_id"]),
        date_label=format_date_label(r["date_label"]),
        is_approved=bool(r["is_approved"]),
        approved_at=from_db_datetime(r.get("approved_at")),
        approved_by=r.get("approved_by"),
    )


class MySQLApprovalRepository(ApprovalRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        is_approved = approved_at is not None
        db_approved_at = to_db_datetime(approved_at)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance
                SET approved_at=%s, approved_by=%s
                WHERE store_id=%s AND punched_at >= %s AND punched_at < %s
                """,
                (db_approved_at, approved_by, store_id, to_db_datetime(start), to_db_datetime(end)),
            )
            cur.execute(
                """
                INSERT INTO attendance_approvals(store_id, date_label, is_approved, approved_at, approved_by)
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    is_approved=VALUES(is_approved),
                    approved_at=VALUES(approved_at),
                    approved_by=VALUES(approved_by)
                """,
                (store_id, parse_date_label(date_label), 1 if is_approved else 0, db_approved_at, approved_by),
            )

        return DayApproval(
            store_id=store_id,
            date_label=date_label,
            is_approved=is_approved,
            approved_at=approved_at,
            approved_by=approved_by,
        )

    def get_day_approval(self, *, store_id: str, date_label: str) -> Optional[DayApproval]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT store_id, date_label, is_approved, approved_at, approved_by
                FROM attendance_approvals
                WHERE store_id=%s AND date_label=%s
                """,
                (store_id, parse_date_label(date_label)),
            )
            r = fetchone(cur)
            return _to_approval(r) if r else None

    def list_between(self, *, store_id: str, first: date, last: date) -> Sequence[DayApproval]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT store_id, date_label, is_approved, approved_at, approved_by
                FROM attendance_approvals
                WHERE store_id=%s AND date_label BETWEEN %s AND %s
                ORDER BY date_label ASC
                """,
                (store_id, first, last),
            )
            return [_to_approval(r) for r in fetchall(cur)]
