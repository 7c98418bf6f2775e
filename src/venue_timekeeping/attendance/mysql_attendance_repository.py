from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

import mysql.connector
from mysql.connector import errorcode

from ..core.enums import PunchType
from ..core.exceptions import StaleTimeline
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_db_datetime, to_db_datetime
from .model import AttendancePhoto, NewPunch, PunchEvent
from .repository import PunchRepository

_LOCK_CONFLICTS = (errorcode.ER_LOCK_DEADLOCK, errorcode.ER_LOCK_WAIT_TIMEOUT)
_COLUMNS = "punch_id, staff_id, store_id, punch_type, punched_at, is_companion, approved_at, approved_by"


def _to_event(r: Dict[str, Any]) -> PunchEvent:
    return PunchEvent(
        punch_id=int(r["punch_id"]),
        staff_id=str(r["staff_id"]),
        store_id=str(r["store_id"]),
        punch_type=PunchType(r["punch_type"]),
        timestamp=from_db_datetime(r["punched_at"]),
        is_companion=bool(r.get("is_companion")),
        approved_at=from_db_datetime(r.get("approved_at")),
        approved_by=r.get("approved_by"),
    )


class MySQLPunchRepository(PunchRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_last_for_staff(self, *, staff_id: str, store_id: str) -> Optional[PunchEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance
                WHERE store_id=%s AND staff_id=%s
                ORDER BY punched_at DESC, punch_id DESC
                LIMIT 1
                """,
                (store_id, staff_id),
            )
            r = fetchone(cur)
            return _to_event(r) if r else None

    def append_punches(
        self,
        *,
        staff_id: str,
        store_id: str,
        expected_last_id: Optional[int],
        punches: Sequence[NewPunch],
        photo_url: Optional[str] = None,
    ) -> list[PunchEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                return self._append_locked(cur, staff_id, store_id, expected_last_id, punches, photo_url)
            except mysql.connector.Error as exc:
                # Two first-ever punches share a gap lock and deadlock on insert;
                # the victim re-reads like any other lost race.
                if exc.errno in _LOCK_CONFLICTS:
                    raise StaleTimeline(f"Lock conflict on punches for staff {staff_id}: {exc}") from exc
                raise

    def _append_locked(
        self,
        cur,
        staff_id: str,
        store_id: str,
        expected_last_id: Optional[int],
        punches: Sequence[NewPunch],
        photo_url: Optional[str],
    ) -> list[PunchEvent]:
        # Locks the staff's latest row (or the index gap when there is none).
        cur.execute(
            """
            SELECT punch_id
            FROM attendance
            WHERE store_id=%s AND staff_id=%s
            ORDER BY punched_at DESC, punch_id DESC
            LIMIT 1
            FOR UPDATE
            """,
            (store_id, staff_id),
        )
        latest = fetchone(cur)
        latest_id = int(latest["punch_id"]) if latest else None
        if latest_id != expected_last_id:
            raise StaleTimeline(f"Latest punch for staff {staff_id} moved from {expected_last_id} to {latest_id}")

        created: list[PunchEvent] = []
        for p in punches:
            cur.execute(
                """
                INSERT INTO attendance(staff_id, store_id, punch_type, punched_at, is_companion)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (staff_id, store_id, p.punch_type.value, to_db_datetime(p.timestamp), 1 if p.is_companion else 0),
            )
            event = PunchEvent(
                punch_id=int(cur.lastrowid),
                staff_id=staff_id,
                store_id=store_id,
                punch_type=p.punch_type,
                timestamp=p.timestamp,
                is_companion=p.is_companion,
            )
            created.append(event)

            if photo_url and p.punch_type is PunchType.CLOCK_IN:
                cur.execute(
                    """
                    INSERT INTO attendance_photos(punch_id, store_id, staff_id, photo_url)
                    VALUES(%s,%s,%s,%s)
                    """,
                    (event.punch_id, store_id, staff_id, photo_url),
                )
        return created

    def list_in_range(
        self,
        *,
        store_id: str,
        start: datetime,
        end: datetime,
        staff_id: Optional[str] = None,
    ) -> Sequence[PunchEvent]:
        clauses = ["store_id=%s", "punched_at >= %s", "punched_at < %s"]
        params: list[object] = [store_id, to_db_datetime(start), to_db_datetime(end)]

        if staff_id is not None:
            clauses.append("staff_id=%s")
            params.append(staff_id)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance
                WHERE {where}
                ORDER BY punched_at ASC, punch_id ASC
                """,
                tuple(params),
            )
            return [_to_event(r) for r in fetchall(cur)]

    def list_latest_per_staff(self, *, store_id: str, since: datetime) -> Sequence[PunchEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM (
                    SELECT {_COLUMNS},
                           ROW_NUMBER() OVER (
                               PARTITION BY staff_id ORDER BY punched_at DESC, punch_id DESC
                           ) AS rn
                    FROM attendance
                    WHERE store_id=%s AND punched_at >= %s
                ) latest
                WHERE rn = 1
                ORDER BY staff_id ASC
                """,
                (store_id, to_db_datetime(since)),
            )
            return [_to_event(r) for r in fetchall(cur)]

    def get_photo(self, *, punch_id: int) -> Optional[AttendancePhoto]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT photo_id, punch_id, store_id, staff_id, photo_url, created_at
                FROM attendance_photos
                WHERE punch_id=%s
                """,
                (punch_id,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return AttendancePhoto(
                photo_id=int(r["photo_id"]),
                punch_id=int(r["punch_id"]),
                store_id=str(r["store_id"]),
                staff_id=str(r["staff_id"]),
                photo_url=str(r["photo_url"]),
                created_at=from_db_datetime(r["created_at"]),
            )
