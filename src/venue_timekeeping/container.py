from __future__ import annotations

from dataclasses import dataclass
from types import ModuleType

from .approvals.mysql_approval_repository import MySQLApprovalRepository
from .approvals.service import DayApprovalService
from .attendance.mysql_attendance_repository import MySQLPunchRepository
from .attendance.service import PunchService
from .business_day.resolver import BusinessDayResolver
from .core import constants
from .database.connection import DBConfig, DatabaseConnection
from .payroll.service import PayrollSummaryService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection
    resolver: BusinessDayResolver

    punches_repo: MySQLPunchRepository
    approvals_repo: MySQLApprovalRepository

    punch_service: PunchService
    payroll_service: PayrollSummaryService
    approval_service: DayApprovalService


def build_resolver(settings: ModuleType) -> BusinessDayResolver:
    return BusinessDayResolver(
        start_hour=getattr(settings, "BUSINESS_DAY_START_HOUR", constants.DEFAULT_BUSINESS_DAY_START_HOUR),
        end_hour=getattr(settings, "BUSINESS_DAY_END_HOUR", constants.DEFAULT_BUSINESS_DAY_END_HOUR),
        grace_minutes=getattr(settings, "BUSINESS_DAY_GRACE_MINUTES", constants.DEFAULT_BUSINESS_DAY_GRACE_MINUTES),
    )


def build_container(*, settings: ModuleType) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(settings.DB_CONFIG))
    # A single resolver keeps every consumer on the same business-day window.
    resolver = build_resolver(settings)

    punches_repo = MySQLPunchRepository(conn)
    approvals_repo = MySQLApprovalRepository(conn)

    punch_service = PunchService(
        punches_repo,
        require_clock_in_photo=bool(getattr(settings, "REQUIRE_CLOCK_IN_PHOTO", True)),
        active_window_hours=getattr(settings, "ACTIVE_STAFF_WINDOW_HOURS", constants.DEFAULT_ACTIVE_STAFF_WINDOW_HOURS),
        max_attempts=getattr(settings, "PUNCH_MAX_ATTEMPTS", constants.DEFAULT_PUNCH_MAX_ATTEMPTS),
    )
    payroll_service = PayrollSummaryService(
        punches_repo,
        resolver,
        rounding_minutes=getattr(settings, "PAYROLL_ROUNDING_MINUTES", constants.DEFAULT_PAYROLL_ROUNDING_MINUTES),
    )
    approval_service = DayApprovalService(approvals_repo, resolver)

    return Container(
        conn=conn,
        resolver=resolver,
        punches_repo=punches_repo,
        approvals_repo=approvals_repo,
        punch_service=punch_service,
        payroll_service=payroll_service,
        approval_service=approval_service,
    )
