"""Ví dụ: dùng service layer trực tiếp (không qua HTTP).

Chấm công một ca đêm rồi in tổng giờ công của tháng.
"""

from datetime import datetime, timezone

from venue_timekeeping.main import create_container


def main():
    container = create_container()
    svc = container.punch_service

    # 17:55 JST clock-in, break 20:00-20:30, out 23:10 (all given in UTC)
    svc.punch("staff-a", "store-1", "clock-in", now=datetime(2024, 3, 1, 8, 55, tzinfo=timezone.utc), photo_url="photos/a.jpg")
    svc.punch("staff-a", "store-1", "break-start", now=datetime(2024, 3, 1, 11, 0, tzinfo=timezone.utc))
    svc.punch("staff-a", "store-1", "break-end", now=datetime(2024, 3, 1, 11, 30, tzinfo=timezone.utc))
    svc.punch("staff-a", "store-1", "clock-out", now=datetime(2024, 3, 1, 14, 10, tzinfo=timezone.utc))

    summary = container.payroll_service.monthly_summary("store-1", 2024, 3, staff_id="staff-a")
    print(summary.as_dict())


if __name__ == "__main__":
    main()
