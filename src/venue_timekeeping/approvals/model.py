from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class DayApproval:
    """Khoá duyệt theo ngày kinh doanh, mỗi (cửa hàng, nhãn ngày) một dòng."""

    store_id: str
    date_label: str
    is_approved: bool
    approved_at: Optional[datetime] = None
    approved_by: Optional[str] = None
