from __future__ import annotations

from enum import Enum


class PunchType(str, Enum):
    """Loại thao tác chấm công lưu trong CSDL."""

    CLOCK_IN = "CLOCK_IN"
    CLOCK_OUT = "CLOCK_OUT"
    BREAK_START = "BREAK_START"
    BREAK_END = "BREAK_END"


class PresenceState(str, Enum):
    """Trạng thái hiện diện suy ra từ lần chấm công gần nhất."""

    OFF = "OFF"
    WORKING = "WORKING"
    ON_BREAK = "ON_BREAK"
