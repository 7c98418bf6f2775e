from __future__ import annotations

from typing import Mapping, Optional, Union

from ..core.enums import PresenceState, PunchType
from ..core.exceptions import PunchRejected, ValidationError

# Exhaustive: every (state, requested type) pair has an explicit verdict.
TRANSITIONS: Mapping[PresenceState, Mapping[PunchType, bool]] = {
    PresenceState.OFF: {
        PunchType.CLOCK_IN: True,
        PunchType.CLOCK_OUT: False,
        PunchType.BREAK_START: False,
        PunchType.BREAK_END: False,
    },
    PresenceState.WORKING: {
        PunchType.CLOCK_IN: False,
        PunchType.CLOCK_OUT: True,
        PunchType.BREAK_START: True,
        PunchType.BREAK_END: False,
    },
    PresenceState.ON_BREAK: {
        PunchType.CLOCK_IN: False,
        PunchType.CLOCK_OUT: True,
        PunchType.BREAK_START: False,
        PunchType.BREAK_END: True,
    },
}

_STATE_AFTER: Mapping[PunchType, PresenceState] = {
    PunchType.CLOCK_IN: PresenceState.WORKING,
    PunchType.CLOCK_OUT: PresenceState.OFF,
    PunchType.BREAK_START: PresenceState.ON_BREAK,
    PunchType.BREAK_END: PresenceState.WORKING,
}


def normalize_punch_type(value: Union[str, PunchType, None]) -> PunchType:
    """Accept enum members or terminal spellings like "clock-in" / "CLOCK_IN"."""
    if isinstance(value, PunchType):
        return value
    if value is None:
        raise ValidationError("punch type is required")
    normalized = str(value).strip().replace("-", "_").upper()
    try:
        return PunchType(normalized)
    except ValueError:
        raise ValidationError(f"Unknown punch type: {value!r}")


def derive_state(last_type: Optional[PunchType]) -> PresenceState:
    """Presence after the most recent punch; no punch at all means OFF."""
    if last_type is None:
        return PresenceState.OFF
    return _STATE_AFTER[last_type]


def is_allowed(state: PresenceState, requested: PunchType) -> bool:
    return TRANSITIONS[state][requested]


def plan_transition(state: PresenceState, requested: PunchType) -> tuple[PunchType, ...]:
    """Punch types to persist, in order, for `requested` from `state`.

    Clocking out from a break closes the break first so the shift never
    carries an unterminated break.
    """
    if not is_allowed(state, requested):
        raise PunchRejected(state, requested)
    if state is PresenceState.ON_BREAK and requested is PunchType.CLOCK_OUT:
        return (PunchType.BREAK_END, PunchType.CLOCK_OUT)
    return (requested,)
