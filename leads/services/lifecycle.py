"""
Lead lifecycle: effective state and countdown for an offered lead.

Everything here is a pure function of an assignment and the current time.
The stored status is combined with expires_at, so a lead still stored as
pending is reported as expired as soon as its deadline passes, without
waiting for the backend to catch up.

Works with both Assignment model instances and AssignmentRecord objects;
only ``status``, ``expires_at``, ``declined_reason`` and
``intake.converted_case_id`` are read.
"""
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from django.conf import settings

EXPIRED_LABEL = 'Expired'

PENDING = 'pending'
ACCEPTED = 'accepted'
DECLINED = 'declined'


class EffectiveState(str, Enum):
    PENDING_ACTIVE = 'pending_active'
    PENDING_EXPIRED = 'pending_expired'
    ACCEPTED = 'accepted'
    DECLINED = 'declined'


TERMINAL_STATES = {
    EffectiveState.PENDING_EXPIRED,
    EffectiveState.ACCEPTED,
    EffectiveState.DECLINED,
}


class UnknownStatusError(ValueError):
    """Raised when an assignment carries a status the engine does not know."""
    pass


def effective_state(assignment, now: datetime) -> EffectiveState:
    """
    Derive the effective state of an assignment at ``now``.

    A pending assignment is active strictly before expires_at; at the exact
    deadline it is already expired.

    Raises:
        UnknownStatusError: If the stored status is not pending, accepted
            or declined
    """
    status = str(assignment.status)
    if status == PENDING:
        if now < assignment.expires_at:
            return EffectiveState.PENDING_ACTIVE
        return EffectiveState.PENDING_EXPIRED
    if status == ACCEPTED:
        return EffectiveState.ACCEPTED
    if status == DECLINED:
        return EffectiveState.DECLINED
    raise UnknownStatusError(f"Unknown assignment status: {status!r}")


def is_terminal(state: EffectiveState) -> bool:
    return state in TERMINAL_STATES


def can_respond(assignment, now: datetime) -> bool:
    """Accept and decline are only offered while the lead is pending and active."""
    return effective_state(assignment, now) == EffectiveState.PENDING_ACTIVE


def remaining_ms(expires_at: datetime, now: datetime) -> int:
    """Whole milliseconds left until expires_at, never below zero."""
    delta_ms = (expires_at - now) // timedelta(milliseconds=1)
    return max(delta_ms, 0)


def format_countdown(expires_at: datetime, now: datetime) -> str:
    """
    Render the time left as "2h 15m 3s remaining", or "Expired".

    Recomputed from the full delta on every call, so a stalled caller still
    shows the true remaining time on its next tick.
    """
    if now >= expires_at:
        return EXPIRED_LABEL

    ms = remaining_ms(expires_at, now)
    hours = ms // (1000 * 60 * 60)
    minutes = (ms % (1000 * 60 * 60)) // (1000 * 60)
    seconds = (ms % (1000 * 60)) // 1000
    return f"{hours}h {minutes}m {seconds}s remaining"


def case_link(assignment) -> Optional[str]:
    """
    Path of the case created when this lead was accepted.

    None unless the assignment is accepted and its intake already carries the
    converted case id.
    """
    if str(assignment.status) != ACCEPTED:
        return None
    case_id = assignment.intake.converted_case_id
    if case_id is None:
        return None
    return settings.CASE_DETAIL_PATH.format(case_id=case_id)
