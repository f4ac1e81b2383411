"""Booking status state machine.

Forward path: draft -> pending -> confirmed -> checked_in -> checked_out -> completed.
Any non-terminal status may also exit to cancelled or no_show.
"""

from stayhub.exceptions import InvalidTransition, ValidationFailed
from stayhub.models.booking import BOOKING_STATUSES

TERMINAL_STATUSES = frozenset({"completed", "cancelled", "no_show"})

_EXITS = frozenset({"cancelled", "no_show"})

ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    "draft": frozenset({"pending"}) | _EXITS,
    "pending": frozenset({"confirmed"}) | _EXITS,
    "confirmed": frozenset({"checked_in"}) | _EXITS,
    "checked_in": frozenset({"checked_out"}) | _EXITS,
    "checked_out": frozenset({"completed"}) | _EXITS,
    "completed": frozenset(),
    "cancelled": frozenset(),
    "no_show": frozenset(),
}

# Lifecycle timestamp column written when a booking enters the status.
TRANSITION_TIMESTAMPS = {
    "confirmed": "confirmed_at",
    "checked_in": "checked_in_at",
    "checked_out": "checked_out_at",
}


def can_transition(current: str, requested: str) -> bool:
    return requested in ALLOWED_TRANSITIONS.get(current, frozenset())


def ensure_transition(current: str, requested: str) -> None:
    """Raise unless ``current -> requested`` is an edge of the lifecycle."""
    if requested not in BOOKING_STATUSES:
        raise ValidationFailed(f"Invalid status: {requested}")
    if not can_transition(current, requested):
        raise InvalidTransition(current, requested)


def is_terminal(status: str) -> bool:
    return status in TERMINAL_STATUSES
