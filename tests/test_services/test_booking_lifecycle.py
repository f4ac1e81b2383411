"""Unit tests for the booking status state machine."""

import pytest

from stayhub.exceptions import InvalidTransition, ValidationFailed
from stayhub.services.booking_lifecycle import (
    ALLOWED_TRANSITIONS,
    TERMINAL_STATUSES,
    can_transition,
    ensure_transition,
    is_terminal,
)


class TestForwardPath:
    """Each status moves forward exactly one step."""

    @pytest.mark.parametrize(
        ("current", "requested"),
        [
            ("draft", "pending"),
            ("pending", "confirmed"),
            ("confirmed", "checked_in"),
            ("checked_in", "checked_out"),
            ("checked_out", "completed"),
        ],
    )
    def test_next_step_allowed(self, current: str, requested: str):
        assert can_transition(current, requested) is True
        ensure_transition(current, requested)

    def test_skipping_a_step_rejected(self):
        with pytest.raises(InvalidTransition) as exc_info:
            ensure_transition("draft", "confirmed")
        assert exc_info.value.message == "Cannot change booking status from 'draft' to 'confirmed'"

    def test_moving_backwards_rejected(self):
        assert can_transition("confirmed", "pending") is False


class TestExits:
    """Cancellation and no-show leave any non-terminal status."""

    @pytest.mark.parametrize("current", ["draft", "pending", "confirmed", "checked_in", "checked_out"])
    def test_cancel_from_open_status(self, current: str):
        assert can_transition(current, "cancelled") is True
        assert can_transition(current, "no_show") is True

    @pytest.mark.parametrize("current", sorted(TERMINAL_STATUSES))
    def test_terminal_statuses_have_no_exits(self, current: str):
        assert ALLOWED_TRANSITIONS[current] == frozenset()
        assert is_terminal(current) is True
        with pytest.raises(InvalidTransition):
            ensure_transition(current, "cancelled")


class TestUnknownStatus:
    def test_unknown_requested_status_is_validation_error(self):
        with pytest.raises(ValidationFailed) as exc_info:
            ensure_transition("draft", "archived")
        assert not isinstance(exc_info.value, InvalidTransition)
        assert exc_info.value.status_code == 400

    def test_unknown_current_status_cannot_move(self):
        assert can_transition("archived", "pending") is False
