"""
Tests for reservation status transitions.
"""

import pytest

from models.reservation_status import (
    ALLOWED_TRANSITIONS, TERMINAL_STATUSES, TRANSITION_SUGGESTIONS,
    ReservationStatus, Severity, ValidationResult, coerce_status,
    get_status_label, get_transition_error_message, is_valid_status_transition,
    validate_status_transition
)


S = ReservationStatus

VALID_TRANSITIONS = {
    (S.CONFIRMED, S.CHECKED_IN),
    (S.CONFIRMED, S.CANCELLED),
    (S.CONFIRMED, S.NO_SHOW),
    (S.CHECKED_IN, S.CHECKED_OUT),
    (S.CHECKED_IN, S.CANCELLED),
}

ALL_PAIRS = [(current, target) for current in S for target in S]


class TestTransitionTable:
    """Exhaustive checks against the allowed transitions table."""

    @pytest.mark.parametrize('current,target', ALL_PAIRS)
    def test_every_pair(self, current, target):
        """Only the five forward/sideways transitions are accepted."""
        expected = (current, target) in VALID_TRANSITIONS
        assert is_valid_status_transition(current, target) is expected
        assert validate_status_transition(current, target).valid is expected

    @pytest.mark.parametrize('current', sorted(TERMINAL_STATUSES, key=lambda s: s.value))
    @pytest.mark.parametrize('target', list(S))
    def test_terminal_statuses_reject_everything(self, current, target):
        """Checked-out, cancelled and no-show never move again."""
        assert not is_valid_status_transition(current, target)

    def test_confirmed_to_checked_out_rejected(self):
        """Check-out requires a check-in first."""
        assert not is_valid_status_transition('confirmed', 'checked_out')

    def test_confirmed_to_checked_in_accepted(self):
        """Check-in from confirmed is allowed."""
        assert is_valid_status_transition('confirmed', 'checked_in')

    def test_checked_in_cancel_and_no_show_asymmetry(self):
        """Checked-in stays can be cancelled but not marked as no-show."""
        assert is_valid_status_transition(S.CHECKED_IN, S.CANCELLED)
        assert not is_valid_status_transition(S.CHECKED_IN, S.NO_SHOW)

    def test_table_is_read_only(self):
        """The transition table cannot be mutated at runtime."""
        with pytest.raises(TypeError):
            ALLOWED_TRANSITIONS[S.CHECKED_OUT] = frozenset({S.CONFIRMED})

    def test_string_and_enum_inputs_agree(self):
        """Raw strings are coerced before table lookups."""
        for current, target in ALL_PAIRS:
            assert (
                is_valid_status_transition(current.value, target.value)
                == is_valid_status_transition(current, target)
            )


class TestValidationResult:
    """Tests for transition validation results."""

    def test_valid_result_has_no_message(self):
        """Valid transitions carry no message or suggestions."""
        result = validate_status_transition(S.CONFIRMED, S.CHECKED_IN)
        assert result == ValidationResult.ok()
        assert result.message == ''
        assert result.suggestions == ()

    def test_back_to_confirmed(self):
        """checked_in -> confirmed names both labels and suggests a fix."""
        result = validate_status_transition('checked_in', 'confirmed')
        assert result.valid is False
        assert result.severity is Severity.ERROR
        assert S.CHECKED_IN.label in result.message
        assert S.CONFIRMED.label in result.message
        assert len(result.suggestions) >= 1
        assert result.suggestions == TRANSITION_SUGGESTIONS

    @pytest.mark.parametrize('current,target', [
        pair for pair in ALL_PAIRS if pair not in VALID_TRANSITIONS
    ])
    def test_invalid_messages_name_both_statuses(self, current, target):
        """Every rejection message contains both status labels."""
        message = get_transition_error_message(current, target)
        assert current.label in message
        assert target.label in message

    def test_check_in_first_message(self):
        """confirmed -> checked_out explains that check-in comes first."""
        message = get_transition_error_message(S.CONFIRMED, S.CHECKED_OUT)
        assert 'check-in primeiro' in message

    def test_valid_transition_has_empty_message(self):
        """No explanation is produced for an allowed transition."""
        assert get_transition_error_message(S.CHECKED_IN, S.CHECKED_OUT) == ''

    def test_to_dict(self):
        """Results serialize with the severity value."""
        data = validate_status_transition(S.CANCELLED, S.CONFIRMED).to_dict()
        assert data['valid'] is False
        assert data['severity'] == 'error'
        assert data['suggestions'] == list(TRANSITION_SUGGESTIONS)

    def test_warning_is_valid(self):
        """Warnings do not block the action."""
        result = ValidationResult.warning('Atenção', ['Confirme com o hóspede'])
        assert result.valid is True
        assert result.severity is Severity.WARNING
        assert result.suggestions == ('Confirme com o hóspede',)


class TestStatusCoercion:
    """Tests for status parsing and labels."""

    def test_coerce_known_value(self):
        """Known values become enum members."""
        assert coerce_status('no_show') is S.NO_SHOW
        assert coerce_status(S.CANCELLED) is S.CANCELLED

    @pytest.mark.parametrize('value', ['pending', '', None, 'CONFIRMED'])
    def test_unknown_status_raises(self, value):
        """Unknown statuses are rejected with a localized message."""
        with pytest.raises(ValueError, match='Status inválido'):
            coerce_status(value)

    def test_unknown_status_in_transition_raises(self):
        """Transitions involving unknown statuses raise instead of returning False."""
        with pytest.raises(ValueError):
            is_valid_status_transition('pending', 'confirmed')

    def test_labels(self):
        """Every status has a pt-BR label."""
        assert get_status_label('confirmed') == 'confirmada'
        assert get_status_label('checked_in') == 'check-in realizado'
        assert get_status_label('checked_out') == 'check-out realizado'
        assert get_status_label('cancelled') == 'cancelada'
        assert get_status_label('no_show') == 'não compareceu'

    def test_status_is_string(self):
        """Statuses compare equal to their stored values."""
        assert S.CHECKED_IN == 'checked_in'
