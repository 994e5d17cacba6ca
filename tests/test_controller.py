"""
Tests for the preview / commit controller.

Covers the session lifecycle: open, key handling, live preview, "=",
confirm and cancel.
"""

from decimal import Decimal

import pytest

from splitcalc.calculator import controller
from splitcalc.calculator.controller import (
    ERROR_SENTINEL,
    cancel,
    confirm,
    evaluate_and_commit_to_buffer,
    handle_key,
    open_session,
    preview,
)
from splitcalc.models.calculator import CalculatorConfig, EditorState, ErrorKind, Key

PATH = "reimbursable.me.meal.2.amount"


def press_all(state: EditorState, keys: str) -> EditorState:
    for key in keys:
        state = handle_key(state, key)
    return state


class TestOpenSession:
    """Tests for opening a session."""

    def test_seed_is_copied_without_commas(self):
        """Test thousands separators are stripped from the seed."""
        state = open_session("1,250", PATH)
        assert state.buffer == "1250"
        assert state.target_path == PATH
        assert state.just_evaluated is True
        assert state.error is None

    def test_digit_overwrites_seed(self):
        """Test the first digit replaces the seed."""
        state = handle_key(open_session("250", PATH), "7")
        assert state.buffer == "7"

    def test_operator_extends_seed(self):
        """Test an operator continues from the seed."""
        state = press_all(open_session("250", PATH), "+5")
        assert state.buffer == "250+5"

    def test_default_config(self):
        """Test sessions default to a 14 digit ceiling."""
        assert open_session("", PATH).config.max_digits == 14


class TestHandleKey:
    """Tests for the single mutation entry point."""

    def test_accepts_key_enum_and_strings(self):
        """Test Key members and their string values are equivalent."""
        state = open_session("", PATH)
        assert handle_key(state, Key.NINE).buffer == handle_key(state, "9").buffer
        assert handle_key(state, "DEL").buffer == ""

    def test_unknown_input_is_transient(self):
        """Test unknown keys set an error the next valid key clears."""
        state = press_all(open_session("", PATH), "12")
        rejected = handle_key(state, "x")
        assert rejected.error == ErrorKind.UNKNOWN_INPUT
        assert rejected.buffer == "12"

        recovered = handle_key(rejected, "3")
        assert recovered.error is None
        assert recovered.buffer == "123"

    def test_unknown_input_cleared_by_no_op_keys(self):
        """Test a repeated point or "=" on an empty buffer still clears UnknownInput."""
        state = handle_key(press_all(open_session("", PATH), "1.5"), "?")
        after_point = handle_key(state, ".")
        assert after_point.buffer == "1.5"
        assert after_point.error is None

        empty = handle_key(open_session("", PATH), "?")
        after_equals = handle_key(empty, "=")
        assert after_equals.buffer == ""
        assert after_equals.error is None

    def test_implicit_multiply_scenario(self):
        """Test "3" then "(" gives "3*("."""
        state = press_all(open_session("", PATH), "3(")
        assert state.buffer == "3*("

    def test_operator_replace_scenario(self):
        """Test "5+" then "*" gives "5*"."""
        state = press_all(open_session("", PATH), "5+*")
        assert state.buffer == "5*"

    def test_full_calculation(self):
        """Test typing an expression and pressing "="."""
        state = press_all(open_session("", PATH), "12+3*2=")
        assert state.buffer == "18"
        assert state.just_evaluated is True


class TestEvaluateAndCommit:
    """Tests for the "=" key."""

    def test_success_replaces_buffer(self):
        """Test the result becomes the buffer."""
        state = evaluate_and_commit_to_buffer(EditorState(buffer="0.1+0.2"))
        assert state.buffer == "0.3"
        assert state.just_evaluated is True
        assert state.error is None

    def test_failure_keeps_buffer(self):
        """Test a failed evaluation surfaces the error only."""
        state = evaluate_and_commit_to_buffer(EditorState(buffer="1/0"))
        assert state.buffer == "1/0"
        assert state.error == ErrorKind.DIVISION_BY_ZERO
        assert state.just_evaluated is False

    def test_empty_is_a_no_op(self):
        """Test "=" on an empty buffer changes nothing."""
        state = EditorState(buffer="")
        assert evaluate_and_commit_to_buffer(state) == state

    def test_next_digit_after_result_starts_over(self):
        """Test the Evaluated -> Editing transition."""
        state = press_all(open_session("", PATH), "2*3=4")
        assert state.buffer == "4"

    def test_next_operator_after_result_continues(self):
        """Test an operator after "=" builds on the result."""
        state = press_all(open_session("", PATH), "2*3=+1=")
        assert state.buffer == "7"


class TestPreview:
    """Tests for the live preview."""

    def test_preview_formats_result(self):
        """Test the preview uses thousands separators by default."""
        assert preview(EditorState(buffer="1000+234.5")) == "1,234.5"

    def test_preview_without_separator(self):
        """Test the separator can be turned off."""
        state = EditorState(
            buffer="1000+234.5",
            config=CalculatorConfig(thousands_separator=False),
        )
        assert preview(state) == "1234.5"

    @pytest.mark.parametrize("buffer", ["", "5+", "(1+2", "1/0"])
    def test_no_preview_for_incomplete_input(self, buffer):
        """Test empty, incomplete and failing buffers have no preview."""
        assert preview(EditorState(buffer=buffer)) is None

    def test_no_preview_right_after_equals(self):
        """Test the preview clears once the result is in the buffer."""
        state = press_all(open_session("", PATH), "2+2=")
        assert preview(state) is None

    def test_preview_never_mutates(self):
        """Test the preview leaves the state untouched."""
        state = EditorState(buffer="1/0")
        snapshot = state.model_dump()
        preview(state)
        assert state.model_dump() == snapshot


class TestConfirm:
    """Tests for the final OK action."""

    def test_confirm_on_empty_commits_zero(self):
        """Test confirming an untouched empty field commits 0."""
        result = confirm(open_session("", PATH))
        assert result.success
        assert result.should_close
        assert result.payload.path == PATH
        assert result.payload.value == Decimal("0")

    def test_confirm_evaluates_first(self):
        """Test a pending expression is evaluated before commit."""
        result = confirm(press_all(open_session("", PATH), "2+3"))
        assert result.payload.value == Decimal("5")
        assert result.state.buffer == "5"

    def test_confirm_seed_unchanged(self):
        """Test confirming straight away commits the seed."""
        result = confirm(open_session("1,250.5", PATH))
        assert result.payload.value == Decimal("1250.5")

    def test_confirm_blocked_by_evaluation_error(self):
        """Test a dangling expression blocks confirm."""
        result = confirm(press_all(open_session("", PATH), "5+"))
        assert not result.success
        assert result.payload is None
        assert result.error == ErrorKind.INVALID_EXPRESSION
        assert result.state.error == ErrorKind.INVALID_EXPRESSION
        assert result.state.buffer == "5+"

    def test_confirm_blocked_by_division_by_zero(self):
        """Test division by zero blocks confirm."""
        result = confirm(press_all(open_session("", PATH), "8/0"))
        assert result.error == ErrorKind.DIVISION_BY_ZERO

    def test_confirm_sentinel_commits_zero(self):
        """Test the host's error sentinel is treated as 0."""
        result = confirm(open_session(ERROR_SENTINEL, PATH))
        assert result.payload.value == Decimal("0")

    def test_stale_advisory_error_does_not_block(self):
        """Test an earlier rejected key does not block confirm."""
        state = handle_key(open_session("", PATH), ")")
        assert state.error == ErrorKind.UNBALANCED_PARENS
        result = confirm(state)
        assert result.success
        assert result.payload.value == Decimal("0")

    def test_incomplete_expression_guard(self, monkeypatch):
        """Test a buffer that is not a single number is never committed."""
        monkeypatch.setattr(controller, "evaluate_and_commit_to_buffer", lambda s: s)
        result = confirm(EditorState(buffer="5+", target_path=PATH))
        assert result.error == ErrorKind.INCOMPLETE_EXPRESSION
        assert result.state.error == ErrorKind.INCOMPLETE_EXPRESSION

    def test_negative_result_commits(self):
        """Test negative values are valid payloads."""
        result = confirm(press_all(open_session("", PATH), "3-10"))
        assert result.payload.value == Decimal("-7")


class TestCancel:
    """Tests for cancel."""

    def test_cancel_emits_nothing(self):
        """Test cancel returns no payload."""
        state = press_all(open_session("", PATH), "9*9")
        assert cancel(state) is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
