"""
Tests for Splitcalc

Test strategy:
1. Unit tests for individual components (models, evaluator, editor)
2. Flow tests against the in-memory expense tree
3. No real host UI in tests
"""

import pytest
from decimal import Decimal
from uuid import uuid4

from pydantic import ValidationError

from splitcalc.audit import SessionLogger
from splitcalc.config import AppSettings, get_settings, validate_all_settings
from splitcalc.models.calculator import (
    CalculatorConfig,
    CommitPayload,
    ConfirmResult,
    EditorState,
    ErrorKind,
    EvaluationResult,
    Key,
)
from splitcalc.models.audit import (
    SessionEvent,
    SessionEventBuilder,
    SessionEventType,
    SessionSeverity,
)


class TestCalculatorModels:
    """Tests for calculator Pydantic models."""

    def test_editor_state_defaults(self):
        """Test EditorState starts empty."""
        state = EditorState()
        assert state.buffer == ""
        assert state.just_evaluated is False
        assert state.error is None
        assert state.config.max_digits == 14

    def test_editor_state_is_frozen(self):
        """Test states cannot be mutated in place."""
        state = EditorState(buffer="1")
        with pytest.raises(ValidationError):
            state.buffer = "2"

    def test_evolve_returns_new_state(self):
        """Test evolve copies and keeps the session id."""
        state = EditorState(buffer="1")
        changed = state.evolve(buffer="12")
        assert state.buffer == "1"
        assert changed.buffer == "12"
        assert changed.session_id == state.session_id

    def test_evaluation_result_ok(self):
        """Test a successful result."""
        result = EvaluationResult.ok(Decimal("18"))
        assert result.is_ok
        assert result.value == Decimal("18")

    def test_evaluation_result_fail(self):
        """Test a failed result."""
        result = EvaluationResult.fail(ErrorKind.DIVISION_BY_ZERO)
        assert not result.is_ok
        assert result.value is None

    def test_evaluation_result_rejects_both_or_neither(self):
        """Test results are never half valid."""
        with pytest.raises(ValueError):
            EvaluationResult()
        with pytest.raises(ValueError):
            EvaluationResult(value=Decimal(1), error=ErrorKind.OVERFLOW)

    def test_evaluation_result_rejects_infinity(self):
        """Test infinite values are never Ok."""
        with pytest.raises(ValueError):
            EvaluationResult(value=Decimal("Infinity"))

    def test_config_bounds(self):
        """Test digit ceiling bounds."""
        with pytest.raises(ValueError):
            CalculatorConfig(max_digits=0)
        with pytest.raises(ValueError):
            CalculatorConfig(max_digits=16)

    def test_confirm_result_success(self):
        """Test success and close flags follow the payload."""
        state = EditorState(buffer="5", target_path="a.b")
        ok = ConfirmResult(state=state, payload=CommitPayload(path="a.b", value=Decimal(5)))
        blocked = ConfirmResult(state=state, error=ErrorKind.INCOMPLETE_EXPRESSION)
        assert ok.success and ok.should_close
        assert not blocked.success and not blocked.should_close


class TestEnums:
    """Tests for the key and error enums."""

    def test_key_values(self):
        """Test keys round-trip from their labels."""
        assert Key("DEL") == Key.DELETE
        assert Key("=") == Key.EQUALS
        assert Key.SEVEN.is_digit
        assert Key.DIVIDE.is_operator
        assert not Key.OPEN_PAREN.is_operator

    def test_every_error_has_a_message(self):
        """Test each error kind has inline text."""
        for kind in ErrorKind:
            assert kind.message

    def test_error_values(self):
        """Test error names used by hosts."""
        assert ErrorKind.DIGIT_LIMIT_EXCEEDED.value == "DigitLimitExceeded"
        assert ErrorKind("UnbalancedParens") == ErrorKind.UNBALANCED_PARENS


class TestSessionEvents:
    """Tests for session event models."""

    def test_event_to_log_dict(self):
        """Test conversion to a log dictionary."""
        session_id = uuid4()
        event = SessionEventBuilder.expression_evaluated(
            session_id=session_id,
            target_path="reimbursable.me.transport",
            expression="2*4",
            result="8",
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "expression_evaluated"
        assert log_dict["session_id"] == str(session_id)
        assert log_dict["details"]["result"] == "8"

    def test_builder_severities(self):
        """Test rejected keys are debug and blocked confirms are warnings."""
        session_id = uuid4()
        rejected = SessionEventBuilder.key_rejected(session_id, "a", "x", "UnknownInput")
        blocked = SessionEventBuilder.confirm_blocked(session_id, "a", "InvalidExpression")
        assert rejected.severity == SessionSeverity.DEBUG
        assert blocked.severity == SessionSeverity.WARNING
        assert blocked.event_type == SessionEventType.CONFIRM_BLOCKED

    def test_event_defaults(self):
        """Test SessionEvent creation."""
        event = SessionEvent(
            event_type=SessionEventType.SESSION_OPENED,
            session_id=uuid4(),
            description="Calculator opened",
        )
        assert event.severity == SessionSeverity.INFO
        assert event.details == {}


class _BrokenLogger:
    """structlog stand-in whose writes always fail."""

    def _fail(self, *args, **kwargs):
        raise RuntimeError("log sink unavailable")

    info = warning = debug = _fail


class TestSessionLogger:
    """Tests for the session logger."""

    def test_keeps_only_recent_events(self):
        """Test the in-memory event window is bounded."""
        session_logger = SessionLogger(max_events=3)
        session_id = uuid4()
        for digit in "12345":
            session_logger.log_key_rejected(session_id, "a", digit, "UnknownInput")
        assert [event.details["key"] for event in session_logger.events] == ["3", "4", "5"]

    def test_clear(self):
        """Test clear empties the window."""
        session_logger = SessionLogger()
        session_logger.log_session_opened(uuid4(), "a", "0")
        session_logger.clear()
        assert session_logger.events == []

    def test_write_failure_does_not_raise(self):
        """Test a failing log sink is reported, not raised."""
        session_logger = SessionLogger()
        session_logger._logger = _BrokenLogger()
        session_logger.log_value_committed(uuid4(), "a", "15")
        assert session_logger.events[-1].event_type == SessionEventType.VALUE_COMMITTED


class TestSettings:
    """Tests for configuration."""

    def test_calculator_defaults(self):
        """Test default calculator settings."""
        settings = get_settings().calculator
        assert settings.max_digits == 14
        assert settings.thousands_separator is True
        assert settings.fraction_digits == 10

    def test_env_override(self, monkeypatch):
        """Test environment variables override defaults."""
        monkeypatch.setenv("SPLITCALC_MAX_DIGITS", "10")
        monkeypatch.setenv("SPLITCALC_THOUSANDS_SEPARATOR", "false")
        config = CalculatorConfig.from_settings()
        assert config.max_digits == 10
        assert config.thousands_separator is False

    def test_log_level_validation(self):
        """Test unknown log levels are rejected."""
        assert AppSettings(log_level="debug").log_level == "DEBUG"
        with pytest.raises(ValueError):
            AppSettings(log_level="verbose")

    def test_debug_mode_forces_debug_level(self):
        """Test debug mode overrides the configured log level."""
        assert AppSettings(log_level="warning").effective_log_level == "WARNING"
        assert AppSettings(log_level="warning", debug_mode=True).effective_log_level == "DEBUG"

    def test_validate_all_settings(self):
        """Test the startup check."""
        results = validate_all_settings()
        assert results["calculator"] is True
        assert results["app"] is True


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
