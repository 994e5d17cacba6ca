"""
Data Models Package

This package contains all Pydantic models used by the calculator.
"""

from splitcalc.models.calculator import (
    OPERATORS,
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

__all__ = [
    # Calculator models
    "OPERATORS",
    "CalculatorConfig",
    "CommitPayload",
    "ConfirmResult",
    "EditorState",
    "ErrorKind",
    "EvaluationResult",
    "Key",
    # Session event models
    "SessionEvent",
    "SessionEventBuilder",
    "SessionEventType",
    "SessionSeverity",
]
