"""
Core Data Models for the Calculator

These models define the values threaded through a calculator session:
1. The logical keys the editor understands
2. The error taxonomy surfaced to the user
3. The session state (immutable - every key press returns a new one)
4. Evaluation, commit and confirm results

DESIGN DECISION: EditorState is frozen. Operations never mutate a state
in place, so a rejected key can simply return the state it was given.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
)

from splitcalc.config import get_settings


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class Key(str, Enum):
    """
    Logical keys accepted by the editor.

    Keyboard, keypad and touch input are all mapped onto these
    before they reach the calculator.
    """
    ZERO = "0"
    ONE = "1"
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    POINT = "."
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    OPEN_PAREN = "("
    CLOSE_PAREN = ")"
    EQUALS = "="
    CLEAR = "C"
    DELETE = "DEL"

    @property
    def is_digit(self) -> bool:
        return self.value.isdigit()

    @property
    def is_operator(self) -> bool:
        return self.value in OPERATORS


OPERATORS = frozenset("+-*/")


class ErrorKind(str, Enum):
    """
    Everything that can go wrong inside a calculator session.

    All of these are recoverable: the buffer stays editable and the
    error clears on the next accepted key.
    """
    EMPTY_EXPRESSION = "EmptyExpression"
    INVALID_CHARACTERS = "InvalidCharacters"
    INVALID_EXPRESSION = "InvalidExpression"
    UNBALANCED_PARENS = "UnbalancedParens"
    DIVISION_BY_ZERO = "DivisionByZero"
    OVERFLOW = "Overflow"
    RESULT_TOO_LARGE = "ResultTooLarge"
    DIGIT_LIMIT_EXCEEDED = "DigitLimitExceeded"
    INCOMPLETE_EXPRESSION = "IncompleteExpression"
    UNKNOWN_INPUT = "UnknownInput"

    @property
    def message(self) -> str:
        """Short inline message for the user."""
        return _ERROR_MESSAGES[self]


_ERROR_MESSAGES = {
    ErrorKind.EMPTY_EXPRESSION: "Nothing to calculate",
    ErrorKind.INVALID_CHARACTERS: "Only numbers and + - * / ( ) are allowed",
    ErrorKind.INVALID_EXPRESSION: "Expression error",
    ErrorKind.UNBALANCED_PARENS: "Parentheses do not match",
    ErrorKind.DIVISION_BY_ZERO: "Cannot divide by zero",
    ErrorKind.OVERFLOW: "Result is out of range",
    ErrorKind.RESULT_TOO_LARGE: "Result has too many digits",
    ErrorKind.DIGIT_LIMIT_EXCEEDED: "Too many digits",
    ErrorKind.INCOMPLETE_EXPRESSION: "Please finish the expression first",
    ErrorKind.UNKNOWN_INPUT: "Unsupported key",
}


# =============================================================================
# SESSION MODELS
# =============================================================================

class CalculatorConfig(BaseModel):
    """Per-session calculator parameters."""
    model_config = ConfigDict(frozen=True)

    max_digits: int = Field(
        default=14,
        ge=1,
        le=15,
        description="Maximum digits in a single number"
    )
    thousands_separator: bool = Field(
        default=True,
        description="Group thousands in the preview"
    )
    fraction_digits: int = Field(
        default=10,
        ge=0,
        le=10,
        description="Maximum fraction digits shown in the preview"
    )

    @classmethod
    def from_settings(cls) -> "CalculatorConfig":
        """Build a config from the environment-backed settings."""
        settings = get_settings().calculator
        return cls(
            max_digits=settings.max_digits,
            thousands_separator=settings.thousands_separator,
            fraction_digits=settings.fraction_digits,
        )


class EditorState(BaseModel):
    """
    State of one open calculator session.

    CRITICAL: The buffer is only ever changed by the editor and by a
    successful evaluation. Failed operations return a state whose buffer
    is identical to the one they received.
    """
    model_config = ConfigDict(frozen=True)

    session_id: UUID = Field(
        default_factory=uuid4,
        description="Identifier used to correlate session log lines"
    )
    buffer: str = Field(
        default="",
        description="The expression being edited"
    )
    just_evaluated: bool = Field(
        default=False,
        description="True when the buffer holds a result the next digit should replace"
    )
    error: Optional[ErrorKind] = None
    target_path: str = Field(
        default="",
        description="Dotted path of the form field being edited"
    )
    config: CalculatorConfig = Field(default_factory=CalculatorConfig)

    def evolve(self, **changes) -> "EditorState":
        """Return a copy of this state with the given fields replaced."""
        return self.model_copy(update=changes)


class EvaluationResult(BaseModel):
    """
    Outcome of evaluating an expression.

    Exactly one of value / error is set. The value is always finite.
    """
    model_config = ConfigDict(frozen=True)

    value: Optional[Decimal] = None
    error: Optional[ErrorKind] = None

    @model_validator(mode='after')
    def validate_outcome(self) -> 'EvaluationResult':
        """Reject half-valid results."""
        if (self.value is None) == (self.error is None):
            raise ValueError("Exactly one of value or error must be set")
        if self.value is not None and not self.value.is_finite():
            raise ValueError("Evaluation value must be finite")
        return self

    @classmethod
    def ok(cls, value: Decimal) -> "EvaluationResult":
        return cls(value=value)

    @classmethod
    def fail(cls, error: ErrorKind) -> "EvaluationResult":
        return cls(error=error)

    @property
    def is_ok(self) -> bool:
        return self.error is None


class CommitPayload(BaseModel):
    """The value handed to the form once the user confirms."""
    model_config = ConfigDict(frozen=True)

    path: str = Field(
        ...,
        description="Dotted path of the form field"
    )
    value: Decimal = Field(
        ...,
        description="Confirmed amount"
    )


class ConfirmResult(BaseModel):
    """
    Result of the final "OK" action.

    On success a payload is present and the widget should close.
    On failure the error is set on both this result and the state.
    """
    model_config = ConfigDict(frozen=True)

    state: EditorState
    payload: Optional[CommitPayload] = None
    error: Optional[ErrorKind] = None

    @property
    def success(self) -> bool:
        return self.payload is not None

    @property
    def should_close(self) -> bool:
        return self.success
