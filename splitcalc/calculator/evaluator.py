"""
Expression Evaluator

DESIGN DECISION: Expressions are evaluated by an explicit recursive-descent
parser over Decimal numbers. Nothing is ever handed to eval().

Two layers guard the input:
1. An allow-list of characters ([0-9+-*/().] and whitespace)
2. A grammar that only knows numbers, four operators and parentheses

Grammar:
    expr    := term (('+' | '-') term)*
    term    := unary (('*' | '/') unary)*
    unary   := '-'* primary
    primary := NUMBER | '(' expr ')'

Unary plus is deliberately absent, so "1++2" is rejected while "3--2"
is 3 - (-2).
"""

import re
from decimal import (
    ROUND_HALF_UP,
    Decimal,
    InvalidOperation,
    Overflow,
    localcontext,
)
from typing import Optional

from splitcalc.models.calculator import OPERATORS, ErrorKind, EvaluationResult

ALLOWED_PATTERN = re.compile(r"^[0-9+\-*/().\s]*$")
FRACTION_DIGITS = 10
DEFAULT_MAX_DIGITS = 14

_QUANTUM = Decimal(1).scaleb(-FRACTION_DIGITS)
_PRECISION = 34
# Deepest parenthesis nesting the parser accepts.
MAX_NESTING = 100


class EvaluationError(Exception):
    """Raised inside the evaluator; converted to an EvaluationResult at the boundary."""

    def __init__(self, kind: ErrorKind, message: Optional[str] = None):
        self.kind = kind
        super().__init__(message or kind.message)


def tokenize(expr: str) -> list[str]:
    """
    Split an allow-listed expression into number and symbol tokens.

    Raises:
        EvaluationError: For malformed numbers ("." alone, "1.2.3")
    """
    tokens = []
    i, n = 0, len(expr)
    while i < n:
        ch = expr[i]
        if ch.isspace():
            i += 1
            continue
        if ch in OPERATORS or ch in "()":
            tokens.append(ch)
            i += 1
            continue
        j = i
        while j < n and (expr[j].isdigit() or expr[j] == "."):
            j += 1
        number = expr[i:j]
        if number.count(".") > 1 or not any(c.isdigit() for c in number):
            raise EvaluationError(ErrorKind.INVALID_EXPRESSION, f"Malformed number: {number!r}")
        tokens.append(number)
        i = j
    return tokens


def _check_balance(tokens: list[str]) -> None:
    depth = 0
    for tok in tokens:
        if tok == "(":
            depth += 1
            if depth > MAX_NESTING:
                raise EvaluationError(
                    ErrorKind.INVALID_EXPRESSION,
                    f"Parentheses nested deeper than {MAX_NESTING}",
                )
        elif tok == ")":
            depth -= 1
            if depth < 0:
                raise EvaluationError(ErrorKind.UNBALANCED_PARENS)
    if depth != 0:
        raise EvaluationError(ErrorKind.UNBALANCED_PARENS)


class _Parser:
    """Recursive-descent parser that evaluates while it parses."""

    def __init__(self, tokens: list[str]):
        self._tokens = tokens
        self._pos = 0

    def _peek(self) -> Optional[str]:
        if self._pos < len(self._tokens):
            return self._tokens[self._pos]
        return None

    def _advance(self) -> str:
        tok = self._tokens[self._pos]
        self._pos += 1
        return tok

    def parse(self) -> Decimal:
        value = self._expr()
        if self._peek() is not None:
            raise EvaluationError(
                ErrorKind.INVALID_EXPRESSION,
                f"Unexpected token {self._peek()!r}",
            )
        return value

    def _expr(self) -> Decimal:
        left = self._term()
        while self._peek() in ("+", "-"):
            op = self._advance()
            right = self._term()
            left = left + right if op == "+" else left - right
        return left

    def _term(self) -> Decimal:
        left = self._unary()
        while self._peek() in ("*", "/"):
            op = self._advance()
            right = self._unary()
            if op == "*":
                left = left * right
            else:
                if right == 0:
                    raise EvaluationError(ErrorKind.DIVISION_BY_ZERO)
                left = left / right
        return left

    def _unary(self) -> Decimal:
        negate = False
        while self._peek() == "-":
            self._advance()
            negate = not negate
        value = self._primary()
        return -value if negate else value

    def _primary(self) -> Decimal:
        tok = self._peek()
        if tok is None:
            raise EvaluationError(ErrorKind.INVALID_EXPRESSION, "Expected a number")
        if tok == "(":
            self._advance()
            value = self._expr()
            if self._peek() != ")":
                # Counts already balance, so something else sits before ")".
                raise EvaluationError(
                    ErrorKind.INVALID_EXPRESSION,
                    f"Expected ')' but found {self._peek()!r}",
                )
            self._advance()
            return value
        if tok in OPERATORS or tok == ")":
            raise EvaluationError(
                ErrorKind.INVALID_EXPRESSION,
                f"Unexpected token {tok!r}",
            )
        self._advance()
        return Decimal(tok)


def canonical_string(value: Decimal) -> str:
    """
    Render a result the way it is written back into the buffer.

    No exponent, no trailing fraction zeros, never "-0".
    """
    if value == 0:
        return "0"
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def count_digits(text: str) -> int:
    """Number of decimal digits in a numeric string, ignoring sign and point."""
    return sum(1 for ch in text if ch.isdigit())


def _round_result(value: Decimal) -> Decimal:
    """
    Round a non-integral result to 10 fraction digits, half away from zero.

    Decimal arithmetic carries no binary representation error, so
    0.1 + 0.2 is exactly 0.3 before rounding.
    """
    if value == value.to_integral_value():
        return value
    return value.quantize(_QUANTUM, rounding=ROUND_HALF_UP)


def compute(expr: str, max_digits: int = DEFAULT_MAX_DIGITS) -> Decimal:
    """
    Evaluate an expression, raising EvaluationError on failure.

    Raises:
        EvaluationError: With the ErrorKind describing the failure
    """
    expr = expr.strip()
    if not expr:
        raise EvaluationError(ErrorKind.EMPTY_EXPRESSION)
    if not ALLOWED_PATTERN.match(expr):
        raise EvaluationError(ErrorKind.INVALID_CHARACTERS)

    tokens = tokenize(expr)
    _check_balance(tokens)

    with localcontext() as ctx:
        ctx.prec = _PRECISION
        try:
            value = _Parser(tokens).parse()
        except Overflow:
            raise EvaluationError(ErrorKind.OVERFLOW)

        if not value.is_finite():
            raise EvaluationError(ErrorKind.OVERFLOW)
        # Integer part alone already over the limit; also keeps quantize in range.
        if value != 0 and value.adjusted() >= max_digits:
            raise EvaluationError(ErrorKind.RESULT_TOO_LARGE)

        try:
            value = _round_result(value)
        except InvalidOperation:
            raise EvaluationError(ErrorKind.RESULT_TOO_LARGE)

    text = canonical_string(value)
    if count_digits(text) > max_digits:
        raise EvaluationError(ErrorKind.RESULT_TOO_LARGE)
    return Decimal(text)


def evaluate(expr: str, max_digits: int = DEFAULT_MAX_DIGITS) -> EvaluationResult:
    """
    Evaluate an expression to a bounded, finite Decimal.

    Never raises: every failure comes back as EvaluationResult.fail(kind).

    Examples:
        >>> evaluate("12+3*2").value
        Decimal('18')
        >>> evaluate("1/0").error
        <ErrorKind.DIVISION_BY_ZERO: 'DivisionByZero'>
    """
    try:
        return EvaluationResult.ok(compute(expr, max_digits))
    except EvaluationError as e:
        return EvaluationResult.fail(e.kind)
