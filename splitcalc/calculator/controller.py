"""
Live-Preview / Commit Controller

Bridges the editor and the evaluator into what the user sees:

1. Live preview - a best-effort evaluation after every edit.
   Preview failures are swallowed; they never touch the buffer.
2. "=" - evaluate and write the result back into the buffer.
3. Confirm - evaluate, check that a single number is left, and produce
   the payload for the form.
4. Cancel - discard everything.

State machine:
    Empty -> Editing -> Evaluated -> Editing ...
The error is an overlay on the state, not a state of its own; the next
accepted key clears it.

CRITICAL: Nothing leaves a session except through confirm().
"""

import re
from decimal import Decimal
from typing import Optional, Union

from splitcalc.calculator.editor import apply_key
from splitcalc.calculator.evaluator import canonical_string, evaluate
from splitcalc.formatting import format_amount
from splitcalc.models.calculator import (
    CalculatorConfig,
    CommitPayload,
    ConfirmResult,
    EditorState,
    ErrorKind,
    Key,
)

# Shown by the host in a field whose value could not be computed.
ERROR_SENTINEL = "Error"

_FINISHED_NUMBER = re.compile(r"^-?\d+(\.\d+)?$")


def open_session(
    seed: str,
    target_path: str,
    config: Optional[CalculatorConfig] = None,
) -> EditorState:
    """
    Start a calculator session seeded with the field's current value.

    Thousands separators are stripped. The session starts as "just
    evaluated", so the first digit replaces the seed instead of
    extending it.
    """
    seed = "" if seed is None else str(seed).replace(",", "").strip()
    return EditorState(
        buffer=seed,
        just_evaluated=True,
        target_path=target_path,
        config=config or CalculatorConfig(),
    )


def _coerce_key(key: Union[Key, str]) -> Optional[Key]:
    if isinstance(key, Key):
        return key
    try:
        return Key(key)
    except ValueError:
        return None


def handle_key(state: EditorState, key: Union[Key, str]) -> EditorState:
    """
    The single mutation entry point.

    Unrecognized input leaves the buffer alone and sets a transient
    UnknownInput error. Any recognized key clears it, even one that is
    otherwise a no-op.
    """
    logical = _coerce_key(key)
    if logical is None:
        return state.evolve(error=ErrorKind.UNKNOWN_INPUT)
    if state.error == ErrorKind.UNKNOWN_INPUT:
        state = state.evolve(error=None)
    if logical == Key.EQUALS:
        return evaluate_and_commit_to_buffer(state)
    return apply_key(state, logical)


def preview(state: EditorState) -> Optional[str]:
    """
    Formatted live result of the buffer, or None.

    None when the buffer is empty, incomplete or in error, and right after
    "=" (the buffer already shows the result).
    """
    if state.just_evaluated or not state.buffer.strip():
        return None
    result = evaluate(state.buffer, state.config.max_digits)
    if not result.is_ok:
        return None
    return format_amount(
        result.value,
        thousands_separator=state.config.thousands_separator,
        max_fraction_digits=state.config.fraction_digits,
    )


def evaluate_and_commit_to_buffer(state: EditorState) -> EditorState:
    """
    The "=" key.

    On success the buffer becomes the result and the session is marked
    just evaluated. An empty buffer is a no-op. Any other failure sets the
    error and leaves the buffer and flag untouched.
    """
    result = evaluate(state.buffer, state.config.max_digits)
    if result.is_ok:
        return state.evolve(
            buffer=canonical_string(result.value),
            just_evaluated=True,
            error=None,
        )
    if result.error == ErrorKind.EMPTY_EXPRESSION:
        return state
    return state.evolve(error=result.error)


def confirm(state: EditorState) -> ConfirmResult:
    """
    The final "OK" action.

    Evaluates first; an evaluation error aborts without a payload.
    An empty buffer (or the error sentinel) commits 0. Anything that is
    still not a single finished number is IncompleteExpression.
    """
    if state.buffer.strip() == ERROR_SENTINEL:
        # The sentinel is not an expression; evaluating it would only fail.
        state = state.evolve(buffer="", error=None)
    else:
        # Advisory errors from earlier keys do not block; only this evaluation can.
        state = evaluate_and_commit_to_buffer(state.evolve(error=None))
        if state.error is not None:
            return ConfirmResult(state=state, error=state.error)

    buffer = state.buffer.strip()
    if buffer == "":
        value = Decimal(0)
    elif _FINISHED_NUMBER.match(buffer):
        value = Decimal(buffer)
    else:
        state = state.evolve(error=ErrorKind.INCOMPLETE_EXPRESSION)
        return ConfirmResult(state=state, error=ErrorKind.INCOMPLETE_EXPRESSION)

    payload = CommitPayload(path=state.target_path, value=value)
    return ConfirmResult(state=state, payload=payload)


def cancel(state: EditorState) -> None:
    """Discard the session. Nothing is emitted."""
    return None
