"""
Expression Buffer & Editor

Turns one logical key into one buffer mutation. Each rule keeps the buffer
in a shape the evaluator can repair or reject cleanly:

- Operators replace a trailing operator instead of stacking
- "(" after a number or ")" gets an implicit "*"
- ")" is refused when it would close more parens than were opened
- A number never grows past max_digits digits
- A number never holds more than one "."

After every accepted edit the buffer is normalized (leading zeros, lone
decimal points, duplicate decimal points).
"""

import re
from typing import Optional

from splitcalc.models.calculator import OPERATORS, EditorState, ErrorKind, Key

_NUMBER_RUN = re.compile(r"[0-9.]+")
_TRAILING_NUMBER = re.compile(r"-?\d+\.?\d*$")


# =============================================================================
# NORMALIZATION
# =============================================================================

def _normalize_number(token: str) -> str:
    first_dot = token.find(".")
    if first_dot != -1:
        token = token[:first_dot + 1] + token[first_dot + 1:].replace(".", "")
    if token == ".":
        return "0."
    if token.startswith("0."):
        return token
    stripped = token.lstrip("0")
    if not stripped:
        return "0"
    if stripped.startswith("."):
        return "0" + stripped
    return stripped


def normalize(buffer: str) -> str:
    """
    Canonicalize every number in the buffer.

    - "007" -> "7", "000" -> "0", "00.5" -> "0.5"
    - "." -> "0."
    - "1.2.3" -> "1.23"

    Idempotent: normalize(normalize(s)) == normalize(s).
    """
    return _NUMBER_RUN.sub(lambda m: _normalize_number(m.group()), buffer)


def current_number(buffer: str) -> Optional[str]:
    """The number currently being typed at the end of the buffer, if any."""
    match = _TRAILING_NUMBER.search(buffer)
    return match.group() if match else None


def digit_count(token: Optional[str]) -> int:
    if not token:
        return 0
    return sum(1 for ch in token if ch.isdigit())


# =============================================================================
# KEY HANDLERS
# =============================================================================

def _accept(state: EditorState, buffer: str) -> EditorState:
    """Commit an accepted edit: normalize, clear the error and the evaluated flag."""
    return state.evolve(
        buffer=normalize(buffer),
        error=None,
        just_evaluated=False,
    )


def _reject(state: EditorState, error: ErrorKind) -> EditorState:
    return state.evolve(error=error)


def press_digit_or_point(state: EditorState, key: Key) -> EditorState:
    if state.just_evaluated:
        return _accept(state, "0." if key == Key.POINT else key.value)

    token = current_number(state.buffer)
    if key == Key.POINT:
        if token is not None and "." in token:
            return state
    elif digit_count(token) >= state.config.max_digits:
        return _reject(state, ErrorKind.DIGIT_LIMIT_EXCEEDED)

    return _accept(state, state.buffer + key.value)


def press_operator(state: EditorState, key: Key) -> EditorState:
    if state.just_evaluated:
        return _accept(state, state.buffer + key.value)
    if state.buffer[-1:] in OPERATORS:
        return _accept(state, state.buffer[:-1] + key.value)
    return _accept(state, state.buffer + key.value)


def press_open_paren(state: EditorState) -> EditorState:
    last = state.buffer[-1:]
    if last and (last.isdigit() or last in ")."):
        return _accept(state, state.buffer + "*(")
    return _accept(state, state.buffer + "(")


def press_close_paren(state: EditorState) -> EditorState:
    if state.buffer.count("(") > state.buffer.count(")"):
        return _accept(state, state.buffer + ")")
    return _reject(state, ErrorKind.UNBALANCED_PARENS)


def press_clear(state: EditorState) -> EditorState:
    return state.evolve(buffer="", error=None, just_evaluated=False)


def press_delete(state: EditorState) -> EditorState:
    buffer = state.buffer[:-1]
    if not buffer:
        return state.evolve(buffer="", error=None, just_evaluated=False)
    return _accept(state, buffer)


def apply_key(state: EditorState, key: Key) -> EditorState:
    """
    Apply an editing key to the state.

    "=" is not an editing key; evaluation belongs to the controller.

    Raises:
        ValueError: If called with Key.EQUALS
    """
    if key.is_digit or key == Key.POINT:
        return press_digit_or_point(state, key)
    if key.is_operator:
        return press_operator(state, key)
    if key == Key.OPEN_PAREN:
        return press_open_paren(state)
    if key == Key.CLOSE_PAREN:
        return press_close_paren(state)
    if key == Key.CLEAR:
        return press_clear(state)
    if key == Key.DELETE:
        return press_delete(state)
    raise ValueError(f"{key.value!r} is not an editing key")
