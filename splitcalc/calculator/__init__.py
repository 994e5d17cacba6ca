"""
Calculator Package

Editor, evaluator and preview/commit controller for the embedded
expense calculator.
"""

from splitcalc.calculator.controller import (
    ERROR_SENTINEL,
    cancel,
    confirm,
    evaluate_and_commit_to_buffer,
    handle_key,
    open_session,
    preview,
)
from splitcalc.calculator.editor import apply_key, normalize
from splitcalc.calculator.evaluator import (
    EvaluationError,
    canonical_string,
    evaluate,
)
from splitcalc.calculator.input_adapters import (
    TapClassifier,
    key_from_button,
    key_from_keyboard,
)

__all__ = [
    # Controller
    "ERROR_SENTINEL",
    "cancel",
    "confirm",
    "evaluate_and_commit_to_buffer",
    "handle_key",
    "open_session",
    "preview",
    # Editor
    "apply_key",
    "normalize",
    # Evaluator
    "EvaluationError",
    "canonical_string",
    "evaluate",
    # Input adapters
    "TapClassifier",
    "key_from_button",
    "key_from_keyboard",
]
