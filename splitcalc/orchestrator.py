"""
Main Orchestrator for Splitcalc

Ties a calculator session to the host form and the session logger.

Flow:
1. Open     -> seed the session from the field's current value
2. Press    -> one key at a time, preview after each
3. Confirm  -> evaluate, then write the value to the field
   or Cancel -> close, write nothing

DESIGN DECISION: The orchestrator enforces the boundaries:
- The form is written at most once per session, and only on confirm
- A closed session cannot be edited or confirmed again
- Every commit and every blocked confirm is logged
"""

from typing import Optional, Union

from splitcalc.audit import SessionLogger, configure_logging
from splitcalc.binding import FormBindingInterface, ExpenseTreeBinding
from splitcalc.calculator import controller
from splitcalc.calculator.evaluator import canonical_string
from splitcalc.config import get_settings
from splitcalc.models.calculator import (
    CalculatorConfig,
    ConfirmResult,
    EditorState,
    ErrorKind,
    Key,
)


class SessionClosedError(Exception):
    """Operation attempted on a calculator that is not open."""
    pass


class CalculatorFlow:
    """
    Orchestrates one calculator widget bound to a form.

    Only one session is open at a time, mirroring the single modal
    the host shows.
    """

    def __init__(
        self,
        binding: FormBindingInterface,
        session_logger: Optional[SessionLogger] = None,
        config: Optional[CalculatorConfig] = None,
    ):
        self._binding = binding
        self._session_logger = session_logger
        self._config = config or CalculatorConfig.from_settings()
        self._state: Optional[EditorState] = None

    @property
    def is_open(self) -> bool:
        return self._state is not None

    @property
    def state(self) -> EditorState:
        if self._state is None:
            raise SessionClosedError("Calculator is not open")
        return self._state

    def open(self, path: str) -> EditorState:
        """
        Open the calculator on a form field.

        Raises:
            PathNotFoundError: If the path does not lead to a field
        """
        seed = self._binding.read(path)
        self._state = controller.open_session(seed, path, self._config)

        if self._session_logger:
            self._session_logger.clear()
            self._session_logger.log_session_opened(
                session_id=self._state.session_id,
                target_path=path,
                seed=self._state.buffer,
            )
        return self._state

    def press(self, key: Union[Key, str]) -> EditorState:
        """Feed one key to the open session."""
        before = self.state
        after = controller.handle_key(before, key)
        self._state = after

        if self._session_logger:
            self._log_transition(before, after, key)
        return after

    def _log_transition(
        self,
        before: EditorState,
        after: EditorState,
        key: Union[Key, str],
    ) -> None:
        key_text = key.value if isinstance(key, Key) else str(key)
        if after.error is not None and after.buffer == before.buffer:
            if key_text == Key.EQUALS.value:
                self._session_logger.log_evaluation_failed(
                    session_id=after.session_id,
                    target_path=after.target_path,
                    expression=before.buffer,
                    error=after.error.value,
                )
            else:
                self._session_logger.log_key_rejected(
                    session_id=after.session_id,
                    target_path=after.target_path,
                    key=key_text,
                    error=after.error.value,
                )
        elif key_text == Key.EQUALS.value and after.just_evaluated and before.buffer.strip():
            self._session_logger.log_expression_evaluated(
                session_id=after.session_id,
                target_path=after.target_path,
                expression=before.buffer,
                result=after.buffer,
            )

    def preview(self) -> Optional[str]:
        return controller.preview(self.state)

    @property
    def error(self) -> Optional[ErrorKind]:
        return self.state.error

    def confirm(self) -> ConfirmResult:
        """
        Confirm the session.

        On success the value is written through the binding and the
        session closes. On failure the session stays open with the error.
        """
        result = controller.confirm(self.state)

        if not result.success:
            self._state = result.state
            if self._session_logger:
                self._session_logger.log_confirm_blocked(
                    session_id=result.state.session_id,
                    target_path=result.state.target_path,
                    error=result.error.value,
                )
            return result

        self._binding.assign(result.payload.path, result.payload.value)
        self._state = None

        if self._session_logger:
            self._session_logger.log_value_committed(
                session_id=result.state.session_id,
                target_path=result.payload.path,
                value=canonical_string(result.payload.value),
            )
        return result

    def cancel(self) -> None:
        """Close the session without writing anything."""
        state = self.state
        controller.cancel(state)
        self._state = None

        if self._session_logger:
            self._session_logger.log_session_cancelled(
                session_id=state.session_id,
                target_path=state.target_path,
            )


def create_calculator_flow(
    binding: Optional[FormBindingInterface] = None,
) -> CalculatorFlow:
    """
    Factory function to create a calculator flow from settings.

    Args:
        binding: Form binding to commit into.
                 Defaults to a fresh in-memory expense tree.

    Returns:
        A CalculatorFlow with local session logging
    """
    settings = get_settings()
    configure_logging(settings.app.effective_log_level)

    return CalculatorFlow(
        binding=binding or ExpenseTreeBinding(),
        session_logger=SessionLogger(),
        config=CalculatorConfig.from_settings(),
    )
