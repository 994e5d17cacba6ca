"""
Session Logger

DESIGN DECISION: Every significant calculator action is logged.
This provides:
1. Traceability from a committed amount back to its expression
2. Debugging capability for "the calculator gave me a weird number"

The session logger:
- Is synchronous; the calculator core has no event loop
- Only logs locally through structlog
- Supports session IDs to trace related events
"""

import logging
from collections import deque
from typing import Optional
from uuid import UUID

import structlog

from splitcalc.models.audit import (
    SessionEvent,
    SessionEventBuilder,
    SessionSeverity,
)


# Events kept in memory per logger; older ones are dropped.
MAX_RECENT_EVENTS = 200

# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output through the standard library at the given level."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(message)s",
    )
    logging.getLogger("splitcalc").setLevel(getattr(logging, level.upper()))


class SessionLogger:
    """
    Central logging service for calculator sessions.

    Each helper builds the matching SessionEvent and writes it.
    """

    def __init__(
        self,
        logger_name: str = "splitcalc.session",
        max_events: int = MAX_RECENT_EVENTS,
    ):
        self._logger = structlog.get_logger(logger_name)
        self._logger_name = logger_name
        self._events: deque[SessionEvent] = deque(maxlen=max_events)

    @property
    def events(self) -> list[SessionEvent]:
        """Most recent events logged by this instance, oldest first."""
        return list(self._events)

    def clear(self) -> None:
        self._events.clear()

    def log(self, event: SessionEvent) -> None:
        """Log a session event."""
        self._events.append(event)
        try:
            log_dict = event.to_log_dict()
            if event.severity == SessionSeverity.WARNING:
                self._logger.warning("session_event", **log_dict)
            elif event.severity == SessionSeverity.DEBUG:
                self._logger.debug("session_event", **log_dict)
            else:
                self._logger.info("session_event", **log_dict)
        except Exception as e:
            # Report the failure but never raise into the calculator
            logging.getLogger(self._logger_name).error(
                "session_log_failed: %s (%s)", event.event_type.value, e
            )

    def log_session_opened(self, session_id: UUID, target_path: str, seed: str) -> None:
        self.log(SessionEventBuilder.session_opened(session_id, target_path, seed))

    def log_key_rejected(
        self,
        session_id: UUID,
        target_path: str,
        key: str,
        error: str,
    ) -> None:
        self.log(SessionEventBuilder.key_rejected(session_id, target_path, key, error))

    def log_expression_evaluated(
        self,
        session_id: UUID,
        target_path: str,
        expression: str,
        result: str,
    ) -> None:
        self.log(SessionEventBuilder.expression_evaluated(
            session_id, target_path, expression, result,
        ))

    def log_evaluation_failed(
        self,
        session_id: UUID,
        target_path: str,
        expression: str,
        error: str,
    ) -> None:
        self.log(SessionEventBuilder.evaluation_failed(
            session_id, target_path, expression, error,
        ))

    def log_value_committed(self, session_id: UUID, target_path: str, value: str) -> None:
        self.log(SessionEventBuilder.value_committed(session_id, target_path, value))

    def log_confirm_blocked(self, session_id: UUID, target_path: str, error: str) -> None:
        self.log(SessionEventBuilder.confirm_blocked(session_id, target_path, error))

    def log_session_cancelled(
        self,
        session_id: UUID,
        target_path: str,
        reason: Optional[str] = None,
    ) -> None:
        event = SessionEventBuilder.session_cancelled(session_id, target_path)
        if reason:
            event.details["reason"] = reason
        self.log(event)
