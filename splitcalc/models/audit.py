"""
Session Event Models for Splitcalc

Significant moments in a calculator session are recorded as events.
This provides:
1. Traceability from a form value back to the keys that produced it
2. Debugging information when users report odd results

DESIGN DECISION: Events describe what happened, never the raw buffer of
a session that was cancelled - cancelled input is discarded entirely.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class SessionEventType(str, Enum):
    """Types of events we record for a calculator session."""
    SESSION_OPENED = "session_opened"
    KEY_REJECTED = "key_rejected"
    EXPRESSION_EVALUATED = "expression_evaluated"
    EVALUATION_FAILED = "evaluation_failed"
    VALUE_COMMITTED = "value_committed"
    CONFIRM_BLOCKED = "confirm_blocked"
    SESSION_CANCELLED = "session_cancelled"


class SessionSeverity(str, Enum):
    """Event severity levels."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"


class SessionEvent(BaseModel):
    """A single session event."""

    event_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    event_type: SessionEventType
    severity: SessionSeverity = SessionSeverity.INFO
    session_id: UUID
    target_path: str = ""
    description: str
    details: dict[str, Any] = Field(default_factory=dict)

    def to_log_dict(self) -> dict[str, Any]:
        """Flatten the event for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "session_id": str(self.session_id),
            "target_path": self.target_path,
            "description": self.description,
            "details": self.details,
        }


class SessionEventBuilder:
    """
    Factory for the events a session emits.

    Keeps descriptions and severities consistent across call sites.
    """

    @staticmethod
    def session_opened(session_id: UUID, target_path: str, seed: str) -> SessionEvent:
        return SessionEvent(
            event_type=SessionEventType.SESSION_OPENED,
            session_id=session_id,
            target_path=target_path,
            description="Calculator opened",
            details={"seed": seed},
        )

    @staticmethod
    def key_rejected(
        session_id: UUID,
        target_path: str,
        key: str,
        error: str,
    ) -> SessionEvent:
        return SessionEvent(
            event_type=SessionEventType.KEY_REJECTED,
            severity=SessionSeverity.DEBUG,
            session_id=session_id,
            target_path=target_path,
            description=f"Key {key!r} rejected",
            details={"key": key, "error": error},
        )

    @staticmethod
    def expression_evaluated(
        session_id: UUID,
        target_path: str,
        expression: str,
        result: str,
    ) -> SessionEvent:
        return SessionEvent(
            event_type=SessionEventType.EXPRESSION_EVALUATED,
            session_id=session_id,
            target_path=target_path,
            description="Expression evaluated",
            details={"expression": expression, "result": result},
        )

    @staticmethod
    def evaluation_failed(
        session_id: UUID,
        target_path: str,
        expression: str,
        error: str,
    ) -> SessionEvent:
        return SessionEvent(
            event_type=SessionEventType.EVALUATION_FAILED,
            severity=SessionSeverity.WARNING,
            session_id=session_id,
            target_path=target_path,
            description=f"Evaluation failed: {error}",
            details={"expression": expression, "error": error},
        )

    @staticmethod
    def value_committed(session_id: UUID, target_path: str, value: str) -> SessionEvent:
        return SessionEvent(
            event_type=SessionEventType.VALUE_COMMITTED,
            session_id=session_id,
            target_path=target_path,
            description=f"Committed {value} to {target_path}",
            details={"value": value},
        )

    @staticmethod
    def confirm_blocked(session_id: UUID, target_path: str, error: str) -> SessionEvent:
        return SessionEvent(
            event_type=SessionEventType.CONFIRM_BLOCKED,
            severity=SessionSeverity.WARNING,
            session_id=session_id,
            target_path=target_path,
            description=f"Confirm blocked: {error}",
            details={"error": error},
        )

    @staticmethod
    def session_cancelled(session_id: UUID, target_path: str) -> SessionEvent:
        return SessionEvent(
            event_type=SessionEventType.SESSION_CANCELLED,
            session_id=session_id,
            target_path=target_path,
            description="Calculator cancelled",
        )
