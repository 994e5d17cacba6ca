"""Session logging package."""

from splitcalc.audit.logger import SessionLogger, configure_logging

__all__ = ["SessionLogger", "configure_logging"]
