"""Structured logging utilities for health probes."""
import json
import logging
import uuid
from datetime import UTC, datetime
from typing import Any, Optional


class StructuredLogger:
    """
    Structured logger emitting one JSON document per record.

    Every entry carries a timestamp, level, message and correlation ID. Fields
    bound with ``bind`` (e.g. the health check name) are merged into the
    ``context`` of every entry.
    """

    def __init__(self, logger_name: str, **bound_context: Any):
        self.logger = logging.getLogger(logger_name)
        self._bound_context = bound_context
        self._correlation_id: Optional[str] = None

    def bind(self, **context: Any) -> "StructuredLogger":
        """Return a logger for the same name with additional bound context."""
        bound = StructuredLogger(self.logger.name, **{**self._bound_context, **context})
        bound._correlation_id = self._correlation_id
        return bound

    def set_correlation_id(self, correlation_id: str):
        """Set correlation ID for current context."""
        self._correlation_id = correlation_id

    def generate_correlation_id(self) -> str:
        """Generate new probe correlation ID."""
        return f"PROBE_{uuid.uuid4().hex[:12]}"

    def _format_message(self, level: str, message: str, **kwargs: Any) -> str:
        log_entry = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": level,
            "logger": self.logger.name,
            "message": message,
            "correlation_id": self._correlation_id or "none",
        }

        context = {**self._bound_context, **kwargs}
        if context:
            log_entry["context"] = context

        # Exceptions and enums are not JSON serializable
        return json.dumps(log_entry, default=str)

    def info(self, message: str, **kwargs: Any):
        self.logger.info(self._format_message("INFO", message, **kwargs))

    def warning(self, message: str, **kwargs: Any):
        self.logger.warning(self._format_message("WARNING", message, **kwargs))

    def error(self, message: str, **kwargs: Any):
        self.logger.error(self._format_message("ERROR", message, **kwargs))

    def debug(self, message: str, **kwargs: Any):
        self.logger.debug(self._format_message("DEBUG", message, **kwargs))


def get_structured_logger(name: str, **bound_context: Any) -> StructuredLogger:
    """Get a structured logger, optionally with bound context fields."""
    return StructuredLogger(name, **bound_context)
