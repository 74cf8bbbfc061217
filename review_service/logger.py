"""
Structured logging for review_service.

JSON logs for production, readable lines for development.

Usage:
    from review_service.logger import logger

    logger.set_context(host="my_app")
    logger.info("Review requested", request_count=2)
    logger.event("review_requested", request_count=2)

The orchestrator accepts any object with the same methods; NullLogger is the
no-op sink used when the host does not inject one.
"""

import logging
import json
import os
import traceback
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from review_service.settings import get_settings


# Context-local extra fields, isolated between concurrent tasks
_extra_context_var: ContextVar[Optional[Dict[str, Any]]] = ContextVar('review_extra_context', default=None)


class StructuredLogger:
    """
    Structured logger with JSON and readable output.

    Features:
    - JSON format for production (LOG_FORMAT=json)
    - Readable format for development (default)
    - Keyword arguments become structured fields
    - event() for business events
    """

    def __init__(self, name: str):
        self.name = name
        self.logger = logging.getLogger(name)

        # Configure only once per underlying logger
        if not self.logger.handlers:
            self._setup_logger()

    def _setup_logger(self) -> None:
        """Configure level, handler and formatter from settings and environment"""
        level_name = get_settings().get_nested("logging.level", "INFO")
        level = getattr(logging, str(level_name).upper(), logging.INFO)
        self.logger.setLevel(level)

        handler = logging.StreamHandler()
        handler.setLevel(level)

        if self._should_use_json():
            formatter = logging.Formatter("%(message)s")
        else:
            formatter = logging.Formatter(
                "[%(asctime)s] %(levelname)s - %(message)s",
                datefmt="%H:%M:%S"
            )

        handler.setFormatter(formatter)
        self.logger.addHandler(handler)

        # Avoid duplicated records through the root logger
        self.logger.propagate = False

    @property
    def _extra_context(self) -> Dict[str, Any]:
        """Context-local extra fields"""
        ctx = _extra_context_var.get()
        if ctx is None:
            ctx = {}
            _extra_context_var.set(ctx)
        return ctx

    def set_context(self, **kwargs: Any) -> None:
        """Set extra fields attached to every record (context-local)"""
        ctx = dict(self._extra_context)
        ctx.update(kwargs)
        _extra_context_var.set(ctx)

    def clear_context(self) -> None:
        """Clear extra fields"""
        _extra_context_var.set({})

    def _format_structured(self, level: str, message: str, **kwargs: Any) -> Dict[str, Any]:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": level,
            "logger": self.name,
            "message": message,
        }

        if self._extra_context:
            log_entry.update(self._extra_context)

        if kwargs:
            log_entry.update(kwargs)

        return log_entry

    def _should_use_json(self) -> bool:
        return os.environ.get("LOG_FORMAT", "readable") == "json"

    def _readable(self, message: str, **kwargs: Any) -> str:
        fields = dict(self._extra_context)
        fields.update(kwargs)
        if not fields:
            return message
        extras = ", ".join(f"{k}={v}" for k, v in fields.items())
        return f"{message} [{extras}]"

    def _log(self, level: str, message: str, log_method, **kwargs: Any) -> None:
        if self._should_use_json():
            structured = self._format_structured(level, message, **kwargs)
            log_method(json.dumps(structured, ensure_ascii=False, default=str))
        else:
            log_method(self._readable(message, **kwargs))

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message"""
        self._log("DEBUG", message, self.logger.debug, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """Log info message"""
        self._log("INFO", message, self.logger.info, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message"""
        self._log("WARNING", message, self.logger.warning, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        """Log error message"""
        self._log("ERROR", message, self.logger.error, **kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log error message with the current traceback"""
        if self._should_use_json():
            kwargs["traceback"] = traceback.format_exc()
            structured = self._format_structured("ERROR", message, **kwargs)
            self.logger.error(json.dumps(structured, ensure_ascii=False, default=str))
        else:
            self.logger.exception(self._readable(message, **kwargs))

    def event(self, event_type: str, **kwargs: Any) -> None:
        """
        Log a business event.

        Example:
            logger.event("review_requested", request_count=1)
        """
        self._log("EVENT", event_type, self.logger.info, **kwargs)


class NullLogger:
    """Logger with the StructuredLogger surface that discards everything."""

    name = "null"

    def set_context(self, **kwargs: Any) -> None:
        pass

    def clear_context(self) -> None:
        pass

    def debug(self, message: str, **kwargs: Any) -> None:
        pass

    def info(self, message: str, **kwargs: Any) -> None:
        pass

    def warning(self, message: str, **kwargs: Any) -> None:
        pass

    def error(self, message: str, **kwargs: Any) -> None:
        pass

    def exception(self, message: str, **kwargs: Any) -> None:
        pass

    def event(self, event_type: str, **kwargs: Any) -> None:
        pass


# Package-wide logger instance
logger = StructuredLogger("review_service")


def create_test_logger(name: str = "test") -> StructuredLogger:
    """Create an isolated logger for tests"""
    return StructuredLogger(f"review_service.{name}")
