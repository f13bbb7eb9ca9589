"""
Centralized logging configuration with structured logging support.
"""
import json
import logging
import logging.config
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from satprep.core.config import settings

# Request ID for the current async request context. Set by
# RequestLoggingMiddleware and attached to every log entry emitted while the
# request is being handled.
request_id_context: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# Structured fields copied from LogRecord extras into the JSON entry
_EXTRA_FIELDS = (
    "method",
    "path",
    "status_code",
    "duration_ms",
    "client_host",
    "user_identifier",
    "error_id",
    "session_id",
    "section",
)


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for production logging.

    Produces structured log entries with consistent fields for log aggregation.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        log_entry: Dict[str, Any] = {
            "timestamp": timestamp.isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = request_id_context.get()
        if request_id:
            log_entry["request_id"] = request_id

        for field in _EXTRA_FIELDS:
            if hasattr(record, field):
                log_entry[field] = getattr(record, field)

        # Add source location for error-level logs
        if record.levelno >= logging.ERROR:
            log_entry["source"] = f"{record.pathname}:{record.lineno}"

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


# Third-party loggers held at WARNING
_QUIET_LOGGERS = ("sqlalchemy.engine", "httpx", "httpcore")


def _console_logger(level: int) -> Dict[str, Any]:
    return {"level": level, "handlers": ["console"], "propagate": False}


def build_logging_config(
    log_level: int, json_output: bool, verbose_access_log: bool
) -> Dict[str, Any]:
    """
    Build the dictConfig mapping used by ``setup_logging``.

    Args:
        log_level: Level for the root and ``satprep`` loggers
        json_output: Emit JSON lines instead of the plain text format
        verbose_access_log: Keep uvicorn's per-request access lines

    Returns:
        A ``logging.config.dictConfig`` mapping
    """
    loggers = {"satprep": _console_logger(log_level)}
    loggers["uvicorn.access"] = _console_logger(
        logging.INFO if verbose_access_log else logging.WARNING
    )
    loggers.update({name: _console_logger(logging.WARNING) for name in _QUIET_LOGGERS})

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "json": {"()": JSONFormatter},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": log_level,
                "formatter": "json" if json_output else "default",
                "stream": sys.stdout,
            },
        },
        "root": {"level": log_level, "handlers": ["console"]},
        "loggers": loggers,
    }


def setup_logging() -> None:
    """
    Configure logging from settings.

    Production emits JSON for log aggregation; every other environment gets
    the plain format. Uvicorn access lines are dropped below WARNING when
    DEBUG is on.
    """
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    logging.config.dictConfig(
        build_logging_config(
            log_level,
            json_output=settings.ENV == "production",
            verbose_access_log=not settings.DEBUG,
        )
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the given name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)
