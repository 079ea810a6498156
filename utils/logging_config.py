"""
Logging setup for the portal.

Records are written as JSON lines (one object per record) to a rotating
file, and to the console either as JSON or, in debug mode, as plain text.
Anything passed through ``extra=`` ends up under the record's "context" key.
"""

import json
import logging
import logging.handlers
import time
import traceback
from collections import Counter
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from config.app_config import AppConfig, get_config

APP_LOGGER_NAME = "suporte_offshore"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5

# Attributes every LogRecord carries; anything else came from ``extra=``
_RECORD_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime", "taskName"}

# Third-party loggers used by the Supabase client and requests
_NOISY_LOGGERS = ("httpx", "httpcore", "hpack", "urllib3")


class StructuredFormatter(logging.Formatter):
    """Render a record as a single JSON object"""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "where": f"{record.module}.{record.funcName}:{record.lineno}",
        }

        context = {k: v for k, v in vars(record).items() if k not in _RECORD_ATTRS}
        if context:
            entry["context"] = context

        if record.exc_info and record.exc_info[0] is not None:
            error_type, error, tb = record.exc_info
            entry["error"] = {
                "type": error_type.__name__,
                "detail": str(error),
                "stack": "".join(traceback.format_exception(error_type, error, tb)),
            }

        return json.dumps(entry, ensure_ascii=False, default=str)


def _console_handler(config: AppConfig) -> logging.Handler:
    handler = logging.StreamHandler()
    if config.debug:
        handler.setFormatter(logging.Formatter(config.logging.format))
    else:
        handler.setFormatter(StructuredFormatter())
    return handler


def _file_handler(config: AppConfig) -> logging.Handler:
    path = Path(config.logging.log_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        path, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUPS, encoding="utf-8"
    )
    handler.setFormatter(StructuredFormatter())
    return handler


def setup_logging(config: Optional[AppConfig] = None) -> logging.Logger:
    """
    Install the console and file handlers on the root logger

    Returns:
        logging.Logger: the root logger
    """
    config = config or get_config()

    root = logging.getLogger()
    root.setLevel(config.logging.level)
    root.handlers.clear()
    root.addHandler(_console_handler(config))
    if config.logging.enable_file_logging:
        root.addHandler(_file_handler(config))

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


@contextmanager
def log_execution_time(logger: logging.Logger, operation: str, **context):
    """
    Time the wrapped block; log its outcome and duration, re-raising failures

    Args:
        logger: Logger instance
        operation: Short operation name, e.g. "reply_webhook_request"
        **context: Fields added to both the start and the outcome records
    """
    started = time.perf_counter()
    logger.debug(f"{operation} started", extra={"operation": operation, **context})

    def elapsed_ms() -> float:
        return round((time.perf_counter() - started) * 1000, 1)

    try:
        yield
    except Exception as e:
        logger.error(f"{operation} failed: {e}", extra={
            "operation": operation,
            "status": "error",
            "duration_ms": elapsed_ms(),
            "error_type": type(e).__name__,
            **context,
        })
        raise

    logger.info(f"{operation} finished", extra={
        "operation": operation,
        "status": "success",
        "duration_ms": elapsed_ms(),
        **context,
    })


def log_user_interaction(logger: logging.Logger, interaction_type: str, **details):
    """Record something the user did (login, message_submitted, ...)"""
    logger.info(f"user: {interaction_type}", extra={
        "event_type": "user_interaction",
        "interaction_type": interaction_type,
        **details,
    })


def log_conversation_event(logger: logging.Logger, event_type: str, conversation_id: Optional[str], **details):
    """Record a persistence event on a conversation (created, message_saved, deleted)"""
    logger.info(f"conversation {conversation_id}: {event_type}", extra={
        "event_type": "conversation_event",
        "conversation_event_type": event_type,
        "conversation_id": conversation_id,
        **details,
    })


class ErrorTracker:
    """
    Logs unexpected errors and counts them by type and context
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self.counts: Counter = Counter()

    def track_error(self, error: Exception, context: str = "", **extra_info):
        """
        Log ``error`` with its traceback and bump its counter

        Args:
            error: The exception being reported
            context: Where it happened, e.g. "supabase_client_initialization"
            **extra_info: Additional fields for the log record
        """
        key = f"{type(error).__name__}:{context}"
        self.counts[key] += 1
        self.logger.error(f"{context or 'unhandled'}: {error}", extra={
            "event_type": "error",
            "error_type": type(error).__name__,
            "context": context,
            "occurrences": self.counts[key],
            **extra_info,
        }, exc_info=error)

    def get_error_summary(self) -> Dict[str, Any]:
        return {
            "total_errors": sum(self.counts.values()),
            "unique_errors": len(self.counts),
            "error_breakdown": dict(self.counts),
            "most_common": self.counts.most_common(1)[0][0] if self.counts else None,
        }


_logging_ready = False
_error_tracker: Optional[ErrorTracker] = None


def initialize_logging() -> ErrorTracker:
    """Configure logging once per process and return the shared error tracker"""
    global _logging_ready, _error_tracker

    if not _logging_ready:
        setup_logging()
        _logging_ready = True
    if _error_tracker is None:
        _error_tracker = ErrorTracker(logging.getLogger(APP_LOGGER_NAME))
    return _error_tracker


def get_error_tracker() -> ErrorTracker:
    return _error_tracker or initialize_logging()
