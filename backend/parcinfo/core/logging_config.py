"""
ParcInfo - Logging

One "parcinfo" logger for the whole service. Records carry the current
request id and principal id; production writes JSON lines, every other
environment writes plain text.
"""

import json
import logging
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

from parcinfo.core.config import settings


request_id_var: ContextVar[str] = ContextVar('request_id', default='')
user_id_var: ContextVar[str] = ContextVar('user_id', default='')


def set_request_id(request_id: str) -> None:
    request_id_var.set(request_id)


def set_user_id(user_id: str) -> None:
    user_id_var.set(user_id)


def generate_request_id() -> str:
    """Short correlation id for requests that arrive without X-Request-ID"""
    return uuid.uuid4().hex[:8]


# LogRecord attributes that are not caller-supplied `extra` fields
_RECORD_ATTRIBUTES = set(vars(logging.makeLogRecord({}))) | {'message', 'taskName', 'request_id', 'user_id'}


class JSONFormatter(logging.Formatter):
    """One JSON object per line, with `extra` fields flattened in"""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        if request_id_var.get():
            entry["request_id"] = request_id_var.get()
        if user_id_var.get():
            entry["user_id"] = user_id_var.get()
        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)

        entry.update(
            (key, value) for key, value in vars(record).items()
            if key not in _RECORD_ATTRIBUTES and not key.startswith('_')
        )
        return json.dumps(entry, default=str)


class ContextualFormatter(logging.Formatter):
    """Plain-text formatter exposing %(request_id)s and %(user_id)s"""

    def format(self, record: logging.LogRecord) -> str:
        record.request_id = request_id_var.get() or '-'
        record.user_id = user_id_var.get() or '-'
        return super().format(record)


class ParcInfoLogger(logging.Logger):
    """Logger with the two structured events the service emits"""

    def log_auth_event(self, event: str, success: bool, username: Optional[str] = None,
                       reason: Optional[str] = None, **kwargs) -> None:
        """Login/logout/password events. Never pass passwords or tokens here."""
        parts = [f"Auth {event}: {'success' if success else 'failed'}"]
        if username:
            parts.append(username)
        if reason:
            parts.append(reason)
        self.log(
            logging.INFO if success else logging.WARNING,
            " - ".join(parts),
            extra={
                "event_type": "auth",
                "auth_event": event,
                "auth_success": success,
                "auth_username": username,
                "failure_reason": reason,
                **kwargs
            }
        )

    def log_error_with_context(self, error: Exception, context: Optional[str] = None,
                               **kwargs) -> None:
        self.error(
            f"Error in {context}: {type(error).__name__}: {error}",
            exc_info=error,
            extra={
                "event_type": "error",
                "error_type": type(error).__name__,
                "error_context": context,
                **kwargs
            }
        )


def _file_handler(formatter: logging.Formatter, backup_count: int) -> Optional[logging.Handler]:
    if not settings.LOG_FILE:
        return None
    path = Path(settings.LOG_FILE)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(path, maxBytes=10 * 1024 * 1024, backupCount=backup_count)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(formatter)
    return handler


def setup_logging() -> ParcInfoLogger:
    """(Re)configure the "parcinfo" logger from settings"""
    logging.setLoggerClass(ParcInfoLogger)
    logger = logging.getLogger("parcinfo")
    logger.__class__ = ParcInfoLogger
    logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    logger.handlers.clear()

    if settings.is_production:
        console_formatter = file_formatter = JSONFormatter()
        backup_count = 10
    else:
        console_formatter = ContextualFormatter("%(levelname)-8s | %(message)s")
        file_formatter = ContextualFormatter(
            "%(asctime)s | %(levelname)-8s | [%(request_id)s] [%(user_id)s] | "
            "%(funcName)s:%(lineno)d | %(message)s"
        )
        backup_count = 5

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(logging.INFO)
    console.setFormatter(console_formatter)
    logger.addHandler(console)

    file_handler = _file_handler(file_formatter, backup_count)
    if file_handler is not None:
        logger.addHandler(file_handler)

    for noisy in ("uvicorn.access", "sqlalchemy.engine", "aiosqlite"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logger.debug(f"Logging configured for {settings.ENVIRONMENT} (level {settings.LOG_LEVEL})")
    return logger


logger: ParcInfoLogger = setup_logging()


__all__ = [
    'logger',
    'setup_logging',
    'set_request_id',
    'set_user_id',
    'generate_request_id',
    'ParcInfoLogger',
]
