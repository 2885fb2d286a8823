"""Structured logging for fast_insert, built on structlog.

Every event is rendered as one JSON object carrying an ISO-8601 timestamp,
the level and the logger name. Connection secrets never reach the output:
keys that look like passwords, tokens or connection URLs are redacted before
rendering.

Output goes to stderr and, when ``log_to_file`` is enabled, to a daily
rotated file ``fast-insert-YYYYMMDD.log`` under ``log_file_dir``. Both are
read from Settings (``LOG_LEVEL``, ``LOG_TO_FILE``, ``LOG_FILE_DIR``).

Usage:
    >>> from fast_insert.utils.logging import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("fast_insert.load.started", table="orders", batch_size=500)
"""

import logging
import os
import re
from datetime import date
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, List, MutableMapping, Optional

import structlog
from structlog.types import EventDict, Processor

from fast_insert.config import Settings, get_settings

SENSITIVE_PATTERNS = [
    re.compile(r".*(password|passwd|token|secret).*", re.IGNORECASE),
    re.compile(r"^(url|uri)$", re.IGNORECASE),
    re.compile(r".*_(url|uri)$", re.IGNORECASE),
]

REDACTED_VALUE = "[REDACTED]"

# Handlers installed by configure_logging, replaced on reconfiguration
_installed_handlers: List[logging.Handler] = []


def _sanitize_value(key: str, value: Any) -> Any:
    if any(pattern.match(key) for pattern in SENSITIVE_PATTERNS):
        return REDACTED_VALUE
    if isinstance(value, dict):
        return sanitize_for_logging(value)
    return value


def sanitize_for_logging(data: Dict[str, Any]) -> Dict[str, Any]:
    """Redact sensitive values from a dictionary before logging.

    Nested dictionaries are sanitized recursively.

    Example:
        >>> sanitize_for_logging({"mysql_password": "secret123", "user": "admin"})
        {'mysql_password': '[REDACTED]', 'user': 'admin'}
    """
    return {key: _sanitize_value(key, value) for key, value in data.items()}


def sanitization_processor(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> MutableMapping[str, Any]:
    return sanitize_for_logging(dict(event_dict))


def _resolve_settings(settings: Optional[Settings]) -> Optional[Settings]:
    if settings is not None:
        return settings
    try:
        return get_settings()
    except Exception:
        # A broken environment must not prevent logging from starting
        return None


def _log_level(settings: Optional[Settings]) -> int:
    name = settings.LOG_LEVEL if settings else os.getenv("LOG_LEVEL", "INFO")
    return getattr(logging, name.upper(), logging.INFO)


def log_file_path(directory: str, today: Optional[date] = None) -> Path:
    """Daily log file inside ``directory``, created on demand."""
    log_dir = Path(directory)
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / f"fast-insert-{(today or date.today()):%Y%m%d}.log"


def _build_handlers(settings: Optional[Settings], level: int) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if settings is not None and settings.log_to_file:
        handlers.append(
            TimedRotatingFileHandler(
                filename=str(log_file_path(settings.log_file_dir)),
                when="midnight",
                backupCount=30,
                encoding="utf-8",
            )
        )
    for handler in handlers:
        handler.setLevel(level)
    return handlers


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Route structlog through stdlib logging with JSON rendering.

    Safe to call again, e.g. after changing settings; handlers installed by a
    previous call are replaced.
    """
    settings = _resolve_settings(settings)
    level = _log_level(settings)

    root = logging.getLogger()
    for handler in _installed_handlers:
        root.removeHandler(handler)
        handler.close()
    _installed_handlers[:] = _build_handlers(settings, level)
    for handler in _installed_handlers:
        root.addHandler(handler)
    root.setLevel(level)

    processors: list[Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        sanitization_processor,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ]
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()


def get_logger(name: str) -> Any:
    """Get a structlog BoundLogger named ``name``."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> Any:
    """Create a logger with bound context fields.

    Example:
        >>> logger = bind_context(table="orders", execution_id="3f2a...")
        >>> logger.info("fast_insert.batch.loaded", batch=1, rows=500)
    """
    return structlog.get_logger().bind(**kwargs)
