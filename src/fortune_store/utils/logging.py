"""Structured logging framework using structlog.

This module provides centralized logging configuration with:
- ISO-8601 timestamps
- JSON rendering for structured logs (console rendering in dev mode)
- Automatic sanitization of sensitive fields and connection strings
- Context binding support

Configuration is read from the environment at import time:
- LOG_LEVEL: Set log level (DEBUG, INFO, WARNING, ERROR, CRITICAL). Default: INFO
- LOG_DEV_MODE: Render human-readable console output (1, true, yes)

Processes that load ``fortune_store.config.Settings`` call
``configure_logging`` again with the validated values.

Usage:
    >>> from fortune_store.utils.logging import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("database.opened", host="localhost", name="fortune_db")
"""

import logging
import os
import re
import sys
from typing import Any, Dict, MutableMapping

import structlog
from structlog.types import EventDict, Processor

from fortune_store.utils.redaction import redact_password

# Sensitive key patterns for sanitization
SENSITIVE_PATTERNS = [
    re.compile(r".*password.*", re.IGNORECASE),
    re.compile(r".*token.*", re.IGNORECASE),
    re.compile(r".*api_key.*", re.IGNORECASE),
    re.compile(r".*secret.*", re.IGNORECASE),
]

# Keys whose values are connection strings: passwords inside are masked.
CONNECTION_STRING_PATTERNS = [
    re.compile(r".*dsn.*", re.IGNORECASE),
    re.compile(r".*url.*", re.IGNORECASE),
]

REDACTED_VALUE = "[REDACTED]"


def sanitize_for_logging(data: Dict[str, Any]) -> Dict[str, Any]:
    """Redact sensitive values from a dictionary before logging.

    Keys matching password, token, api_key or secret are replaced entirely;
    values of dsn/url keys keep their shape with the password masked.

    Example:
        >>> sanitize_for_logging({"password": "secret123", "user": "admin"})
        {'password': '[REDACTED]', 'user': 'admin'}
        >>> sanitize_for_logging({"dsn": "root:example@tcp(db:3306)/fortune"})
        {'dsn': 'root:REDACTED@tcp(db:3306)/fortune'}
    """
    sanitized: Dict[str, Any] = {}
    for key, value in data.items():
        if any(pattern.match(key) for pattern in SENSITIVE_PATTERNS):
            sanitized[key] = REDACTED_VALUE
        elif isinstance(value, dict):
            sanitized[key] = sanitize_for_logging(value)
        elif isinstance(value, str) and any(
            pattern.match(key) for pattern in CONNECTION_STRING_PATTERNS
        ):
            sanitized[key] = redact_password(value)
        else:
            sanitized[key] = value
    return sanitized


def sanitization_processor(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> MutableMapping[str, Any]:
    """Structlog processor that sanitizes sensitive fields in event_dict."""
    return sanitize_for_logging(dict(event_dict))


def _env_log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()


def _env_dev_mode() -> bool:
    return os.getenv("LOG_DEV_MODE", "").lower() in ("1", "true", "yes")


def configure_logging(level: str = "INFO", dev_mode: bool = False) -> None:
    """Configure stdlib logging and structlog.

    Sets up:
    - ISO-8601 timestamps
    - Logger name and log level
    - Sanitization processor
    - JSON renderer, or a console renderer when ``dev_mode`` is set
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)
    logging.basicConfig(
        format="%(message)s",
        level=numeric_level,
        handlers=[handler],
        force=True,
    )

    renderer: Processor
    if dev_mode:
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    processors: list[Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        sanitization_processor,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        renderer,
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


# Configure structlog on module import
configure_logging(_env_log_level(), _env_dev_mode())


def get_logger(name: str) -> Any:
    """Get a structlog BoundLogger instance.

    Args:
        name: Logger name (typically __name__ of the calling module)

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("pool.initialized", size=4)
    """
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> Any:
    """Create a logger with bound context fields.

    Example:
        >>> logger = bind_context(instance_id="frontend-7f9c", database="fortune_db")
        >>> logger.info("database.opened")
    """
    return structlog.get_logger().bind(**kwargs)
