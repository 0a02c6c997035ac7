"""Centralized logging utilities for contextacl.

This module provides:
- Logging configuration from AclConfig
- Safe, length-bounded previews of identifiers
- Structured (JSON) or plain-text formatting with ACL context fields
- A logger adapter that lifts role/resource/action into log records

The library itself only calls ``logging.getLogger(__name__)``; handlers are
installed by the embedding application, optionally via ``setup_logging()``.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from .config import AclConfig, LogLevel

# Extra fields the formatter renders as ACL context.
CONTEXT_FIELDS = ("role", "resource", "action")

_STANDARD_ATTRS = {
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "message", "pathname", "process", "processName", "relativeCreated",
    "thread", "threadName", "exc_info", "exc_text", "stack_info",
    "taskName",
}


def safe_preview(value: Any, limit: int = 120) -> str:
    """Create a safe, length-bounded preview of a value for logging.

    Identifiers come from callers and may be arbitrarily long; this keeps
    log lines single-line and bounded.

    Args:
        value: The value to preview (any type)
        limit: Maximum length of the preview (default: 120)

    Returns:
        A truncated, whitespace-normalized string representation
    """
    if value is None:
        return ""

    if isinstance(value, str):
        s = value
    elif isinstance(value, (dict, list)):
        try:
            s = json.dumps(value, default=str, ensure_ascii=False)
        except (TypeError, ValueError):
            s = str(value)
    else:
        s = str(value)

    s = " ".join(s.split())

    if len(s) > limit:
        return s[: limit - 1] + "…"

    return s


class AclLogFormatter(logging.Formatter):
    """Formatter that renders ACL context fields.

    This formatter:
    - Extracts role, resource and action from log records (if available)
    - Formats logs as JSON for structured logging, or as plain text
    - Bounds the length of every extra field
    """

    def __init__(
        self,
        json_format: bool = True,
        *args: Any,
        **kwargs: Any,
    ):
        """Initialize the formatter.

        Args:
            json_format: Whether to output JSON (True) or plain text (False)
        """
        super().__init__(*args, **kwargs)
        self.json_format = json_format

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record."""
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = {
            field: safe_preview(getattr(record, field))
            for field in CONTEXT_FIELDS
            if getattr(record, field, None) is not None
        }
        log_data.update(context)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS and key not in CONTEXT_FIELDS:
                log_data[key] = safe_preview(value)

        if self.json_format:
            return json.dumps(log_data, default=str, ensure_ascii=False)

        parts = [
            f"[{log_data['timestamp']}]",
            f"{log_data['level']}",
            f"{log_data['logger']}",
        ]
        parts.extend(f"{field}={value}" for field, value in context.items())
        parts.append(f": {log_data['message']}")
        return " ".join(parts)


class AclLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds role/resource/action to log records.

    Usage:
        logger = get_acl_logger(__name__)
        logger.info("Removed role", role="gimli")
    """

    def __init__(
        self,
        logger: logging.Logger,
        role: Optional[str] = None,
        resource: Optional[str] = None,
    ):
        """Initialize the adapter.

        Args:
            logger: The underlying logger
            role: Optional role id to include in all logs
            resource: Optional resource id to include in all logs
        """
        super().__init__(logger, {})
        self.role = role
        self.resource = resource

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        """Move ACL context keyword arguments into ``extra``."""
        role = kwargs.pop("role", self.role)
        resource = kwargs.pop("resource", self.resource)
        action = kwargs.pop("action", None)

        extra = kwargs.get("extra", {})
        if role is not None:
            extra["role"] = role
        if resource is not None:
            extra["resource"] = resource
        if action is not None:
            extra["action"] = getattr(action, "value", action)
        kwargs["extra"] = extra

        return msg, kwargs


def setup_logging(
    config: Optional[AclConfig] = None,
    json_format: Optional[bool] = None,
) -> None:
    """Configure root logging for an application embedding contextacl.

    Args:
        config: AclConfig instance (if None, loads from environment)
        json_format: Override ``config.log_json``
    """
    if config is None:
        from .config import load_acl_config_from_env
        config = load_acl_config_from_env()

    level_map = {
        LogLevel.DEBUG: logging.DEBUG,
        LogLevel.INFO: logging.INFO,
        LogLevel.WARNING: logging.WARNING,
        LogLevel.ERROR: logging.ERROR,
        LogLevel.CRITICAL: logging.CRITICAL,
    }
    log_level = level_map.get(config.log_level, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(
        AclLogFormatter(json_format=config.log_json if json_format is None else json_format)
    )
    root_logger.addHandler(console_handler)

    logging.getLogger("contextacl").setLevel(log_level)
    if config.service_name:
        logging.getLogger(config.service_name).setLevel(log_level)


def get_acl_logger(
    name: str,
    role: Optional[str] = None,
    resource: Optional[str] = None,
) -> AclLoggerAdapter:
    """Get a logger adapter with ACL context support.

    Args:
        name: Logger name (typically __name__)
        role: Optional role id to include in all logs
        resource: Optional resource id to include in all logs

    Returns:
        AclLoggerAdapter instance
    """
    return AclLoggerAdapter(logging.getLogger(name), role=role, resource=resource)


__all__ = [
    "AclLogFormatter",
    "AclLoggerAdapter",
    "get_acl_logger",
    "safe_preview",
    "setup_logging",
]
