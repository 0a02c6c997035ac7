"""Configuration contract for contextacl.

This module provides a Pydantic-validated configuration model for the
settings an embedding application may want to control: the default policy
seeded into a new ACL and how the library's logs are rendered.

Direct os.environ/os.getenv usage is limited to
``load_acl_config_from_env()``; everything else receives an ``AclConfig``.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class LogLevel(str, Enum):
    """Standard log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class DefaultPolicy(str, Enum):
    """Answer of the ``*::*`` tuple when nothing more specific matches.

    - DENY: whitelist mode, everything not granted is refused
    - ALLOW: blacklist mode, everything not denied is permitted
    """

    DENY = "deny"
    ALLOW = "allow"


class AclConfig(BaseModel):
    """Configuration for an ACL instance and its logging."""

    default_policy: DefaultPolicy = Field(
        default=DefaultPolicy.DENY,
        description="Seed for the *::* tuple: deny (whitelist) or allow (blacklist)",
    )

    # Logging
    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level used by setup_logging()",
    )
    log_json: bool = Field(
        default=False,
        description="Use JSON log format (default: plain text)",
    )

    service_name: Optional[str] = Field(
        default=None,
        description="Name of the embedding service, used as an extra logger name",
    )

    @field_validator("default_policy", mode="before")
    @classmethod
    def validate_default_policy(cls, v: str | DefaultPolicy) -> DefaultPolicy:
        """Accept the policy name in any case."""
        if isinstance(v, DefaultPolicy):
            return v
        if isinstance(v, str):
            try:
                return DefaultPolicy(v.strip().lower())
            except ValueError:
                raise ValueError(f"Invalid default policy: {v}. Must be one of {[p.value for p in DefaultPolicy]}")
        raise ValueError(f"Default policy must be string or DefaultPolicy enum, got {type(v)}")

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Convert string to LogLevel enum."""
        if isinstance(v, LogLevel):
            return v
        if isinstance(v, str):
            try:
                return LogLevel[v.upper()]
            except KeyError:
                raise ValueError(f"Invalid log level: {v}. Must be one of {[e.value for e in LogLevel]}")
        raise ValueError(f"Log level must be string or LogLevel enum, got {type(v)}")

    model_config = {
        "extra": "forbid",  # Prevent accidental extra fields
    }

    @property
    def default_allow(self) -> bool:
        return self.default_policy is DefaultPolicy.ALLOW


def load_acl_config_from_env() -> AclConfig:
    """Load configuration from environment variables.

    This is the ONLY place where os.getenv is allowed.

    Environment variables:
    - ACL_DEFAULT_POLICY: deny | allow (default: deny)
    - LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - LOG_JSON: Use JSON log format (true/false, default: false)
    - SERVICE_NAME: Name of the embedding service

    Returns:
        AclConfig instance with values from environment or defaults.
    """
    import os

    return AclConfig(
        default_policy=os.getenv("ACL_DEFAULT_POLICY", "deny"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_json=os.getenv("LOG_JSON", "false").lower() in ("true", "1", "yes"),
        service_name=os.getenv("SERVICE_NAME"),
    )


__all__ = [
    "AclConfig",
    "DefaultPolicy",
    "LogLevel",
    "load_acl_config_from_env",
]
