"""Unified exception hierarchy for contextacl.

All errors inherit from ContextAclError. This module provides:
- Base exception hierarchy with stable error codes
- ErrorRegistry for mapping codes back to exception classes

Usage:
    from contextacl.exceptions import (
        ContextAclError,
        DuplicateEntryError,
        EntryNotFoundError,
        NonEmptyError,
    )

Callers translating errors across their own protocol boundary can look up
classes by code:
    error_cls = error_registry.get("ENTRY_NOT_FOUND")
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar, cast

__all__ = [
    # Base hierarchy
    "ContextAclError",
    "DuplicateEntryError",
    "EntryNotFoundError",
    "NonEmptyError",
    "InvalidActionError",
    "InvalidEntryError",
    # Registry
    "ErrorRegistry",
    "error_registry",
    "register_error",
]


# ---- Exception Hierarchy ----------------------------------------------------


class ContextAclError(Exception):
    """Base exception for the ACL engine.

    Attributes:
        code: Stable error code string for protocol mapping (e.g. "ENTRY_NOT_FOUND").
        message: Human-readable error description.
        details: Additional context as keyword arguments.
    """

    code: str = "INTERNAL_ERROR"
    message: str = "An internal error occurred"

    def __init__(self, message: str | None = None, code: str | None = None, **kwargs: Any) -> None:
        self.message = message or self.message
        self.code = code or self.code
        self.details = kwargs
        super().__init__(self.message)


class DuplicateEntryError(ContextAclError):
    """Entry is already in the registry."""

    code: str = "DUPLICATE_ENTRY"
    message: str = "Entry is already in the registry"


class EntryNotFoundError(ContextAclError):
    """Registry entry, permission tuple or action is missing."""

    code: str = "ENTRY_NOT_FOUND"
    message: str = "Entry not found"


class NonEmptyError(ContextAclError):
    """Import target is not empty."""

    code: str = "NON_EMPTY"
    message: str = "Target is not empty"


class InvalidActionError(ContextAclError, ValueError):
    """Unknown action kind passed by the caller."""

    code: str = "INVALID_ACTION"
    message: str = "Invalid action"


class InvalidEntryError(ContextAclError, TypeError):
    """Value cannot be used as a role or resource identifier."""

    code: str = "INVALID_ENTRY"
    message: str = "Invalid entry"


# ---- Error Registry for Protocol Mapping ------------------------------------

_E = TypeVar("_E", bound=type[ContextAclError])


class ErrorRegistry:
    """Registry for mapping error codes to exception classes."""

    def __init__(self) -> None:
        self._errors: dict[str, type[ContextAclError]] = {}

    def register(self, code: str, error_cls: type[ContextAclError]) -> None:
        self._errors[code] = error_cls

    def get(self, code: str) -> type[ContextAclError] | None:
        return self._errors.get(code)

    def all(self) -> dict[str, type[ContextAclError]]:
        return dict(self._errors)


error_registry = ErrorRegistry()


def register_error(code: str) -> Callable[[_E], _E]:
    """Decorator to register a custom error type.

    Usage:
        @register_error("POLICY_LOCKED")
        class PolicyLockedError(ContextAclError):
            code = "POLICY_LOCKED"
    """

    def decorator(cls: _E) -> _E:
        error_registry.register(code, cls)
        return cls

    return cast(Callable[[_E], _E], decorator)


# Register base errors
error_registry.register("INTERNAL_ERROR", ContextAclError)
error_registry.register("DUPLICATE_ENTRY", DuplicateEntryError)
error_registry.register("ENTRY_NOT_FOUND", EntryNotFoundError)
error_registry.register("NON_EMPTY", NonEmptyError)
error_registry.register("INVALID_ACTION", InvalidActionError)
error_registry.register("INVALID_ENTRY", InvalidEntryError)
