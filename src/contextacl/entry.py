"""Entry identity primitives.

Anything managed as a role or resource only needs a stable string ``id``.
The public API accepts either a raw id string or an object satisfying
:class:`AclEntry`; :func:`entry_id` normalizes both to the string used as
the internal key.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from .exceptions import InvalidEntryError
from .permissions.constants import WILDCARD


@runtime_checkable
class AclEntry(Protocol):
    """A role or resource: a unique ``id`` plus a human-readable description."""

    @property
    def id(self) -> str: ...

    @property
    def description(self) -> str: ...


@dataclass(frozen=True)
class SimpleEntry:
    """Plain role/resource entry for callers without their own model.

    Example::

        warriors = SimpleEntry("warriors", "All fighters")
        acl.add_role(warriors)
        acl.add_role(SimpleEntry("gimli"), parent=warriors)
    """

    id: str
    description: str = ""

    def __str__(self) -> str:
        return self.description or self.id


@dataclass(frozen=True)
class RootEntry:
    """The implicit root shared by every hierarchy (``*``)."""

    id: str = WILDCARD
    description: str = "ROOT"


def entry_id(value: str | AclEntry | None) -> str | None:
    """Normalize a role/resource argument to its string identifier.

    Args:
        value: ``None`` (wildcard), an id string, or an object exposing a
            string ``id`` attribute.

    Returns:
        The identifier, or ``None`` for the wildcard. Empty strings are
        treated as the wildcard as well.

    Raises:
        InvalidEntryError: If ``value`` is none of the accepted shapes.
    """
    if value is None:
        return None
    if isinstance(value, str):
        return value or None

    ident = getattr(value, "id", None)
    if isinstance(ident, str):
        return ident or None
    raise InvalidEntryError(
        f"Invalid entry type {type(value).__name__}: expected a string or an object with a string 'id'",
        value=repr(value),
    )


def describe(value: str | AclEntry) -> str:
    """Human-readable label of an entry (its description, else its id)."""
    if isinstance(value, str):
        return value
    return getattr(value, "description", "") or entry_id(value) or WILDCARD


__all__ = [
    "AclEntry",
    "RootEntry",
    "SimpleEntry",
    "describe",
    "entry_id",
]
