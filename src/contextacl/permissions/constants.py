"""Permission constants for the ACL engine.

Provides:
- ``Action``: action kinds a grant can be scoped to.
- ``Decision``: tri-state answer of a single permission lookup.
- ``WILDCARD`` / ``DEFAULT_KEY``: reserved identifiers of the implicit root.
"""

from __future__ import annotations

from enum import Enum

from ..exceptions import InvalidActionError

# ── Reserved identifiers ────────────────────────────────
# ``*`` is the implicit root of both hierarchies and the wildcard
# component of a permission key.

WILDCARD = "*"
KEY_SEPARATOR = "::"
DEFAULT_KEY = f"{WILDCARD}{KEY_SEPARATOR}{WILDCARD}"


class Action(str, Enum):
    """Action kinds a permission can be granted or denied on.

    ``ALL`` covers the four specific actions unless one of them is
    recorded separately on the same tuple, in which case the specific
    entry wins for that action.
    """

    ALL = "ALL"
    CREATE = "CREATE"
    READ = "READ"
    UPDATE = "UPDATE"
    DELETE = "DELETE"

    @classmethod
    def parse(cls, value: str | Action) -> Action:
        """Convert a string (any case) or ``Action`` to ``Action``.

        Raises:
            InvalidActionError: If the value names no known action.
        """
        if isinstance(value, Action):
            return value
        if isinstance(value, str):
            try:
                return cls[value.upper()]
            except KeyError:
                pass
        raise InvalidActionError(
            f"Invalid action: {value!r}. Must be one of {[a.value for a in cls]}",
            action=value,
        )

    @classmethod
    def specific(cls) -> tuple[Action, ...]:
        """The four concrete actions, i.e. everything except ``ALL``."""
        return (cls.CREATE, cls.READ, cls.UPDATE, cls.DELETE)


class Decision(str, Enum):
    """Outcome of a permission lookup at one role/resource tuple.

    ``UNSPECIFIED`` tells the resolver to keep searching the ancestors.
    """

    ALLOWED = "allowed"
    DENIED = "denied"
    UNSPECIFIED = "unspecified"

    @property
    def is_definitive(self) -> bool:
        return self is not Decision.UNSPECIFIED

    @classmethod
    def from_flag(cls, allowed: bool) -> Decision:
        return cls.ALLOWED if allowed else cls.DENIED


__all__ = [
    "DEFAULT_KEY",
    "KEY_SEPARATOR",
    "WILDCARD",
    "Action",
    "Decision",
]
