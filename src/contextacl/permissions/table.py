"""Permission table: tri-state grants per role/resource tuple.

The table maps ``"<role>::<resource>"`` keys to a per-action map of
``action → bool`` (``True`` = explicit grant, ``False`` = explicit deny).
An action missing from the map is unspecified for that tuple.

Per-action maps are never mutated in place: every write builds a new map
and stores it under the key in one assignment, so concurrent readers see
either the old or the new map. Bulk removals scan a snapshot of the keys
and may undercount when other writers race them.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from ..exceptions import EntryNotFoundError
from .constants import DEFAULT_KEY, KEY_SEPARATOR, WILDCARD, Action, Decision

logger = logging.getLogger(__name__)

ActionMap = dict[str, bool]


def make_key(role: str | None, resource: str | None) -> str:
    """Build the tuple key; ``None`` or empty components become ``*``.

    A real entry literally named ``*`` is indistinguishable from the
    wildcard, which is why registries refuse to register it.
    """
    return f"{role or WILDCARD}{KEY_SEPARATOR}{resource or WILDCARD}"


def split_key(key: str) -> tuple[str, str]:
    """Inverse of :func:`make_key`."""
    role, _, resource = key.partition(KEY_SEPARATOR)
    return role, resource


class PermissionTable:
    """Stores and evaluates grants keyed by (role, resource, action).

    Args:
        default_allow: Seed ``*::*`` with a blanket grant instead of the
            usual blanket deny.

    Example::

        table = PermissionTable()
        table.allow("warriors", "weapons")
        table.deny("gimli", "weapons", Action.DELETE)
        table.is_allowed("gimli", "weapons", Action.DELETE)  # Decision.DENIED
        table.is_allowed("gimli", "armour")                  # Decision.UNSPECIFIED
    """

    __slots__ = ("_permissions",)

    def __init__(self, default_allow: bool = False) -> None:
        self._permissions: dict[str, ActionMap] = {}
        if default_allow:
            self.make_default_allow()
        else:
            self.make_default_deny()

    def __repr__(self) -> str:
        return f"PermissionTable(size={len(self._permissions)})"

    def __len__(self) -> int:
        return len(self._permissions)

    # ── Grants ──────────────────────────────────────────

    def allow(self, role: str | None, resource: str | None, action: Action | None = None) -> None:
        """Grant ``action`` (or everything) on ``resource`` to ``role``.

        Without an action the tuple is overwritten with ``{ALL: True}``,
        discarding per-action overrides. With an action the grant is merged
        into whatever the tuple already records.
        """
        self._set(role, resource, action, True)

    def deny(self, role: str | None, resource: str | None, action: Action | None = None) -> None:
        """Deny ``action`` (or everything) on ``resource`` to ``role``.

        Mirror of :meth:`allow`.
        """
        self._set(role, resource, action, False)

    def make_default_allow(self) -> None:
        self._permissions[DEFAULT_KEY] = {Action.ALL.value: True}

    def make_default_deny(self) -> None:
        self._permissions[DEFAULT_KEY] = {Action.ALL.value: False}

    def _set(self, role: str | None, resource: str | None, action: Action | None, allowed: bool) -> None:
        key = make_key(role, resource)

        if action is None:
            self._permissions[key] = {Action.ALL.value: allowed}
        else:
            updated = dict(self._permissions.get(key) or {})
            updated[action.value] = allowed
            self._permissions[key] = updated

        logger.debug(
            "%s %s on %s",
            "Allowed" if allowed else "Denied",
            action.value if action else Action.ALL.value,
            key,
        )

    # ── Evaluation ──────────────────────────────────────

    def is_allowed(self, role: str | None, resource: str | None, action: Action | None = None) -> Decision:
        """Tri-state grant check at exactly this tuple.

        Without an action (or with ``Action.ALL``) the tuple counts as
        allowed only if nothing in it is denied and either ``ALL`` or all
        four specific actions are granted. A single explicit deny on any
        action makes the whole tuple ``DENIED``.

        With a specific action the recorded value of that action wins,
        then ``ALL``, else ``UNSPECIFIED``.
        """
        perm = self._permissions.get(make_key(role, resource))
        if perm is None:
            return Decision.UNSPECIFIED

        if action is None or action is Action.ALL:
            return _aggregate(perm, Decision.DENIED, Decision.ALLOWED)

        return _lookup(perm, action)

    def is_denied(self, role: str | None, resource: str | None, action: Action | None = None) -> Decision:
        """Tri-state deny check at exactly this tuple.

        Structural mirror of :meth:`is_allowed`: any explicit grant makes
        the aggregate check ``ALLOWED`` (i.e. not denied), and ``DENIED``
        requires ``ALL`` or all four specific actions to be denied.
        """
        perm = self._permissions.get(make_key(role, resource))
        if perm is None:
            return Decision.UNSPECIFIED

        if action is None or action is Action.ALL:
            return _aggregate(perm, Decision.ALLOWED, Decision.DENIED)

        return _lookup(perm, action)

    # ── Removal ─────────────────────────────────────────

    def remove(self, role: str | None, resource: str | None, action: Action | None = None) -> None:
        """Remove the whole tuple, or a single action from it.

        Removing a specific action from a tuple that only records ``ALL``
        expands ``ALL`` into the other three specific actions first, so the
        remaining actions keep their meaning. A tuple left empty is dropped.

        Raises:
            EntryNotFoundError: The tuple, or the action within it, is not
                recorded.
        """
        key = make_key(role, resource)
        perm = self._permissions.get(key)
        if perm is None:
            raise EntryNotFoundError(
                f"Permission '{key}' not found on '{resource or WILDCARD}' for '{role or WILDCARD}'.",
                key=key,
            )

        if action is None:
            self._permissions.pop(key, None)
            logger.debug("Removed permission %s", key)
            return

        updated = dict(perm)
        if action.value in updated:
            del updated[action.value]
        elif Action.ALL.value in updated and action is not Action.ALL:
            original = updated.pop(Action.ALL.value)
            for other in Action.specific():
                if other is not action:
                    updated[other.value] = original
        else:
            raise EntryNotFoundError(
                f"Permission '{action.value}' not found on '{resource or WILDCARD}' for '{role or WILDCARD}'.",
                key=key,
                action=action.value,
            )

        if updated:
            self._permissions[key] = updated
        else:
            self._permissions.pop(key, None)
        logger.debug("Removed %s from permission %s", action.value, key)

    def remove_by_resource(self, resource_id: str) -> int:
        """Drop every tuple on ``resource_id``.

        Returns:
            Number of tuples this call removed. Best effort: tuples removed
            concurrently by someone else are not counted.
        """
        suffix = f"{KEY_SEPARATOR}{resource_id}"
        return self._remove_keys([key for key in list(self._permissions) if key.endswith(suffix)])

    def remove_by_role(self, role_id: str) -> int:
        """Drop every tuple held by ``role_id``. Best effort, as above."""
        prefix = f"{role_id}{KEY_SEPARATOR}"
        return self._remove_keys([key for key in list(self._permissions) if key.startswith(prefix)])

    def _remove_keys(self, keys: list[str]) -> int:
        removed = 0
        for key in keys:
            if self._permissions.pop(key, None) is not None:
                removed += 1
        if removed:
            logger.debug("Removed %d permission tuple(s)", removed)
        return removed

    def clear(self) -> None:
        """Drop everything, including ``*::*``.

        Only meant as the reset preceding an import; re-seed with
        :meth:`make_default_deny` or :meth:`make_default_allow` otherwise.
        """
        self._permissions = {}

    # ── Queries ─────────────────────────────────────────

    def has(self, role: str | None, resource: str | None) -> bool:
        return make_key(role, resource) in self._permissions

    def get(self, role: str | None, resource: str | None) -> ActionMap | None:
        """Copy of the per-action map recorded for the tuple, if any."""
        perm = self._permissions.get(make_key(role, resource))
        return dict(perm) if perm is not None else None

    def size(self) -> int:
        return len(self._permissions)

    # ── Snapshots ───────────────────────────────────────

    def export(self) -> dict[str, ActionMap]:
        """Deep copy of the table; mutating it never affects the table."""
        return {key: dict(perm) for key, perm in list(self._permissions.items())}

    def import_map(self, mapping: Mapping[str, Mapping[str, bool]]) -> None:
        """Replace the whole table with ``mapping``.

        Action names are validated so a corrupt snapshot fails fast
        instead of silently never matching.
        """
        imported: dict[str, ActionMap] = {}
        for key, perm in mapping.items():
            imported[key] = {Action.parse(action).value: bool(allowed) for action, allowed in perm.items()}
        self._permissions = imported
        logger.debug("Imported %d permission tuple(s)", len(imported))

    def __str__(self) -> str:
        lines = [f"Size: {len(self._permissions)}\n-------\n"]
        for key, perm in sorted(self._permissions.items()):
            lines.append(f"- {key}\n")
            for action, allowed in perm.items():
                lines.append(f"\t{action}\t{str(allowed).lower()}\n")
        return "".join(lines)


def _aggregate(perm: ActionMap, on_conflict: Decision, on_complete: Decision) -> Decision:
    # ``on_conflict`` is returned as soon as one value disagrees with the
    # perspective being checked (a deny when checking grants, and vice versa).
    expected = on_complete is Decision.ALLOWED
    for value in perm.values():
        if value != expected:
            return on_conflict
    if Action.ALL.value in perm:
        return on_complete
    if all(action.value in perm for action in Action.specific()):
        return on_complete
    return Decision.UNSPECIFIED


def _lookup(perm: ActionMap, action: Action) -> Decision:
    if action.value in perm:
        value = perm[action.value]
    elif Action.ALL.value in perm:
        value = perm[Action.ALL.value]
    else:
        return Decision.UNSPECIFIED
    return Decision.from_flag(value)


__all__ = [
    "ActionMap",
    "PermissionTable",
    "make_key",
    "split_key",
]
