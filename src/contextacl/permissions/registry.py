"""Hierarchy registry shared by roles and resources.

A registry is a forest stored as ``child id → parent id``. An empty parent
means the entry hangs directly under the implicit root ``*``. The ancestor
chain returned by :meth:`HierarchyRegistry.traverse_root` defines the search
order of permission resolution: self first, ancestors next, ``*`` last.

Single-key reads and writes are atomic dict operations. Structural
operations spanning several keys (cascade removal, reparenting) are not
snapshot-consistent under concurrent writers.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import Callable

from ..exceptions import DuplicateEntryError, EntryNotFoundError, InvalidEntryError
from .constants import WILDCARD

logger = logging.getLogger(__name__)

ROOT_PARENT = ""


class HierarchyRegistry:
    """Parent-pointer tree over role or resource identifiers.

    Args:
        name: Label used in log lines and error messages (``"role"``,
            ``"resource"``).

    Example::

        roles = HierarchyRegistry("role")
        roles.add("warriors")
        roles.add("gimli", "warriors")
        roles.traverse_root("gimli")  # ["gimli", "warriors", "*"]
    """

    __slots__ = ("name", "_registry")

    def __init__(self, name: str = "entry") -> None:
        self.name = name
        self._registry: dict[str, str] = {}

    def __repr__(self) -> str:
        return f"HierarchyRegistry(name={self.name!r}, size={len(self._registry)})"

    def __len__(self) -> int:
        return len(self._registry)

    def __contains__(self, entry_id: object) -> bool:
        return entry_id in self._registry

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._registry))

    # ── Mutation ────────────────────────────────────────

    def add(self, entry_id: str, parent_id: str | None = None) -> None:
        """Register ``entry_id``, optionally under ``parent_id``.

        Raises:
            DuplicateEntryError: ``entry_id`` is already registered.
            EntryNotFoundError: ``parent_id`` is given but not registered.
            InvalidEntryError: ``entry_id`` is empty or the reserved ``*``.
        """
        if not entry_id or entry_id == WILDCARD:
            raise InvalidEntryError(
                f"'{entry_id}' cannot be registered as a {self.name}",
                entry_id=entry_id,
            )
        if entry_id in self._registry:
            raise DuplicateEntryError(
                f"Entry '{entry_id}' is already in the {self.name} registry - cannot add duplicate.",
                entry_id=entry_id,
            )
        if parent_id and parent_id != WILDCARD:
            if parent_id not in self._registry:
                raise EntryNotFoundError(
                    f"Parent '{parent_id}' not in {self.name} registry.",
                    entry_id=parent_id,
                )
            self._registry[entry_id] = parent_id
        else:
            self._registry[entry_id] = ROOT_PARENT

        logger.debug("Added %s '%s' under '%s'", self.name, entry_id, parent_id or WILDCARD)

    def remove(self, entry_id: str, cascade: bool = False) -> list[str]:
        """Remove ``entry_id`` from the registry.

        Without ``cascade`` the direct children are reparented to the
        removed entry's own parent. With ``cascade`` the whole subtree goes.

        Returns:
            Every removed identifier, descendants first and ``entry_id``
            last, so dependent permissions can be cleaned up.

        Raises:
            EntryNotFoundError: ``entry_id`` is not registered.
        """
        if entry_id not in self._registry:
            raise EntryNotFoundError(
                f"Entry '{entry_id}' not in {self.name} registry.",
                entry_id=entry_id,
            )

        removed: list[str] = []
        children = self.children(entry_id)
        if children:
            if cascade:
                for descendant in self.descendants(entry_id):
                    if self._registry.pop(descendant, None) is not None:
                        removed.append(descendant)
            else:
                parent_id = self._registry.get(entry_id, ROOT_PARENT)
                for child_id in children:
                    self._registry[child_id] = parent_id

        self._registry.pop(entry_id, None)
        removed.append(entry_id)

        logger.info(
            "Removed %s '%s' (cascade=%s, removed=%d)",
            self.name,
            entry_id,
            cascade,
            len(removed),
        )
        return removed

    def clear(self) -> None:
        self._registry = {}

    # ── Queries ─────────────────────────────────────────

    def has(self, entry_id: str | None) -> bool:
        return entry_id is not None and entry_id in self._registry

    def has_child(self, parent_id: str) -> bool:
        """True if at least one entry hangs directly under ``parent_id``."""
        return any(parent == parent_id for parent in list(self._registry.values()))

    def parent(self, entry_id: str) -> str | None:
        """Parent of ``entry_id``; ``None`` when it hangs under the root."""
        if entry_id not in self._registry:
            raise EntryNotFoundError(
                f"Entry '{entry_id}' not in {self.name} registry.",
                entry_id=entry_id,
            )
        return self._registry[entry_id] or None

    def children(self, parent_id: str) -> list[str]:
        """Direct children of ``parent_id`` (``""`` for root-level entries)."""
        return [child for child, parent in list(self._registry.items()) if parent == parent_id]

    def descendants(self, entry_id: str) -> list[str]:
        """All entries below ``entry_id``, in breadth-first order."""
        found: list[str] = []
        seen = {entry_id}
        queue = [entry_id]

        while queue:
            current = queue.pop(0)
            for child in self.children(current):
                if child not in seen:
                    seen.add(child)
                    found.append(child)
                    queue.append(child)

        return found

    def traverse_root(self, entry_id: str | None) -> list[str]:
        """Ancestor chain from ``entry_id`` up to the implicit root.

        The chain starts with ``entry_id`` itself, follows parent links
        while they point at registered entries, and always ends with
        ``*``. An unregistered or ``None`` id yields ``["*"]``.

        Example::

            roles.traverse_root("gimli")  # ["gimli", "warriors", "*"]
            roles.traverse_root(None)     # ["*"]
        """
        path: list[str] = []
        if entry_id is None:
            path.append(WILDCARD)
            return path

        current = entry_id
        while current in self._registry:
            if current in path:
                logger.warning(
                    "Cycle detected in %s registry at '%s'; stopping traversal",
                    self.name,
                    current,
                )
                break
            path.append(current)
            current = self._registry.get(current, ROOT_PARENT)
        path.append(WILDCARD)

        return path

    def size(self) -> int:
        """Raw count of all entries, regardless of depth."""
        return len(self._registry)

    # ── Snapshots ───────────────────────────────────────

    def export(self) -> dict[str, str]:
        """Independent copy of the ``child → parent`` mapping."""
        return dict(self._registry)

    def import_registry(self, mapping: Mapping[str, str | None]) -> None:
        """Replace the whole hierarchy with ``mapping``.

        ``None`` parents are stored as root-level entries. Emptiness of the
        target is checked by the facade, not here.
        """
        self._registry = {child: parent or ROOT_PARENT for child, parent in mapping.items()}
        logger.debug("Imported %d %s entries", len(self._registry), self.name)

    # ── Display ─────────────────────────────────────────

    def display(
        self,
        describe: Callable[[str], str] | None = None,
        leading: str = "",
        entry_id: str = ROOT_PARENT,
    ) -> str:
        """Indented tree of the entries below ``entry_id``.

        Args:
            describe: Maps an id to the label to print. Defaults to the id.
            leading: Indentation prefix for the current depth.
            entry_id: Subtree root; ``""`` renders the whole forest.
        """
        lines: list[str] = []
        for child_id in sorted(self.children(entry_id)):
            label = describe(child_id) if describe else child_id
            lines.append(f"{leading}- {label}\n")
            lines.append(self.display(describe, " " + leading, child_id))
        return "".join(lines)

    def __str__(self) -> str:
        if not self._registry:
            return ""
        width = max(len(key) for key in self._registry)
        return "".join(
            f"\t{key.rjust(width)} - {parent or WILDCARD}\n" for key, parent in sorted(self._registry.items())
        )


def print_path(path: list[str]) -> str:
    """Render a traversal path, e.g. ``- -> gimli -> warriors -> * <``."""
    return "-" + "".join(f" -> {step}" for step in path) + " <"


__all__ = [
    "ROOT_PARENT",
    "HierarchyRegistry",
    "print_path",
]
