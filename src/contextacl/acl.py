"""Public facade for managing roles, resources and permissions.

``Acl`` wires a role registry, a resource registry and a permission table
together. It accepts raw id strings or any object with a string ``id``
everywhere an entry is expected; ``None`` stands for the wildcard ``*``
(all roles / all resources).

Example::

    acl = new_acl()
    acl.add_role("warriors")
    acl.add_role("gimli", parent="warriors")
    acl.add_resource("weapons")

    acl.allow("warriors", "weapons")
    acl.deny("gimli", "weapons", "DELETE")

    acl.is_allowed("gimli", "weapons", "CREATE")  # True
    acl.is_allowed("gimli", "weapons", "DELETE")  # False
    acl.is_allowed("gimli", "weapons")            # False (not every action)
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Callable, Optional

from .config import AclConfig
from .entry import AclEntry, entry_id
from .exceptions import DuplicateEntryError, InvalidEntryError, NonEmptyError
from .logging import get_acl_logger
from .permissions import (
    DEFAULT_KEY,
    WILDCARD,
    Action,
    ActionMap,
    Decision,
    HierarchyRegistry,
    PermissionTable,
    resolve_allowed,
    resolve_denied,
)

logger = get_acl_logger(__name__)

NON_EMPTY = "The {} registry is not empty - clear it before importing."


class Acl:
    """Hierarchical access control list.

    Args:
        permissions: Permission table; a default-deny one if omitted.
        resources: Resource registry; an empty one if omitted.
        roles: Role registry; an empty one if omitted.
        config: Configuration; only ``default_policy`` is read here.

    Instances share nothing; create one per independent ACL domain.
    """

    def __init__(
        self,
        permissions: Optional[PermissionTable] = None,
        resources: Optional[HierarchyRegistry] = None,
        roles: Optional[HierarchyRegistry] = None,
        config: Optional[AclConfig] = None,
    ) -> None:
        self.config = config or AclConfig()
        self.permissions = (
            permissions if permissions is not None else PermissionTable(default_allow=self.config.default_allow)
        )
        self.resources = resources if resources is not None else HierarchyRegistry("resource")
        self.roles = roles if roles is not None else HierarchyRegistry("role")

    def __repr__(self) -> str:
        return (
            f"Acl(roles={self.roles.size()}, resources={self.resources.size()}, "
            f"permissions={self.permissions.size()})"
        )

    # ── Registries ──────────────────────────────────────

    def add_role(self, role: str | AclEntry, parent: str | AclEntry | None = None) -> None:
        """Register a role, optionally under a registered parent role.

        Raises:
            DuplicateEntryError: The role is already registered.
            EntryNotFoundError: ``parent`` is not registered.
        """
        self.roles.add(_required_id(role, "role"), entry_id(parent))

    def add_resource(self, resource: str | AclEntry, parent: str | AclEntry | None = None) -> None:
        """Register a resource, optionally under a registered parent resource.

        Raises:
            DuplicateEntryError: The resource is already registered.
            EntryNotFoundError: ``parent`` is not registered.
        """
        self.resources.add(_required_id(resource, "resource"), entry_id(parent))

    def remove_role(self, role: str | AclEntry, cascade: bool = False) -> list[str]:
        """Remove a role and every permission held by the removed roles.

        With ``cascade`` all descendant roles (and their permissions) go
        too; otherwise the children are reparented and keep their own
        permissions.

        Returns:
            The removed role ids.
        """
        removed = self.roles.remove(_required_id(role, "role"), cascade)
        dropped = sum(self.permissions.remove_by_role(role_id) for role_id in removed)
        logger.info(
            "Removed %d role(s) and %d permission tuple(s)",
            len(removed),
            dropped,
            role=removed[-1],
        )
        return removed

    def remove_resource(self, resource: str | AclEntry, cascade: bool = False) -> list[str]:
        """Remove a resource and every permission on the removed resources.

        Mirror of :meth:`remove_role`.

        Returns:
            The removed resource ids.
        """
        removed = self.resources.remove(_required_id(resource, "resource"), cascade)
        dropped = sum(self.permissions.remove_by_resource(resource_id) for resource_id in removed)
        logger.info(
            "Removed %d resource(s) and %d permission tuple(s)",
            len(removed),
            dropped,
            resource=removed[-1],
        )
        return removed

    # ── Grants ──────────────────────────────────────────

    def allow(
        self,
        role: str | AclEntry | None,
        resource: str | AclEntry | None,
        action: str | Action | None = None,
    ) -> None:
        """Grant ``action`` (or everything) on ``resource`` to ``role``.

        Unknown roles and resources are registered at the root first.
        Without an action any per-action rule on the tuple is replaced.
        """
        role_id, resource_id, parsed = self._prepare(role, resource, action)
        self.permissions.allow(role_id, resource_id, parsed)

    def deny(
        self,
        role: str | AclEntry | None,
        resource: str | AclEntry | None,
        action: str | Action | None = None,
    ) -> None:
        """Deny ``action`` (or everything) on ``resource`` to ``role``.

        Mirror of :meth:`allow`.
        """
        role_id, resource_id, parsed = self._prepare(role, resource, action)
        self.permissions.deny(role_id, resource_id, parsed)

    def allow_all_resource(self, role: str | AclEntry) -> None:
        """Grant ``role`` everything on every resource."""
        self.allow(_required_id(role, "role"), None)

    def allow_all_role(self, resource: str | AclEntry) -> None:
        """Grant every role everything on ``resource``."""
        self.allow(None, _required_id(resource, "resource"))

    def deny_all_resource(self, role: str | AclEntry) -> None:
        """Deny ``role`` everything on every resource."""
        self.deny(_required_id(role, "role"), None)

    def deny_all_role(self, resource: str | AclEntry) -> None:
        """Deny every role everything on ``resource``."""
        self.deny(None, _required_id(resource, "resource"))

    def make_default_allow(self) -> None:
        self.permissions.make_default_allow()

    def make_default_deny(self) -> None:
        self.permissions.make_default_deny()

    def remove(
        self,
        role: str | AclEntry | None,
        resource: str | AclEntry | None,
        action: str | Action | None = None,
    ) -> None:
        """Remove the permission tuple, or one action from it.

        Removing the ``*::*`` tuple (or its last action) re-seeds the
        configured default; use :meth:`clear` for an empty table.

        Raises:
            EntryNotFoundError: Nothing is recorded for the tuple/action.
        """
        self.permissions.remove(entry_id(role), entry_id(resource), _parse_action(action))
        if not self.permissions.has(None, None):
            logger.warning("Default permission %s removed; restoring configured default", DEFAULT_KEY)
            self._seed_default()

    def _seed_default(self) -> None:
        if self.config.default_allow:
            self.permissions.make_default_allow()
        else:
            self.permissions.make_default_deny()

    def _prepare(
        self,
        role: str | AclEntry | None,
        resource: str | AclEntry | None,
        action: str | Action | None,
    ) -> tuple[Optional[str], Optional[str], Optional[Action]]:
        parsed = _parse_action(action)
        role_id = entry_id(role)
        resource_id = entry_id(resource)
        _ensure_registered(self.roles, role_id)
        _ensure_registered(self.resources, resource_id)
        return role_id, resource_id, parsed

    # ── Queries ─────────────────────────────────────────

    def check(
        self,
        role: str | AclEntry | None = None,
        resource: str | AclEntry | None = None,
        action: str | Action | None = None,
    ) -> Decision:
        """Tri-state answer of the grant scan, before defaulting to deny."""
        parsed = _parse_action(action)
        role_path, resource_path = self._paths(role, resource)
        return resolve_allowed(role_path, resource_path, self.permissions, parsed)

    def is_allowed(
        self,
        role: str | AclEntry | None = None,
        resource: str | AclEntry | None = None,
        action: str | Action | None = None,
    ) -> bool:
        """True if ``role`` may perform ``action`` (or everything) on ``resource``.

        Walks the role ancestors (outer) and the resource ancestors (inner),
        nearest first; the first tuple with a definitive answer decides.
        Nothing applicable means ``False``.
        """
        return self.check(role, resource, action) is Decision.ALLOWED

    def is_denied(
        self,
        role: str | AclEntry | None = None,
        resource: str | AclEntry | None = None,
        action: str | Action | None = None,
    ) -> bool:
        """True if ``role`` is explicitly denied ``action`` (or everything) on ``resource``.

        Same scan as :meth:`is_allowed` from the deny perspective. A tuple
        mixing grants and denies can make both methods return ``False``.
        """
        parsed = _parse_action(action)
        role_path, resource_path = self._paths(role, resource)
        return resolve_denied(role_path, resource_path, self.permissions, parsed) is Decision.DENIED

    def _paths(
        self,
        role: str | AclEntry | None,
        resource: str | AclEntry | None,
    ) -> tuple[list[str], list[str]]:
        return self.roles.traverse_root(entry_id(role)), self.resources.traverse_root(entry_id(resource))

    # ── Snapshots ───────────────────────────────────────

    def clear(self) -> None:
        """Empty the registries and the permission table.

        The ``*::*`` default is gone until an import or a
        ``make_default_*`` call; queries answer ``False`` meanwhile.
        """
        self.permissions.clear()
        self.resources.clear()
        self.roles.clear()
        logger.info("Cleared ACL")

    def export_permissions(self) -> dict[str, ActionMap]:
        return self.permissions.export()

    def export_resources(self) -> dict[str, str]:
        return self.resources.export()

    def export_roles(self) -> dict[str, str]:
        return self.roles.export()

    def import_permissions(self, permissions: Mapping[str, Mapping[str, bool]]) -> None:
        """Load a permission snapshot into an empty table.

        The configured default is re-seeded when the snapshot carries no
        ``*::*`` tuple.

        Raises:
            NonEmptyError: The table is not empty; call :meth:`clear` first.
        """
        if self.permissions.size() != 0:
            raise NonEmptyError(NON_EMPTY.format("permissions"), target="permissions")
        self.permissions.import_map(permissions)
        if DEFAULT_KEY not in permissions:
            self._seed_default()

    def import_resources(self, resources: Mapping[str, Optional[str]]) -> None:
        """Load a resource hierarchy snapshot into an empty registry.

        Raises:
            NonEmptyError: The resource registry is not empty.
        """
        if self.resources.size() != 0:
            raise NonEmptyError(NON_EMPTY.format("resources"), target="resources")
        self.resources.import_registry(resources)

    def import_roles(self, roles: Mapping[str, Optional[str]]) -> None:
        """Load a role hierarchy snapshot into an empty registry.

        Raises:
            NonEmptyError: The role registry is not empty.
        """
        if self.roles.size() != 0:
            raise NonEmptyError(NON_EMPTY.format("roles"), target="roles")
        self.roles.import_registry(roles)

    # ── Display ─────────────────────────────────────────

    def visualize(self) -> str:
        """Plain-text dump of both registries and the permission table."""
        return f"{self.roles}\n{self.resources}\n{self.permissions}\n"

    def visualize_permissions(self) -> str:
        return str(self.permissions)

    def visualize_resources(self, describe: Callable[[str], str] | None = None) -> str:
        return self.resources.display(describe)

    def visualize_roles(self, describe: Callable[[str], str] | None = None) -> str:
        return self.roles.display(describe)


def new_acl(config: Optional[AclConfig] = None) -> Acl:
    """Create an ACL with fresh, independent registries and table.

    Args:
        config: Configuration (defaults to a default-deny ``AclConfig``).
    """
    config = config or AclConfig()
    return Acl(
        permissions=PermissionTable(default_allow=config.default_allow),
        resources=HierarchyRegistry("resource"),
        roles=HierarchyRegistry("role"),
        config=config,
    )


def _parse_action(action: str | Action | None) -> Optional[Action]:
    return None if action is None else Action.parse(action)


def _required_id(value: str | AclEntry | None, kind: str) -> str:
    ident = entry_id(value)
    if ident is None:
        raise InvalidEntryError(f"A {kind} is required", kind=kind)
    return ident


def _ensure_registered(registry: HierarchyRegistry, ident: Optional[str]) -> None:
    # Grants register unknown entries at the root; an existing entry is fine.
    if ident is None or ident == WILDCARD:
        return
    try:
        registry.add(ident)
    except DuplicateEntryError:
        logger.debug("%s '%s' already registered", registry.name.capitalize(), ident)


__all__ = [
    "Acl",
    "new_acl",
]
