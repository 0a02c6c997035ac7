"""Inheritance-based resolution of allow/deny queries.

Resolution is a pure function of two ancestor chains and a permission
table. The role chain is the outer loop and the resource chain the inner
one, both nearest-first, so a rule on ``(exact role, root resource)`` is
consulted before a rule on ``(root role, exact resource)``: role
specificity beats resource specificity.

The first tuple with a definitive answer decides. An exhausted scan yields
``Decision.UNSPECIFIED``; the facade turns that into ``False``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence

from .constants import Action, Decision
from .table import PermissionTable

logger = logging.getLogger(__name__)


def search_order(role_path: Sequence[str], resource_path: Sequence[str]) -> Iterator[tuple[str, str]]:
    """Yield ``(role, resource)`` tuples in the order they are consulted.

    Example::

        list(search_order(["gimli", "warriors", "*"], ["axe", "*"]))
        # [("gimli", "axe"), ("gimli", "*"),
        #  ("warriors", "axe"), ("warriors", "*"),
        #  ("*", "axe"), ("*", "*")]
    """
    for aro in role_path:
        for aco in resource_path:
            yield aro, aco


def resolve_allowed(
    role_path: Sequence[str],
    resource_path: Sequence[str],
    table: PermissionTable,
    action: Action | None = None,
) -> Decision:
    """First definitive grant decision along the search order.

    Args:
        role_path: Ancestor chain of the role, self first, ``*`` last.
        resource_path: Ancestor chain of the resource, self first, ``*`` last.
        table: Permission table to consult.
        action: Specific action, or ``None``/``Action.ALL`` for all of them.

    Returns:
        ``ALLOWED`` or ``DENIED`` from the first tuple that specifies
        either, otherwise ``UNSPECIFIED``.
    """
    for aro, aco in search_order(role_path, resource_path):
        decision = table.is_allowed(aro, aco, action)
        if decision.is_definitive:
            logger.debug("Grant check decided at %s::%s -> %s", aro, aco, decision.value)
            return decision
    return Decision.UNSPECIFIED


def resolve_denied(
    role_path: Sequence[str],
    resource_path: Sequence[str],
    table: PermissionTable,
    action: Action | None = None,
) -> Decision:
    """First definitive deny decision along the search order.

    Same scan as :func:`resolve_allowed`, evaluated with
    :meth:`PermissionTable.is_denied`. A tuple mixing grants and denies
    can therefore stop both scans without either reporting its own
    perspective.
    """
    for aro, aco in search_order(role_path, resource_path):
        decision = table.is_denied(aro, aco, action)
        if decision.is_definitive:
            logger.debug("Deny check decided at %s::%s -> %s", aro, aco, decision.value)
            return decision
    return Decision.UNSPECIFIED


__all__ = [
    "resolve_allowed",
    "resolve_denied",
    "search_order",
]
