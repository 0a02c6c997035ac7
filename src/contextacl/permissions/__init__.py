"""Core permission engine for contextacl.

Defines:
- Action / Decision: action kinds and tri-state lookup outcomes
- HierarchyRegistry: parent-pointer tree for roles and for resources
- PermissionTable: per-tuple, per-action grants and denies
- resolve_allowed() / resolve_denied(): inheritance-aware resolution
"""

from .constants import DEFAULT_KEY, KEY_SEPARATOR, WILDCARD, Action, Decision
from .registry import ROOT_PARENT, HierarchyRegistry, print_path
from .resolution import resolve_allowed, resolve_denied, search_order
from .table import ActionMap, PermissionTable, make_key, split_key

__all__ = [
    "DEFAULT_KEY",
    "KEY_SEPARATOR",
    "ROOT_PARENT",
    "WILDCARD",
    "Action",
    "ActionMap",
    "Decision",
    "HierarchyRegistry",
    "PermissionTable",
    "make_key",
    "print_path",
    "resolve_allowed",
    "resolve_denied",
    "search_order",
    "split_key",
]
