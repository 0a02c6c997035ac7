from .exceptions import (
    ContextAclError,
    DuplicateEntryError,
    EntryNotFoundError,
    InvalidActionError,
    InvalidEntryError,
    NonEmptyError,
)
from .config import AclConfig, DefaultPolicy, LogLevel, load_acl_config_from_env
from .logging import (
    safe_preview,
    AclLogFormatter,
    AclLoggerAdapter,
    setup_logging,
    get_acl_logger,
)
from .permissions import (
    Action,
    Decision,
    HierarchyRegistry,
    PermissionTable,
    resolve_allowed,
    resolve_denied,
)
from .entry import AclEntry, RootEntry, SimpleEntry, entry_id
from .acl import Acl, new_acl

__all__ = [
    'Acl',
    'new_acl',
    'AclEntry',
    'RootEntry',
    'SimpleEntry',
    'entry_id',
    'Action',
    'Decision',
    'HierarchyRegistry',
    'PermissionTable',
    'resolve_allowed',
    'resolve_denied',
    'AclConfig',
    'DefaultPolicy',
    'LogLevel',
    'load_acl_config_from_env',
    'safe_preview',
    'AclLogFormatter',
    'AclLoggerAdapter',
    'setup_logging',
    'get_acl_logger',
    'ContextAclError',
    'DuplicateEntryError',
    'EntryNotFoundError',
    'InvalidActionError',
    'InvalidEntryError',
    'NonEmptyError',
]
