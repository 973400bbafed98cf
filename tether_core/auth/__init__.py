from tether_core.auth.guard import evaluate_permission
from tether_core.auth.rbac import (
    ACTION_DEVICE_ACCEPT,
    ACTION_DEVICE_CONNECT,
    ACTION_DEVICE_REMOVE,
    ACTION_DEVICE_RENAME,
    ACTION_DEVICE_UPDATE,
    ACTION_TAG_CREATE,
    ACTION_TAG_REMOVE,
    ACTION_TAG_UPDATE,
    DEFAULT_ROLES,
    ROLE_ADMINISTRATOR,
    ROLE_OBSERVER,
    ROLE_OPERATOR,
    ROLE_OWNER,
    Role,
    get_role_table,
    is_action_allowed,
    load_role_table,
)
from tether_core.auth.types import Principal

__all__ = [
    "ACTION_DEVICE_ACCEPT",
    "ACTION_DEVICE_CONNECT",
    "ACTION_DEVICE_REMOVE",
    "ACTION_DEVICE_RENAME",
    "ACTION_DEVICE_UPDATE",
    "ACTION_TAG_CREATE",
    "ACTION_TAG_REMOVE",
    "ACTION_TAG_UPDATE",
    "DEFAULT_ROLES",
    "Principal",
    "ROLE_ADMINISTRATOR",
    "ROLE_OBSERVER",
    "ROLE_OPERATOR",
    "ROLE_OWNER",
    "Role",
    "evaluate_permission",
    "get_role_table",
    "is_action_allowed",
    "load_role_table",
]
