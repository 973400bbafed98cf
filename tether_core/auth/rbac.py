from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Mapping

import fsspec

from tether_core.config import get_config

ROLE_OWNER = "owner"
ROLE_ADMINISTRATOR = "administrator"
ROLE_OPERATOR = "operator"
ROLE_OBSERVER = "observer"

ACTION_DEVICE_CONNECT = "device:connect"
ACTION_DEVICE_ACCEPT = "device:accept"
ACTION_DEVICE_REMOVE = "device:remove"
ACTION_DEVICE_RENAME = "device:rename"
ACTION_DEVICE_UPDATE = "device:update"
ACTION_TAG_CREATE = "tag:create"
ACTION_TAG_UPDATE = "tag:update"
ACTION_TAG_REMOVE = "tag:remove"

WILDCARD = "*"


@dataclass(frozen=True)
class Role:
    name: str
    permissions: tuple[str, ...]

    def allows(self, action: str) -> bool:
        return WILDCARD in self.permissions or action in self.permissions


_OPERATOR_ACTIONS = (
    ACTION_DEVICE_CONNECT,
    ACTION_DEVICE_ACCEPT,
    ACTION_DEVICE_RENAME,
    ACTION_DEVICE_UPDATE,
    ACTION_TAG_CREATE,
    ACTION_TAG_UPDATE,
    ACTION_TAG_REMOVE,
)

DEFAULT_ROLES: Mapping[str, Role] = MappingProxyType(
    {
        ROLE_OWNER: Role(ROLE_OWNER, (WILDCARD,)),
        ROLE_ADMINISTRATOR: Role(
            ROLE_ADMINISTRATOR, _OPERATOR_ACTIONS + (ACTION_DEVICE_REMOVE,)
        ),
        ROLE_OPERATOR: Role(ROLE_OPERATOR, _OPERATOR_ACTIONS),
        ROLE_OBSERVER: Role(ROLE_OBSERVER, (ACTION_DEVICE_CONNECT,)),
    }
)


def load_role_table(uri: str) -> Mapping[str, Role]:
    """Read a capability table override.

    The document looks like ``{"roles": [{"name": "operator",
    "permissions": ["device:accept"]}]}``. Roles it names replace the
    defaults of the same name; the others are kept.
    """
    fs, path = fsspec.core.url_to_fs(uri)
    with fs.open(path, "rb") as handle:
        payload = json.loads(handle.read().decode("utf-8"))
    items = payload.get("roles", []) if isinstance(payload, dict) else []
    roles: dict[str, Role] = dict(DEFAULT_ROLES)
    for item in items:
        if not isinstance(item, dict):
            continue
        name = str(item.get("name") or "").strip()
        permissions = item.get("permissions", [])
        if not name or not isinstance(permissions, list):
            continue
        roles[name] = Role(name, tuple(str(action) for action in permissions if action))
    return MappingProxyType(roles)


@lru_cache(maxsize=1)
def get_role_table() -> Mapping[str, Role]:
    uri = get_config().rbac_roles_uri
    if uri:
        return load_role_table(uri)
    return DEFAULT_ROLES


def is_action_allowed(
    role: str | None,
    action: str,
    roles: Mapping[str, Role] | None = None,
) -> bool:
    if not role:
        return False
    table = roles if roles is not None else get_role_table()
    match = table.get(role)
    if match is None:
        return False
    return match.allows(action)
