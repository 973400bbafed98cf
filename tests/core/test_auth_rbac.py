from __future__ import annotations

import json

import pytest

from tether_core.auth.rbac import (
    ACTION_DEVICE_ACCEPT,
    ACTION_DEVICE_CONNECT,
    ACTION_DEVICE_REMOVE,
    ACTION_TAG_CREATE,
    DEFAULT_ROLES,
    ROLE_ADMINISTRATOR,
    ROLE_OBSERVER,
    ROLE_OPERATOR,
    ROLE_OWNER,
    get_role_table,
    is_action_allowed,
    load_role_table,
)


@pytest.mark.core
def test_owner_allows_everything():
    assert is_action_allowed(ROLE_OWNER, ACTION_DEVICE_REMOVE)
    assert is_action_allowed(ROLE_OWNER, "anything:else")


@pytest.mark.core
def test_operator_cannot_remove_devices():
    assert is_action_allowed(ROLE_OPERATOR, ACTION_DEVICE_ACCEPT)
    assert is_action_allowed(ROLE_OPERATOR, ACTION_TAG_CREATE)
    assert not is_action_allowed(ROLE_OPERATOR, ACTION_DEVICE_REMOVE)
    assert is_action_allowed(ROLE_ADMINISTRATOR, ACTION_DEVICE_REMOVE)


@pytest.mark.core
def test_observer_only_connects():
    assert is_action_allowed(ROLE_OBSERVER, ACTION_DEVICE_CONNECT)
    assert not is_action_allowed(ROLE_OBSERVER, ACTION_TAG_CREATE)


@pytest.mark.core
def test_unknown_or_missing_role_denied():
    assert not is_action_allowed("guest", ACTION_DEVICE_CONNECT)
    assert not is_action_allowed(None, ACTION_DEVICE_CONNECT)
    assert not is_action_allowed("", ACTION_DEVICE_CONNECT)


@pytest.mark.core
def test_default_table_is_read_only():
    with pytest.raises(TypeError):
        DEFAULT_ROLES["guest"] = DEFAULT_ROLES[ROLE_OBSERVER]  # type: ignore[index]


@pytest.mark.core
def test_role_table_override(monkeypatch, tmp_path):
    path = tmp_path / "roles.json"
    path.write_text(
        json.dumps(
            {"roles": [{"name": ROLE_OBSERVER, "permissions": [ACTION_TAG_CREATE]}]}
        ),
        encoding="utf-8",
    )
    table = load_role_table(path.as_posix())
    assert table[ROLE_OBSERVER].permissions == (ACTION_TAG_CREATE,)
    assert table[ROLE_OWNER] == DEFAULT_ROLES[ROLE_OWNER]

    monkeypatch.setenv("RBAC_ROLES_URI", path.as_posix())
    assert is_action_allowed(ROLE_OBSERVER, ACTION_TAG_CREATE)
    assert get_role_table() is get_role_table()
