from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Iterable

import fsspec

from tether_core.accounts.types import Member, Namespace, User
from tether_core.errors import DuplicateRecordError, RecordNotFoundError
from tether_core.storage.paths import join_uri


def user_registry_uri(base_uri: str) -> str:
    return join_uri(base_uri, "control", "users.json")


def namespace_registry_uri(base_uri: str) -> str:
    return join_uri(base_uri, "control", "namespaces.json")


def load_users(base_uri: str) -> list[User]:
    return [
        _user_from_dict(item)
        for item in _read_items(user_registry_uri(base_uri), "users")
    ]


def save_users(base_uri: str, users: Iterable[User]) -> str:
    return _write_items(
        user_registry_uri(base_uri), "users", [asdict(user) for user in users]
    )


def create_user(base_uri: str, user: User) -> User:
    users = load_users(base_uri)
    for existing in users:
        if existing.username == user.username:
            raise DuplicateRecordError(f"username already registered: {user.username}")
        if user.email and existing.email == user.email:
            raise DuplicateRecordError(f"email already registered: {user.email}")
    users.append(user)
    save_users(base_uri, users)
    return user


def get_user_by_username(base_uri: str, username: str) -> User:
    for user in load_users(base_uri):
        if user.username == username:
            return user
    raise RecordNotFoundError(f"user {username}")


def load_namespaces(base_uri: str) -> list[Namespace]:
    return [
        _namespace_from_dict(item)
        for item in _read_items(namespace_registry_uri(base_uri), "namespaces")
    ]


def save_namespaces(base_uri: str, namespaces: Iterable[Namespace]) -> str:
    return _write_items(
        namespace_registry_uri(base_uri),
        "namespaces",
        [asdict(namespace) for namespace in namespaces],
    )


def create_namespace(base_uri: str, namespace: Namespace) -> Namespace:
    namespaces = load_namespaces(base_uri)
    for existing in namespaces:
        if existing.name == namespace.name:
            raise DuplicateRecordError(
                f"namespace already registered: {namespace.name}"
            )
        if existing.tenant_id == namespace.tenant_id:
            raise DuplicateRecordError(
                f"tenant already registered: {namespace.tenant_id}"
            )
    namespaces.append(namespace)
    save_namespaces(base_uri, namespaces)
    return namespace


def get_namespace_by_name(base_uri: str, name: str) -> Namespace:
    for namespace in load_namespaces(base_uri):
        if namespace.name == name:
            return namespace
    raise RecordNotFoundError(f"namespace {name}")


def _read_items(uri: str, key: str) -> list[dict[str, object]]:
    fs, path = fsspec.core.url_to_fs(uri)
    if not fs.exists(path):
        return []
    with fs.open(path, "rb") as handle:
        payload = json.loads(handle.read().decode("utf-8"))
    items = payload.get(key, []) if isinstance(payload, dict) else []
    return [item for item in items if isinstance(item, dict)]


def _write_items(uri: str, key: str, items: list[dict[str, object]]) -> str:
    fs, path = fsspec.core.url_to_fs(uri)
    fs.makedirs("/".join(path.split("/")[:-1]), exist_ok=True)
    payload = {
        "updated_at": datetime.now(timezone.utc).isoformat(),
        key: items,
    }
    with fs.open(path, "wb") as handle:
        handle.write(json.dumps(payload, ensure_ascii=True).encode("utf-8"))
    return uri


def _user_from_dict(payload: dict[str, object]) -> User:
    return User(
        id=str(payload.get("id", "")),
        name=str(payload.get("name", "")),
        email=str(payload.get("email", "")),
        username=str(payload.get("username", "")),
        password=str(payload.get("password", "")),
        confirmed=bool(payload.get("confirmed", False)),
        created_at=str(payload.get("created_at", "")),
    )


def _namespace_from_dict(payload: dict[str, object]) -> Namespace:
    raw_members = payload.get("members")
    members: list[Member] = []
    if isinstance(raw_members, list):
        for item in raw_members:
            if isinstance(item, dict) and item.get("id"):
                members.append(
                    Member(id=str(item["id"]), role=str(item.get("role", "")))
                )
    raw_max = payload.get("max_devices", 0)
    return Namespace(
        tenant_id=str(payload.get("tenant_id", "")),
        name=str(payload.get("name", "")),
        owner=str(payload.get("owner", "")),
        members=tuple(members),
        max_devices=int(raw_max) if isinstance(raw_max, (int, float, str)) else 0,
        created_at=str(payload.get("created_at", "")),
    )
