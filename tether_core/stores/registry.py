from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Iterable, Sequence

from tether_core.accounts import store as account_store
from tether_core.accounts.types import Namespace, User
from tether_core.config import get_config
from tether_core.devices import store as device_store
from tether_core.devices.types import STATUS_PENDING, Device, Filter, PageQuery
from tether_core.stores.interfaces import DeviceStore, NamespaceStore, UserStore


class JsonDeviceStore(DeviceStore):
    def __init__(self, base_uri: str) -> None:
        self._base_uri = base_uri

    def load_devices(self) -> list[Device]:
        return device_store.load_devices(self._base_uri)

    def register_device(
        self,
        *,
        tenant_id: str,
        name: str,
        uid: str | None = None,
        status: str = STATUS_PENDING,
        tags: Iterable[str] | None = None,
        info: dict[str, object] | None = None,
    ) -> Device:
        return device_store.register_device(
            base_uri=self._base_uri,
            tenant_id=tenant_id,
            name=name,
            uid=uid,
            status=status,
            tags=tags,
            info=info,
        )

    def get_device(self, uid: str) -> Device:
        return device_store.get_device(self._base_uri, uid)

    def get_device_by_public_url_address(self, address: str) -> Device:
        return device_store.get_device_by_public_url_address(self._base_uri, address)

    def get_device_by_name(self, tenant_id: str, name: str) -> Device:
        return device_store.get_device_by_name(self._base_uri, tenant_id, name)

    def list_devices(
        self,
        *,
        tenant_id: str,
        query: PageQuery,
        filters: Sequence[Filter],
        status: str,
        sort_by: str,
        order_by: str,
    ) -> tuple[list[Device], int]:
        return device_store.list_devices(
            self._base_uri,
            tenant_id=tenant_id,
            query=query,
            filters=filters,
            status=status,
            sort_by=sort_by,
            order_by=order_by,
        )

    def delete_device(self, uid: str) -> None:
        device_store.delete_device(self._base_uri, uid)

    def rename_device(self, uid: str, name: str) -> None:
        device_store.rename_device(self._base_uri, uid, name)

    def update_device_status(self, uid: str, status: str) -> None:
        device_store.update_device_status(self._base_uri, uid, status)

    def set_online(self, uid: str, *, last_seen_at: str) -> None:
        device_store.set_online(self._base_uri, uid, last_seen_at=last_seen_at)

    def set_offline(self, uid: str, *, disconnected_at: str) -> None:
        device_store.set_offline(self._base_uri, uid, disconnected_at=disconnected_at)

    def update_public_url(
        self,
        uid: str,
        *,
        public_url: bool,
        address: str | None,
    ) -> None:
        device_store.update_public_url(
            self._base_uri,
            uid,
            public_url=public_url,
            address=address,
        )

    def create_tag(self, uid: str, tag: str) -> None:
        device_store.create_tag(self._base_uri, uid, tag)

    def remove_tag(self, uid: str, tag: str) -> None:
        device_store.remove_tag(self._base_uri, uid, tag)

    def update_tags(self, uid: str, tags: Sequence[str]) -> None:
        device_store.update_tags(self._base_uri, uid, tags)


class JsonUserStore(UserStore):
    def __init__(self, base_uri: str) -> None:
        self._base_uri = base_uri

    def create_user(self, user: User) -> User:
        return account_store.create_user(self._base_uri, user)

    def get_user_by_username(self, username: str) -> User:
        return account_store.get_user_by_username(self._base_uri, username)


class JsonNamespaceStore(NamespaceStore):
    def __init__(self, base_uri: str) -> None:
        self._base_uri = base_uri

    def create_namespace(self, namespace: Namespace) -> Namespace:
        return account_store.create_namespace(self._base_uri, namespace)

    def get_namespace_by_name(self, name: str) -> Namespace:
        return account_store.get_namespace_by_name(self._base_uri, name)


@dataclass(frozen=True)
class StoreBundle:
    devices: DeviceStore
    users: UserStore
    namespaces: NamespaceStore


def get_store_bundle(base_uri: str) -> StoreBundle:
    backend = os.getenv("CONTROL_PLANE_STORE", "json").strip().lower()
    if backend != "json":
        raise ValueError(f"Unsupported control-plane store backend: {backend}")
    return StoreBundle(
        devices=JsonDeviceStore(base_uri),
        users=JsonUserStore(base_uri),
        namespaces=JsonNamespaceStore(base_uri),
    )


def default_store_bundle() -> StoreBundle:
    return get_store_bundle(get_config().store_uri)
