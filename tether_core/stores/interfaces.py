from __future__ import annotations

from typing import Iterable, Protocol, Sequence

from tether_core.accounts.types import Namespace, User
from tether_core.devices.types import Device, Filter, PageQuery


class DeviceStore(Protocol):
    """Device persistence.

    Lookups raise ``RecordNotFoundError`` when the record is absent and
    uniqueness violations raise ``DuplicateRecordError``. Each call is expected
    to be atomic for the single record it touches.
    """

    def register_device(
        self,
        *,
        tenant_id: str,
        name: str,
        uid: str | None = None,
        status: str = "pending",
        tags: Iterable[str] | None = None,
        info: dict[str, object] | None = None,
    ) -> Device:
        ...

    def get_device(self, uid: str) -> Device:
        ...

    def get_device_by_public_url_address(self, address: str) -> Device:
        ...

    def get_device_by_name(self, tenant_id: str, name: str) -> Device:
        ...

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
        ...

    def delete_device(self, uid: str) -> None:
        ...

    def rename_device(self, uid: str, name: str) -> None:
        ...

    def update_device_status(self, uid: str, status: str) -> None:
        ...

    def set_online(self, uid: str, *, last_seen_at: str) -> None:
        ...

    def set_offline(self, uid: str, *, disconnected_at: str) -> None:
        ...

    def update_public_url(
        self,
        uid: str,
        *,
        public_url: bool,
        address: str | None,
    ) -> None:
        ...

    def create_tag(self, uid: str, tag: str) -> None:
        ...

    def remove_tag(self, uid: str, tag: str) -> None:
        ...

    def update_tags(self, uid: str, tags: Sequence[str]) -> None:
        ...


class UserStore(Protocol):
    def create_user(self, user: User) -> User:
        ...

    def get_user_by_username(self, username: str) -> User:
        ...


class NamespaceStore(Protocol):
    def create_namespace(self, namespace: Namespace) -> Namespace:
        ...

    def get_namespace_by_name(self, name: str) -> Namespace:
        ...
