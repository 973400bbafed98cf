from __future__ import annotations

import hashlib
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable, Iterable, Iterator, Mapping

from tether_core.auth.guard import evaluate_permission
from tether_core.auth.rbac import (
    ACTION_DEVICE_ACCEPT,
    ACTION_DEVICE_REMOVE,
    ACTION_DEVICE_RENAME,
    ACTION_DEVICE_UPDATE,
    ACTION_TAG_CREATE,
    ACTION_TAG_REMOVE,
    ACTION_TAG_UPDATE,
    Role,
)
from tether_core.auth.types import Principal
from tether_core.devices.tags import validate_tag, validate_tags
from tether_core.devices.types import (
    DEVICE_STATUSES,
    STATUS_ACCEPTED,
    STATUS_ACTIONS,
    Device,
)
from tether_core.errors import (
    DeviceNameConflictError,
    DeviceNotFoundError,
    DuplicateRecordError,
    RecordNotFoundError,
    TagDuplicatedError,
    TagNotFoundError,
    ValidationError,
)
from tether_core.logging import get_logger

if TYPE_CHECKING:
    from tether_core.stores.interfaces import DeviceStore, NamespaceStore
    from tether_core.stores.registry import StoreBundle

logger = get_logger(__name__)

PUBLIC_URL_ADDRESS_LENGTH = 16


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def resolve_status(value: str) -> str:
    """Map a status value or a transition word (``accept``) to a status."""
    if value in DEVICE_STATUSES:
        return value
    status = STATUS_ACTIONS.get(value)
    if status is None:
        raise ValidationError(f"unknown device status: {value!r}")
    return status


def derive_public_url_address(tenant_id: str, uid: str) -> str:
    digest = hashlib.sha256(f"{tenant_id}:{uid}".encode("utf-8")).hexdigest()
    return digest[:PUBLIC_URL_ADDRESS_LENGTH]


def _require(value: str, label: str) -> None:
    if not value:
        raise ValidationError(f"{label} is required")


class DeviceRegistry:
    """Device lookups and mutations for one store.

    Mutations that change what an operator sees go through
    ``evaluate_permission`` with the caller's role. Heartbeat and offline
    signals come from the devices themselves and are not guarded.
    """

    def __init__(
        self,
        devices: DeviceStore,
        namespaces: NamespaceStore,
        *,
        roles: Mapping[str, Role] | None = None,
        clock: Callable[[], str] = _utc_now,
    ) -> None:
        self._devices = devices
        self._namespaces = namespaces
        self._roles = roles
        self._clock = clock

    @classmethod
    def from_bundle(
        cls,
        stores: StoreBundle,
        *,
        roles: Mapping[str, Role] | None = None,
    ) -> "DeviceRegistry":
        return cls(stores.devices, stores.namespaces, roles=roles)

    # Reads

    def get_device(self, uid: str) -> Device:
        _require(uid, "uid")
        return self._load(uid)

    def get_device_by_public_url_address(self, address: str) -> Device:
        _require(address, "address")
        try:
            return self._devices.get_device_by_public_url_address(address)
        except RecordNotFoundError as exc:
            raise DeviceNotFoundError(address) from exc

    def lookup_device(self, domain: str, name: str) -> Device:
        _require(domain, "domain")
        _require(name, "name")
        try:
            namespace = self._namespaces.get_namespace_by_name(domain)
            device = self._devices.get_device_by_name(namespace.tenant_id, name)
        except RecordNotFoundError as exc:
            raise DeviceNotFoundError(f"{name}.{domain}") from exc
        if device.status != STATUS_ACCEPTED:
            raise DeviceNotFoundError(f"{name}.{domain}")
        return device

    # Liveness

    def device_heartbeat(self, uid: str) -> None:
        _require(uid, "uid")
        with self._translate_not_found(uid):
            self._devices.set_online(uid, last_seen_at=self._clock())

    def offline_device(self, uid: str, forced: bool = False) -> None:
        _require(uid, "uid")
        device = self._load(uid)
        if not forced and not device.online:
            return
        with self._translate_not_found(uid):
            self._devices.set_offline(uid, disconnected_at=self._clock())
        logger.info(
            "Device marked offline",
            extra={"device_uid": uid, "tenant_id": device.tenant_id},
        )

    # Guarded mutations

    def delete_device(self, principal: Principal, uid: str) -> None:
        _require(uid, "uid")
        evaluate_permission(
            principal.role,
            ACTION_DEVICE_REMOVE,
            lambda: self._delete(uid, principal.tenant),
            roles=self._roles,
        )

    def rename_device(self, principal: Principal, uid: str, name: str) -> None:
        _require(uid, "uid")
        _require(name, "name")
        evaluate_permission(
            principal.role,
            ACTION_DEVICE_RENAME,
            lambda: self._rename(self._load(uid, principal.tenant), name),
            roles=self._roles,
        )

    def update_device_status(self, principal: Principal, uid: str, status: str) -> None:
        _require(uid, "uid")
        target = resolve_status(status)
        evaluate_permission(
            principal.role,
            ACTION_DEVICE_ACCEPT,
            lambda: self._update_status(uid, principal.tenant, target),
            roles=self._roles,
        )

    def update_device(
        self,
        principal: Principal,
        uid: str,
        *,
        name: str | None = None,
        public_url: bool | None = None,
    ) -> None:
        _require(uid, "uid")
        if name is not None:
            _require(name, "name")
        evaluate_permission(
            principal.role,
            ACTION_DEVICE_UPDATE,
            lambda: self._update(uid, principal.tenant, name, public_url),
            roles=self._roles,
        )

    def create_device_tag(self, principal: Principal, uid: str, tag: str) -> None:
        _require(uid, "uid")
        validate_tag(tag)
        evaluate_permission(
            principal.role,
            ACTION_TAG_CREATE,
            lambda: self._create_tag(uid, principal.tenant, tag),
            roles=self._roles,
        )

    def remove_device_tag(self, principal: Principal, uid: str, tag: str) -> None:
        _require(uid, "uid")
        validate_tag(tag)
        evaluate_permission(
            principal.role,
            ACTION_TAG_REMOVE,
            lambda: self._remove_tag(uid, principal.tenant, tag),
            roles=self._roles,
        )

    def update_device_tags(
        self,
        principal: Principal,
        uid: str,
        tags: Iterable[str],
    ) -> None:
        _require(uid, "uid")
        items = validate_tags(tags)
        evaluate_permission(
            principal.role,
            ACTION_TAG_UPDATE,
            lambda: self._update_tags(uid, principal.tenant, items),
            roles=self._roles,
        )

    # Operations run once authorized

    def _delete(self, uid: str, tenant: str) -> None:
        device = self._load(uid, tenant)
        with self._translate_not_found(uid):
            self._devices.delete_device(uid)
        logger.info(
            "Device deleted",
            extra={"device_uid": uid, "tenant_id": device.tenant_id},
        )

    def _rename(self, device: Device, name: str) -> None:
        if device.name == name:
            return
        try:
            other = self._devices.get_device_by_name(device.tenant_id, name)
        except RecordNotFoundError:
            other = None
        if other is not None and other.uid != device.uid:
            raise DeviceNameConflictError(name)
        try:
            with self._translate_not_found(device.uid):
                self._devices.rename_device(device.uid, name)
        except DuplicateRecordError as exc:
            raise DeviceNameConflictError(name) from exc
        logger.info(
            "Device renamed",
            extra={"device_uid": device.uid, "tenant_id": device.tenant_id},
        )

    def _update_status(self, uid: str, tenant: str, status: str) -> None:
        device = self._load(uid, tenant)
        with self._translate_not_found(uid):
            self._devices.update_device_status(uid, status)
        logger.info(
            "Device status updated",
            extra={
                "device_uid": uid,
                "tenant_id": device.tenant_id,
                "status": status,
            },
        )

    def _update(
        self,
        uid: str,
        tenant: str,
        name: str | None,
        public_url: bool | None,
    ) -> None:
        device = self._load(uid, tenant)
        if name is not None:
            self._rename(device, name)
        if public_url is None:
            return
        address = device.public_url_address
        if public_url and not address:
            address = derive_public_url_address(device.tenant_id, device.uid)
        with self._translate_not_found(uid):
            self._devices.update_public_url(uid, public_url=public_url, address=address)

    def _create_tag(self, uid: str, tenant: str, tag: str) -> None:
        device = self._load(uid, tenant)
        if device.has_tag(tag):
            raise TagDuplicatedError(tag)
        with self._translate_not_found(uid):
            self._devices.create_tag(uid, tag)

    def _remove_tag(self, uid: str, tenant: str, tag: str) -> None:
        device = self._load(uid, tenant)
        if not device.has_tag(tag):
            raise TagNotFoundError(tag)
        self._devices.remove_tag(uid, tag)

    def _update_tags(self, uid: str, tenant: str, tags: tuple[str, ...]) -> None:
        self._load(uid, tenant)
        with self._translate_not_found(uid):
            self._devices.update_tags(uid, tags)

    def _load(self, uid: str, tenant: str = "") -> Device:
        with self._translate_not_found(uid):
            device = self._devices.get_device(uid)
        if tenant and device.tenant_id != tenant:
            raise DeviceNotFoundError(uid)
        return device

    @staticmethod
    @contextmanager
    def _translate_not_found(uid: str) -> Iterator[None]:
        try:
            yield
        except RecordNotFoundError as exc:
            raise DeviceNotFoundError(uid) from exc
