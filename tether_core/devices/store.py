from __future__ import annotations

import json
import uuid
from dataclasses import asdict, fields, replace
from datetime import datetime, timezone
from typing import Callable, Iterable, Sequence

import fsspec

from tether_core.devices.filters import build_matcher
from tether_core.devices.types import STATUS_PENDING, Device, Filter, PageQuery
from tether_core.errors import DuplicateRecordError, RecordNotFoundError
from tether_core.storage.paths import join_uri

_DEVICE_FIELDS = {item.name for item in fields(Device)}


def device_registry_uri(base_uri: str) -> str:
    return join_uri(base_uri, "control", "devices.json")


def load_devices(base_uri: str) -> list[Device]:
    uri = device_registry_uri(base_uri)
    fs, path = fsspec.core.url_to_fs(uri)
    if not fs.exists(path):
        return []
    with fs.open(path, "rb") as handle:
        payload = json.loads(handle.read().decode("utf-8"))
    items = payload.get("devices", []) if isinstance(payload, dict) else []
    results: list[Device] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        results.append(_device_from_dict(item))
    return results


def save_devices(base_uri: str, devices: Iterable[Device]) -> str:
    uri = device_registry_uri(base_uri)
    fs, path = fsspec.core.url_to_fs(uri)
    fs.makedirs("/".join(path.split("/")[:-1]), exist_ok=True)
    payload = {
        "updated_at": _now(),
        "devices": [asdict(device) for device in devices],
    }
    with fs.open(path, "wb") as handle:
        handle.write(json.dumps(payload, ensure_ascii=True).encode("utf-8"))
    return uri


def register_device(
    *,
    base_uri: str,
    tenant_id: str,
    name: str,
    uid: str | None = None,
    status: str = STATUS_PENDING,
    tags: Iterable[str] | None = None,
    info: dict[str, object] | None = None,
) -> Device:
    devices = load_devices(base_uri)
    device_uid = uid or uuid.uuid4().hex
    for existing in devices:
        if existing.uid == device_uid:
            raise DuplicateRecordError(f"device uid already registered: {device_uid}")
        if existing.tenant_id == tenant_id and existing.name == name:
            raise DuplicateRecordError(f"device name already registered: {name}")
    now = _now()
    device = Device(
        uid=device_uid,
        tenant_id=tenant_id,
        name=name,
        status=status,
        tags=tuple(tags or ()),
        info=info,
        created_at=now,
        updated_at=now,
    )
    devices.append(device)
    save_devices(base_uri, devices)
    return device


def get_device(base_uri: str, uid: str) -> Device:
    return _find(base_uri, lambda device: device.uid == uid, f"device {uid}")


def get_device_by_public_url_address(base_uri: str, address: str) -> Device:
    return _find(
        base_uri,
        lambda device: device.public_url_address == address,
        f"device with public address {address}",
    )


def get_device_by_name(base_uri: str, tenant_id: str, name: str) -> Device:
    return _find(
        base_uri,
        lambda device: device.tenant_id == tenant_id and device.name == name,
        f"device {name} in {tenant_id}",
    )


def list_devices(
    base_uri: str,
    *,
    tenant_id: str,
    query: PageQuery,
    filters: Sequence[Filter],
    status: str,
    sort_by: str,
    order_by: str,
) -> tuple[list[Device], int]:
    matcher = build_matcher(filters)
    matches = [
        device
        for device in load_devices(base_uri)
        if (not tenant_id or device.tenant_id == tenant_id)
        and (not status or device.status == status)
        and matcher(device)
    ]
    if sort_by in _DEVICE_FIELDS:
        matches.sort(
            key=lambda device: _sort_key(getattr(device, sort_by)),
            reverse=order_by.lower() == "desc",
        )
    total = len(matches)
    if query.per_page > 0:
        matches = matches[query.offset : query.offset + query.per_page]
    return matches, total


def delete_device(base_uri: str, uid: str) -> None:
    devices = load_devices(base_uri)
    remaining = [device for device in devices if device.uid != uid]
    if len(remaining) == len(devices):
        raise RecordNotFoundError(f"device {uid}")
    save_devices(base_uri, remaining)


def rename_device(base_uri: str, uid: str, name: str) -> None:
    devices = load_devices(base_uri)
    current = next((device for device in devices if device.uid == uid), None)
    if current is None:
        raise RecordNotFoundError(f"device {uid}")
    for device in devices:
        if (
            device.uid != uid
            and device.tenant_id == current.tenant_id
            and device.name == name
        ):
            raise DuplicateRecordError(f"device name already registered: {name}")
    _save_replaced(base_uri, devices, replace(current, name=name, updated_at=_now()))


def update_device_status(base_uri: str, uid: str, status: str) -> None:
    _update(base_uri, uid, lambda device: replace(device, status=status))


def set_online(base_uri: str, uid: str, *, last_seen_at: str) -> None:
    _update(
        base_uri,
        uid,
        lambda device: replace(device, online=True, last_seen_at=last_seen_at),
    )


def set_offline(base_uri: str, uid: str, *, disconnected_at: str) -> None:
    _update(
        base_uri,
        uid,
        lambda device: replace(device, online=False, disconnected_at=disconnected_at),
    )


def update_public_url(
    base_uri: str,
    uid: str,
    *,
    public_url: bool,
    address: str | None,
) -> None:
    _update(
        base_uri,
        uid,
        lambda device: replace(
            device, public_url=public_url, public_url_address=address
        ),
    )


def create_tag(base_uri: str, uid: str, tag: str) -> None:
    def add(device: Device) -> Device:
        if tag in device.tags:
            return device
        return replace(device, tags=device.tags + (tag,))

    _update(base_uri, uid, add)


def remove_tag(base_uri: str, uid: str, tag: str) -> None:
    _update(
        base_uri,
        uid,
        lambda device: replace(
            device, tags=tuple(item for item in device.tags if item != tag)
        ),
    )


def update_tags(base_uri: str, uid: str, tags: Sequence[str]) -> None:
    _update(base_uri, uid, lambda device: replace(device, tags=tuple(tags)))


def _find(base_uri: str, predicate: Callable[[Device], bool], label: str) -> Device:
    for device in load_devices(base_uri):
        if predicate(device):
            return device
    raise RecordNotFoundError(label)


def _update(base_uri: str, uid: str, change: Callable[[Device], Device]) -> None:
    devices = load_devices(base_uri)
    current = next((device for device in devices if device.uid == uid), None)
    if current is None:
        raise RecordNotFoundError(f"device {uid}")
    _save_replaced(base_uri, devices, replace(change(current), updated_at=_now()))


def _save_replaced(base_uri: str, devices: list[Device], device: Device) -> None:
    updated: list[Device] = []
    for existing in devices:
        if existing.uid == device.uid:
            updated.append(device)
        else:
            updated.append(existing)
    save_devices(base_uri, updated)


def _sort_key(value: object) -> tuple[bool, str]:
    if value is None:
        return (True, "")
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return (False, f"{value:020.6f}")
    return (False, str(value))


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _device_from_dict(payload: dict[str, object]) -> Device:
    return Device(
        uid=str(payload.get("uid")),
        tenant_id=str(payload.get("tenant_id", "")),
        name=str(payload.get("name", "")),
        status=str(payload.get("status", STATUS_PENDING)),
        online=bool(payload.get("online", False)),
        public_url=bool(payload.get("public_url", False)),
        public_url_address=_coerce_optional_str(payload.get("public_url_address")),
        tags=_coerce_tags(payload.get("tags")),
        info=_coerce_metadata(payload.get("info")),
        last_seen_at=_coerce_optional_str(payload.get("last_seen_at")),
        disconnected_at=_coerce_optional_str(payload.get("disconnected_at")),
        created_at=str(payload.get("created_at", "")),
        updated_at=str(payload.get("updated_at", "")),
    )


def _coerce_optional_str(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _coerce_tags(value: object) -> tuple[str, ...]:
    if isinstance(value, (list, tuple)):
        return tuple(str(item) for item in value)
    return ()


def _coerce_metadata(value: object) -> dict[str, object] | None:
    if not isinstance(value, dict):
        return None
    return {str(key): item for key, item in value.items()}
