from __future__ import annotations

import pytest

from tether_core.devices import DeviceRegistry
from tether_core.errors import (
    DeviceNotFoundError,
    ForbiddenError,
    StoreError,
    TagDuplicatedError,
    TagFormatError,
    TagNotFoundError,
    TagsDuplicatedInBatchError,
    ValidationError,
)
from tether_core.stores import JsonNamespaceStore


@pytest.mark.core
def test_create_tag_on_unknown_device(registry, owner):
    with pytest.raises(DeviceNotFoundError) as excinfo:
        registry.create_device_tag(owner, "invalid_uid", "device1")
    assert excinfo.value.uid == "invalid_uid"


@pytest.mark.core
def test_create_tag_duplicated(registry, owner, device_factory, stores):
    device_factory(uid="uid", tags=["device1"])

    with pytest.raises(TagDuplicatedError):
        registry.create_device_tag(owner, "uid", "device1")
    assert stores.devices.get_device("uid").tags == ("device1",)


@pytest.mark.core
def test_create_tag_appends(registry, owner, device_factory, stores):
    device_factory(uid="uid", tags=["device1"])

    registry.create_device_tag(owner, "uid", "device6")

    assert stores.devices.get_device("uid").tags == ("device1", "device6")


@pytest.mark.core
def test_create_tag_rejects_invalid_format(registry, owner, device_factory):
    device_factory(uid="uid")
    with pytest.raises(TagFormatError):
        registry.create_device_tag(owner, "uid", "a@b")


@pytest.mark.core
def test_remove_tag_on_unknown_device(registry, owner):
    with pytest.raises(DeviceNotFoundError):
        registry.remove_device_tag(owner, "invalid_uid", "device1")


@pytest.mark.core
def test_remove_missing_tag(registry, owner, device_factory):
    device_factory(uid="uid", tags=["device1"])
    with pytest.raises(TagNotFoundError) as excinfo:
        registry.remove_device_tag(owner, "uid", "device2")
    assert excinfo.value.tag == "device2"


@pytest.mark.core
def test_remove_tag(registry, owner, device_factory, stores):
    device_factory(uid="uid", tags=["device1", "device2"])

    registry.remove_device_tag(owner, "uid", "device1")

    assert stores.devices.get_device("uid").tags == ("device2",)


@pytest.mark.core
def test_remove_tag_store_error_passes_through(stores, owner, device_factory):
    device_factory(uid="uid", tags=["device1"])
    failure = StoreError("write failed")

    class FailingStore:
        def get_device(self, uid):
            return stores.devices.get_device(uid)

        def remove_tag(self, uid, tag):
            raise failure

    registry = DeviceRegistry(FailingStore(), stores.namespaces)
    with pytest.raises(StoreError) as excinfo:
        registry.remove_device_tag(owner, "uid", "device1")
    assert excinfo.value is failure


@pytest.mark.core
def test_update_tags_on_unknown_device(registry, owner):
    with pytest.raises(DeviceNotFoundError):
        registry.update_device_tags(owner, "invalid_uid", ["device1", "device2"])


@pytest.mark.core
def test_update_tags_replaces_set(registry, owner, device_factory, stores):
    device_factory(uid="uid", tags=["old"])

    registry.update_device_tags(owner, "uid", ["device1", "device2", "device3"])

    assert stores.devices.get_device("uid").tags == ("device1", "device2", "device3")


@pytest.mark.core
def test_update_tags_duplicate_never_touches_store(counting_store, owner):
    registry = DeviceRegistry(counting_store, JsonNamespaceStore("unused"))

    with pytest.raises(TagsDuplicatedInBatchError):
        registry.update_device_tags(owner, "uid", ["tagduplicated", "tagduplicated"])
    with pytest.raises(ValidationError):
        registry.update_device_tags(owner, "uid", ["test/"])

    assert counting_store.calls == []


@pytest.mark.core
def test_tag_mutation_denied_for_observer(counting_store, observer):
    counting_store.register_device(tenant_id="tenant", name="device", uid="uid")
    counting_store.calls.clear()
    registry = DeviceRegistry(counting_store, JsonNamespaceStore("unused"))

    with pytest.raises(ForbiddenError):
        registry.create_device_tag(observer, "uid", "device1")
    with pytest.raises(ForbiddenError):
        registry.remove_device_tag(observer, "uid", "device1")
    with pytest.raises(ForbiddenError):
        registry.update_device_tags(observer, "uid", ["device1"])

    assert counting_store.calls == []


@pytest.mark.core
def test_tag_operations_scoped_to_tenant(registry, owner, device_factory):
    device_factory(uid="uid", tenant_id="other-tenant", tags=["device1"])
    with pytest.raises(DeviceNotFoundError):
        registry.create_device_tag(owner, "uid", "device2")
