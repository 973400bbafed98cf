import os

import pytest

from tether_core.auth.rbac import (
    ROLE_OBSERVER,
    ROLE_OPERATOR,
    ROLE_OWNER,
    get_role_table,
)
from tether_core.auth.types import Principal
from tether_core.config import get_config
from tether_core.devices import DeviceRegistry, ListingEngine
from tether_core.stores import JsonDeviceStore, get_store_bundle


@pytest.fixture(autouse=True)
def _test_env(monkeypatch: pytest.MonkeyPatch):
    def set_default(name: str, value: str) -> None:
        if not os.getenv(name):
            monkeypatch.setenv(name, value)

    set_default("ENV", "test")
    set_default("LOG_LEVEL", "INFO")
    monkeypatch.setenv("CONTROL_PLANE_STORE", "json")
    monkeypatch.delenv("TETHER_STORE_URI", raising=False)
    monkeypatch.delenv("RBAC_ROLES_URI", raising=False)
    monkeypatch.delenv("DEVICE_PAGE_DEFAULT", raising=False)
    monkeypatch.delenv("DEVICE_PAGE_MAX", raising=False)
    get_config.cache_clear()
    get_role_table.cache_clear()
    yield
    get_config.cache_clear()
    get_role_table.cache_clear()


class CountingDeviceStore:
    """Wraps a device store and records every call made against it."""

    def __init__(self, inner) -> None:
        self._inner = inner
        self.calls: list[str] = []

    def __getattr__(self, name: str):
        attr = getattr(self._inner, name)
        if not callable(attr):
            return attr

        def _record(*args, **kwargs):
            self.calls.append(name)
            return attr(*args, **kwargs)

        return _record


@pytest.fixture
def stores(tmp_path):
    return get_store_bundle(tmp_path.as_posix())


@pytest.fixture
def counting_store(tmp_path):
    return CountingDeviceStore(JsonDeviceStore(tmp_path.as_posix()))


@pytest.fixture
def registry(stores):
    return DeviceRegistry.from_bundle(stores)


@pytest.fixture
def listing(stores):
    return ListingEngine(stores.devices)


@pytest.fixture
def owner():
    return Principal(user_id="user-1", tenant_id="tenant", role=ROLE_OWNER)


@pytest.fixture
def operator():
    return Principal(user_id="user-2", tenant_id="tenant", role=ROLE_OPERATOR)


@pytest.fixture
def observer():
    return Principal(user_id="user-3", tenant_id="tenant", role=ROLE_OBSERVER)


@pytest.fixture
def device_factory(stores):
    def _factory(**kwargs):
        kwargs.setdefault("tenant_id", "tenant")
        kwargs.setdefault("name", "device")
        return stores.devices.register_device(**kwargs)

    return _factory
