from tether_core.stores.interfaces import DeviceStore, NamespaceStore, UserStore
from tether_core.stores.registry import (
    JsonDeviceStore,
    JsonNamespaceStore,
    JsonUserStore,
    StoreBundle,
    default_store_bundle,
    get_store_bundle,
)

__all__ = [
    "DeviceStore",
    "JsonDeviceStore",
    "JsonNamespaceStore",
    "JsonUserStore",
    "NamespaceStore",
    "StoreBundle",
    "UserStore",
    "default_store_bundle",
    "get_store_bundle",
]
