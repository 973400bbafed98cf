from tether_core.devices.filters import build_matcher, decode_filter, encode_filter
from tether_core.devices.listing import ListingEngine, normalize_page_query
from tether_core.devices.registry import (
    DeviceRegistry,
    derive_public_url_address,
    resolve_status,
)
from tether_core.devices.tags import validate_tag, validate_tags
from tether_core.devices.types import (
    DEVICE_STATUSES,
    STATUS_ACCEPTED,
    STATUS_PENDING,
    STATUS_REJECTED,
    STATUS_UNUSED,
    Device,
    Filter,
    PageQuery,
)

__all__ = [
    "DEVICE_STATUSES",
    "Device",
    "DeviceRegistry",
    "Filter",
    "ListingEngine",
    "PageQuery",
    "STATUS_ACCEPTED",
    "STATUS_PENDING",
    "STATUS_REJECTED",
    "STATUS_UNUSED",
    "build_matcher",
    "decode_filter",
    "derive_public_url_address",
    "encode_filter",
    "normalize_page_query",
    "resolve_status",
    "validate_tag",
    "validate_tags",
]
