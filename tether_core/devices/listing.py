from __future__ import annotations

import time
from typing import TYPE_CHECKING

from tether_core.config import Config, get_config
from tether_core.devices.filters import decode_filter
from tether_core.devices.types import Device, PageQuery
from tether_core.logging import get_logger

if TYPE_CHECKING:
    from tether_core.stores.interfaces import DeviceStore

logger = get_logger(__name__)


def normalize_page_query(
    query: PageQuery | None,
    *,
    default_per_page: int,
    max_per_page: int,
) -> PageQuery:
    page = query.page if query else 0
    per_page = query.per_page if query else 0
    if page < 1:
        page = 1
    if per_page < 1:
        per_page = default_per_page
    per_page = min(per_page, max_per_page)
    return PageQuery(page=page, per_page=per_page)


class ListingEngine:
    """Read-only device enumeration scoped to a tenant.

    Listing is not guarded; the tenant is already fixed by the caller.
    """

    def __init__(self, devices: DeviceStore, *, config: Config | None = None) -> None:
        self._devices = devices
        self._config = config

    def normalize(self, query: PageQuery | None) -> PageQuery:
        config = self._config or get_config()
        return normalize_page_query(
            query,
            default_per_page=config.device_page_default,
            max_per_page=config.device_page_max,
        )

    def list_devices(
        self,
        tenant: str,
        query: PageQuery | None = None,
        filter_payload: str | None = None,
        status: str = "",
        sort_by: str = "",
        order_by: str = "",
    ) -> tuple[list[Device], int]:
        start = time.monotonic()
        filters = decode_filter(filter_payload)
        page_query = self.normalize(query)
        devices, count = self._devices.list_devices(
            tenant_id=tenant,
            query=page_query,
            filters=filters,
            status=status or "",
            sort_by=sort_by or "",
            order_by=order_by or "",
        )
        logger.debug(
            "Listed devices",
            extra={
                "tenant_id": tenant or None,
                "count": count,
                "duration_ms": int((time.monotonic() - start) * 1000),
            },
        )
        return list(devices or []), count
