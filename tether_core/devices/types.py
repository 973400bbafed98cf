from __future__ import annotations

from dataclasses import dataclass

STATUS_PENDING = "pending"
STATUS_ACCEPTED = "accepted"
STATUS_REJECTED = "rejected"
STATUS_UNUSED = "unused"

DEVICE_STATUSES: tuple[str, ...] = (
    STATUS_PENDING,
    STATUS_ACCEPTED,
    STATUS_REJECTED,
    STATUS_UNUSED,
)

# Action words callers use for status transitions.
STATUS_ACTIONS: dict[str, str] = {
    "accept": STATUS_ACCEPTED,
    "reject": STATUS_REJECTED,
    "pending": STATUS_PENDING,
    "unused": STATUS_UNUSED,
}


@dataclass(frozen=True)
class Device:
    uid: str
    tenant_id: str
    name: str
    status: str = STATUS_PENDING
    online: bool = False
    public_url: bool = False
    public_url_address: str | None = None
    tags: tuple[str, ...] = ()
    info: dict[str, object] | None = None
    last_seen_at: str | None = None
    disconnected_at: str | None = None
    created_at: str = ""
    updated_at: str = ""

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags


@dataclass(frozen=True)
class Filter:
    type: str
    params: dict[str, object]


@dataclass(frozen=True)
class PageQuery:
    page: int = 0
    per_page: int = 0

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page if self.page > 0 else 0
