from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Principal:
    user_id: str
    tenant_id: str | None
    role: str | None
    username: str | None = None

    @property
    def tenant(self) -> str:
        return self.tenant_id or ""
