from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class User:
    id: str
    name: str
    email: str
    username: str
    password: str
    confirmed: bool
    created_at: str


@dataclass(frozen=True)
class Member:
    id: str
    role: str


@dataclass(frozen=True)
class Namespace:
    tenant_id: str
    name: str
    owner: str
    members: tuple[Member, ...]
    max_devices: int
    created_at: str


@dataclass(frozen=True)
class SetupRequest:
    email: str
    name: str
    username: str
    password: str
    namespace: str
