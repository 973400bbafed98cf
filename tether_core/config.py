import os
from dataclasses import dataclass
from functools import lru_cache

DEFAULT_STORE_URI = "./.tether"
DEFAULT_PER_PAGE = 10
MAX_PER_PAGE = 100


@dataclass(frozen=True)
class Config:
    store_uri: str
    store_backend: str
    env: str
    log_level: str
    device_page_default: int
    device_page_max: int
    rbac_roles_uri: str | None = None

    @classmethod
    def from_env(cls) -> "Config":
        store_backend = os.getenv("CONTROL_PLANE_STORE", "json").strip().lower()
        if store_backend != "json":
            raise ValueError(f"Unsupported CONTROL_PLANE_STORE: {store_backend}")

        page_default = _parse_int("DEVICE_PAGE_DEFAULT", DEFAULT_PER_PAGE)
        page_max = _parse_int("DEVICE_PAGE_MAX", MAX_PER_PAGE)
        if page_default < 1:
            raise ValueError("DEVICE_PAGE_DEFAULT must be at least 1")
        if page_max < page_default:
            raise ValueError(
                "DEVICE_PAGE_MAX must not be lower than DEVICE_PAGE_DEFAULT"
            )

        return cls(
            store_uri=os.getenv("TETHER_STORE_URI", DEFAULT_STORE_URI),
            store_backend=store_backend,
            env=os.getenv("ENV", "dev"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            device_page_default=page_default,
            device_page_max=page_max,
            rbac_roles_uri=os.getenv("RBAC_ROLES_URI") or None,
        )


def _parse_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer") from exc


@lru_cache(maxsize=1)
def get_config() -> Config:
    return Config.from_env()
