from tether_core.storage.paths import join_uri

__all__ = ["join_uri"]
