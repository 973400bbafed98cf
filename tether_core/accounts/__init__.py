from tether_core.accounts.provisioning import hash_password, setup
from tether_core.accounts.types import Member, Namespace, SetupRequest, User

__all__ = [
    "Member",
    "Namespace",
    "SetupRequest",
    "User",
    "hash_password",
    "setup",
]
