from __future__ import annotations

import hashlib
import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable

from tether_core.accounts.types import Member, Namespace, SetupRequest, User
from tether_core.auth.rbac import ROLE_OWNER
from tether_core.errors import (
    NamespaceDuplicatedError,
    StoreError,
    UserDuplicatedError,
)
from tether_core.logging import get_logger

if TYPE_CHECKING:
    from tether_core.stores.interfaces import NamespaceStore, UserStore

logger = get_logger(__name__)


def hash_password(raw_password: str) -> str:
    return hashlib.sha256(raw_password.encode("utf-8")).hexdigest()


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def setup(
    *,
    users: UserStore,
    namespaces: NamespaceStore,
    request: SetupRequest,
    clock: Callable[[], datetime] = _utc_now,
    id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
) -> tuple[User, Namespace]:
    """Create the first user and its namespace.

    Two steps, no compensation: when the namespace cannot be created the user
    created in the first step stays in place.
    """
    created_at = clock().isoformat()
    user = User(
        id=id_factory(),
        name=request.name,
        email=request.email,
        username=request.username,
        password=hash_password(request.password),
        confirmed=True,
        created_at=created_at,
    )
    try:
        users.create_user(user)
    except StoreError as exc:
        logger.warning(
            "Setup failed creating user",
            extra={"error_code": "user_duplicated", "error_message": str(exc)},
        )
        raise UserDuplicatedError([request.username]) from exc

    namespace = Namespace(
        tenant_id=id_factory(),
        name=request.namespace,
        owner=user.id,
        members=(Member(id=user.id, role=ROLE_OWNER),),
        max_devices=0,
        created_at=created_at,
    )
    try:
        namespaces.create_namespace(namespace)
    except StoreError as exc:
        # TODO: decide whether the user created above should be removed here.
        logger.warning(
            "Setup failed creating namespace; user left in place",
            extra={
                "error_code": "namespace_duplicated",
                "error_message": str(exc),
            },
        )
        raise NamespaceDuplicatedError(request.namespace) from exc

    logger.info(
        "Setup completed",
        extra={"tenant_id": namespace.tenant_id, "status": "ok"},
    )
    return user, namespace
