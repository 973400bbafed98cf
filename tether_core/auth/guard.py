from __future__ import annotations

from typing import Callable, Mapping, TypeVar

from tether_core.auth.rbac import Role, is_action_allowed
from tether_core.errors import ForbiddenError
from tether_core.logging import get_logger

T = TypeVar("T")

logger = get_logger(__name__)


def evaluate_permission(
    role: str | None,
    action: str,
    operation: Callable[[], T],
    *,
    roles: Mapping[str, Role] | None = None,
) -> T:
    """Run ``operation`` only when ``role`` may perform ``action``.

    On denial ``ForbiddenError`` is raised and ``operation`` is never called.
    Otherwise it is called once and its result or exception is passed through
    untouched.
    """
    if not is_action_allowed(role, action, roles):
        logger.warning(
            "Permission denied",
            extra={"role": role, "action": action, "error_code": "forbidden"},
        )
        raise ForbiddenError(role, action)
    return operation()
