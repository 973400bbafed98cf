from __future__ import annotations

from typing import Iterable


class TetherError(Exception):
    """Base error for Tether."""


class NotFoundError(TetherError):
    """Requested entity does not exist."""


class DuplicatedError(TetherError):
    """Entity collides with an existing one."""


class ValidationError(TetherError):
    """Input validation failure."""


class ForbiddenError(TetherError):
    """Role is not allowed to perform the action."""

    def __init__(self, role: str | None, action: str) -> None:
        super().__init__(f"role {role!r} is not allowed to {action}")
        self.role = role
        self.action = action


class StoreError(TetherError):
    """Failure raised by a store adapter."""


class RecordNotFoundError(StoreError):
    """Store has no record for the given key."""


class DuplicateRecordError(StoreError):
    """Store rejected a write that breaks a uniqueness constraint."""


class DeviceNotFoundError(NotFoundError):
    def __init__(self, uid: str) -> None:
        super().__init__(f"device not found: {uid}")
        self.uid = uid


class DeviceNameConflictError(NotFoundError, DuplicatedError):
    """Another device in the tenant already uses the name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"device name already in use: {name}")
        self.name = name


class TagNotFoundError(NotFoundError):
    def __init__(self, tag: str) -> None:
        super().__init__(f"tag not found: {tag}")
        self.tag = tag


class TagDuplicatedError(DuplicatedError):
    def __init__(self, tag: str) -> None:
        super().__init__(f"tag already exists: {tag}")
        self.tag = tag


class UserDuplicatedError(DuplicatedError):
    def __init__(self, usernames: Iterable[str]) -> None:
        self.usernames = tuple(usernames)
        super().__init__(f"user already exists: {', '.join(self.usernames)}")


class NamespaceDuplicatedError(DuplicatedError):
    def __init__(self, name: str) -> None:
        super().__init__(f"namespace already exists: {name}")
        self.name = name


class TagFormatError(ValidationError):
    def __init__(self, tag: str, reason: str) -> None:
        super().__init__(f"invalid tag {tag!r}: {reason}")
        self.tag = tag
        self.reason = reason


class TagsDuplicatedInBatchError(ValidationError):
    def __init__(self, tags: Iterable[str]) -> None:
        self.tags = tuple(tags)
        super().__init__(f"duplicated tags in request: {', '.join(self.tags)}")


class FilterDecodeError(ValidationError):
    """Filter payload is not valid base64-encoded JSON."""
