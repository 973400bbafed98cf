from __future__ import annotations

from typing import Iterable

from tether_core.errors import TagFormatError, TagsDuplicatedInBatchError

TAG_MIN_LENGTH = 3
TAG_MAX_LENGTH = 255
TAG_FORBIDDEN_CHARS = ("/", "&", "@")


def validate_tag(tag: str) -> None:
    if not isinstance(tag, str):
        raise TagFormatError(str(tag), "must be a string")
    if len(tag) < TAG_MIN_LENGTH:
        raise TagFormatError(tag, f"must have at least {TAG_MIN_LENGTH} characters")
    if len(tag) > TAG_MAX_LENGTH:
        raise TagFormatError(tag, f"must have at most {TAG_MAX_LENGTH} characters")
    for char in TAG_FORBIDDEN_CHARS:
        if char in tag:
            raise TagFormatError(tag, f"must not contain {char!r}")


def find_duplicates(tags: Iterable[str]) -> tuple[str, ...]:
    seen: set[str] = set()
    duplicates: list[str] = []
    for tag in tags:
        if tag in seen and tag not in duplicates:
            duplicates.append(tag)
        seen.add(tag)
    return tuple(duplicates)


def validate_tags(tags: Iterable[str]) -> tuple[str, ...]:
    """Check a replacement tag set and return it as a tuple.

    Duplicates are reported before format problems, each with its own error.
    """
    items = tuple(tags)
    duplicates = find_duplicates(items)
    if duplicates:
        raise TagsDuplicatedInBatchError(duplicates)
    for tag in items:
        validate_tag(tag)
    return items
