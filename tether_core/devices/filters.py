from __future__ import annotations

import base64
import binascii
import json
from dataclasses import asdict
from typing import Callable, Iterable, Sequence

from tether_core.devices.types import Device, Filter
from tether_core.errors import FilterDecodeError

FILTER_TYPE_PROPERTY = "property"
FILTER_TYPE_OPERATOR = "operator"

PROPERTY_OPERATORS = ("contains", "eq", "bool", "gt", "lt")
LOGICAL_OPERATORS = ("and", "or")

Matcher = Callable[[Device], bool]

_TRUE_VALUES = {"1", "true", "yes", "y", "on"}


def decode_filter(payload: str | None) -> list[Filter]:
    """Decode a base64 JSON filter payload into predicates.

    An absent payload, or one that decodes to zero bytes, means no filter.
    """
    if not payload:
        return []
    try:
        raw = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise FilterDecodeError("filter is not valid base64") from exc
    if not raw:
        return []
    try:
        items = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise FilterDecodeError("filter is not valid JSON") from exc
    if not isinstance(items, list):
        raise FilterDecodeError("filter must be a JSON array")
    return parse_filters(items)


def encode_filter(filters: Iterable[Filter]) -> str:
    data = json.dumps([asdict(item) for item in filters]).encode("utf-8")
    return base64.b64encode(data).decode("ascii")


def parse_filters(items: Iterable[object]) -> list[Filter]:
    results: list[Filter] = []
    for item in items:
        if not isinstance(item, dict):
            raise FilterDecodeError("filter predicate must be an object")
        kind = str(item.get("type") or "")
        params = item.get("params")
        if not isinstance(params, dict):
            raise FilterDecodeError(f"filter predicate {kind!r} has no params")
        if kind == FILTER_TYPE_PROPERTY:
            if not params.get("name"):
                raise FilterDecodeError("property predicate requires a name")
            if params.get("operator") not in PROPERTY_OPERATORS:
                raise FilterDecodeError(
                    f"unsupported property operator: {params.get('operator')!r}"
                )
        elif kind == FILTER_TYPE_OPERATOR:
            if str(params.get("name", "")).lower() not in LOGICAL_OPERATORS:
                raise FilterDecodeError(
                    f"unsupported logical operator: {params.get('name')!r}"
                )
        else:
            raise FilterDecodeError(f"unsupported filter type: {kind!r}")
        results.append(Filter(type=kind, params=dict(params)))
    return results


def build_matcher(filters: Sequence[Filter]) -> Matcher:
    """Compile predicates into a single device matcher.

    A logical operator folds every matcher accumulated so far into one using
    ``and``/``or``. Whatever is left at the end is combined with ``and``.
    """
    stack: list[Matcher] = []
    for item in filters:
        if item.type == FILTER_TYPE_PROPERTY:
            stack.append(_property_matcher(item.params))
            continue
        if not stack:
            continue
        combined = list(stack)
        stack.clear()
        if str(item.params.get("name", "")).lower() == "or":
            stack.append(lambda device, ms=combined: any(m(device) for m in ms))
        else:
            stack.append(lambda device, ms=combined: all(m(device) for m in ms))
    if not stack:
        return lambda device: True
    return lambda device: all(m(device) for m in stack)


def _property_matcher(params: dict[str, object]) -> Matcher:
    name = str(params.get("name"))
    operator = params.get("operator")
    expected = params.get("value")

    def match(device: Device) -> bool:
        actual = _resolve(device, name)
        if operator == "contains":
            return _contains(actual, expected)
        if operator == "eq":
            return actual == expected
        if operator == "bool":
            return bool(actual) == _as_bool(expected)
        if operator == "gt":
            return _compare(actual, expected) > 0
        if operator == "lt":
            return _compare(actual, expected) < 0
        return False

    return match


def _resolve(device: Device, name: str) -> object:
    head, _, rest = name.partition(".")
    value: object = getattr(device, head, None)
    for part in rest.split(".") if rest else ():
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


def _contains(actual: object, expected: object) -> bool:
    if actual is None or expected is None:
        return False
    if isinstance(actual, (list, tuple)):
        wanted = expected if isinstance(expected, list) else [expected]
        return all(item in actual for item in wanted)
    return str(expected).lower() in str(actual).lower()


def _as_bool(value: object) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_VALUES
    return bool(value)


def _compare(actual: object, expected: object) -> int:
    if actual is None or expected is None:
        return 0
    try:
        return _sign(float(actual), float(expected))
    except (TypeError, ValueError):
        return _sign(str(actual), str(expected))


def _sign(left, right) -> int:
    return (left > right) - (left < right)
