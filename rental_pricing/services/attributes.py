import re
from typing import Iterable, List, Mapping, Optional

from rental_pricing.config.settings import get_settings
from rental_pricing.core.exceptions import (
    InvalidAttributeAxisException,
    TooManyAttributeAxesException,
)
from rental_pricing.schemas import (
    DEFAULT_COMBINATION_KEY,
    BookingAttributeAxis,
    SelectionMode,
    UnitAttributes,
)

_WHITESPACE_RE = re.compile(r"\s+")
_INVALID_KEY_CHARS_RE = re.compile(r"[^a-z0-9_-]+")
_REPEATED_UNDERSCORE_RE = re.compile(r"_+")

Axes = Optional[Iterable[BookingAttributeAxis]]
Attributes = Optional[Mapping[str, object]]


def _normalize_token(value: str) -> str:
    return _WHITESPACE_RE.sub(" ", value.strip())


def normalize_axis_key(value: str) -> str:
    key = _normalize_token(value).lower()
    key = _INVALID_KEY_CHARS_RE.sub("_", key)
    key = _REPEATED_UNDERSCORE_RE.sub("_", key)
    return key.strip("_")


def normalize_attribute_value(value: str) -> str:
    return _normalize_token(value)


def get_sorted_axes(axes: Axes) -> List[BookingAttributeAxis]:
    return sorted(axes or [], key=lambda axis: axis.position)


def validate_axes(axes: Axes) -> List[BookingAttributeAxis]:
    """Check the per-product axis limit and key uniqueness, return axes in order."""
    sorted_axes = get_sorted_axes(axes)
    limit = get_settings().max_booking_attribute_axes
    if len(sorted_axes) > limit:
        raise TooManyAttributeAxesException(len(sorted_axes), limit)

    seen = set()
    for axis in sorted_axes:
        key = normalize_axis_key(axis.key)
        if not key:
            raise InvalidAttributeAxisException(f"Axis key {axis.key!r} is empty")
        if key in seen:
            raise InvalidAttributeAxisException(f"Duplicate axis key {key!r}")
        seen.add(key)
    return sorted_axes


def canonicalize_attributes(axes: Axes, attributes: Attributes) -> UnitAttributes:
    source = attributes or {}
    normalized: UnitAttributes = {}

    for axis in get_sorted_axes(axes):
        raw_value = source.get(axis.key)
        if not isinstance(raw_value, str):
            continue
        value = normalize_attribute_value(raw_value)
        if value:
            normalized[axis.key] = value

    return normalized


def has_complete_attributes(axes: Axes, attributes: Attributes) -> bool:
    sorted_axes = get_sorted_axes(axes)
    normalized = canonicalize_attributes(sorted_axes, attributes)
    return all(axis.key in normalized for axis in sorted_axes)


def build_combination_key(axes: Axes, attributes: Attributes) -> str:
    sorted_axes = get_sorted_axes(axes)
    if not sorted_axes:
        return DEFAULT_COMBINATION_KEY

    normalized = canonicalize_attributes(sorted_axes, attributes)
    tokens = []
    for axis in sorted_axes:
        value = normalized.get(axis.key)
        if not value:
            return DEFAULT_COMBINATION_KEY
        tokens.append(f"{axis.key}:{value}")

    return "|".join(tokens)


def build_partial_combination_key(axes: Axes, attributes: Attributes) -> str:
    sorted_axes = get_sorted_axes(axes)
    normalized = canonicalize_attributes(sorted_axes, attributes)
    tokens = [
        f"{axis.key}:{normalized[axis.key]}"
        for axis in sorted_axes
        if axis.key in normalized
    ]
    return "|".join(tokens) if tokens else DEFAULT_COMBINATION_KEY


def matches_selected_attributes(selected: Attributes, candidate: Attributes) -> bool:
    """True when every non-blank selected value equals the candidate's value.

    Extra candidate attributes are ignored, so a partial selection matches
    every variant below it.
    """
    candidate = candidate or {}
    for key, value in (selected or {}).items():
        if not isinstance(value, str):
            continue
        expected = normalize_attribute_value(value)
        if not expected:
            continue
        actual = candidate.get(key)
        if not isinstance(actual, str) or normalize_attribute_value(actual) != expected:
            return False
    return True


def get_deterministic_combination_sort_value(axes: Axes, attributes: Attributes) -> str:
    sorted_axes = get_sorted_axes(axes)
    if not sorted_axes:
        return DEFAULT_COMBINATION_KEY

    normalized = canonicalize_attributes(sorted_axes, attributes)
    return "|".join(f"{axis.key}:{normalized.get(axis.key, '')}" for axis in sorted_axes)


def get_selection_mode(axes: Axes, selected: Attributes) -> SelectionMode:
    sorted_axes = get_sorted_axes(axes)
    if not sorted_axes:
        return SelectionMode.NONE

    selected_count = len(canonicalize_attributes(sorted_axes, selected))
    if selected_count == 0:
        return SelectionMode.NONE
    if selected_count >= len(sorted_axes):
        return SelectionMode.FULL
    return SelectionMode.PARTIAL
