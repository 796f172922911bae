"""Shared parsing helpers for config, CLI, and proxy input normalization."""

from __future__ import annotations


_TRUE_BOOLEAN_TOKENS = frozenset({"1", "true", "yes", "on"})
_FALSE_BOOLEAN_TOKENS = frozenset({"0", "false", "no", "off"})


def normalize_optional_string(value: object) -> str | None:
    """Normalize an optional value to a stripped non-empty string.

    Returns:
        Stripped string value, or `None` when the value is empty after trimming.
    """

    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return text


def parse_permissive_boolean(value: object) -> bool | None:
    """Parse a permissive boolean token and return `None` for invalid values."""

    if isinstance(value, bool):
        return value

    normalized = normalize_optional_string(value)
    if normalized is None:
        return None

    token = normalized.lower()
    if token in _TRUE_BOOLEAN_TOKENS:
        return True
    if token in _FALSE_BOOLEAN_TOKENS:
        return False
    return None


def parse_bounded_float(
    value: object,
    field_name: str,
    minimum: float,
    maximum: float,
) -> float:
    """Parse a number and require it to lie within `[minimum, maximum]`.

    Raises:
        ValueError: If the value is not numeric or falls outside the range.
    """

    if isinstance(value, bool):
        raise ValueError(f"`{field_name}` must be a number.")
    try:
        parsed = float(str(value).strip()) if isinstance(value, str) else float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ValueError(f"`{field_name}` must be a number.") from exc
    if not minimum <= parsed <= maximum:
        raise ValueError(f"`{field_name}` must be between {minimum} and {maximum}.")
    return parsed


def parse_positive_int(value: object, field_name: str) -> int:
    """Parse a strictly positive integer."""

    if isinstance(value, bool):
        raise ValueError(f"`{field_name}` must be a positive integer.")
    try:
        parsed = int(str(value).strip()) if not isinstance(value, int) else value
    except ValueError as exc:
        raise ValueError(f"`{field_name}` must be a positive integer.") from exc
    if parsed <= 0:
        raise ValueError(f"`{field_name}` must be a positive integer.")
    return parsed
