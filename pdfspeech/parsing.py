"""Shared parsing helpers for config and CLI value normalization."""

from __future__ import annotations


def normalize_optional_string(value: object) -> str | None:
    """Normalize an optional value to a stripped non-empty string.

    Args:
        value: Arbitrary input value.

    Returns:
        Stripped string value, or `None` when the value is empty after trimming.
    """

    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return text


def parse_optional_int(value: object, field_name: str, minimum: int | None = None) -> int | None:
    """Parse an optional integer value, returning `None` for blank input.

    Raises:
        ValueError: If the value is not an integer or is below ``minimum``.
    """

    if isinstance(value, bool):
        raise ValueError(f"`{field_name}` must be an integer.")
    if isinstance(value, int):
        parsed = value
    else:
        normalized = normalize_optional_string(value)
        if normalized is None:
            return None
        try:
            parsed = int(normalized)
        except ValueError as exc:
            raise ValueError(f"`{field_name}` must be an integer.") from exc

    if minimum is not None and parsed < minimum:
        raise ValueError(f"`{field_name}` must be >= {minimum}.")
    return parsed


def parse_optional_float(value: object, field_name: str, minimum: float = 0.0) -> float | None:
    """Parse an optional non-negative float value, returning `None` for blank input."""

    if isinstance(value, bool):
        raise ValueError(f"`{field_name}` must be a number.")
    if isinstance(value, (int, float)):
        parsed = float(value)
    else:
        normalized = normalize_optional_string(value)
        if normalized is None:
            return None
        try:
            parsed = float(normalized)
        except ValueError as exc:
            raise ValueError(f"`{field_name}` must be a number.") from exc

    if parsed < minimum:
        raise ValueError(f"`{field_name}` must be >= {minimum}.")
    return parsed
