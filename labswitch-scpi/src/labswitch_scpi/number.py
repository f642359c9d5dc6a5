"""SCPI value parsing and formatting utilities.

Handles NR1/NR2/NR3 numeric responses, the ``NAN``/``INF``/``NINF`` special
values, and the ``0``/``1``/``ON``/``OFF`` boolean tokens returned by state
queries such as ``ROUT:CLOS?``.
"""

from __future__ import annotations

import math

_SPECIAL_FLOAT_MAP: dict[str, float] = {
    "NAN": float("nan"),
    "INF": float("inf"),
    "NINF": float("-inf"),
    "-INF": float("-inf"),
}


def parse_number(text: str) -> float:
    """Parse a SCPI numeric response into a float.

    Args:
        text: The raw response token. Surrounding whitespace is ignored.

    Returns:
        The parsed value.

    Raises:
        ValueError: If *text* is not a SCPI number.
    """
    token = text.strip().upper()
    special = _SPECIAL_FLOAT_MAP.get(token)
    if special is not None:
        return special
    try:
        return float(token)
    except ValueError:
        raise ValueError(f"Invalid SCPI number: {text!r}") from None


def parse_numbers(text: str) -> tuple[float, ...]:
    """Parse a comma-separated list of SCPI numbers (e.g. a ``:READ?`` response)."""
    return tuple(parse_number(part) for part in text.split(","))


def parse_int(text: str) -> int:
    """Parse a SCPI NR1 (integer) response.

    Raises:
        ValueError: If *text* is not a valid integer.
    """
    token = text.strip()
    try:
        return int(token)
    except ValueError:
        raise ValueError(f"Invalid SCPI integer: {text!r}") from None


def parse_bool(text: str) -> bool:
    """Parse a SCPI boolean token.

    Accepts ``1``/``0`` and ``ON``/``OFF`` (case-insensitive).

    Raises:
        ValueError: If *text* is not a recognized boolean token.
    """
    token = text.strip().upper()
    if token in ("1", "ON"):
        return True
    if token in ("0", "OFF"):
        return False
    raise ValueError(f"Invalid SCPI boolean: {text!r}")


def parse_bools(text: str) -> tuple[bool, ...]:
    """Parse a comma-separated list of SCPI boolean tokens.

    An empty response yields an empty tuple.

    Raises:
        ValueError: If any token is not a recognized boolean.
    """
    if not text.strip():
        return ()
    return tuple(parse_bool(part) for part in text.split(","))


def format_number(value: float) -> str:
    """Format a float for use in a SCPI command.

    Non-finite values are rendered as ``NAN``, ``INF`` and ``NINF``.
    """
    if math.isnan(value):
        return "NAN"
    if math.isinf(value):
        return "NINF" if value < 0 else "INF"
    return repr(float(value))


def format_bool(value: bool) -> str:
    """Format a boolean as ``ON`` or ``OFF``."""
    return "ON" if value else "OFF"
