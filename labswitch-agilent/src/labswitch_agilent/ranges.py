"""SCPI channel-list range expressions.

The 34980A accepts channel lists such as ``(@1101:1104,1107,1201:1216)``.
The expression inside the parentheses is a comma-separated list of single
channels and inclusive ``low:high`` ranges, written here strictly ascending
with no overlaps and no spaces.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Sequence

from labswitch_scpi.number import parse_bools

if TYPE_CHECKING:
    from labswitch_agilent.translator import AddressTranslator


def compress_relays(relays: Iterable[int]) -> str:
    """Encode relay addresses as a range expression.

    Duplicates are collapsed and the relays sorted before encoding. Runs of
    two or more consecutive addresses become ``first:last``; isolated ones
    are written bare.

    Example:
        >>> compress_relays([12, 10, 15, 11])
        '10:12,15'
        >>> compress_relays([])
        ''
    """
    ordered = sorted(set(relays))
    tokens: list[str] = []
    start = 0
    for index in range(1, len(ordered) + 1):
        if index < len(ordered) and ordered[index] == ordered[index - 1] + 1:
            continue
        first, last = ordered[start], ordered[index - 1]
        tokens.append(str(first) if first == last else f"{first}:{last}")
        start = index
    return ",".join(tokens)


def compress_pins(translator: AddressTranslator, pins: Iterable[int]) -> str:
    """Resolve fixture pins and encode their relays as a range expression.

    Adjacency is judged on the relay addresses, since those are what the
    instrument switches.

    Raises:
        UnknownPinError: If any pin is not in the mapping table.
    """
    return compress_relays(translator.pins_to_relays(sorted(pins)))


def expand_range_expression(expression: str) -> list[int]:
    """Expand a range expression into its ascending list of addresses.

    An optional ``(@...)`` wrapper is accepted.

    Raises:
        ValueError: If a token is malformed, a range is reversed, or the
            tokens are not strictly ascending.
    """
    text = expression.strip()
    if text.startswith("(@") and text.endswith(")"):
        text = text[2:-1]
    if not text:
        return []

    expanded: list[int] = []
    for token in text.split(","):
        low_text, sep, high_text = token.partition(":")
        try:
            low = int(low_text)
            high = int(high_text) if sep else low
        except ValueError:
            raise ValueError(f"Invalid channel-list token {token!r} in {expression!r}") from None
        if high < low:
            raise ValueError(f"Reversed range {token!r} in {expression!r}")
        if expanded and low <= expanded[-1]:
            raise ValueError(f"Channel list {expression!r} is not strictly ascending")
        expanded.extend(range(low, high + 1))
    return expanded


def decode_states(response: str, relays: Sequence[int]) -> dict[int, bool]:
    """Decode a ``ROUT:CLOS?`` response.

    Args:
        response: Comma-separated ``0``/``1`` tokens.
        relays: The expanded, ascending relay list the query was issued for.

    Returns:
        Closed state keyed by relay address.

    Raises:
        ValueError: If the token count does not match ``relays``.
    """
    states = parse_bools(response)
    if len(states) != len(relays):
        raise ValueError(
            f"State response has {len(states)} values for {len(relays)} relays: {response!r}"
        )
    return dict(zip(relays, states))
