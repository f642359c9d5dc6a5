"""Agilent 34980A switch mainframe emulator.

Provides an in-process SCPI emulator implementing the ``ScpiTransport``
protocol, populated with 34932A matrix modules (or any other card model) in
chosen slots. Relay state is tracked so open/close/state round trips can be
tested without hardware.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Mapping

from labswitch_agilent.mapping import BANKS_PER_MODULE, MATRIX_COLUMNS, MATRIX_ROWS, split_relay
from labswitch_agilent.modules import SLOT_COUNT, ModuleType

# ---------------------------------------------------------------------------
# Long-form -> short-form SCPI keyword map
# ---------------------------------------------------------------------------

_LONG_TO_SHORT: dict[str, str] = {
    "ROUTE": "ROUT",
    "CLOSE": "CLOS",
    "SYSTEM": "SYST",
    "CTYPE": "CTYP",
    "ERROR": "ERR",
}


def _normalize_header(header: str) -> str:
    """Normalize a SCPI header to canonical short form.

    ``:ROUTe:CLOSe`` and ``ROUT:CLOS`` both become ``ROUT:CLOS``.
    """
    upper = header.upper().lstrip(":")
    return ":".join(_LONG_TO_SHORT.get(seg, seg) for seg in upper.split(":"))


class _ChannelListError(ValueError):
    """Malformed channel list argument."""


def _parse_channel_list(args: str) -> list[int]:
    """Parse ``(@1101:1103,1201)`` into channels, keeping the given order."""
    text = args.strip()
    if not (text.startswith("(@") and text.endswith(")")):
        raise _ChannelListError(args)
    channels: list[int] = []
    for token in text[2:-1].split(","):
        low_text, sep, high_text = token.strip().partition(":")
        try:
            low = int(low_text)
            high = int(high_text) if sep else low
        except ValueError:
            raise _ChannelListError(args) from None
        step = 1 if high >= low else -1
        channels.extend(range(low, high + step, step))
    return channels


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Agilent34980AEmulatorConfig:
    """Configuration for a 34980A emulator instance.

    Args:
        identity: ``*IDN?`` response string.
        slot_models: Card model per slot (index 0 is slot 1); ``""`` for an
            empty slot. Exactly eight entries.
    """

    identity: str
    slot_models: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.identity:
            raise ValueError("identity must be non-empty")
        if len(self.slot_models) != SLOT_COUNT:
            raise ValueError(f"slot_models must have {SLOT_COUNT} entries")


# ---------------------------------------------------------------------------
# Emulator
# ---------------------------------------------------------------------------


class Agilent34980AEmulator:
    """In-process 34980A emulator implementing ``ScpiTransport``.

    Args:
        config: Emulator configuration describing the installed cards.
    """

    def __init__(self, config: Agilent34980AEmulatorConfig) -> None:
        self._config = config
        self._closed: set[int] = set()
        self._response_buffer: str = ""
        self._error_queue: list[tuple[int, str]] = []
        self._log: list[str] = []

        self._set_handlers: dict[str, Callable[[str], None]] = {
            "ROUT:CLOS": self._close_channels,
            "ROUT:OPEN": self._open_channels,
            "ROUT:OPEN:ALL": self._open_all,
        }

        self._query_handlers: dict[str, Callable[[str], str]] = {
            "SYST:CTYP?": self._card_type,
            "ROUT:CLOS?": self._query_closed,
            "ROUT:OPEN?": self._query_open,
        }

    # -- Transport interface ------------------------------------------------

    def write(self, message: str) -> None:
        """Process one or more ``;``-separated SCPI commands or queries."""
        for line in message.split(";"):
            line = line.strip()
            if not line:
                continue
            self._log.append(line)
            is_query, header, args = self._parse_line(line)
            if self._handle_common_command(header, is_query):
                continue
            self._dispatch(header, args, is_query)

    def read(self) -> str:
        """Return and clear the buffered response."""
        resp = self._response_buffer
        self._response_buffer = ""
        return resp

    def close(self) -> None:
        """Close the emulator (no-op for in-process transport)."""

    # -- Test helpers -------------------------------------------------------

    @property
    def closed_relays(self) -> frozenset[int]:
        """Relays currently closed."""
        return frozenset(self._closed)

    @property
    def command_log(self) -> tuple[str, ...]:
        """Every command and query received, in order."""
        return tuple(self._log)

    def queue_error(self, code: int, message: str) -> None:
        """Push an entry onto the error queue as if the last command failed."""
        self._error_queue.append((code, message))

    # -- Parsing / dispatch -------------------------------------------------

    @staticmethod
    def _parse_line(line: str) -> tuple[bool, str, str]:
        is_query = "?" in line
        if is_query:
            qmark_idx = line.index("?")
            return True, line[: qmark_idx + 1], line[qmark_idx + 1 :].strip()
        parts = line.split(None, 1)
        return False, parts[0], parts[1] if len(parts) > 1 else ""

    def _handle_common_command(self, header: str, is_query: bool) -> bool:
        upper_header = header.upper()
        if upper_header == "*IDN?":
            self._response_buffer = self._config.identity
            return True
        if upper_header == "*OPC?":
            self._response_buffer = "1"
            return True
        if upper_header == "*RST":
            self._closed.clear()
            return True
        if upper_header == "*CLS":
            self._error_queue.clear()
            return True
        if is_query and _normalize_header(header.rstrip("?")) == "SYST:ERR":
            self._response_buffer = self._pop_error()
            return True
        return False

    def _dispatch(self, header: str, args: str, is_query: bool) -> None:
        if is_query:
            query = self._query_handlers.get(_normalize_header(header.rstrip("?")) + "?")
            if query is None:
                self._error_queue.append((-113, "Undefined header"))
                return
            self._response_buffer = query(args)
        else:
            command = self._set_handlers.get(_normalize_header(header))
            if command is None:
                self._error_queue.append((-113, "Undefined header"))
                return
            command(args)

    def _pop_error(self) -> str:
        if self._error_queue:
            code, msg = self._error_queue.pop(0)
            return f'{code:+d},"{msg}"'
        return '+0,"No error"'

    # -- Channel helpers ----------------------------------------------------

    def _valid_channels(self, args: str) -> list[int] | None:
        """Parse and validate a channel list, queueing an error on failure."""
        try:
            channels = _parse_channel_list(args)
        except _ChannelListError:
            self._error_queue.append((-104, "Data type error"))
            return None
        for channel in channels:
            slot, row, column = split_relay(channel)
            if (
                not 1 <= slot <= SLOT_COUNT
                or self._config.slot_models[slot - 1] != ModuleType.MATRIX_34932A.value
                or not 1 <= row <= BANKS_PER_MODULE * MATRIX_ROWS
                or not 1 <= column <= MATRIX_COLUMNS
            ):
                self._error_queue.append((-222, "Data out of range"))
                return None
        return channels

    # -- Command handlers ---------------------------------------------------

    def _close_channels(self, args: str) -> None:
        channels = self._valid_channels(args)
        if channels is not None:
            self._closed.update(channels)

    def _open_channels(self, args: str) -> None:
        channels = self._valid_channels(args)
        if channels is not None:
            self._closed.difference_update(channels)

    def _open_all(self, args: str) -> None:
        target = args.strip().upper()
        if target == "ALL":
            self._closed.clear()
            return
        try:
            slot = int(target)
        except ValueError:
            self._error_queue.append((-104, "Data type error"))
            return
        self._closed = {ch for ch in self._closed if split_relay(ch)[0] != slot}

    # -- Query handlers -----------------------------------------------------

    def _card_type(self, args: str) -> str:
        try:
            slot = int(args)
        except ValueError:
            self._error_queue.append((-104, "Data type error"))
            return ""
        if not 1 <= slot <= SLOT_COUNT:
            self._error_queue.append((-222, "Data out of range"))
            return ""
        model = self._config.slot_models[slot - 1]
        if not model:
            return ""
        return f"Agilent Technologies,{model},0,2.12"

    def _query_closed(self, args: str) -> str:
        channels = self._valid_channels(args)
        if channels is None:
            return ""
        return ",".join("1" if ch in self._closed else "0" for ch in channels)

    def _query_open(self, args: str) -> str:
        channels = self._valid_channels(args)
        if channels is None:
            return ""
        return ",".join("0" if ch in self._closed else "1" for ch in channels)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def make_34980a_emulator(
    matrix_slots: Iterable[int] = (1,),
    other_cards: Mapping[int, str] | None = None,
    serial: str = "MY44000001",
) -> Agilent34980AEmulator:
    """Create a 34980A emulator with 34932A modules in the given slots.

    Args:
        matrix_slots: Slots holding a 34932A dual 4x16 matrix.
        other_cards: Extra cards by slot, e.g. ``{2: "34921A"}``.
        serial: Serial number for the ``*IDN?`` response.

    Returns:
        Configured emulator instance.
    """
    models = [""] * SLOT_COUNT
    for slot, model in (other_cards or {}).items():
        models[slot - 1] = model
    for slot in matrix_slots:
        models[slot - 1] = ModuleType.MATRIX_34932A.value
    config = Agilent34980AEmulatorConfig(
        identity=f"Agilent Technologies,34980A,{serial},2.41-2.35-0.00-0.00",
        slot_models=tuple(models),
    )
    return Agilent34980AEmulator(config)
