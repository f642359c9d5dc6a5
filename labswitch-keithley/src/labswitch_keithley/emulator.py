"""Keithley 2400 SourceMeter emulator.

In-process SCPI emulator implementing the ``ScpiTransport`` protocol. It
stores every setting it is sent, so tests can check what the driver
configured, and answers ``:READ?`` from the programmed source level or from
values injected with :meth:`Keithley2400Emulator.set_reading`.
"""

from __future__ import annotations

_LONG_TO_SHORT: dict[str, str] = {
    "SOURCE": "SOUR",
    "SENSE": "SENS",
    "OUTPUT": "OUTP",
    "FUNCTION": "FUNC",
    "VOLTAGE": "VOLT",
    "CURRENT": "CURR",
    "PROTECTION": "PROT",
    "RANGE": "RANG",
    "SYSTEM": "SYST",
    "ERROR": "ERR",
}

_SETTINGS: frozenset[str] = frozenset(
    {
        "SOUR:FUNC",
        "OUTP:SMOD",
        "SOUR:VOLT:PROT:LEV",
        "SOUR:VOLT:MODE",
        "SOUR:CURR:MODE",
        "SOUR:DEL:AUTO",
        "SYST:AZER:STAT",
        "SENS:FUNC",
        "SENS:CURR:DC:RANG:AUTO",
        "SENS:VOLT:DC:RANG:AUTO",
        "SOUR:VOLT",
        "SOUR:VOLT:RANG",
        "SOUR:CURR",
        "SOUR:CURR:RANG",
        "SENS:CURR:PROT",
        "SENS:CURR:DC:RANG",
        "SENS:CURR:NPLC",
        "SENS:VOLT:PROT",
        "SENS:VOLT:DC:RANG",
        "SENS:VOLT:NPLC",
        "SYST:RSEN",
        "OUTP",
    }
)

# Settings whose argument must be numeric.
_NUMERIC: frozenset[str] = frozenset(
    {
        "SOUR:VOLT",
        "SOUR:VOLT:RANG",
        "SOUR:CURR",
        "SOUR:CURR:RANG",
        "SENS:CURR:PROT",
        "SENS:CURR:DC:RANG",
        "SENS:CURR:NPLC",
        "SENS:VOLT:PROT",
        "SENS:VOLT:DC:RANG",
        "SENS:VOLT:NPLC",
    }
)

MAX_VOLTAGE = 210.0
MAX_CURRENT = 1.05


def _normalize_header(header: str) -> str:
    upper = header.upper().lstrip(":")
    return ":".join(_LONG_TO_SHORT.get(seg, seg) for seg in upper.split(":"))


class Keithley2400Emulator:
    """In-process Keithley 2400 emulator implementing ``ScpiTransport``.

    Args:
        serial: Serial number for the ``*IDN?`` response.
    """

    def __init__(self, serial: str = "1234567") -> None:
        self._identity = f"KEITHLEY INSTRUMENTS INC.,MODEL 2400,{serial},C30   Mar 17 2006 09:29:29/A02  /K/J"
        self._settings: dict[str, str] = {}
        self._reading: tuple[float, float] | None = None
        self._response_buffer = ""
        self._error_queue: list[tuple[int, str]] = []

    # -- Transport interface ------------------------------------------------

    def write(self, message: str) -> None:
        """Process a SCPI command or query string."""
        line = message.strip()
        if not line:
            return
        upper = line.upper()
        if upper == "*IDN?":
            self._response_buffer = self._identity
        elif upper == "*OPC?":
            self._response_buffer = "1"
        elif upper == "*RST":
            self._settings.clear()
            self._reading = None
        elif upper == "*CLS":
            self._error_queue.clear()
        elif line.endswith("?"):
            self._query(_normalize_header(line.rstrip("?")))
        else:
            parts = line.split(None, 1)
            self._set(_normalize_header(parts[0]), parts[1] if len(parts) > 1 else "")

    def read(self) -> str:
        """Return and clear the buffered response."""
        resp = self._response_buffer
        self._response_buffer = ""
        return resp

    def close(self) -> None:
        """Close the emulator (no-op for in-process transport)."""

    # -- Test helpers -------------------------------------------------------

    @property
    def settings(self) -> dict[str, str]:
        """Copy of every setting received since the last ``*RST``."""
        return dict(self._settings)

    def set_reading(self, voltage: float, current: float) -> None:
        """Fix the voltage and current returned by ``:READ?``."""
        self._reading = (voltage, current)

    def queue_error(self, code: int, message: str) -> None:
        """Push an entry onto the error queue."""
        self._error_queue.append((code, message))

    # -- Handlers -----------------------------------------------------------

    def _set(self, header: str, args: str) -> None:
        if header not in _SETTINGS:
            self._error_queue.append((-113, "Undefined header"))
            return
        value = args.strip()
        if header in _NUMERIC:
            try:
                number = float(value)
            except ValueError:
                self._error_queue.append((-104, "Data type error"))
                return
            if header == "SOUR:VOLT" and abs(number) > MAX_VOLTAGE:
                self._error_queue.append((-222, "Data out of range"))
                return
            if header == "SOUR:CURR" and abs(number) > MAX_CURRENT:
                self._error_queue.append((-222, "Data out of range"))
                return
        self._settings[header] = value

    def _query(self, header: str) -> None:
        if header == "SYST:ERR":
            if self._error_queue:
                code, msg = self._error_queue.pop(0)
                self._response_buffer = f'{code:+d},"{msg}"'
            else:
                self._response_buffer = '0,"No error"'
        elif header == "READ":
            voltage, current = self._reading or self._sourced_reading()
            self._response_buffer = f"{voltage:+.6E},{current:+.6E},+9.910000E+37,+1.000000E+00,+2.150800E+04"
        elif header in self._settings:
            self._response_buffer = self._settings[header]
        else:
            self._error_queue.append((-113, "Undefined header"))

    def _sourced_reading(self) -> tuple[float, float]:
        if self._settings.get("OUTP", "OFF").upper() not in ("ON", "1"):
            return 0.0, 0.0
        if self._settings.get("SOUR:FUNC", "VOLT").upper() == "CURR":
            return 0.0, float(self._settings.get("SOUR:CURR", "0"))
        return float(self._settings.get("SOUR:VOLT", "0")), 0.0
