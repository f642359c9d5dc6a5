"""Keithley 2400 SourceMeter driver.

Wraps a ``ScpiConnection`` with source configuration for voltage and current
sourcing in auto or fixed range, and reading of the measured values.

Setup commands that the 2400 may reject harmlessly depending on its current
state are sent without draining the error queue; levels, ranges, limits and
integration time are checked.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from labswitch_core import InstrumentIdentity
from labswitch_scpi import ScpiConnection, ScpiError, VisaResource, format_number

from labswitch_keithley.errors import SourceConfigurationError

logger = logging.getLogger(__name__)

VOLTAGE_RANGES: tuple[float, ...] = (0.02, 0.2, 2.0, 20.0, 200.0)
CURRENT_RANGES: tuple[float, ...] = (10e-9, 100e-9, 1e-6, 10e-6, 100e-6, 1e-3, 10e-3, 100e-3, 1.0)
VOLTAGE_PROTECTION_LEVEL = 210


def suitable_range(ranges: Sequence[float], target: float) -> float:
    """Pick the smallest range that can hold ``|target|``.

    Targets above the largest range get the largest range.

    Example:
        >>> suitable_range(VOLTAGE_RANGES, -5.0)
        20.0
    """
    magnitude = abs(target)
    ordered = sorted(ranges)
    for candidate in ordered:
        if magnitude <= candidate:
            return candidate
    return ordered[-1]


@dataclass(frozen=True)
class SourceReading:
    """One ``:READ?`` result.

    Attributes:
        voltage: Measured voltage in volts.
        current: Measured current in amps.
    """

    voltage: float
    current: float


class Keithley2400:
    """High-level driver for the Keithley 2400 SourceMeter.

    Args:
        connection: An open ``ScpiConnection`` to the instrument.
    """

    def __init__(self, connection: ScpiConnection) -> None:
        self._conn = connection

    # -- Identity / lifecycle -----------------------------------------------

    def identify(self) -> str:
        """Query the instrument identification string (``*IDN?``)."""
        return self._conn.identify()

    def get_identity(self) -> InstrumentIdentity:
        """Query and parse the instrument identification."""
        return self._conn.get_identity()

    def initialize(self) -> None:
        """Reset the instrument to its power-on state.

        Raises:
            SourceConfigurationError: If the instrument rejects the reset.
        """
        try:
            self._conn.reset()
        except ScpiError as exc:
            raise SourceConfigurationError(f"initialize failed: {exc}") from exc

    def close(self) -> None:
        """Close the underlying connection."""
        self._conn.close()

    # -- Readings -----------------------------------------------------------

    def read_source_data(self) -> SourceReading:
        """Trigger a reading and return the measured voltage and current.

        Raises:
            SourceConfigurationError: If the instrument rejects the read.
            ValueError: If the response is missing voltage or current.
        """
        try:
            values = self._conn.query_numbers(":READ?")
        except ScpiError as exc:
            raise SourceConfigurationError(f"data read failed: {exc}") from exc
        if len(values) < 2:
            raise ValueError(f"Expected voltage and current in :READ? response, got {values}")
        return SourceReading(voltage=values[0], current=values[1])

    # -- Output -------------------------------------------------------------

    def enable_output(self) -> None:
        self._set_output(True)

    def disable_output(self) -> None:
        self._set_output(False)

    # -- Source configuration -----------------------------------------------

    def set_auto_range_voltage_source(
        self, voltage: float, current_limit: float, nplc: float, remote_sense: bool
    ) -> None:
        """Source voltage with autoranging and measure current.

        Args:
            voltage: Source level in volts.
            current_limit: Current compliance in amps.
            nplc: Integration time in power-line cycles.
            remote_sense: Use 4-wire remote sensing.
        """
        self._configure(
            "auto range voltage source",
            setup=[
                "SOUR:FUNC VOLT",
                "OUTP:SMOD ZERO",
                f"SOUR:VOLT:PROT:LEV {VOLTAGE_PROTECTION_LEVEL}",
                "SOUR:VOLT:MODE AUTO",
                "SOUR:DEL:AUTO ON",
                "SYST:AZER:STAT ONCE",
                'SENS:FUNC "CURR:DC"',
                "SENS:CURR:DC:RANG:AUTO ON",
            ],
            checked=[
                f"SOUR:VOLT {format_number(voltage)}",
                f"SENS:CURR:PROT {format_number(current_limit)}",
                f"SENS:CURR:NPLC {format_number(nplc)}",
            ],
            remote_sense=remote_sense,
        )

    def set_fixed_range_voltage_source(
        self, voltage: float, current_limit: float, nplc: float, remote_sense: bool
    ) -> None:
        """Source voltage on the fixed range that fits ``voltage``.

        The current measurement range is fixed to the one that fits
        ``current_limit``.
        """
        voltage_range = suitable_range(VOLTAGE_RANGES, voltage)
        current_range = suitable_range(CURRENT_RANGES, current_limit)
        self._configure(
            "fixed range voltage source",
            setup=[
                "SOUR:FUNC VOLT",
                "OUTP:SMOD ZERO",
                f"SOUR:VOLT:PROT:LEV {VOLTAGE_PROTECTION_LEVEL}",
                "SOUR:VOLT:MODE FIX",
                "SOUR:DEL:AUTO ON",
                "SYST:AZER:STAT ONCE",
                'SENS:FUNC "CURR:DC"',
                "SENS:CURR:DC:RANG:AUTO OFF",
            ],
            checked=[
                f"SOUR:VOLT:RANG {format_number(voltage_range)}",
                f"SOUR:VOLT {format_number(voltage)}",
                f"SENS:CURR:DC:RANG {format_number(current_range)}",
                f"SENS:CURR:PROT {format_number(current_limit)}",
                f"SENS:CURR:NPLC {format_number(nplc)}",
            ],
            remote_sense=remote_sense,
        )

    def set_auto_range_current_source(
        self, current: float, voltage_limit: float, nplc: float, remote_sense: bool
    ) -> None:
        """Source current with autoranging and measure voltage."""
        self._configure(
            "auto range current source",
            setup=[
                "SOUR:FUNC CURR",
                "OUTP:SMOD ZERO",
                "SOUR:CURR:MODE AUTO",
                "SOUR:DEL:AUTO ON",
                "SYST:AZER:STAT ONCE",
                'SENS:FUNC "VOLT:DC"',
                "SENS:VOLT:DC:RANG:AUTO ON",
            ],
            checked=[
                f"SOUR:CURR {format_number(current)}",
                f"SENS:VOLT:PROT {format_number(voltage_limit)}",
                f"SENS:VOLT:NPLC {format_number(nplc)}",
            ],
            remote_sense=remote_sense,
        )

    def set_fixed_range_current_source(
        self, current: float, voltage_limit: float, nplc: float, remote_sense: bool
    ) -> None:
        """Source current on the fixed range that fits ``current``."""
        current_range = suitable_range(CURRENT_RANGES, current)
        voltage_range = suitable_range(VOLTAGE_RANGES, voltage_limit)
        self._configure(
            "fixed range current source",
            setup=[
                "SOUR:FUNC CURR",
                "OUTP:SMOD ZERO",
                "SOUR:CURR:MODE FIX",
                "SOUR:DEL:AUTO ON",
                "SYST:AZER:STAT ONCE",
                'SENS:FUNC "VOLT:DC"',
                "SENS:VOLT:DC:RANG:AUTO OFF",
            ],
            checked=[
                f"SOUR:CURR:RANG {format_number(current_range)}",
                f"SOUR:CURR {format_number(current)}",
                f"SENS:VOLT:DC:RANG {format_number(voltage_range)}",
                f"SENS:VOLT:PROT {format_number(voltage_limit)}",
                f"SENS:VOLT:NPLC {format_number(nplc)}",
            ],
            remote_sense=remote_sense,
        )

    # -- Private helpers ----------------------------------------------------

    def _set_output(self, enabled: bool) -> None:
        state = "ON" if enabled else "OFF"
        try:
            self._conn.command(f"OUTP {state}")
        except ScpiError as exc:
            raise SourceConfigurationError(f"output {state.lower()} failed: {exc}") from exc

    def _configure(
        self, step: str, *, setup: list[str], checked: list[str], remote_sense: bool
    ) -> None:
        logger.debug("Configuring 2400 %s", step)
        try:
            for cmd in setup:
                self._conn.command(cmd, check=False)
            for cmd in checked:
                self._conn.command(cmd)
            self._conn.command(f"SYST:RSEN {'ON' if remote_sense else 'OFF'}", check=False)
        except ScpiError as exc:
            raise SourceConfigurationError(f"{step} setup failed: {exc}") from exc


def create_instrument(visa_address: str, *, timeout_ms: int = 5000) -> Keithley2400:
    """Create and reset a Keithley 2400 driver from a VISA address.

    Args:
        visa_address: VISA resource string (e.g. ``"GPIB0::24::INSTR"``).
        timeout_ms: VISA I/O timeout.
    """
    resource = VisaResource(visa_address, timeout_ms=timeout_ms)
    resource.open()
    smu = Keithley2400(ScpiConnection(resource))
    try:
        smu.initialize()
    except Exception:
        smu.close()
        raise
    return smu
