"""Keithley 2400 SourceMeter driver and emulator.

Modules:
    smu: High-level driver for source configuration and readings.
    emulator: In-process SCPI emulator for testing without hardware.

Example::

    from labswitch_keithley import create_instrument

    smu = create_instrument("GPIB0::24::INSTR")
    smu.set_fixed_range_voltage_source(5.0, 0.01, nplc=1.0, remote_sense=False)
    smu.enable_output()
    reading = smu.read_source_data()
"""

from labswitch_keithley.emulator import Keithley2400Emulator
from labswitch_keithley.errors import SourceConfigurationError
from labswitch_keithley.smu import (
    CURRENT_RANGES,
    VOLTAGE_RANGES,
    Keithley2400,
    SourceReading,
    create_instrument,
    suitable_range,
)

__all__ = [
    # Driver
    "Keithley2400",
    "SourceReading",
    "create_instrument",
    "suitable_range",
    "CURRENT_RANGES",
    "VOLTAGE_RANGES",
    # Errors
    "SourceConfigurationError",
    # Emulator
    "Keithley2400Emulator",
]
