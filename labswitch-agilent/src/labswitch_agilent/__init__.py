"""Agilent/Keysight 34980A switch driver with fixture pin mapping.

The 34980A mainframe holds up to eight cards; this package drives 34932A
dual 4x16 armature matrix cards through the fixture's own pin numbering.

Modules:
    modules: Slot inventory and module classification.
    mapping: Pin/relay table builder.
    translator: Pin/relay lookups with full validation.
    ranges: SCPI channel-list encoding and state decoding.
    switch: High-level instrument driver.
    emulator: In-process SCPI emulator for testing without hardware.

Example:
    Connect to a real instrument::

        from labswitch_agilent import create_instrument

        switch = create_instrument("TCPIP0::192.168.1.10::INSTR", pin_count=64)
        switch.close_pins([1001, 2001])

    Use an emulator for testing::

        from labswitch_agilent import Agilent34980A, make_34980a_emulator
        from labswitch_scpi import ScpiConnection

        switch = Agilent34980A(ScpiConnection(make_34980a_emulator([1, 2])))
        switch.initialize(64)
"""

from labswitch_agilent.emulator import (
    Agilent34980AEmulator,
    Agilent34980AEmulatorConfig,
    make_34980a_emulator,
)
from labswitch_agilent.errors import (
    CapacityError,
    CapacityWarning,
    CommutationError,
    SwitchError,
    UnknownPinError,
    UnknownRelayError,
)
from labswitch_agilent.mapping import (
    MATRIX_COLUMNS,
    MATRIX_ROWS,
    PINS_PER_MODULE,
    MappingTable,
    build_mapping_table,
    pin_number,
    relay_number,
)
from labswitch_agilent.modules import SLOT_COUNT, ModuleType, SlotModule, discover_modules
from labswitch_agilent.ranges import (
    compress_pins,
    compress_relays,
    decode_states,
    expand_range_expression,
)
from labswitch_agilent.switch import Agilent34980A, create_instrument
from labswitch_agilent.translator import AddressTranslator

__all__ = [
    # Driver
    "Agilent34980A",
    "create_instrument",
    # Inventory
    "SLOT_COUNT",
    "ModuleType",
    "SlotModule",
    "discover_modules",
    # Mapping
    "MATRIX_COLUMNS",
    "MATRIX_ROWS",
    "PINS_PER_MODULE",
    "MappingTable",
    "build_mapping_table",
    "pin_number",
    "relay_number",
    "AddressTranslator",
    # Channel lists
    "compress_pins",
    "compress_relays",
    "decode_states",
    "expand_range_expression",
    # Errors
    "CapacityError",
    "CapacityWarning",
    "CommutationError",
    "SwitchError",
    "UnknownPinError",
    "UnknownRelayError",
    # Emulator
    "Agilent34980AEmulator",
    "Agilent34980AEmulatorConfig",
    "make_34980a_emulator",
]
