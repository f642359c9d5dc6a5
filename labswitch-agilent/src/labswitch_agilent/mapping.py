"""Pin/relay mapping table for 34932A dual 4x16 armature matrix modules.

Fixture pins are numbered ``row * 1000 + column``: four rows, and columns
running left to right across every allocated module. Relays are numbered by
the instrument as ``slot * 1000 + row * 100 + column`` where each module has
two 4x16 banks (rows 1-4 and 5-8) of 16 columns.

Each bank becomes one block of 16 logical columns. Banks are laid out left
to right in allocation order, so module ``m`` (0-based allocation index)
owns blocks ``2m`` and ``2m + 1``::

    logical_row    = (physical_row - 1) % 4 + 1
    block          = 2 * m + (physical_row - 1) // 4
    logical_column = block * 16 + physical_column
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping, Sequence

from labswitch_agilent.errors import CapacityError, CapacityWarning
from labswitch_agilent.modules import ModuleType, SlotModule

logger = logging.getLogger(__name__)

MATRIX_ROWS = 4
MATRIX_COLUMNS = 16
BANKS_PER_MODULE = 2
PINS_PER_MODULE = BANKS_PER_MODULE * MATRIX_COLUMNS

PIN_ROW_SCALE = 1000
SLOT_SCALE = 1000
RELAY_ROW_SCALE = 100


def pin_number(row: int, column: int) -> int:
    """Encode a logical fixture pin."""
    return row * PIN_ROW_SCALE + column


def relay_number(slot: int, row: int, column: int) -> int:
    """Encode a physical relay address."""
    return slot * SLOT_SCALE + row * RELAY_ROW_SCALE + column


def split_relay(relay: int) -> tuple[int, int, int]:
    """Decode a relay address into ``(slot, physical_row, physical_column)``."""
    slot, rest = divmod(relay, SLOT_SCALE)
    row, column = divmod(rest, RELAY_ROW_SCALE)
    return slot, row, column


def relay_position(relay: int, slots: Sequence[int]) -> tuple[int, int]:
    """Locate a relay in the logical pin grid.

    Args:
        relay: Physical relay address.
        slots: Allocated slots in allocation order.

    Returns:
        ``(logical_row, logical_column)`` implemented by the relay.

    Raises:
        ValueError: If the relay is not on an allocated module or its row or
            column is outside the 34932A geometry.
    """
    slot, row, column = split_relay(relay)
    if slot not in slots:
        raise ValueError(f"relay {relay} is not on an allocated module (slots {list(slots)})")
    if not 1 <= row <= BANKS_PER_MODULE * MATRIX_ROWS or not 1 <= column <= MATRIX_COLUMNS:
        raise ValueError(f"relay {relay} is outside the {MATRIX_ROWS}x{MATRIX_COLUMNS} bank layout")
    block = BANKS_PER_MODULE * slots.index(slot) + (row - 1) // MATRIX_ROWS
    return (row - 1) % MATRIX_ROWS + 1, block * MATRIX_COLUMNS + column


def logical_pins(columns: int) -> list[int]:
    """Logical pins in row-major order for a grid ``columns`` wide."""
    return [
        pin_number(row, column)
        for row in range(1, MATRIX_ROWS + 1)
        for column in range(1, columns + 1)
    ]


def physical_relays(slots: Sequence[int]) -> list[int]:
    """Relays of the allocated modules in native module/row/column order."""
    return [
        relay_number(slot, row, column)
        for slot in slots
        for row in range(1, BANKS_PER_MODULE * MATRIX_ROWS + 1)
        for column in range(1, MATRIX_COLUMNS + 1)
    ]


def align_relays(relays: Iterable[int], slots: Sequence[int]) -> list[int]:
    """Reorder relays so that ``result[i]`` implements ``logical_pins(...)[i]``.

    Args:
        relays: Every relay of the allocated modules, in any order.
        slots: Allocated slots in allocation order.

    Returns:
        Relays in row-major logical order for a grid of
        ``len(slots) * PINS_PER_MODULE`` columns.
    """
    columns = len(slots) * PINS_PER_MODULE
    aligned: list[int | None] = [None] * (MATRIX_ROWS * columns)
    for relay in relays:
        row, column = relay_position(relay, slots)
        index = (row - 1) * columns + column - 1
        if aligned[index] is not None:
            raise RuntimeError(f"relays {aligned[index]} and {relay} map to the same pin")
        aligned[index] = relay
    missing = aligned.count(None)
    if missing:
        raise RuntimeError(f"{missing} pin positions have no relay")
    return [relay for relay in aligned if relay is not None]


@dataclass(frozen=True)
class MappingTable:
    """Read-only bidirectional pin/relay table.

    Attributes:
        pin_to_relay: Logical pin to relay address.
        relay_to_pin: Relay address to logical pin.
        slots: Slots of the modules backing the table, in allocation order.
        pin_count: Pins per row actually mapped.
        advisory: Set when the requested pin count had to be reduced.
    """

    pin_to_relay: Mapping[int, int]
    relay_to_pin: Mapping[int, int]
    slots: tuple[int, ...]
    pin_count: int
    advisory: CapacityWarning | None = None

    @property
    def rows(self) -> int:
        return MATRIX_ROWS

    def __len__(self) -> int:
        return len(self.pin_to_relay)


def build_mapping_table(modules: Iterable[SlotModule], pin_count: int) -> MappingTable:
    """Build the pin/relay table for the installed modules.

    Modules are allocated lowest slot first. When the usable modules cannot
    hold ``pin_count`` pins per row the table is clamped to what they can
    hold and a :class:`CapacityWarning` is logged and attached to the table.

    Args:
        modules: Slot inventory from :func:`discover_modules`.
        pin_count: Pins per row required by the fixture.

    Returns:
        The built table.

    Raises:
        ValueError: If ``pin_count`` is not positive or a slot is listed twice.
        CapacityError: If no usable matrix module is installed.
    """
    if pin_count < 1:
        raise ValueError(f"pin_count must be >= 1, got {pin_count}")

    modules = list(modules)
    slot_numbers = [m.slot for m in modules]
    if len(set(slot_numbers)) != len(slot_numbers):
        raise ValueError(f"duplicate slots in module inventory: {slot_numbers}")

    usable = sorted(m.slot for m in modules if m.is_usable)
    if not usable:
        raise CapacityError(f"no {ModuleType.MATRIX_34932A.value} module found in switch slots")

    modules_needed = math.ceil(pin_count / PINS_PER_MODULE)
    advisory = None
    if len(usable) < modules_needed:
        advisory = CapacityWarning(
            requested_pins=pin_count,
            supported_pins=len(usable) * PINS_PER_MODULE,
            modules_required=modules_needed,
            modules_installed=len(usable),
        )
        logger.warning("Switch capacity exceeded: %s", advisory)
        pin_count = advisory.supported_pins
        modules_needed = len(usable)

    slots = tuple(usable[:modules_needed])
    pins = logical_pins(len(slots) * PINS_PER_MODULE)
    relays = align_relays(physical_relays(slots), slots)

    pin_to_relay: dict[int, int] = {}
    relay_to_pin: dict[int, int] = {}
    for pin, relay in zip(pins, relays):
        # padding columns beyond the requested count are not mapped
        if pin % PIN_ROW_SCALE > pin_count:
            continue
        if pin in pin_to_relay or relay in relay_to_pin:
            raise RuntimeError(f"mapping collision for pin {pin} / relay {relay}")
        pin_to_relay[pin] = relay
        relay_to_pin[relay] = pin

    logger.debug(
        "Built mapping table: %d pins per row on slots %s (%d entries)",
        pin_count,
        list(slots),
        len(pin_to_relay),
    )
    return MappingTable(
        pin_to_relay=MappingProxyType(pin_to_relay),
        relay_to_pin=MappingProxyType(relay_to_pin),
        slots=slots,
        pin_count=pin_count,
        advisory=advisory,
    )
