"""Slot inventory for the 34980A mainframe.

Each of the eight slots is asked for its card type with ``SYST:CTYP?``. The
answer is ``<vendor>,<model>,<serial>,<firmware>`` for a populated slot and
an empty string for an empty one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from labswitch_core.errors import LabswitchError

if TYPE_CHECKING:
    from labswitch_scpi import ScpiConnection

logger = logging.getLogger(__name__)

SLOT_COUNT = 8


class ModuleType(Enum):
    """Closed set of module variants the driver distinguishes.

    Only :attr:`MATRIX_34932A` is usable for pin mapping.
    """

    MATRIX_34932A = "34932A"
    EMPTY = "empty"
    UNSUPPORTED = "unsupported"

    @classmethod
    def from_model(cls, model: str) -> ModuleType:
        """Classify a model string reported by ``SYST:CTYP?``."""
        model = model.strip()
        if not model:
            return cls.EMPTY
        if model == cls.MATRIX_34932A.value:
            return cls.MATRIX_34932A
        return cls.UNSUPPORTED


@dataclass(frozen=True)
class SlotModule:
    """A mainframe slot and the module installed in it.

    Attributes:
        slot: Slot number, 1 to 8.
        model: Model string as reported, or ``""`` for an empty slot.
        module_type: Classification of ``model``.
    """

    slot: int
    model: str
    module_type: ModuleType

    @property
    def is_usable(self) -> bool:
        """True if the module is a supported armature matrix."""
        return self.module_type is ModuleType.MATRIX_34932A

    @classmethod
    def from_response(cls, slot: int, response: str) -> SlotModule:
        """Build from a raw ``SYST:CTYP?`` response.

        The model is the second comma-separated field. A response without
        one is classified as unsupported.
        """
        response = response.strip()
        if not response:
            return cls(slot=slot, model="", module_type=ModuleType.EMPTY)
        fields = response.split(",")
        if len(fields) < 2:
            return cls(slot=slot, model=response, module_type=ModuleType.UNSUPPORTED)
        model = fields[1].strip()
        module_type = ModuleType.from_model(model)
        if module_type is ModuleType.EMPTY:
            # a populated answer with a blank model field is still not a matrix
            module_type = ModuleType.UNSUPPORTED
        return cls(slot=slot, model=model, module_type=module_type)


def discover_modules(connection: ScpiConnection) -> tuple[SlotModule, ...]:
    """Query every mainframe slot for its installed module.

    A slot whose query fails is reported as empty: a missing card is a
    normal hardware state, so no error from this function is fatal.

    Args:
        connection: Open connection to the 34980A.

    Returns:
        One :class:`SlotModule` per slot, in slot order.
    """
    modules: list[SlotModule] = []
    for slot in range(1, SLOT_COUNT + 1):
        try:
            response = connection.query(f"SYST:CTYP? {slot}")
        except LabswitchError as exc:
            logger.warning("Slot %d unreadable, treating as empty: %s", slot, exc)
            response = ""
        module = SlotModule.from_response(slot, response)
        logger.debug("Slot %d: %s (%s)", slot, module.model or "-", module.module_type.value)
        modules.append(module)
    return tuple(modules)
