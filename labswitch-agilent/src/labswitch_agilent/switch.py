"""Agilent/Keysight 34980A switch mainframe driver.

Drives 34932A dual 4x16 armature matrix modules through fixture pin
numbers. The mapping table is built once by :meth:`Agilent34980A.initialize`
from the live slot inventory and is read-only afterwards.

Example::

    switch = create_instrument("TCPIP0::192.168.1.10::INSTR", pin_count=64)
    switch.close_pins([1001, 1002, 2001])
    states = switch.get_commutation([1001, 2001])
    switch.open_all()
"""

from __future__ import annotations

import logging
from typing import Iterable

from labswitch_core import InstrumentIdentity
from labswitch_core.errors import StateError
from labswitch_scpi import ScpiConnection, ScpiError, VisaResource

from labswitch_agilent.errors import CapacityWarning, CommutationError, SwitchError
from labswitch_agilent.mapping import MappingTable, build_mapping_table
from labswitch_agilent.modules import SlotModule, discover_modules
from labswitch_agilent.ranges import compress_relays, decode_states, expand_range_expression
from labswitch_agilent.translator import AddressTranslator

logger = logging.getLogger(__name__)

MANUFACTURER = "Agilent Technologies"
MODEL = "34980A"


class Agilent34980A:
    """High-level driver for the 34980A with 34932A matrix modules.

    Args:
        connection: An open ``ScpiConnection`` to the mainframe.
    """

    def __init__(self, connection: ScpiConnection) -> None:
        self._conn = connection
        self._modules: tuple[SlotModule, ...] = ()
        self._translator: AddressTranslator | None = None

    # -- Identity / lifecycle -----------------------------------------------

    def identify(self) -> str:
        """Query the instrument identification string (``*IDN?``)."""
        return self._conn.identify()

    def get_identity(self) -> InstrumentIdentity:
        """Query and parse the instrument identification."""
        return self._conn.get_identity()

    def reset(self) -> None:
        """Reset the mainframe (``*RST``), opening every relay."""
        self._conn.reset()

    def close(self) -> None:
        """Close the underlying connection."""
        self._conn.close()

    def initialize(self, pin_count: int) -> CapacityWarning | None:
        """Reset the mainframe and build the pin/relay table.

        Args:
            pin_count: Pins per row required by the fixture.

        Returns:
            A capacity advisory if the installed modules could not hold
            ``pin_count`` pins, otherwise None.

        Raises:
            CapacityError: If no 34932A module is installed.
            SwitchError: If the mainframe rejects the reset.
        """
        self._translator = None
        try:
            self.reset()
        except ScpiError as exc:
            raise SwitchError(f"34980A initialize failed: {exc}") from exc
        self._modules = self.check_slots()
        table = build_mapping_table(self._modules, pin_count)
        self._translator = AddressTranslator(table)
        logger.info(
            "34980A initialized: %d pins per row on slots %s",
            table.pin_count,
            list(table.slots),
        )
        return table.advisory

    @property
    def is_initialized(self) -> bool:
        return self._translator is not None

    @property
    def modules(self) -> tuple[SlotModule, ...]:
        """Slot inventory read by the last :meth:`initialize`."""
        return self._modules

    @property
    def table(self) -> MappingTable:
        """The pin/relay mapping table.

        Raises:
            StateError: If the switch has not been initialized.
        """
        return self._ready().table

    def check_slots(self) -> tuple[SlotModule, ...]:
        """Query every slot for its installed module."""
        return discover_modules(self._conn)

    # -- Translation --------------------------------------------------------

    def pins_to_relays(self, pins: Iterable[int]) -> list[int]:
        """Translate fixture pins to relay addresses, preserving order."""
        return self._ready().pins_to_relays(pins)

    def relays_to_pins(self, relays: Iterable[int]) -> list[int]:
        """Translate relay addresses to fixture pins, preserving order."""
        return self._ready().relays_to_pins(relays)

    def pins_to_channel_list(self, pins: Iterable[int]) -> str:
        """Encode fixture pins as a relay range expression (without ``(@...)``)."""
        return compress_relays(self.pins_to_relays(pins))

    # -- Commutation --------------------------------------------------------

    def set_commutation(self, pins: Iterable[int], closed: bool) -> None:
        """Close or open the relays behind the given pins.

        Every pin is validated before any command is sent. An empty pin list
        sends nothing.

        Raises:
            StateError: If the switch has not been initialized.
            UnknownPinError: If any pin is not mapped.
            CommutationError: If the instrument rejects the command.
        """
        channels = self.pins_to_channel_list(pins)
        if not channels:
            return
        action = "CLOS" if closed else "OPEN"
        try:
            self._conn.command(f"ROUT:{action} (@{channels})")
        except ScpiError as exc:
            verb = "close" if closed else "open"
            raise CommutationError(f"Failed to {verb} relays {channels}: {exc}") from exc

    def close_pins(self, pins: Iterable[int]) -> None:
        """Close the relays behind the given pins."""
        self.set_commutation(pins, True)

    def open_pins(self, pins: Iterable[int]) -> None:
        """Open the relays behind the given pins."""
        self.set_commutation(pins, False)

    def get_commutation(self, pins: Iterable[int]) -> list[bool]:
        """Query whether the relays behind the given pins are closed.

        Returns:
            One state per input pin, in input order.

        Raises:
            StateError: If the switch has not been initialized.
            UnknownPinError: If any pin is not mapped.
            CommutationError: If the query fails or its response is malformed.
        """
        relays = self.pins_to_relays(pins)
        channels = compress_relays(relays)
        if not channels:
            return []
        try:
            response = self._conn.query(f"ROUT:CLOS? (@{channels})")
            states = decode_states(response, expand_range_expression(channels))
        except (ScpiError, ValueError) as exc:
            raise CommutationError(f"Failed to get relay states for {channels}: {exc}") from exc
        return [states[relay] for relay in relays]

    def open_all(self) -> None:
        """Open every relay in every slot and wait for completion.

        Raises:
            CommutationError: If the instrument rejects the command.
        """
        try:
            self._conn.command("ROUT:OPEN:ALL ALL")
            self._conn.wait_complete()
        except ScpiError as exc:
            raise CommutationError(f"Failed to open all relays: {exc}") from exc

    # -- Private helpers ----------------------------------------------------

    def _ready(self) -> AddressTranslator:
        if self._translator is None:
            raise StateError("34980A switch is not initialized; call initialize() first")
        return self._translator


def create_instrument(visa_address: str, pin_count: int, *, timeout_ms: int = 5000) -> Agilent34980A:
    """Create and initialize a 34980A driver from a VISA address.

    Args:
        visa_address: VISA resource string (e.g. ``"TCPIP0::192.168.1.10::INSTR"``).
        pin_count: Pins per row required by the fixture.
        timeout_ms: VISA I/O timeout.

    Returns:
        An initialized switch driver.
    """
    resource = VisaResource(visa_address, timeout_ms=timeout_ms)
    resource.open()
    switch = Agilent34980A(ScpiConnection(resource))
    try:
        switch.initialize(pin_count)
    except Exception:
        switch.close()
        raise
    return switch
