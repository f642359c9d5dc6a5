"""Pin/relay address translation over a built :class:`MappingTable`."""

from __future__ import annotations

from typing import Iterable

from labswitch_agilent.errors import UnknownPinError, UnknownRelayError
from labswitch_agilent.mapping import MappingTable


class AddressTranslator:
    """Order-preserving lookups between fixture pins and relay addresses.

    Every input is validated before anything is returned: a single unknown
    value fails the whole call, and the error lists all unknown values.

    Args:
        table: The mapping table to translate with.
    """

    def __init__(self, table: MappingTable) -> None:
        self._table = table

    @property
    def table(self) -> MappingTable:
        return self._table

    def pins_to_relays(self, pins: Iterable[int]) -> list[int]:
        """Translate fixture pins to relay addresses.

        Raises:
            UnknownPinError: If any pin is not in the table.
        """
        pins = list(pins)
        lookup = self._table.pin_to_relay
        unknown = [pin for pin in pins if pin not in lookup]
        if unknown:
            raise UnknownPinError(unknown, self._table.rows, self._table.pin_count)
        return [lookup[pin] for pin in pins]

    def relays_to_pins(self, relays: Iterable[int]) -> list[int]:
        """Translate relay addresses to fixture pins.

        Raises:
            UnknownRelayError: If any relay is not in the table.
        """
        relays = list(relays)
        lookup = self._table.relay_to_pin
        unknown = [relay for relay in relays if relay not in lookup]
        if unknown:
            raise UnknownRelayError(unknown)
        return [lookup[relay] for relay in relays]
