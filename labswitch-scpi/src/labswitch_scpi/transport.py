"""SCPI transport protocol definition.

Transports handle the physical layer between a :class:`ScpiConnection` and an
instrument. Implementations include:

- :class:`labswitch_scpi.VisaResource`: PyVISA-backed transport for real hardware
- In-process emulators in the instrument driver packages
  (``labswitch_agilent.emulator``, ``labswitch_keithley.emulator``)
"""

from __future__ import annotations

from typing import Protocol


class ScpiTransport(Protocol):
    """Protocol for SCPI message transport.

    Any class with ``write()``, ``read()`` and ``close()`` methods of these
    signatures is a valid transport. Callers open the transport before
    handing it to :class:`ScpiConnection`.
    """

    def write(self, message: str) -> None:
        """Send a command or query string to the instrument."""
        ...

    def read(self) -> str:
        """Read one response from the instrument."""
        ...

    def close(self) -> None:
        """Close the transport and release resources."""
        ...
