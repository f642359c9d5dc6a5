"""SCPI protocol library for labswitch instrument drivers.

Provides:

- the :class:`ScpiTransport` protocol and a PyVISA-backed implementation
- :class:`ScpiConnection` with automatic error-queue checking
- value parsing and formatting helpers
- SCPI exception types

Typical usage::

    from labswitch_scpi import VisaResource, ScpiConnection

    transport = VisaResource("TCPIP0::192.168.1.10::INSTR")
    transport.open()
    conn = ScpiConnection(transport)
    identity = conn.get_identity()
    conn.close()
"""

from labswitch_scpi.connection import ScpiConnection, parse_idn_response
from labswitch_scpi.errors import (
    ScpiCommandError,
    ScpiError,
    ScpiInstrumentError,
    ScpiTransportError,
)
from labswitch_scpi.number import (
    format_bool,
    format_number,
    parse_bool,
    parse_bools,
    parse_int,
    parse_number,
    parse_numbers,
)
from labswitch_scpi.transport import ScpiTransport
from labswitch_scpi.visa import VisaResource

__all__ = [
    # Connection
    "ScpiConnection",
    "parse_idn_response",
    # Errors
    "ScpiCommandError",
    "ScpiError",
    "ScpiInstrumentError",
    "ScpiTransportError",
    # Parsing/formatting
    "format_bool",
    "format_number",
    "parse_bool",
    "parse_bools",
    "parse_int",
    "parse_number",
    "parse_numbers",
    # Transport
    "ScpiTransport",
    # VISA
    "VisaResource",
]
