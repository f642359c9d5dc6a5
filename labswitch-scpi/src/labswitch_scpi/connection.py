"""SCPI connection with automatic error-queue checking.

:class:`ScpiConnection` wraps a transport with command/query methods that
drain the instrument error queue after every exchange, typed query variants,
and the IEEE 488.2 common commands the drivers rely on.

Typical usage::

    from labswitch_scpi import VisaResource, ScpiConnection

    transport = VisaResource("TCPIP0::192.168.1.10::INSTR")
    transport.open()
    conn = ScpiConnection(transport)
    conn.reset()
    model = conn.query("SYST:CTYP? 1")
    conn.close()
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from labswitch_core.types.common import InstrumentIdentity

from labswitch_scpi.errors import ScpiCommandError, ScpiInstrumentError
from labswitch_scpi.number import parse_bool, parse_bools, parse_int, parse_number, parse_numbers

if TYPE_CHECKING:
    from labswitch_scpi.transport import ScpiTransport

logger = logging.getLogger(__name__)


def parse_idn_response(response: str) -> InstrumentIdentity:
    """Parse a ``*IDN?`` response into an :class:`InstrumentIdentity`.

    The response is four comma-separated fields
    ``manufacturer,model,serial,firmware``. Extra fields are folded into
    the firmware string.

    Args:
        response: Raw ``*IDN?`` response.

    Returns:
        The parsed identity.

    Raises:
        ValueError: If the response has fewer than four fields.
    """
    parts = [p.strip() for p in response.split(",")]
    if len(parts) < 4:
        raise ValueError(
            f"Expected at least 4 comma-separated fields in *IDN? response, "
            f"got {len(parts)}: {response!r}"
        )
    return InstrumentIdentity(
        manufacturer=parts[0],
        model=parts[1],
        serial=parts[2],
        firmware=",".join(parts[3:]),
    )


# Optional sign and code, comma, optionally quoted message.
_ERROR_RE = re.compile(r"^\s*([+-]?\d+)\s*,\s*\"?([^\"]*)\"?\s*$")


class ScpiConnection:
    """High-level SCPI connection wrapping a transport.

    When error checking is enabled, every command and query is followed by
    draining the error queue with *error_query*; a non-empty queue raises
    :class:`ScpiCommandError` naming the command that caused it.

    Args:
        transport: An open :class:`ScpiTransport`.
        check_errors: Drain and check the error queue after each exchange.
        error_query: Query that pops one entry from the error queue.
    """

    def __init__(
        self,
        transport: ScpiTransport,
        *,
        check_errors: bool = True,
        error_query: str = "SYST:ERR?",
    ) -> None:
        self._transport = transport
        self._check_errors = check_errors
        self._error_query = error_query

    @property
    def error_query(self) -> str:
        """The query used to drain the error queue."""
        return self._error_query

    # -- Core operations -----------------------------------------------------

    def command(self, cmd: str, *, check: bool | None = None) -> None:
        """Send a command that produces no response.

        Args:
            cmd: SCPI command string (e.g. ``"ROUT:CLOS (@1101:1104)"``).
            check: Override the instance-level error check setting.

        Raises:
            ScpiCommandError: If the instrument reports errors.
        """
        logger.debug("SCPI command: %s", cmd)
        self._transport.write(cmd)
        self._check(cmd, check)

    def query(self, cmd: str, *, check: bool | None = None) -> str:
        """Send a query and return the response with whitespace stripped.

        Args:
            cmd: SCPI query string (e.g. ``"ROUT:CLOS? (@1101)"``).
            check: Override the instance-level error check setting.

        Raises:
            ScpiCommandError: If the instrument reports errors.
        """
        self._transport.write(cmd)
        response = self._transport.read().strip()
        logger.debug("SCPI query: %s -> %r", cmd, response)
        self._check(cmd, check)
        return response

    # -- Typed query variants ------------------------------------------------

    def query_number(self, cmd: str, *, check: bool | None = None) -> float:
        """Query and parse the response as a SCPI number."""
        return parse_number(self.query(cmd, check=check))

    def query_numbers(self, cmd: str, *, check: bool | None = None) -> tuple[float, ...]:
        """Query and parse the response as comma-separated numbers."""
        return parse_numbers(self.query(cmd, check=check))

    def query_int(self, cmd: str, *, check: bool | None = None) -> int:
        """Query and parse the response as an integer."""
        return parse_int(self.query(cmd, check=check))

    def query_bool(self, cmd: str, *, check: bool | None = None) -> bool:
        """Query and parse the response as a single boolean."""
        return parse_bool(self.query(cmd, check=check))

    def query_bools(self, cmd: str, *, check: bool | None = None) -> tuple[bool, ...]:
        """Query and parse the response as comma-separated booleans."""
        return parse_bools(self.query(cmd, check=check))

    # -- IEEE 488.2 convenience methods --------------------------------------

    def identify(self) -> str:
        """Return the raw ``*IDN?`` string."""
        return self.query("*IDN?")

    def get_identity(self) -> InstrumentIdentity:
        """Query and parse ``*IDN?``."""
        return parse_idn_response(self.identify())

    def reset(self) -> None:
        """Reset the instrument to its power-on state (``*RST``)."""
        self.command("*RST")

    def clear_status(self) -> None:
        """Clear the status registers and error queue (``*CLS``)."""
        self.command("*CLS")

    def wait_complete(self) -> None:
        """Block until pending operations finish (``*OPC?``)."""
        self.query("*OPC?", check=False)

    # -- Error queue ---------------------------------------------------------

    def get_errors(self) -> tuple[ScpiInstrumentError, ...]:
        """Drain the instrument error queue.

        Returns:
            Every queued error, oldest first. Empty if the queue was empty.
        """
        errors: list[ScpiInstrumentError] = []
        while True:
            self._transport.write(self._error_query)
            raw = self._transport.read().strip()
            error = self._parse_error_response(raw)
            if error is None:
                break
            errors.append(error)
        return tuple(errors)

    # -- Lifecycle -----------------------------------------------------------

    def close(self) -> None:
        """Close the underlying transport."""
        self._transport.close()

    # -- Private helpers -----------------------------------------------------

    def _check(self, cmd: str, override: bool | None) -> None:
        should_check = self._check_errors if override is None else override
        if not should_check:
            return
        errors = self.get_errors()
        if errors:
            raise ScpiCommandError(cmd, errors)

    @staticmethod
    def _parse_error_response(raw: str) -> ScpiInstrumentError | None:
        """Parse one error-queue entry; ``None`` means the queue is empty."""
        match = _ERROR_RE.match(raw)
        if match is None:
            return None
        code = int(match.group(1))
        if code == 0:
            return None
        return ScpiInstrumentError(code=code, message=match.group(2).strip())
