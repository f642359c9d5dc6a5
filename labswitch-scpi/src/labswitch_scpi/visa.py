"""PyVISA transport for SCPI instruments.

``pyvisa`` is imported lazily on :meth:`VisaResource.open`, so the mapping
engine and the emulators work without a VISA backend installed.

Resource strings follow the NI-VISA format, for example:

- LAN: ``TCPIP0::192.168.1.10::INSTR``
- GPIB: ``GPIB0::24::INSTR``
- USB: ``USB0::0x0957::0x0507::MY44001234::0::INSTR``
"""

from __future__ import annotations

from typing import Any

from labswitch_core.errors import LabswitchError

from labswitch_scpi.errors import ScpiTransportError


class VisaResource:
    """SCPI transport backed by PyVISA.

    Implements the :class:`ScpiTransport` protocol. I/O failures raised by
    PyVISA are re-raised as :class:`ScpiTransportError` carrying the message
    that was being exchanged.

    Args:
        resource_string: VISA resource address.
        timeout_ms: I/O timeout in milliseconds, applied on open.
        read_termination: Character(s) that terminate read operations.
        write_termination: Character(s) appended to write operations.
    """

    def __init__(
        self,
        resource_string: str,
        *,
        timeout_ms: int = 5000,
        read_termination: str = "\n",
        write_termination: str = "\n",
    ) -> None:
        self._resource_string = resource_string
        self._timeout_ms = timeout_ms
        self._read_termination = read_termination
        self._write_termination = write_termination
        self._rm: Any = None
        self._resource: Any = None
        self._last_message = ""

    @property
    def resource_string(self) -> str:
        """The VISA resource string."""
        return self._resource_string

    @property
    def is_open(self) -> bool:
        """True if the resource is currently open."""
        return self._resource is not None

    # -- Lifecycle -----------------------------------------------------------

    def open(self) -> None:
        """Open the VISA resource.

        Raises:
            LabswitchError: If ``pyvisa`` is missing or the resource cannot
                be opened.
        """
        if self._resource is not None:
            return

        try:
            import pyvisa  # type: ignore[import-not-found]  # pylint: disable=import-outside-toplevel
        except ImportError as exc:
            raise LabswitchError(
                "pyvisa library is not installed. Install with: pip install pyvisa"
            ) from exc

        try:
            self._rm = pyvisa.ResourceManager()
            self._resource = self._rm.open_resource(
                self._resource_string,
                read_termination=self._read_termination,
                write_termination=self._write_termination,
            )
            self._resource.timeout = self._timeout_ms
        except Exception as exc:
            self._resource = None
            self._close_manager()
            raise LabswitchError(
                f"Failed to open VISA resource {self._resource_string!r}: {exc}"
            ) from exc

    def close(self) -> None:
        """Close the resource and resource manager. Safe to call repeatedly."""
        if self._resource is not None:
            try:
                self._resource.close()
            except Exception:  # pylint: disable=broad-except
                pass
            self._resource = None
        self._close_manager()

    def _close_manager(self) -> None:
        if self._rm is not None:
            try:
                self._rm.close()
            except Exception:  # pylint: disable=broad-except
                pass
            self._rm = None

    # -- Transport interface -------------------------------------------------

    def write(self, message: str) -> None:
        """Send a message to the instrument.

        Raises:
            LabswitchError: If the resource is not open.
            ScpiTransportError: If the write fails.
        """
        if self._resource is None:
            raise LabswitchError("VISA resource is not open")
        self._last_message = message
        try:
            self._resource.write(message)
        except Exception as exc:
            raise ScpiTransportError(message, f"write failed: {exc}") from exc

    def read(self) -> str:
        """Read one response from the instrument.

        Raises:
            LabswitchError: If the resource is not open.
            ScpiTransportError: If the read fails or times out.
        """
        if self._resource is None:
            raise LabswitchError("VISA resource is not open")
        try:
            result: str = self._resource.read()
        except Exception as exc:
            raise ScpiTransportError(self._last_message, f"read failed: {exc}") from exc
        return result
