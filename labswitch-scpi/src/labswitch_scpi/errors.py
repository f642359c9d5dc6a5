"""SCPI protocol error types.

All exceptions inherit from :class:`labswitch_core.errors.LabswitchError`.
"""

from __future__ import annotations

from dataclasses import dataclass

from labswitch_core.errors import LabswitchError


class ScpiError(LabswitchError):
    """Base exception for SCPI protocol errors."""


@dataclass(frozen=True)
class ScpiInstrumentError:
    """Single entry drained from an instrument's error queue.

    Attributes:
        code: SCPI error code (negative for standard errors, positive for
            device-specific ones).
        message: Error description reported by the instrument.
    """

    code: int
    message: str

    def __str__(self) -> str:
        return f'{self.code},"{self.message}"'


class ScpiCommandError(ScpiError):
    """Raised when an instrument reports errors after a command or query.

    Attributes:
        command: The command or query that was in progress.
        errors: Every error drained from the instrument's error queue.

    Example:
        >>> try:
        ...     conn.command("ROUT:CLOS (@9101)")
        ... except ScpiCommandError as e:
        ...     for err in e.errors:
        ...         print(f"Error {err.code}: {err.message}")
    """

    def __init__(self, command: str, errors: tuple[ScpiInstrumentError, ...]) -> None:
        self.command = command
        self.errors = errors
        messages = "; ".join(str(e) for e in errors)
        super().__init__(f"SCPI instrument error(s) after {command!r}: {messages}")


class ScpiTransportError(ScpiError):
    """Raised when the transport fails to deliver a message or a response.

    Attributes:
        command: The command or query that was in progress.
    """

    def __init__(self, command: str, reason: str) -> None:
        self.command = command
        super().__init__(f"Transport error while handling {command!r}: {reason}")
