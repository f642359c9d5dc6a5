"""Error and advisory types for the 34980A switch driver."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from labswitch_core.errors import LabswitchError


def _join(values: Iterable[int]) -> str:
    return ",".join(str(v) for v in values)


class SwitchError(LabswitchError):
    """Base exception for pin/relay mapping and commutation failures."""


class CapacityError(SwitchError):
    """Raised when no usable matrix module is installed in the mainframe."""


class UnknownPinError(SwitchError):
    """Raised when pins are absent from the mapping table.

    Attributes:
        values: Every offending pin, in the order they were supplied.
    """

    def __init__(self, values: Iterable[int], rows: int, columns: int) -> None:
        self.values = tuple(values)
        super().__init__(
            f"{_join(self.values)} are not pin numbers for the current switch "
            f"configuration ({rows} rows by {columns} pins)"
        )


class UnknownRelayError(SwitchError):
    """Raised when relays are absent from the mapping table.

    Attributes:
        values: Every offending relay address, in the order they were supplied.
    """

    def __init__(self, values: Iterable[int]) -> None:
        self.values = tuple(values)
        super().__init__(f"{_join(self.values)} are not mapped relay numbers")


class CommutationError(SwitchError):
    """Raised when the instrument rejects or fails an open/close/state request.

    The underlying SCPI error is chained as ``__cause__``.
    """


@dataclass(frozen=True)
class CapacityWarning:
    """Advisory that the installed modules cannot hold the requested pin count.

    The mapping table is still built, clamped to ``supported_pins``.

    Attributes:
        requested_pins: Pin count asked for by the caller.
        supported_pins: Pin count the table was actually built for.
        modules_required: Matrix modules needed for ``requested_pins``.
        modules_installed: Usable matrix modules found in the mainframe.
    """

    requested_pins: int
    supported_pins: int
    modules_required: int
    modules_installed: int

    def __str__(self) -> str:
        return (
            f"a mapping table for {self.requested_pins} pins needs {self.modules_required} "
            f"matrix modules but only {self.modules_installed} are installed; "
            f"table limited to {self.supported_pins} pins"
        )
