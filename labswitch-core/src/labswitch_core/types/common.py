"""Common types shared by the labswitch instrument drivers."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class InstrumentIdentity:
    """Instrument identification metadata.

    Holds the four standard fields returned by the SCPI ``*IDN?`` query.

    Attributes:
        manufacturer: Instrument manufacturer name (e.g., "Agilent Technologies").
        model: Instrument model number (e.g., "34980A").
        serial: Serial number string.
        firmware: Firmware version string.

    Example:
        >>> identity = InstrumentIdentity(
        ...     manufacturer="Agilent Technologies",
        ...     model="34980A",
        ...     serial="MY44001234",
        ...     firmware="2.41-2.35-0.00-0.00",
        ... )
    """

    manufacturer: str
    model: str
    serial: str
    firmware: str

    def matches(self, manufacturer: str, model: str) -> bool:
        """Check whether this identity belongs to the given instrument model.

        Args:
            manufacturer: Expected manufacturer name.
            model: Expected model name.

        Returns:
            True if both fields match exactly.
        """
        return self.manufacturer == manufacturer and self.model == model

    def __str__(self) -> str:
        return f"{self.manufacturer} {self.model} (serial {self.serial}, firmware {self.firmware})"
