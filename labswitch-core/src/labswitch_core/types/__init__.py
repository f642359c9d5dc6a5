"""Shared data types for labswitch packages."""

from labswitch_core.types.common import InstrumentIdentity

__all__ = [
    "InstrumentIdentity",
]
