"""Core library for labswitch instrument automation.

This package holds the foundational pieces every other labswitch package
builds on: the exception hierarchy and the instrument identity type. It has
no third-party dependencies.

Example:
    >>> from labswitch_core import InstrumentIdentity
    >>> identity = InstrumentIdentity("Agilent Technologies", "34980A", "MY1", "2.41")
    >>> identity.matches("Agilent Technologies", "34980A")
    True
"""

from labswitch_core.errors import LabswitchError, StateError
from labswitch_core.types import InstrumentIdentity

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Types
    "InstrumentIdentity",
    # Errors
    "LabswitchError",
    "StateError",
]
