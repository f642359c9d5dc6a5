"""Exception types for labswitch-core.

All labswitch exceptions inherit from :class:`LabswitchError`, so callers can
catch any framework-specific failure with a single except clause.

Exception hierarchy:
    LabswitchError (base)
    +-- StateError: operation attempted on an uninitialized instrument
    +-- (labswitch_scpi) ScpiError: SCPI protocol and transport failures
    +-- (labswitch_agilent) SwitchError: pin/relay mapping and commutation failures
    +-- (labswitch_keithley) SourceConfigurationError: SMU setup failures
"""


class LabswitchError(Exception):
    """Base exception for all labswitch errors."""


class StateError(LabswitchError):
    """Raised when an operation requires state that has not been established.

    Instrument drivers raise this when a method is called before the driver
    has been initialized against live hardware.
    """
