"""Error types for the Keithley 2400 driver."""

from labswitch_core.errors import LabswitchError


class SourceConfigurationError(LabswitchError):
    """Raised when the SMU rejects a source configuration step.

    The underlying SCPI error is chained as ``__cause__``.
    """
