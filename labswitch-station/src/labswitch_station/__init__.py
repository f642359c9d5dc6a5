"""Station configuration and command-line tool for labswitch.

Modules:
    config: YAML station configuration loading.
    cli: ``labswitch`` command-line entry point.
"""

from labswitch_station.config import (
    SmuConfig,
    StationConfig,
    SwitchConfig,
    load_station_config,
)

__all__ = [
    "SmuConfig",
    "StationConfig",
    "SwitchConfig",
    "load_station_config",
]
