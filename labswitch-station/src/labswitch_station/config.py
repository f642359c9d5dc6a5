"""YAML configuration loading for switching stations.

A station file names the station and the VISA resources of its switch
mainframe and source-measure unit.

Example YAML configuration:
    station:
      id: "bench-a"
      description: "Fixture bench A"

    switch:
      visa_address: "TCPIP0::192.168.1.10::INSTR"
      pin_count: 64
      timeout_ms: 5000

    smu:
      visa_address: "GPIB0::24::INSTR"

The ``LABSWITCH_SWITCH_ADDRESS`` environment variable, when set, replaces
``switch.visa_address``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

SWITCH_ADDRESS_ENV = "LABSWITCH_SWITCH_ADDRESS"
DEFAULT_TIMEOUT_MS = 5000


@dataclass(frozen=True)
class SwitchConfig:
    """Connection settings for the 34980A mainframe.

    Attributes:
        visa_address: VISA resource string.
        pin_count: Pins per row required by the fixture.
        timeout_ms: VISA I/O timeout in milliseconds.
    """

    visa_address: str
    pin_count: int
    timeout_ms: int = DEFAULT_TIMEOUT_MS


@dataclass(frozen=True)
class SmuConfig:
    """Connection settings for the Keithley 2400.

    Attributes:
        visa_address: VISA resource string.
        timeout_ms: VISA I/O timeout in milliseconds.
    """

    visa_address: str
    timeout_ms: int = DEFAULT_TIMEOUT_MS


@dataclass(frozen=True)
class StationConfig:
    """Configuration for one switching station.

    Attributes:
        station_id: Unique identifier for the station.
        description: Human-readable description.
        switch: Switch mainframe settings, if the station has one.
        smu: Source-measure unit settings, if the station has one.
    """

    station_id: str
    description: str = ""
    switch: SwitchConfig | None = None
    smu: SmuConfig | None = None


def _positive_int(section: str, key: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"{section}.{key} must be a positive integer, got {value!r}")
    return value


def _parse_switch(data: Any, env_address: str | None) -> SwitchConfig:
    if not isinstance(data, dict):
        raise ValueError("switch must be a mapping")
    address = env_address or data.get("visa_address")
    if not address:
        raise ValueError("Missing required field: switch.visa_address")
    if "pin_count" not in data:
        raise ValueError("Missing required field: switch.pin_count")
    return SwitchConfig(
        visa_address=str(address),
        pin_count=_positive_int("switch", "pin_count", data["pin_count"]),
        timeout_ms=_positive_int("switch", "timeout_ms", data.get("timeout_ms", DEFAULT_TIMEOUT_MS)),
    )


def _parse_smu(data: Any) -> SmuConfig:
    if not isinstance(data, dict):
        raise ValueError("smu must be a mapping")
    address = data.get("visa_address")
    if not address:
        raise ValueError("Missing required field: smu.visa_address")
    return SmuConfig(
        visa_address=str(address),
        timeout_ms=_positive_int("smu", "timeout_ms", data.get("timeout_ms", DEFAULT_TIMEOUT_MS)),
    )


def load_station_config(path: str | Path) -> StationConfig:
    """Load a station configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        Parsed station configuration.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        ValueError: If the config is invalid or missing required fields.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ValueError("Config must be a YAML mapping")

    station_section = data.get("station") or {}
    if not isinstance(station_section, dict):
        raise ValueError("station must be a mapping")
    station_id = station_section.get("id")
    if not station_id:
        raise ValueError("Missing required field: station.id")

    switch = None
    if data.get("switch") is not None:
        switch = _parse_switch(data["switch"], os.environ.get(SWITCH_ADDRESS_ENV))

    smu = None
    if data.get("smu") is not None:
        smu = _parse_smu(data["smu"])

    return StationConfig(
        station_id=str(station_id),
        description=str(station_section.get("description", "")),
        switch=switch,
        smu=smu,
    )
