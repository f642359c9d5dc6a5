"""Tests for station configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from labswitch_station.config import (
    SWITCH_ADDRESS_ENV,
    SmuConfig,
    SwitchConfig,
    load_station_config,
)

FULL_CONFIG = """\
station:
  id: bench-a
  description: Fixture bench A
switch:
  visa_address: "TCPIP0::192.168.1.10::INSTR"
  pin_count: 64
  timeout_ms: 2000
smu:
  visa_address: "GPIB0::24::INSTR"
"""


@pytest.fixture(autouse=True)
def _no_env_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(SWITCH_ADDRESS_ENV, raising=False)


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "station.yaml"
    path.write_text(text, encoding="utf-8")
    return path


class TestLoadStationConfig:
    def test_full_config(self, tmp_path: Path) -> None:
        config = load_station_config(_write(tmp_path, FULL_CONFIG))
        assert config.station_id == "bench-a"
        assert config.description == "Fixture bench A"
        assert config.switch == SwitchConfig("TCPIP0::192.168.1.10::INSTR", 64, 2000)
        assert config.smu == SmuConfig("GPIB0::24::INSTR", 5000)

    def test_optional_sections(self, tmp_path: Path) -> None:
        config = load_station_config(_write(tmp_path, "station:\n  id: bare\n"))
        assert config.switch is None
        assert config.smu is None
        assert config.description == ""

    def test_env_overrides_switch_address(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv(SWITCH_ADDRESS_ENV, "TCPIP0::10.0.0.5::INSTR")
        config = load_station_config(_write(tmp_path, FULL_CONFIG))
        assert config.switch is not None
        assert config.switch.visa_address == "TCPIP0::10.0.0.5::INSTR"

    def test_env_supplies_missing_address(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv(SWITCH_ADDRESS_ENV, "TCPIP0::10.0.0.5::INSTR")
        text = "station:\n  id: a\nswitch:\n  pin_count: 32\n"
        config = load_station_config(_write(tmp_path, text))
        assert config.switch == SwitchConfig("TCPIP0::10.0.0.5::INSTR", 32)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_station_config(tmp_path / "absent.yaml")


class TestInvalidConfig:
    @pytest.mark.parametrize(
        ("text", "message"),
        [
            ("- a\n- b\n", "YAML mapping"),
            ("station:\n  description: x\n", "station.id"),
            ("station:\n  id: a\nswitch:\n  pin_count: 32\n", "switch.visa_address"),
            ("station:\n  id: a\nswitch:\n  visa_address: X\n", "switch.pin_count"),
            ("station:\n  id: a\nswitch:\n  visa_address: X\n  pin_count: 0\n", "positive integer"),
            ("station:\n  id: a\nswitch:\n  visa_address: X\n  pin_count: many\n", "positive integer"),
            ("station:\n  id: a\nsmu: GPIB0::24\n", "smu must be a mapping"),
            ("station:\n  id: a\nsmu:\n  timeout_ms: 10\n", "smu.visa_address"),
            ("station: [\n", "Invalid YAML"),
        ],
    )
    def test_rejected(self, tmp_path: Path, text: str, message: str) -> None:
        with pytest.raises(ValueError, match=message):
            load_station_config(_write(tmp_path, text))
