"""Tests for the Keithley 2400 emulator."""

from __future__ import annotations

from labswitch_keithley.emulator import Keithley2400Emulator


def _query(emu: Keithley2400Emulator, cmd: str) -> str:
    emu.write(cmd)
    return emu.read()


class TestEmulator:
    def test_idn(self) -> None:
        assert _query(Keithley2400Emulator(serial="42"), "*IDN?").startswith(
            "KEITHLEY INSTRUMENTS INC.,MODEL 2400,42,"
        )

    def test_long_form_setting(self) -> None:
        emu = Keithley2400Emulator()
        emu.write(":SOURce:VOLTage 1.5")
        assert _query(emu, "SOUR:VOLT?") == "1.5"

    def test_unknown_header(self) -> None:
        emu = Keithley2400Emulator()
        emu.write("TRIG:COUN 5")
        assert _query(emu, "SYST:ERR?") == '-113,"Undefined header"'

    def test_non_numeric_level(self) -> None:
        emu = Keithley2400Emulator()
        emu.write("SOUR:VOLT high")
        assert _query(emu, "SYST:ERR?") == '-104,"Data type error"'
        assert "SOUR:VOLT" not in emu.settings

    def test_read_format(self) -> None:
        emu = Keithley2400Emulator()
        emu.set_reading(1.0, -2e-3)
        fields = _query(emu, ":READ?").split(",")
        assert len(fields) == 5
        assert float(fields[0]) == 1.0
        assert float(fields[1]) == -2e-3

    def test_reset_clears_settings(self) -> None:
        emu = Keithley2400Emulator()
        emu.write("OUTP ON")
        emu.write("*RST")
        assert emu.settings == {}
