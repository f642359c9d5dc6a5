"""Tests for common types."""

from __future__ import annotations

import pytest

from labswitch_core import InstrumentIdentity, LabswitchError, StateError


class TestInstrumentIdentity:
    """Tests for InstrumentIdentity."""

    def test_fields(self) -> None:
        identity = InstrumentIdentity("Agilent Technologies", "34980A", "MY123", "2.41")
        assert identity.manufacturer == "Agilent Technologies"
        assert identity.model == "34980A"
        assert identity.serial == "MY123"
        assert identity.firmware == "2.41"

    def test_frozen(self) -> None:
        identity = InstrumentIdentity("Agilent Technologies", "34980A", "MY123", "2.41")
        with pytest.raises(AttributeError):
            identity.model = "34970A"  # type: ignore[misc]

    def test_matches(self) -> None:
        identity = InstrumentIdentity("KEITHLEY INSTRUMENTS INC.", "MODEL 2400", "1", "C30")
        assert identity.matches("KEITHLEY INSTRUMENTS INC.", "MODEL 2400")
        assert not identity.matches("KEITHLEY INSTRUMENTS INC.", "MODEL 2410")

    def test_str(self) -> None:
        identity = InstrumentIdentity("Agilent Technologies", "34980A", "MY123", "2.41")
        assert str(identity) == "Agilent Technologies 34980A (serial MY123, firmware 2.41)"


class TestErrors:
    """Tests for the base error hierarchy."""

    def test_state_error_is_labswitch_error(self) -> None:
        with pytest.raises(LabswitchError):
            raise StateError("not initialized")
