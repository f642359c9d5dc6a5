"""Tests for channel-list encoding and state decoding."""

from __future__ import annotations

import pytest

from labswitch_agilent.errors import UnknownPinError
from labswitch_agilent.mapping import build_mapping_table
from labswitch_agilent.modules import ModuleType, SlotModule
from labswitch_agilent.ranges import (
    compress_pins,
    compress_relays,
    decode_states,
    expand_range_expression,
)
from labswitch_agilent.translator import AddressTranslator


@pytest.fixture
def translator() -> AddressTranslator:
    modules = [SlotModule(1, "34932A", ModuleType.MATRIX_34932A)]
    return AddressTranslator(build_mapping_table(modules, 32))


class TestCompressRelays:
    def test_empty(self) -> None:
        assert compress_relays([]) == ""

    def test_single(self) -> None:
        assert compress_relays([1101]) == "1101"

    def test_run_then_single(self) -> None:
        assert compress_relays([10, 11, 12, 15]) == "10:12,15"

    def test_no_adjacency(self) -> None:
        assert compress_relays([5, 7, 9]) == "5,7,9"

    def test_two_adjacent_then_gap(self) -> None:
        assert compress_relays([5, 6, 9]) == "5:6,9"

    def test_two_non_adjacent(self) -> None:
        assert compress_relays([1101, 1103]) == "1101,1103"

    def test_run_at_end_is_closed(self) -> None:
        assert compress_relays([1, 4, 5, 6]) == "1,4:6"

    def test_unsorted_input(self) -> None:
        assert compress_relays([15, 12, 10, 11]) == "10:12,15"

    def test_duplicates_collapsed(self) -> None:
        assert compress_relays([7, 7, 8, 8, 10]) == "7:8,10"


class TestCompressPins:
    def test_empty(self, translator: AddressTranslator) -> None:
        assert compress_pins(translator, []) == ""

    def test_single_pin(self, translator: AddressTranslator) -> None:
        assert compress_pins(translator, [1017]) == "1501"

    def test_adjacency_judged_on_relays(self, translator: AddressTranslator) -> None:
        # pins 1016 and 1017 are adjacent but sit on different banks
        assert compress_pins(translator, [1015, 1016, 1017]) == "1115:1116,1501"

    def test_full_row(self, translator: AddressTranslator) -> None:
        pins = [1000 + column for column in range(1, 33)]
        assert compress_pins(translator, pins) == "1101:1116,1501:1516"

    def test_rows_sorted_by_relay(self, translator: AddressTranslator) -> None:
        pins = [2001, 2002, 1001, 1017]
        assert compress_pins(translator, pins) == "1101,1201:1202,1501"

    def test_unknown_pin(self, translator: AddressTranslator) -> None:
        with pytest.raises(UnknownPinError) as exc_info:
            compress_pins(translator, [1001, 1033])
        assert exc_info.value.values == (1033,)


class TestExpandRangeExpression:
    def test_empty(self) -> None:
        assert expand_range_expression("") == []

    def test_mixed(self) -> None:
        assert expand_range_expression("10:12,15") == [10, 11, 12, 15]

    def test_wrapped(self) -> None:
        assert expand_range_expression("(@1101:1102,1201)") == [1101, 1102, 1201]

    def test_inverse_of_compress(self) -> None:
        relays = [1101, 1102, 1103, 1110, 1201, 1216, 1501, 1502]
        assert expand_range_expression(compress_relays(relays)) == relays

    @pytest.mark.parametrize("expression", ["a", "1:", "1101;1102", "1:2:3"])
    def test_malformed(self, expression: str) -> None:
        with pytest.raises(ValueError, match="Invalid channel-list token"):
            expand_range_expression(expression)

    def test_reversed_range(self) -> None:
        with pytest.raises(ValueError, match="Reversed"):
            expand_range_expression("12:10")

    def test_not_ascending(self) -> None:
        with pytest.raises(ValueError, match="ascending"):
            expand_range_expression("10:12,11")


class TestDecodeStates:
    def test_aligned(self) -> None:
        assert decode_states("1,0,1", [10, 11, 15]) == {10: True, 11: False, 15: True}

    def test_empty(self) -> None:
        assert decode_states("", []) == {}

    def test_count_mismatch(self) -> None:
        with pytest.raises(ValueError, match="2 values for 3 relays"):
            decode_states("1,0", [10, 11, 12])

    def test_bad_token(self) -> None:
        with pytest.raises(ValueError, match="Invalid SCPI boolean"):
            decode_states("1,x", [10, 11])
