"""Tests for the pin/relay table builder."""

from __future__ import annotations

import logging

import pytest

from labswitch_agilent.errors import CapacityError, CapacityWarning
from labswitch_agilent.mapping import (
    MATRIX_ROWS,
    PINS_PER_MODULE,
    align_relays,
    build_mapping_table,
    logical_pins,
    physical_relays,
    pin_number,
    relay_number,
    relay_position,
    split_relay,
)
from labswitch_agilent.modules import SLOT_COUNT, ModuleType, SlotModule

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _inventory(*matrix_slots: int, others: dict[int, str] | None = None) -> tuple[SlotModule, ...]:
    """Slot inventory with 34932A modules in the given slots."""
    others = others or {}
    modules = []
    for slot in range(1, SLOT_COUNT + 1):
        if slot in matrix_slots:
            modules.append(SlotModule(slot, "34932A", ModuleType.MATRIX_34932A))
        elif slot in others:
            modules.append(SlotModule(slot, others[slot], ModuleType.UNSUPPORTED))
        else:
            modules.append(SlotModule(slot, "", ModuleType.EMPTY))
    return tuple(modules)


# ---------------------------------------------------------------------------
# Address arithmetic
# ---------------------------------------------------------------------------


class TestAddressing:
    def test_pin_number(self) -> None:
        assert pin_number(3, 17) == 3017

    def test_relay_number_round_trip(self) -> None:
        assert relay_number(2, 7, 16) == 2716
        assert split_relay(2716) == (2, 7, 16)

    @pytest.mark.parametrize(
        ("relay", "expected"),
        [
            (1101, (1, 1)),  # first bank, first relay
            (1116, (1, 16)),
            (1401, (4, 1)),
            (1501, (1, 17)),  # second bank continues the row
            (1816, (4, 32)),
            (3101, (1, 33)),  # second allocated module
            (3816, (4, 64)),
        ],
    )
    def test_relay_position(self, relay: int, expected: tuple[int, int]) -> None:
        assert relay_position(relay, (1, 3)) == expected

    def test_relay_position_unallocated_slot(self) -> None:
        with pytest.raises(ValueError, match="not on an allocated module"):
            relay_position(2101, (1, 3))

    @pytest.mark.parametrize("relay", [1901, 1117, 1100, 1001])
    def test_relay_position_outside_bank(self, relay: int) -> None:
        with pytest.raises(ValueError, match="outside"):
            relay_position(relay, (1,))

    def test_logical_pins_row_major(self) -> None:
        pins = logical_pins(32)
        assert len(pins) == MATRIX_ROWS * 32
        assert pins[:3] == [1001, 1002, 1003]
        assert pins[31:33] == [1032, 2001]

    def test_physical_relays_native_order(self) -> None:
        relays = physical_relays((4,))
        assert len(relays) == PINS_PER_MODULE * MATRIX_ROWS
        assert relays[:2] == [4101, 4102]
        assert relays[16] == 4201
        assert relays[-1] == 4816

    def test_align_relays_matches_logical_order(self) -> None:
        slots = (1, 2)
        aligned = align_relays(physical_relays(slots), slots)
        pins = logical_pins(64)
        for pin, relay in zip(pins, aligned):
            row, column = relay_position(relay, slots)
            assert pin_number(row, column) == pin

    def test_align_relays_rejects_duplicates(self) -> None:
        relays = physical_relays((1,))
        relays[1] = relays[0]
        with pytest.raises(RuntimeError, match="same pin"):
            align_relays(relays, (1,))

    def test_align_relays_rejects_gaps(self) -> None:
        with pytest.raises(RuntimeError, match="no relay"):
            align_relays(physical_relays((1,))[:-1], (1,))


# ---------------------------------------------------------------------------
# build_mapping_table
# ---------------------------------------------------------------------------


class TestBuildMappingTable:
    def test_full_single_module(self) -> None:
        table = build_mapping_table(_inventory(1), 32)
        assert len(table) == MATRIX_ROWS * 32
        assert table.slots == (1,)
        assert table.pin_count == 32
        assert table.advisory is None
        assert table.pin_to_relay[1001] == 1101
        assert table.pin_to_relay[1016] == 1116
        assert table.pin_to_relay[1017] == 1501
        assert table.pin_to_relay[2001] == 1201
        assert table.pin_to_relay[4032] == 1816

    def test_two_modules_continue_columns(self) -> None:
        table = build_mapping_table(_inventory(2, 6), 64)
        assert table.slots == (2, 6)
        assert table.pin_to_relay[1033] == 6101
        assert table.pin_to_relay[3064] == 6716

    def test_lowest_slots_allocated_first(self) -> None:
        table = build_mapping_table(_inventory(3, 5, 8), 40)
        assert table.slots == (3, 5)
        assert not any(relay // 1000 == 8 for relay in table.relay_to_pin)

    def test_other_cards_skipped(self) -> None:
        table = build_mapping_table(_inventory(4, others={1: "34921A", 2: "34937A"}), 10)
        assert table.slots == (4,)

    def test_partial_module_truncated(self) -> None:
        table = build_mapping_table(_inventory(1, 2), 40)
        assert len(table) == MATRIX_ROWS * 40
        assert table.slots == (1, 2)
        assert 1040 in table.pin_to_relay
        assert 1041 not in table.pin_to_relay
        assert 4041 not in table.pin_to_relay
        # padded columns are absent from the reverse map too
        assert 2209 not in table.relay_to_pin
        assert 2208 in table.relay_to_pin

    def test_mappings_are_read_only(self) -> None:
        table = build_mapping_table(_inventory(1), 8)
        with pytest.raises(TypeError):
            table.pin_to_relay[1001] = 0  # type: ignore[index]

    def test_zero_usable_modules_raises(self) -> None:
        with pytest.raises(CapacityError, match="34932A"):
            build_mapping_table(_inventory(others={1: "34921A"}), 16)

    def test_empty_inventory_raises(self) -> None:
        with pytest.raises(CapacityError):
            build_mapping_table([], 16)

    @pytest.mark.parametrize("pin_count", [0, -5])
    def test_non_positive_pin_count(self, pin_count: int) -> None:
        with pytest.raises(ValueError, match="pin_count"):
            build_mapping_table(_inventory(1), pin_count)

    def test_duplicate_slots_rejected(self) -> None:
        module = SlotModule(1, "34932A", ModuleType.MATRIX_34932A)
        with pytest.raises(ValueError, match="duplicate"):
            build_mapping_table([module, module], 16)


class TestCapacityClamp:
    def test_clamps_and_reports(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="labswitch_agilent.mapping"):
            table = build_mapping_table(_inventory(2, 7), 100)
        assert table.pin_count == 64
        assert len(table) == MATRIX_ROWS * 64
        assert table.advisory == CapacityWarning(
            requested_pins=100, supported_pins=64, modules_required=4, modules_installed=2
        )
        assert "only 2 are installed" in caplog.text

    def test_advisory_message(self) -> None:
        advisory = CapacityWarning(100, 64, 4, 2)
        assert str(advisory) == (
            "a mapping table for 100 pins needs 4 matrix modules but only 2 are "
            "installed; table limited to 64 pins"
        )

    def test_no_advisory_when_capacity_suffices(self) -> None:
        assert build_mapping_table(_inventory(1, 2), 64).advisory is None


class TestTableProperties:
    @pytest.mark.parametrize("module_count", [1, 2, 3])
    def test_bijective_for_every_pin_count(self, module_count: int) -> None:
        inventory = _inventory(*range(1, module_count + 1))
        for pin_count in range(1, module_count * PINS_PER_MODULE + 1):
            table = build_mapping_table(inventory, pin_count)
            assert len(table.pin_to_relay) == len(table.relay_to_pin) == MATRIX_ROWS * pin_count
            for pin, relay in table.pin_to_relay.items():
                assert table.relay_to_pin[relay] == pin
            for relay, pin in table.relay_to_pin.items():
                assert table.pin_to_relay[pin] == relay

    def test_pin_domain_is_rows_by_columns(self) -> None:
        table = build_mapping_table(_inventory(1, 2), 45)
        expected = {pin_number(r, c) for r in range(1, 5) for c in range(1, 46)}
        assert set(table.pin_to_relay) == expected

    def test_deterministic(self) -> None:
        first = build_mapping_table(_inventory(1, 4, 6), 70)
        second = build_mapping_table(tuple(reversed(_inventory(1, 4, 6))), 70)
        assert list(first.pin_to_relay.items()) == list(second.pin_to_relay.items())
        assert list(first.relay_to_pin.items()) == list(second.relay_to_pin.items())
        assert first.slots == second.slots
