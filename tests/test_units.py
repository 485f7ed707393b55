"""
Unit tests for the unit conversion and leg combination helpers.

Tests verify:
- Milli-unit conversion rounds half up and keeps None.
- Leg sums treat absent legs as zero.
- The voltage tie-break follows the configured policy.
- showFlag decoding reads only the AC and DC bits.
"""

from __future__ import annotations

import pytest

from ecoflow_dpu.units import (
    VoltagePolicy,
    any_present,
    decode_show_flags,
    select_leg,
    sum_legs,
    to_milli,
)


class TestToMilli:
    """Base units are published as rounded milli-units."""

    def test_integer_watts(self) -> None:
        assert to_milli(100) == 100000

    def test_fractional_value_rounds_half_up(self) -> None:
        assert to_milli(1.0005) == 1001
        assert to_milli(2.5) == 2500

    def test_float_noise_does_not_leak(self) -> None:
        """0.1 + 0.2 must not become 300.00000000000006 milli-units."""
        assert to_milli(0.1 + 0.2) == 300

    def test_none_stays_none(self) -> None:
        assert to_milli(None) is None

    def test_zero(self) -> None:
        assert to_milli(0) == 0


class TestSumLegs:
    """Absent legs contribute zero."""

    def test_all_present(self) -> None:
        assert sum_legs(100, 50.5) == 150.5

    def test_missing_leg_counts_as_zero(self) -> None:
        assert sum_legs(100, None) == 100

    def test_all_missing(self) -> None:
        assert sum_legs(None, None) == 0

    def test_any_present(self) -> None:
        assert any_present(None, 0)
        assert not any_present(None, None)


class TestSelectLeg:
    """Single reading chosen out of two voltage legs."""

    def test_only_first_leg_live(self) -> None:
        assert select_leg(120, 0, VoltagePolicy.NULL_IF_BOTH_PRESENT) == 120

    def test_only_second_leg_live(self) -> None:
        assert select_leg(0, 240, VoltagePolicy.NULL_IF_BOTH_PRESENT) == 240

    def test_both_live_null_policy(self) -> None:
        assert select_leg(120, 121, VoltagePolicy.NULL_IF_BOTH_PRESENT) is None

    def test_both_live_average_policy(self) -> None:
        assert select_leg(120, 122, VoltagePolicy.AVERAGE_IF_BOTH_PRESENT) == 121

    def test_neither_live(self) -> None:
        assert select_leg(0, 0, VoltagePolicy.AVERAGE_IF_BOTH_PRESENT) == 0

    def test_missing_leg_is_not_live(self) -> None:
        assert select_leg(None, 230, VoltagePolicy.NULL_IF_BOTH_PRESENT) == 230


class TestDecodeShowFlags:
    """Bit 0x04 is the AC output, bit 0x02 the DC output."""

    @pytest.mark.parametrize(
        ("flags", "expected"),
        [
            (0x00, (False, False)),
            (0x02, (False, True)),
            (0x04, (True, False)),
            (0x06, (True, True)),
        ],
    )
    def test_bits(self, flags: int, expected: tuple[bool, bool]) -> None:
        assert decode_show_flags(flags) == expected

    def test_other_bits_ignored(self) -> None:
        assert decode_show_flags(0xF9) == (False, False)
        assert decode_show_flags(0xFF) == (True, True)
