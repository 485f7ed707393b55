"""Unit conversion and multi-leg combination helpers.

The device reports power, current and voltage in base units (W, A, V) and
splits most quantities across several physical ports ("legs"). Attributes are
published in milli-units, so every projected value goes through ``to_milli``.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Optional, Union

from .const import SHOW_FLAG_AC_ON, SHOW_FLAG_DC_ON

Number = Union[int, float]

MILLI = Decimal(1000)


class VoltagePolicy(str, Enum):
    """How to combine two voltage legs when both are energized."""

    AVERAGE_IF_BOTH_PRESENT = "average_if_both_present"
    NULL_IF_BOTH_PRESENT = "null_if_both_present"


def to_milli(value: Optional[Number]) -> Optional[int]:
    """Convert a base-unit reading to milli-units, rounding half up.

    ``None`` stays ``None``: a missing single value is "no value", not zero.
    """
    if value is None:
        return None
    scaled = Decimal(str(value)) * MILLI
    return int(scaled.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def sum_legs(*legs: Optional[Number]) -> Number:
    """Sum the legs that are present; absent legs contribute zero."""
    return sum(leg for leg in legs if leg is not None)


def any_present(*legs: Optional[Number]) -> bool:
    """Return True when at least one leg carries a value."""
    return any(leg is not None for leg in legs)


def select_leg(
    first: Optional[Number],
    second: Optional[Number],
    policy: VoltagePolicy,
) -> Optional[Number]:
    """Pick a single reading out of two legs.

    Exactly one leg above zero wins outright. When both are above zero the
    policy decides: average them, or report ``None`` because the reading is
    ambiguous. When neither is above zero the result is 0.
    """
    first_live = first is not None and first > 0
    second_live = second is not None and second > 0

    if first_live and second_live:
        if policy is VoltagePolicy.NULL_IF_BOTH_PRESENT:
            return None
        return (first + second) / 2
    if first_live:
        return first
    if second_live:
        return second
    return 0


def decode_show_flags(flags: int) -> tuple[bool, bool]:
    """Decode the ``showFlag`` bitmask into (ac_on, dc_on)."""
    return bool(flags & SHOW_FLAG_AC_ON), bool(flags & SHOW_FLAG_DC_ON)
