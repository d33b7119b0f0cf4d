"""Integer-cent helpers."""

from __future__ import annotations

import math
from typing import Optional


def round_half_up(value: float) -> int:
    # Halves round toward +inf, so -2.5 -> -2 and 2.5 -> 3.
    return math.floor(value + 0.5)


def to_cents(amount: Optional[float]) -> int:
    if amount is None:
        return 0
    return round_half_up(amount * 100)


def from_cents(cents: Optional[int]) -> float:
    if cents is None:
        return 0.0
    return cents / 100
