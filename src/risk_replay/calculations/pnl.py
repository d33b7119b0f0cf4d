"""Asset P&L from price movement measured in ticks."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from risk_replay.calculations.money import round_half_up


class Direction(str, Enum):
    LONG = "long"
    SHORT = "short"


@dataclass(frozen=True)
class AssetPnlResult:
    ticks_gained: int
    gross_pnl: float
    total_costs: float
    net_pnl: float


def calculate_asset_pnl(
    entry_price: float,
    exit_price: float,
    position_size: float,
    direction: Direction | str,
    tick_size: float,
    tick_value: float,
    commission: float = 0.0,
    fees: float = 0.0,
    contracts_executed: Optional[float] = None,
) -> AssetPnlResult:
    """Gross and net P&L in currency units (not cents).

    Costs are charged per execution; without an explicit
    ``contracts_executed`` every contract counts one entry and one exit fill.
    """
    if tick_size <= 0:
        ticks_gained = 0
    else:
        move = (exit_price - entry_price) / tick_size
        if Direction(direction) == Direction.SHORT:
            move = -move
        ticks_gained = round_half_up(move)

    if contracts_executed is None:
        contracts_executed = position_size * 2

    gross_pnl = ticks_gained * tick_value * position_size
    total_costs = (commission + fees) * contracts_executed
    return AssetPnlResult(
        ticks_gained=ticks_gained,
        gross_pnl=gross_pnl,
        total_costs=total_costs,
        net_pnl=gross_pnl - total_costs,
    )
