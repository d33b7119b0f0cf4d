"""Sizing, P&L and metric primitives."""

from risk_replay.calculations.metrics import (
    Outcome,
    calculate_drawdown,
    calculate_expected_value,
    calculate_profit_factor,
    calculate_r_multiple,
    calculate_win_rate,
    determine_outcome,
)
from risk_replay.calculations.money import from_cents, round_half_up, to_cents
from risk_replay.calculations.pnl import AssetPnlResult, Direction, calculate_asset_pnl
from risk_replay.calculations.sizing import RiskSizingResult, calculate_tick_based_position_size

__all__ = [
    "AssetPnlResult",
    "Direction",
    "Outcome",
    "RiskSizingResult",
    "calculate_asset_pnl",
    "calculate_drawdown",
    "calculate_expected_value",
    "calculate_profit_factor",
    "calculate_r_multiple",
    "calculate_tick_based_position_size",
    "calculate_win_rate",
    "determine_outcome",
    "from_cents",
    "round_half_up",
    "to_cents",
]
