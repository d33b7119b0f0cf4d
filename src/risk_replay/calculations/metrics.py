"""Outcome classification and ratio metrics with zero-safe fallbacks."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class Outcome(str, Enum):
    WIN = "win"
    LOSS = "loss"
    BREAKEVEN = "breakeven"


def determine_outcome(
    pnl: float,
    ticks_gained: Optional[float] = None,
    breakeven_ticks: Optional[float] = None,
) -> Outcome:
    if breakeven_ticks and ticks_gained is not None and abs(ticks_gained) <= breakeven_ticks:
        return Outcome.BREAKEVEN
    if pnl > 0:
        return Outcome.WIN
    if pnl < 0:
        return Outcome.LOSS
    return Outcome.BREAKEVEN


def calculate_r_multiple(pnl: float, risk_amount: float) -> float:
    if risk_amount == 0:
        return 0.0
    return pnl / risk_amount


def calculate_drawdown(equity: float, peak: float) -> float:
    """Percent below peak, on a 0-100 scale."""
    if peak <= 0:
        return 0.0
    return (peak - equity) / peak * 100


def calculate_profit_factor(gross_profit: float, gross_loss: float) -> float:
    if gross_loss == 0:
        return float("inf") if gross_profit > 0 else 0.0
    return gross_profit / abs(gross_loss)


def calculate_win_rate(wins: int, total: int) -> float:
    if total == 0:
        return 0.0
    return wins / total * 100


def calculate_expected_value(win_rate: float, avg_win: float, avg_loss: float) -> float:
    loss_rate = 100 - win_rate
    return (win_rate / 100) * avg_win - (loss_rate / 100) * abs(avg_loss)
