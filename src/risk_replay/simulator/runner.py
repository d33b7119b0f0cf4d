"""Entry points that pick the engine for a parameter set."""

from __future__ import annotations

from typing import Sequence

from risk_replay.simulator.advanced import run_advanced_simulation
from risk_replay.simulator.models import HistoricalTrade, SimulationPreview, SimulationResult
from risk_replay.simulator.params import AdvancedSimulationParams, SimpleSimulationParams, SimulationParams
from risk_replay.simulator.simple import run_simple_simulation
from risk_replay.simulator.time import DEFAULT_TIMEZONE, day_key


def run_simulation(
    trades: Sequence[HistoricalTrade],
    params: SimulationParams,
    timezone: str = DEFAULT_TIMEZONE,
) -> SimulationResult:
    if isinstance(params, SimpleSimulationParams):
        return run_simple_simulation(trades, params, timezone)
    if isinstance(params, AdvancedSimulationParams):
        return run_advanced_simulation(trades, params, timezone)
    raise TypeError(f"Unsupported simulation params: {type(params).__name__}")


def build_preview(trades: Sequence[HistoricalTrade], timezone: str = DEFAULT_TIMEZONE) -> SimulationPreview:
    with_sl = sum(1 for trade in trades if trade.has_stop_loss)
    assets = sorted({trade.asset for trade in trades})
    days = {day_key(trade.entry_date, timezone) for trade in trades}
    return SimulationPreview(
        total_trades=len(trades),
        trades_with_sl=with_sl,
        trades_without_sl=len(trades) - with_sl,
        assets=assets,
        day_count=len(days),
    )
