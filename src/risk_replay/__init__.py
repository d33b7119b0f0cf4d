"""Replay historical futures trades under alternative risk rules."""

from risk_replay.simulator import (
    AdvancedSimulationParams,
    HistoricalTrade,
    SimpleSimulationParams,
    SimulationResult,
    build_preview,
    run_simulation,
)

__version__ = "0.1.0"

__all__ = [
    "AdvancedSimulationParams",
    "HistoricalTrade",
    "SimpleSimulationParams",
    "SimulationResult",
    "build_preview",
    "run_simulation",
]
