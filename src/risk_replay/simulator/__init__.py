"""Trade replay engines and their result types."""

from risk_replay.simulator.advanced import run_advanced_simulation
from risk_replay.simulator.models import (
    DateRange,
    DayPhase,
    DayTrace,
    DayTraceResult,
    EquityCurvePoint,
    HistoricalTrade,
    SimulatedTrade,
    SimulationPreview,
    SimulationResult,
    SimulationSummary,
    TradeStatus,
    WeekTrace,
)
from risk_replay.simulator.params import (
    AdvancedSimulationParams,
    ConsecutiveLossScope,
    SimpleSimulationParams,
    SimulationMode,
    SimulationParams,
)
from risk_replay.simulator.runner import build_preview, run_simulation
from risk_replay.simulator.simple import run_simple_simulation

__all__ = [
    "AdvancedSimulationParams",
    "ConsecutiveLossScope",
    "DateRange",
    "DayPhase",
    "DayTrace",
    "DayTraceResult",
    "EquityCurvePoint",
    "HistoricalTrade",
    "SimpleSimulationParams",
    "SimulatedTrade",
    "SimulationMode",
    "SimulationParams",
    "SimulationPreview",
    "SimulationResult",
    "SimulationSummary",
    "TradeStatus",
    "WeekTrace",
    "build_preview",
    "run_advanced_simulation",
    "run_simple_simulation",
    "run_simulation",
]
