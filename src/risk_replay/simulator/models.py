"""Simulation data structures."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from risk_replay.calculations.pnl import Direction
from risk_replay.calculations.sizing import ticks_between
from risk_replay.simulator.params import SimulationParams


class TradeStatus(str, Enum):
    EXECUTED = "executed"
    SKIPPED_NO_SL = "skipped_no_sl"
    SKIPPED_DAILY_LIMIT = "skipped_daily_limit"
    SKIPPED_DAILY_TARGET = "skipped_daily_target"
    SKIPPED_MAX_TRADES = "skipped_max_trades"
    SKIPPED_CONSECUTIVE_LOSS = "skipped_consecutive_loss"
    SKIPPED_MONTHLY_LIMIT = "skipped_monthly_limit"
    SKIPPED_WEEKLY_LIMIT = "skipped_weekly_limit"
    SKIPPED_RECOVERY_COMPLETE = "skipped_recovery_complete"
    SKIPPED_GAIN_STOP = "skipped_gain_stop"

    @property
    def is_skipped(self) -> bool:
        return self != TradeStatus.EXECUTED

    def describe(self) -> str:
        if self == TradeStatus.EXECUTED:
            return "Executed"
        return "Skipped: " + self.value.removeprefix("skipped_").replace("_", " ")


class DayPhase(str, Enum):
    BASE = "base"
    LOSS_RECOVERY = "loss_recovery"
    GAIN_MODE = "gain_mode"


@dataclass(frozen=True)
class HistoricalTrade:
    direction: Direction
    entry_price: float
    exit_price: float
    stop_loss: Optional[float]
    position_size: float
    pnl_cents: int
    tick_size: float
    tick_value: int
    entry_date: datetime
    asset: str
    commission_per_execution: int = 0
    fees_per_execution: int = 0
    contracts_executed: Optional[float] = None
    trade_id: Optional[str] = None
    exit_date: Optional[datetime] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "direction", Direction(self.direction))
        if self.contracts_executed is None:
            object.__setattr__(self, "contracts_executed", self.position_size * 2)

    @property
    def has_stop_loss(self) -> bool:
        # A zero stop is how journals record "no stop".
        if not self.stop_loss:
            return False
        return self.stop_loss != self.entry_price

    @property
    def original_r_multiple(self) -> Optional[float]:
        if not self.has_stop_loss:
            return None
        risk_cents = ticks_between(self.entry_price, self.stop_loss, self.tick_size) * self.tick_value * self.position_size
        if risk_cents <= 0:
            return None
        return self.pnl_cents / risk_cents


@dataclass(frozen=True)
class SimulatedTrade:
    trade_index: int
    trade_id: Optional[str]
    day_key: str
    day_trade_number: int
    status: TradeStatus
    asset: str
    direction: Direction
    entry_price: float
    exit_price: float
    stop_loss: Optional[float]

    original_position_size: float
    original_pnl_cents: int
    original_r_multiple: Optional[float]

    # None when the trade was skipped.
    simulated_position_size: Optional[int]
    simulated_pnl_cents: Optional[int]
    simulated_r_multiple: Optional[float]
    risk_amount_cents: Optional[int]

    risk_reason: str
    day_phase: Optional[DayPhase]
    recovery_step_index: Optional[int]

    equity_after_cents: int
    daily_pnl_cents: int
    consecutive_losses: int
    drawdown_percent: float

    @property
    def executed(self) -> bool:
        return self.status == TradeStatus.EXECUTED


@dataclass(frozen=True)
class EquityCurvePoint:
    trade_index: int
    day_key: str
    original_equity_cents: int
    simulated_equity_cents: int


@dataclass(frozen=True)
class DayTraceResult:
    total_pnl_cents: int
    executed_count: int
    skipped_count: int
    hit_daily_limit: bool
    hit_daily_target: bool
    final_phase: Optional[DayPhase]


@dataclass(frozen=True)
class DayTrace:
    day_key: str
    week_key: str
    trades: list[SimulatedTrade]
    result: DayTraceResult


@dataclass(frozen=True)
class WeekTrace:
    week_key: str
    week_label: str
    days: list[DayTrace]
    week_pnl_cents: int
    executed_count: int
    skipped_count: int


@dataclass(frozen=True)
class SimulationSummary:
    total_trades: int
    executed_trades: int
    skipped_no_sl: int
    skipped_daily_limit: int
    skipped_daily_target: int
    skipped_max_trades: int
    skipped_consecutive_loss: int
    skipped_monthly_limit: int
    skipped_weekly_limit: int
    skipped_recovery_complete: int
    skipped_gain_stop: int

    original_total_pnl_cents: int
    original_win_rate: float
    original_profit_factor: float
    original_max_drawdown_percent: float
    original_avg_r: float

    simulated_total_pnl_cents: int
    simulated_win_rate: float
    simulated_profit_factor: float
    simulated_max_drawdown_percent: float
    simulated_avg_r: float

    pnl_delta_cents: int
    days_hit_daily_limit: int
    days_hit_daily_target: int

    @property
    def skipped_trades(self) -> int:
        return (
            self.skipped_no_sl
            + self.skipped_daily_limit
            + self.skipped_daily_target
            + self.skipped_max_trades
            + self.skipped_consecutive_loss
            + self.skipped_monthly_limit
            + self.skipped_weekly_limit
            + self.skipped_recovery_complete
            + self.skipped_gain_stop
        )


@dataclass(frozen=True)
class DateRange:
    start: str
    end: str


@dataclass(frozen=True)
class SimulationResult:
    params: SimulationParams
    summary: SimulationSummary
    trades: list[SimulatedTrade]
    equity_curve: list[EquityCurvePoint]
    weeks: list[WeekTrace]
    date_range: DateRange


@dataclass(frozen=True)
class SimulationPreview:
    total_trades: int
    trades_with_sl: int
    trades_without_sl: int
    assets: list[str]
    day_count: int
