"""Running account state shared by both simulation engines.

A ``Ledger`` is an immutable value: every method returns a new ledger, so an
engine step is ``(state, trade) -> (state, row)`` and any intermediate state
can be kept and replayed from.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from risk_replay.calculations.metrics import Outcome, calculate_drawdown, calculate_r_multiple, determine_outcome
from risk_replay.calculations.money import from_cents, round_half_up
from risk_replay.calculations.pnl import calculate_asset_pnl
from risk_replay.calculations.sizing import RiskSizingResult
from risk_replay.simulator.models import DayPhase, HistoricalTrade, SimulatedTrade, TradeStatus
from risk_replay.simulator.time import day_key, month_key, week_key


@dataclass(frozen=True)
class PeriodKeys:
    day: str
    week: str
    month: str

    @classmethod
    def for_trade(cls, trade: HistoricalTrade, timezone: str) -> "PeriodKeys":
        return cls(
            day=day_key(trade.entry_date, timezone),
            week=week_key(trade.entry_date, timezone),
            month=month_key(trade.entry_date, timezone),
        )


@dataclass(frozen=True)
class Ledger:
    equity_cents: int
    peak_cents: int
    original_equity_cents: int
    keys: Optional[PeriodKeys] = None
    daily_pnl_cents: int = 0
    weekly_pnl_cents: int = 0
    monthly_pnl_cents: int = 0
    day_trade_count: int = 0
    day_executed_count: int = 0
    daily_limit_hit: bool = False
    daily_target_hit: bool = False
    limit_days: frozenset[str] = frozenset()
    target_days: frozenset[str] = frozenset()

    @classmethod
    def opening(cls, balance_cents: int) -> "Ledger":
        return cls(equity_cents=balance_cents, peak_cents=balance_cents, original_equity_cents=balance_cents)

    @property
    def day_key(self) -> str:
        return self.keys.day if self.keys else ""

    def is_new_day(self, keys: PeriodKeys) -> bool:
        return self.keys is None or keys.day != self.keys.day

    def rolled(self, keys: PeriodKeys) -> "Ledger":
        """Reset each counter whose period differs from the trade's period."""
        changes: dict = {"keys": keys}
        if self.is_new_day(keys):
            changes.update(
                daily_pnl_cents=0,
                day_trade_count=0,
                day_executed_count=0,
                daily_limit_hit=False,
                daily_target_hit=False,
            )
        if self.keys is None or keys.week != self.keys.week:
            changes["weekly_pnl_cents"] = 0
        if self.keys is None or keys.month != self.keys.month:
            changes["monthly_pnl_cents"] = 0
        return replace(self, **changes)

    def entered(self, trade: HistoricalTrade) -> "Ledger":
        """Count the trade for the day and track the original equity path."""
        return replace(
            self,
            day_trade_count=self.day_trade_count + 1,
            original_equity_cents=self.original_equity_cents + trade.pnl_cents,
        )

    def booked(self, pnl_cents: int) -> "Ledger":
        equity = self.equity_cents + pnl_cents
        return replace(
            self,
            equity_cents=equity,
            peak_cents=max(self.peak_cents, equity),
            daily_pnl_cents=self.daily_pnl_cents + pnl_cents,
            weekly_pnl_cents=self.weekly_pnl_cents + pnl_cents,
            monthly_pnl_cents=self.monthly_pnl_cents + pnl_cents,
            day_executed_count=self.day_executed_count + 1,
        )

    def with_daily_limit_hit(self) -> "Ledger":
        return replace(self, daily_limit_hit=True, limit_days=self.limit_days | {self.day_key})

    def with_daily_target_hit(self) -> "Ledger":
        return replace(self, daily_target_hit=True, target_days=self.target_days | {self.day_key})

    def check_daily_bounds(self, daily_loss_cents: Optional[int], daily_target_cents: Optional[int]) -> "Ledger":
        ledger = self
        if daily_loss_cents and ledger.daily_pnl_cents <= -daily_loss_cents:
            ledger = ledger.with_daily_limit_hit()
        if daily_target_cents and ledger.daily_pnl_cents >= daily_target_cents:
            ledger = ledger.with_daily_target_hit()
        return ledger

    def drawdown_percent(self) -> float:
        return calculate_drawdown(self.equity_cents, self.peak_cents)


@dataclass(frozen=True)
class Repriced:
    pnl_cents: int
    outcome: Outcome
    r_multiple: Optional[float]


def reprice(trade: HistoricalTrade, sizing: RiskSizingResult) -> Repriced:
    """Replay the trade's own price action at the simulated size."""
    result = calculate_asset_pnl(
        entry_price=trade.entry_price,
        exit_price=trade.exit_price,
        position_size=sizing.contracts,
        direction=trade.direction,
        tick_size=trade.tick_size,
        tick_value=from_cents(trade.tick_value),
        commission=from_cents(trade.commission_per_execution),
        fees=from_cents(trade.fees_per_execution),
        contracts_executed=sizing.contracts * 2,
    )
    pnl_cents = round_half_up(result.net_pnl * 100)
    r_multiple = None
    if sizing.actual_risk_cents > 0:
        r_multiple = calculate_r_multiple(pnl_cents, sizing.actual_risk_cents)
    return Repriced(pnl_cents=pnl_cents, outcome=determine_outcome(pnl_cents), r_multiple=r_multiple)


def skipped_row(
    index: int,
    trade: HistoricalTrade,
    ledger: Ledger,
    status: TradeStatus,
    consecutive_losses: int,
    day_phase: Optional[DayPhase] = None,
) -> SimulatedTrade:
    return _row(
        index,
        trade,
        ledger,
        status=status,
        risk_reason=status.describe(),
        consecutive_losses=consecutive_losses,
        day_phase=day_phase,
    )


def executed_row(
    index: int,
    trade: HistoricalTrade,
    ledger: Ledger,
    sizing: RiskSizingResult,
    repriced: Repriced,
    risk_reason: str,
    consecutive_losses: int,
    day_phase: Optional[DayPhase] = None,
    recovery_step_index: Optional[int] = None,
) -> SimulatedTrade:
    return _row(
        index,
        trade,
        ledger,
        status=TradeStatus.EXECUTED,
        risk_reason=risk_reason,
        consecutive_losses=consecutive_losses,
        day_phase=day_phase,
        recovery_step_index=recovery_step_index,
        simulated_position_size=sizing.contracts,
        simulated_pnl_cents=repriced.pnl_cents,
        simulated_r_multiple=repriced.r_multiple,
        risk_amount_cents=sizing.actual_risk_cents,
    )


def _row(
    index: int,
    trade: HistoricalTrade,
    ledger: Ledger,
    status: TradeStatus,
    risk_reason: str,
    consecutive_losses: int,
    day_phase: Optional[DayPhase] = None,
    recovery_step_index: Optional[int] = None,
    simulated_position_size: Optional[int] = None,
    simulated_pnl_cents: Optional[int] = None,
    simulated_r_multiple: Optional[float] = None,
    risk_amount_cents: Optional[int] = None,
) -> SimulatedTrade:
    return SimulatedTrade(
        trade_index=index,
        trade_id=trade.trade_id,
        day_key=ledger.day_key,
        day_trade_number=ledger.day_trade_count,
        status=status,
        asset=trade.asset,
        direction=trade.direction,
        entry_price=trade.entry_price,
        exit_price=trade.exit_price,
        stop_loss=trade.stop_loss,
        original_position_size=trade.position_size,
        original_pnl_cents=trade.pnl_cents,
        original_r_multiple=trade.original_r_multiple,
        simulated_position_size=simulated_position_size,
        simulated_pnl_cents=simulated_pnl_cents,
        simulated_r_multiple=simulated_r_multiple,
        risk_amount_cents=risk_amount_cents,
        risk_reason=risk_reason,
        day_phase=day_phase,
        recovery_step_index=recovery_step_index,
        equity_after_cents=ledger.equity_cents,
        daily_pnl_cents=ledger.daily_pnl_cents,
        consecutive_losses=consecutive_losses,
        drawdown_percent=ledger.drawdown_percent(),
    )
