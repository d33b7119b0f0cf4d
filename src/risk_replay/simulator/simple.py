"""Simple engine: percent-of-balance sizing with streak adjustments.

Skip conditions are checked in a fixed priority and the first match wins:
no stop loss, daily loss limit, daily profit target, max daily trades,
consecutive losses, monthly loss limit, weekly loss limit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional, Sequence

from risk_replay.calculations.metrics import Outcome
from risk_replay.calculations.money import round_half_up
from risk_replay.calculations.sizing import calculate_tick_based_position_size
from risk_replay.simulator.aggregate import build_simulation_result
from risk_replay.simulator.ledger import Ledger, PeriodKeys, executed_row, reprice, skipped_row
from risk_replay.simulator.models import HistoricalTrade, SimulatedTrade, SimulationResult, TradeStatus
from risk_replay.simulator.params import ConsecutiveLossScope, SimpleSimulationParams
from risk_replay.simulator.time import DEFAULT_TIMEZONE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimpleState:
    ledger: Ledger
    consecutive_losses: int = 0
    last_outcome: Optional[Outcome] = None
    last_pnl_cents: int = 0

    @classmethod
    def opening(cls, params: SimpleSimulationParams) -> "SimpleState":
        return cls(ledger=Ledger.opening(params.account_balance_cents))


def skip_status(
    trade: HistoricalTrade,
    ledger: Ledger,
    consecutive_losses: int,
    params: SimpleSimulationParams,
) -> Optional[TradeStatus]:
    if not trade.has_stop_loss:
        return TradeStatus.SKIPPED_NO_SL

    daily_loss = params.daily_loss_cents()
    if ledger.daily_limit_hit or (daily_loss and ledger.daily_pnl_cents <= -daily_loss):
        return TradeStatus.SKIPPED_DAILY_LIMIT

    daily_target = params.daily_profit_target_cents()
    if ledger.daily_target_hit or (daily_target and ledger.daily_pnl_cents >= daily_target):
        return TradeStatus.SKIPPED_DAILY_TARGET

    if params.max_daily_trades and ledger.day_executed_count >= params.max_daily_trades:
        return TradeStatus.SKIPPED_MAX_TRADES

    if params.max_consecutive_losses and consecutive_losses >= params.max_consecutive_losses:
        return TradeStatus.SKIPPED_CONSECUTIVE_LOSS

    monthly_loss = params.monthly_loss_cents()
    if monthly_loss and ledger.monthly_pnl_cents <= -monthly_loss:
        return TradeStatus.SKIPPED_MONTHLY_LIMIT

    weekly_loss = params.weekly_loss_cents()
    if weekly_loss and ledger.weekly_pnl_cents <= -weekly_loss:
        return TradeStatus.SKIPPED_WEEKLY_LIMIT

    return None


def risk_budget(state: SimpleState, consecutive_losses: int, params: SimpleSimulationParams) -> tuple[int, str]:
    base = params.base_risk_cents()
    risk_cents = base
    reason = "Base risk"

    if params.reduce_risk_after_loss and consecutive_losses > 0:
        multiplier = params.risk_reduction_factor**consecutive_losses
        risk_cents = round_half_up(base * multiplier)
        reason = f"Reduced risk (loss #{consecutive_losses}, x{multiplier:.2f})"
    elif (
        params.increase_risk_after_win
        and params.profit_reinvestment_percent
        and state.last_outcome == Outcome.WIN
        and state.last_pnl_cents > 0
    ):
        bonus = round_half_up(state.last_pnl_cents * params.profit_reinvestment_percent / 100)
        risk_cents = base + bonus
        reason = f"Win bonus (+{params.profit_reinvestment_percent:g}% of last gain)"

    return max(1, risk_cents), reason


def step(
    state: SimpleState,
    index: int,
    trade: HistoricalTrade,
    params: SimpleSimulationParams,
    timezone: str = DEFAULT_TIMEZONE,
) -> tuple[SimpleState, SimulatedTrade]:
    keys = PeriodKeys.for_trade(trade, timezone)
    streak = state.consecutive_losses
    if state.ledger.is_new_day(keys) and params.consecutive_loss_scope == ConsecutiveLossScope.DAILY:
        streak = 0
    ledger = state.ledger.rolled(keys).entered(trade)

    status = skip_status(trade, ledger, streak, params)
    if status is not None:
        if status == TradeStatus.SKIPPED_DAILY_LIMIT:
            ledger = ledger.with_daily_limit_hit()
        elif status == TradeStatus.SKIPPED_DAILY_TARGET:
            ledger = ledger.with_daily_target_hit()
        logger.debug("trade %s on %s: %s", index, keys.day, status.value)
        row = skipped_row(index, trade, ledger, status, consecutive_losses=streak)
        return replace(state, ledger=ledger, consecutive_losses=streak), row

    risk_cents, reason = risk_budget(state, streak, params)
    sizing = calculate_tick_based_position_size(
        risk_budget_cents=risk_cents,
        entry_price=trade.entry_price,
        stop_loss=trade.stop_loss,
        tick_size=trade.tick_size,
        tick_value=trade.tick_value,
    )
    repriced = reprice(trade, sizing)

    ledger = ledger.booked(repriced.pnl_cents).check_daily_bounds(
        params.daily_loss_cents(), params.daily_profit_target_cents()
    )
    if repriced.outcome == Outcome.LOSS:
        streak += 1
    elif repriced.outcome == Outcome.WIN:
        streak = 0

    row = executed_row(index, trade, ledger, sizing, repriced, reason, consecutive_losses=streak)
    next_state = SimpleState(
        ledger=ledger,
        consecutive_losses=streak,
        last_outcome=repriced.outcome,
        last_pnl_cents=repriced.pnl_cents,
    )
    return next_state, row


def run_simple_simulation(
    trades: Sequence[HistoricalTrade],
    params: SimpleSimulationParams,
    timezone: str = DEFAULT_TIMEZONE,
) -> SimulationResult:
    state = SimpleState.opening(params)
    rows: list[SimulatedTrade] = []
    for index, trade in enumerate(trades):
        state, row = step(state, index, trade, params, timezone)
        rows.append(row)

    logger.info("simple simulation: %s trades, final equity %s", len(rows), state.ledger.equity_cents)
    return build_simulation_result(
        trades=trades,
        rows=rows,
        params=params,
        limit_days=state.ledger.limit_days,
        target_days=state.ledger.target_days,
        timezone=timezone,
    )
