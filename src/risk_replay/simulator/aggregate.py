"""Equity curve, day/week traces and summary statistics for a finished run."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional, Sequence

from risk_replay.calculations.metrics import calculate_drawdown, calculate_profit_factor, calculate_win_rate
from risk_replay.simulator.models import (
    DateRange,
    DayTrace,
    DayTraceResult,
    EquityCurvePoint,
    HistoricalTrade,
    SimulatedTrade,
    SimulationResult,
    SimulationSummary,
    TradeStatus,
    WeekTrace,
)
from risk_replay.simulator.params import SimulationParams
from risk_replay.simulator.time import DEFAULT_TIMEZONE, week_key, week_label

# Keeps summaries JSON-friendly when there are no losing trades.
PROFIT_FACTOR_CAP = 999.0


@dataclass(frozen=True)
class PnlStats:
    total_pnl_cents: int
    win_rate: float
    profit_factor: float
    max_drawdown_percent: float
    avg_r: float


def pnl_stats(
    pnls: Iterable[int],
    r_multiples: Iterable[Optional[float]],
    initial_equity_cents: int,
) -> PnlStats:
    gross_profit = 0
    gross_loss = 0
    wins = 0
    losses = 0
    total = 0
    equity = initial_equity_cents
    peak = initial_equity_cents
    max_drawdown = 0.0

    for pnl in pnls:
        total += pnl
        if pnl > 0:
            gross_profit += pnl
            wins += 1
        elif pnl < 0:
            gross_loss += abs(pnl)
            losses += 1
        equity += pnl
        peak = max(peak, equity)
        max_drawdown = max(max_drawdown, calculate_drawdown(equity, peak))

    rs = [value for value in r_multiples if value is not None]
    profit_factor = calculate_profit_factor(gross_profit, gross_loss)
    return PnlStats(
        total_pnl_cents=total,
        win_rate=calculate_win_rate(wins, wins + losses),
        profit_factor=min(profit_factor, PROFIT_FACTOR_CAP),
        max_drawdown_percent=max_drawdown,
        avg_r=sum(rs) / len(rs) if rs else 0.0,
    )


def build_equity_curve(
    trades: Sequence[HistoricalTrade],
    rows: Sequence[SimulatedTrade],
    initial_equity_cents: int,
) -> list[EquityCurvePoint]:
    curve: list[EquityCurvePoint] = []
    original = initial_equity_cents
    for trade, row in zip(trades, rows):
        original += trade.pnl_cents
        curve.append(
            EquityCurvePoint(
                trade_index=row.trade_index,
                day_key=row.day_key,
                original_equity_cents=original,
                simulated_equity_cents=row.equity_after_cents,
            )
        )
    return curve


def build_week_traces(
    trades: Sequence[HistoricalTrade],
    rows: Sequence[SimulatedTrade],
    limit_days: frozenset[str] = frozenset(),
    target_days: frozenset[str] = frozenset(),
    timezone: str = DEFAULT_TIMEZONE,
) -> list[WeekTrace]:
    """Group rows by calendar day and ISO week, in order of first occurrence."""
    day_rows: dict[str, list[SimulatedTrade]] = {}
    day_weeks: dict[str, str] = {}
    for trade, row in zip(trades, rows):
        key = row.day_key
        day_rows.setdefault(key, []).append(row)
        day_weeks.setdefault(key, week_key(trade.entry_date, timezone))

    week_days: dict[str, list[DayTrace]] = {}
    for key, items in day_rows.items():
        executed = [item for item in items if item.executed]
        result = DayTraceResult(
            total_pnl_cents=sum(item.simulated_pnl_cents or 0 for item in executed),
            executed_count=len(executed),
            skipped_count=len(items) - len(executed),
            hit_daily_limit=key in limit_days
            or any(item.status == TradeStatus.SKIPPED_DAILY_LIMIT for item in items),
            hit_daily_target=key in target_days
            or any(item.status == TradeStatus.SKIPPED_DAILY_TARGET for item in items),
            final_phase=items[-1].day_phase,
        )
        trace = DayTrace(day_key=key, week_key=day_weeks[key], trades=items, result=result)
        week_days.setdefault(trace.week_key, []).append(trace)

    weeks: list[WeekTrace] = []
    for key, days in week_days.items():
        weeks.append(
            WeekTrace(
                week_key=key,
                week_label=week_label(date.fromisoformat(key)),
                days=days,
                week_pnl_cents=sum(day.result.total_pnl_cents for day in days),
                executed_count=sum(day.result.executed_count for day in days),
                skipped_count=sum(day.result.skipped_count for day in days),
            )
        )
    return weeks


def build_summary(
    trades: Sequence[HistoricalTrade],
    rows: Sequence[SimulatedTrade],
    initial_equity_cents: int,
    days_hit_daily_limit: int,
    days_hit_daily_target: int,
) -> SimulationSummary:
    counts = Counter(row.status for row in rows)
    executed = [row for row in rows if row.executed]

    original = pnl_stats(
        (trade.pnl_cents for trade in trades),
        (trade.original_r_multiple for trade in trades),
        initial_equity_cents,
    )
    simulated = pnl_stats(
        (row.simulated_pnl_cents or 0 for row in executed),
        (row.simulated_r_multiple for row in executed),
        initial_equity_cents,
    )

    return SimulationSummary(
        total_trades=len(rows),
        executed_trades=counts[TradeStatus.EXECUTED],
        skipped_no_sl=counts[TradeStatus.SKIPPED_NO_SL],
        skipped_daily_limit=counts[TradeStatus.SKIPPED_DAILY_LIMIT],
        skipped_daily_target=counts[TradeStatus.SKIPPED_DAILY_TARGET],
        skipped_max_trades=counts[TradeStatus.SKIPPED_MAX_TRADES],
        skipped_consecutive_loss=counts[TradeStatus.SKIPPED_CONSECUTIVE_LOSS],
        skipped_monthly_limit=counts[TradeStatus.SKIPPED_MONTHLY_LIMIT],
        skipped_weekly_limit=counts[TradeStatus.SKIPPED_WEEKLY_LIMIT],
        skipped_recovery_complete=counts[TradeStatus.SKIPPED_RECOVERY_COMPLETE],
        skipped_gain_stop=counts[TradeStatus.SKIPPED_GAIN_STOP],
        original_total_pnl_cents=original.total_pnl_cents,
        original_win_rate=original.win_rate,
        original_profit_factor=original.profit_factor,
        original_max_drawdown_percent=original.max_drawdown_percent,
        original_avg_r=original.avg_r,
        simulated_total_pnl_cents=simulated.total_pnl_cents,
        simulated_win_rate=simulated.win_rate,
        simulated_profit_factor=simulated.profit_factor,
        simulated_max_drawdown_percent=simulated.max_drawdown_percent,
        simulated_avg_r=simulated.avg_r,
        pnl_delta_cents=simulated.total_pnl_cents - original.total_pnl_cents,
        days_hit_daily_limit=days_hit_daily_limit,
        days_hit_daily_target=days_hit_daily_target,
    )


def build_simulation_result(
    trades: Sequence[HistoricalTrade],
    rows: Sequence[SimulatedTrade],
    params: SimulationParams,
    limit_days: frozenset[str] = frozenset(),
    target_days: frozenset[str] = frozenset(),
    timezone: str = DEFAULT_TIMEZONE,
) -> SimulationResult:
    if len(trades) != len(rows):
        raise ValueError(f"Expected one row per trade, got {len(rows)} rows for {len(trades)} trades")

    initial = params.account_balance_cents
    weeks = build_week_traces(trades, rows, limit_days, target_days, timezone)
    days = [day for week in weeks for day in week.days]
    summary = build_summary(
        trades,
        rows,
        initial,
        days_hit_daily_limit=sum(1 for day in days if day.result.hit_daily_limit),
        days_hit_daily_target=sum(1 for day in days if day.result.hit_daily_target),
    )

    if rows:
        date_range = DateRange(start=rows[0].day_key, end=rows[-1].day_key)
    else:
        date_range = DateRange(start="", end="")

    return SimulationResult(
        params=params,
        summary=summary,
        trades=list(rows),
        equity_curve=build_equity_curve(trades, rows, initial),
        weeks=weeks,
        date_range=date_range,
    )
