from dataclasses import replace
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from risk_replay.calculations import Direction
from risk_replay.simulator import (
    ConsecutiveLossScope,
    HistoricalTrade,
    SimpleSimulationParams,
    TradeStatus,
    run_simple_simulation,
)

TZ = ZoneInfo("America/Sao_Paulo")


def _at(day: int, hour: int = 10, month: int = 1) -> datetime:
    return datetime(2024, month, day, hour, 0, tzinfo=TZ)


def _trade(index: int, when: datetime, move_points: float, stop_points=50.0, direction=Direction.LONG, size=1):
    # WINFUT-like contract: 5 point tick worth 100 cents.
    entry = 120000.0
    sign = 1 if direction == Direction.LONG else -1
    stop = None if stop_points is None else entry - sign * stop_points
    return HistoricalTrade(
        direction=direction,
        entry_price=entry,
        exit_price=entry + sign * move_points,
        stop_loss=stop,
        position_size=size,
        pnl_cents=int(move_points / 5 * 100 * size),
        tick_size=5.0,
        tick_value=100,
        entry_date=when,
        asset="WINFUT",
        trade_id=f"t-{index}",
    )


def _params(**overrides) -> SimpleSimulationParams:
    values = {
        "account_balance_cents": 1_000_000,
        "risk_per_trade_percent": 1.0,
        "daily_loss_percent": 10.0,
    }
    values.update(overrides)
    return SimpleSimulationParams(**values)


def _statuses(result):
    return [row.status for row in result.trades]


def test_win_loss_win_day_builds_full_curve():
    trades = [
        _trade(1, _at(2, 9), 100),
        _trade(2, _at(2, 10), -50),
        _trade(3, _at(2, 11), 100),
    ]
    result = run_simple_simulation(trades, _params())

    assert len(result.equity_curve) == 3
    assert result.summary.original_total_pnl_cents == sum(trade.pnl_cents for trade in trades)
    assert result.summary.executed_trades == 3
    # 1% of 10,000.00 with a 10 tick stop sizes 10 contracts.
    assert [row.simulated_position_size for row in result.trades] == [10, 10, 10]
    assert [row.simulated_pnl_cents for row in result.trades] == [20000, -10000, 20000]
    assert result.equity_curve[-1].simulated_equity_cents == 1_030_000
    assert result.equity_curve[-1].original_equity_cents == 1_003_000
    assert result.trades[1].simulated_r_multiple == pytest.approx(-1.0)
    assert result.summary.simulated_win_rate == pytest.approx(200 / 3)


def test_max_daily_trades_skips_third_trade():
    trades = [_trade(i, _at(2, 9 + i), 100) for i in range(3)]
    result = run_simple_simulation(trades, _params(max_daily_trades=2))

    skipped = [row for row in result.trades if row.status == TradeStatus.SKIPPED_MAX_TRADES]
    assert len(skipped) == 1
    assert skipped[0].trade_index == 2
    assert skipped[0].day_trade_number == 3
    assert skipped[0].simulated_pnl_cents is None


def test_stop_at_entry_is_skipped_without_stop_loss():
    trades = [
        _trade(1, _at(2, 9), 100, stop_points=0),
        _trade(2, _at(2, 10), 100, stop_points=None),
        _trade(3, _at(2, 11), 100),
    ]
    result = run_simple_simulation(trades, _params())

    assert _statuses(result) == [TradeStatus.SKIPPED_NO_SL, TradeStatus.SKIPPED_NO_SL, TradeStatus.EXECUTED]
    assert result.trades[0].original_r_multiple is None
    assert result.trades[0].risk_reason == "Skipped: no sl"
    assert result.summary.skipped_no_sl == 2


def test_zero_stop_counts_as_no_stop_loss():
    zero_stop = replace(_trade(1, _at(2, 9), 100), stop_loss=0.0)
    result = run_simple_simulation([zero_stop, _trade(2, _at(2, 10), 100)], _params())

    assert not zero_stop.has_stop_loss
    assert _statuses(result) == [TradeStatus.SKIPPED_NO_SL, TradeStatus.EXECUTED]
    assert result.trades[0].original_r_multiple is None


def test_daily_loss_limit_stops_the_day_only():
    trades = [
        _trade(1, _at(2, 9), -50),
        _trade(2, _at(2, 10), 100),
        _trade(3, _at(3, 9), 100),
    ]
    result = run_simple_simulation(trades, _params(daily_loss_percent=1.0))

    assert _statuses(result) == [TradeStatus.EXECUTED, TradeStatus.SKIPPED_DAILY_LIMIT, TradeStatus.EXECUTED]
    assert result.summary.days_hit_daily_limit == 1
    assert result.trades[2].daily_pnl_cents == 20000


def test_daily_profit_target_stops_the_day():
    trades = [
        _trade(1, _at(2, 9), 100),
        _trade(2, _at(2, 10), 100),
    ]
    result = run_simple_simulation(trades, _params(daily_profit_target_percent=2.0))

    assert _statuses(result) == [TradeStatus.EXECUTED, TradeStatus.SKIPPED_DAILY_TARGET]
    assert result.summary.days_hit_daily_target == 1


def test_consecutive_losses_reset_daily():
    trades = [
        _trade(1, _at(2, 9), -50),
        _trade(2, _at(2, 10), -50),
        _trade(3, _at(2, 11), 100),
        _trade(4, _at(3, 9), 100),
    ]
    result = run_simple_simulation(trades, _params(max_consecutive_losses=2))

    assert _statuses(result) == [
        TradeStatus.EXECUTED,
        TradeStatus.EXECUTED,
        TradeStatus.SKIPPED_CONSECUTIVE_LOSS,
        TradeStatus.EXECUTED,
    ]
    assert result.trades[2].consecutive_losses == 2
    assert result.trades[3].consecutive_losses == 0


def test_consecutive_losses_global_scope_carries_across_days():
    trades = [
        _trade(1, _at(2, 9), -50),
        _trade(2, _at(2, 10), -50),
        _trade(3, _at(3, 9), 100),
    ]
    params = _params(max_consecutive_losses=2, consecutive_loss_scope=ConsecutiveLossScope.GLOBAL)
    result = run_simple_simulation(trades, params)

    assert result.trades[2].status == TradeStatus.SKIPPED_CONSECUTIVE_LOSS


def test_reduced_risk_after_loss():
    trades = [
        _trade(1, _at(2, 9), -50),
        _trade(2, _at(2, 10), -50),
        _trade(3, _at(2, 11), 100),
    ]
    result = run_simple_simulation(trades, _params(reduce_risk_after_loss=True, risk_reduction_factor=0.5))

    assert result.trades[0].risk_reason == "Base risk"
    assert result.trades[1].risk_reason == "Reduced risk (loss #1, x0.50)"
    assert result.trades[1].risk_amount_cents == 5000
    assert result.trades[2].risk_reason == "Reduced risk (loss #2, x0.25)"
    assert result.trades[2].simulated_position_size == 2


def test_win_bonus_after_win():
    trades = [
        _trade(1, _at(2, 9), 100),
        _trade(2, _at(2, 10), 100),
    ]
    params = _params(increase_risk_after_win=True, profit_reinvestment_percent=50.0)
    result = run_simple_simulation(trades, params)

    assert result.trades[1].risk_reason == "Win bonus (+50% of last gain)"
    assert result.trades[1].simulated_position_size == 20


def test_weekly_limit_resets_on_monday():
    trades = [
        _trade(1, _at(2, 9), -50),
        _trade(2, _at(3, 9), -50),
        _trade(3, _at(4, 9), 100),
        _trade(4, _at(8, 9), 100),
    ]
    result = run_simple_simulation(trades, _params(weekly_loss_percent=2.0))

    assert _statuses(result) == [
        TradeStatus.EXECUTED,
        TradeStatus.EXECUTED,
        TradeStatus.SKIPPED_WEEKLY_LIMIT,
        TradeStatus.EXECUTED,
    ]
    assert [week.week_key for week in result.weeks] == ["2024-01-01", "2024-01-08"]
    assert result.weeks[0].week_label == "Jan 1-7"


def test_monthly_limit_resets_on_first_of_month():
    trades = [
        _trade(1, _at(30, 9), -50),
        _trade(2, _at(31, 9), -50),
        _trade(3, _at(31, 10), 100),
        _trade(4, _at(1, 9, month=2), 100),
    ]
    result = run_simple_simulation(trades, _params(monthly_loss_percent=2.0))

    assert _statuses(result)[2:] == [TradeStatus.SKIPPED_MONTHLY_LIMIT, TradeStatus.EXECUTED]


def test_trades_bucket_by_local_trading_day():
    late_utc = datetime(2024, 1, 3, 1, 30, tzinfo=timezone.utc)
    trades = [_trade(1, _at(2, 15), 100), _trade(2, late_utc, 100)]
    result = run_simple_simulation(trades, _params(max_daily_trades=1))

    assert result.trades[1].day_key == "2024-01-02"
    assert result.trades[1].status == TradeStatus.SKIPPED_MAX_TRADES


def test_skip_counters_add_up():
    trades = [
        _trade(1, _at(2, 9), 100, stop_points=None),
        _trade(2, _at(2, 10), -50),
        _trade(3, _at(2, 11), -50),
        _trade(4, _at(3, 9), 100),
    ]
    result = run_simple_simulation(trades, _params(daily_loss_percent=1.0))
    summary = result.summary

    assert summary.executed_trades + summary.skipped_trades == summary.total_trades == 4
    assert summary.pnl_delta_cents == summary.simulated_total_pnl_cents - summary.original_total_pnl_cents
    assert result.date_range.start == "2024-01-02"
    assert result.date_range.end == "2024-01-03"


def test_empty_input():
    result = run_simple_simulation([], _params())

    assert result.summary.total_trades == 0
    assert result.summary.executed_trades == 0
    assert result.trades == []
    assert result.equity_curve == []
    assert result.weeks == []
    assert result.date_range.start == ""
