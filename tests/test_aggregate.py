from datetime import date, datetime
from zoneinfo import ZoneInfo

import pytest

from risk_replay.calculations import Direction
from risk_replay.simulator import HistoricalTrade, SimpleSimulationParams, TradeStatus, run_simple_simulation
from risk_replay.simulator.aggregate import PROFIT_FACTOR_CAP, build_simulation_result, pnl_stats
from risk_replay.simulator.time import day_key, month_key, week_key, week_label

TZ = ZoneInfo("America/Sao_Paulo")


def _trade(index: int, when: datetime, move_points: float) -> HistoricalTrade:
    return HistoricalTrade(
        direction=Direction.SHORT,
        entry_price=120000.0,
        exit_price=120000.0 - move_points,
        stop_loss=120050.0,
        position_size=1,
        pnl_cents=int(move_points / 5 * 100),
        tick_size=5.0,
        tick_value=100,
        entry_date=when,
        asset="WINFUT",
        trade_id=f"t-{index}",
    )


def test_calendar_keys():
    moment = datetime(2024, 2, 1, 9, 0, tzinfo=TZ)
    assert day_key(moment) == "2024-02-01"
    assert week_key(moment) == "2024-01-29"
    assert month_key(moment) == "2024-02"
    assert week_label(date(2024, 1, 29)) == "Jan 29-Feb 4"
    assert week_label(date(2024, 1, 8)) == "Jan 8-14"


def test_pnl_stats_caps_profit_factor_and_tracks_drawdown():
    stats = pnl_stats([1000, 2000], [1.0, None], 10000)
    assert stats.profit_factor == PROFIT_FACTOR_CAP
    assert stats.win_rate == pytest.approx(100.0)
    assert stats.avg_r == pytest.approx(1.0)

    stats = pnl_stats([2000, -3000, 500], [], 10000)
    assert stats.max_drawdown_percent == pytest.approx(25.0)
    assert stats.profit_factor == pytest.approx(2500 / 3000)
    assert stats.avg_r == 0


def test_day_traces_and_week_totals():
    trades = [
        _trade(1, datetime(2024, 1, 31, 9, 0, tzinfo=TZ), -50),
        _trade(2, datetime(2024, 1, 31, 10, 0, tzinfo=TZ), 100),
        _trade(3, datetime(2024, 2, 1, 9, 0, tzinfo=TZ), 100),
    ]
    params = SimpleSimulationParams(account_balance_cents=1_000_000, risk_per_trade_percent=1, daily_loss_percent=1)
    result = run_simple_simulation(trades, params)

    assert len(result.weeks) == 1
    week = result.weeks[0]
    assert week.week_label == "Jan 29-Feb 4"
    assert [day.day_key for day in week.days] == ["2024-01-31", "2024-02-01"]

    first_day = week.days[0].result
    assert first_day.hit_daily_limit is True
    assert first_day.executed_count == 1
    assert first_day.skipped_count == 1
    assert first_day.total_pnl_cents == -10000

    assert week.week_pnl_cents == 10000
    assert week.executed_count == 2
    assert week.skipped_count == 1
    assert result.trades[1].status == TradeStatus.SKIPPED_DAILY_LIMIT


def test_result_requires_one_row_per_trade():
    params = SimpleSimulationParams(account_balance_cents=1_000_000, risk_per_trade_percent=1, daily_loss_percent=1)
    trade = _trade(1, datetime(2024, 1, 31, 9, 0, tzinfo=TZ), 100)
    with pytest.raises(ValueError):
        build_simulation_result([trade], [], params)
