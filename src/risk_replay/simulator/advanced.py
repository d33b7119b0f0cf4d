"""Advanced engine: decision-tree day phases with cascading limits.

Each calendar day starts in the ``base`` phase. The base trade uses the
tree's base risk; a loss moves the day into ``loss_recovery`` where each
trade follows the next step of the recovery sequence, and a win moves it
into ``gain_mode`` where risk comes from the day's gains (compounding) or
the day stops after a single target.

Cascading limits are checked before any phase logic, in order: no stop
loss, daily loss, daily target, weekly loss, monthly loss.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional, Sequence

from risk_replay.calculations.metrics import Outcome
from risk_replay.calculations.money import round_half_up
from risk_replay.calculations.sizing import calculate_tick_based_position_size
from risk_replay.profile.models import (
    Compounding,
    DecisionTreeConfig,
    GainMode,
    SingleTarget,
    describe_risk_calculation,
    resolve_risk_calculation,
)
from risk_replay.simulator.aggregate import build_simulation_result
from risk_replay.simulator.ledger import Ledger, PeriodKeys, executed_row, reprice, skipped_row
from risk_replay.simulator.models import DayPhase, HistoricalTrade, SimulatedTrade, SimulationResult, TradeStatus
from risk_replay.simulator.params import AdvancedSimulationParams
from risk_replay.simulator.time import DEFAULT_TIMEZONE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdvancedState:
    ledger: Ledger
    previous_risk_cents: int
    phase: DayPhase = DayPhase.BASE
    recovery_index: int = 0
    day_gains_cents: int = 0
    consecutive_losses: int = 0

    @classmethod
    def opening(cls, params: AdvancedSimulationParams) -> "AdvancedState":
        return cls(
            ledger=Ledger.opening(params.account_balance_cents),
            previous_risk_cents=params.decision_tree.base_trade.risk_cents,
        )

    def new_day(self, tree: DecisionTreeConfig) -> "AdvancedState":
        return replace(
            self,
            previous_risk_cents=tree.base_trade.risk_cents,
            phase=DayPhase.BASE,
            recovery_index=0,
            day_gains_cents=0,
        )


@dataclass(frozen=True)
class RiskDecision:
    risk_cents: int
    reason: str
    phase: DayPhase
    max_contracts: Optional[int]
    recovery_step_index: Optional[int] = None


def cascade_status(
    trade: HistoricalTrade,
    ledger: Ledger,
    params: AdvancedSimulationParams,
) -> Optional[TradeStatus]:
    if not trade.has_stop_loss:
        return TradeStatus.SKIPPED_NO_SL

    if ledger.daily_limit_hit or ledger.daily_pnl_cents <= -params.daily_loss_cents:
        return TradeStatus.SKIPPED_DAILY_LIMIT

    target = params.daily_profit_target_cents
    if ledger.daily_target_hit or (target and ledger.daily_pnl_cents >= target):
        return TradeStatus.SKIPPED_DAILY_TARGET

    weekly_loss = params.effective_weekly_loss_cents()
    if weekly_loss and ledger.weekly_pnl_cents <= -weekly_loss:
        return TradeStatus.SKIPPED_WEEKLY_LIMIT

    if ledger.monthly_pnl_cents <= -params.effective_monthly_loss_cents():
        return TradeStatus.SKIPPED_MONTHLY_LIMIT

    return None


def decide_risk(state: AdvancedState, tree: DecisionTreeConfig) -> RiskDecision | TradeStatus:
    """Risk for the next trade given the day phase, or the status that skips it."""
    base = tree.base_trade

    if state.phase == DayPhase.BASE:
        return RiskDecision(
            risk_cents=base.risk_cents,
            reason=f"T{state.ledger.day_trade_count} base risk",
            phase=DayPhase.BASE,
            max_contracts=base.max_contracts,
        )

    if state.phase == DayPhase.LOSS_RECOVERY:
        step = tree.loss_recovery.step_at(state.recovery_index)
        if step is None:
            if tree.loss_recovery.stop_after_sequence:
                return TradeStatus.SKIPPED_RECOVERY_COMPLETE
            return RiskDecision(
                risk_cents=base.risk_cents,
                reason="Post-recovery base risk",
                phase=DayPhase.LOSS_RECOVERY,
                max_contracts=base.max_contracts,
            )
        max_contracts = step.max_contracts_override
        if max_contracts is None:
            max_contracts = base.max_contracts
        return RiskDecision(
            risk_cents=resolve_risk_calculation(step.risk_calculation, base.risk_cents, state.previous_risk_cents),
            reason=f"Recovery #{state.recovery_index + 1} ({describe_risk_calculation(step.risk_calculation)})",
            phase=DayPhase.LOSS_RECOVERY,
            max_contracts=max_contracts,
            recovery_step_index=state.recovery_index,
        )

    gain_mode = tree.gain_mode
    if isinstance(gain_mode, SingleTarget):
        return TradeStatus.SKIPPED_GAIN_STOP
    if isinstance(gain_mode, Compounding):
        budget = round_half_up(state.day_gains_cents * gain_mode.reinvestment_percent / 100)
        return RiskDecision(
            risk_cents=min(budget, state.day_gains_cents),
            reason=f"Gain reinvest ({gain_mode.reinvestment_percent:g}% of day gains)",
            phase=DayPhase.GAIN_MODE,
            max_contracts=base.max_contracts,
        )
    raise TypeError(f"Unknown gain mode: {gain_mode!r}")


def apply_constraints(decision: RiskDecision, state: AdvancedState, tree: DecisionTreeConfig) -> RiskDecision:
    risk_cents = decision.risk_cents
    reason = decision.reason

    if tree.drawdown_control is not None:
        tier = tree.drawdown_control.tier_for(state.ledger.drawdown_percent())
        if tier is not None:
            risk_cents = round_half_up(risk_cents * (1 - tier.reduce_percent / 100))
            reason += f" (DD tier: -{tier.reduce_percent:g}%)"

    caps = [
        cap
        for cap in (decision.max_contracts, tree.execution_constraints.max_contracts)
        if cap is not None and cap > 0
    ]
    return replace(
        decision,
        risk_cents=max(1, risk_cents),
        reason=reason,
        max_contracts=min(caps) if caps else None,
    )


def _gain_target_cents(gain_mode: GainMode) -> Optional[int]:
    if isinstance(gain_mode, (SingleTarget, Compounding)):
        return gain_mode.daily_target_cents
    return None


def _enter_gain_mode(state: AdvancedState, ledger: Ledger, pnl_cents: int, tree: DecisionTreeConfig):
    gains = state.day_gains_cents + pnl_cents
    target = _gain_target_cents(tree.gain_mode)
    if target and gains >= target:
        ledger = ledger.with_daily_target_hit()
    return replace(state, phase=DayPhase.GAIN_MODE, day_gains_cents=gains), ledger


def transition(
    state: AdvancedState,
    ledger: Ledger,
    decision: RiskDecision,
    outcome: Outcome,
    pnl_cents: int,
    tree: DecisionTreeConfig,
) -> tuple[AdvancedState, Ledger]:
    """Move the day phase after an executed trade."""
    if decision.phase == DayPhase.BASE:
        if outcome == Outcome.LOSS:
            return replace(state, phase=DayPhase.LOSS_RECOVERY, recovery_index=0), ledger
        if outcome == Outcome.WIN:
            return _enter_gain_mode(state, ledger, pnl_cents, tree)
        return state, ledger

    if decision.phase == DayPhase.LOSS_RECOVERY:
        if outcome == Outcome.WIN and not tree.loss_recovery.execute_all_regardless:
            return _enter_gain_mode(state, ledger, pnl_cents, tree)
        if decision.recovery_step_index is None:
            return state, ledger
        return replace(state, recovery_index=state.recovery_index + 1), ledger

    gain_mode = tree.gain_mode
    if isinstance(gain_mode, Compounding):
        if outcome == Outcome.LOSS and gain_mode.stop_on_first_loss:
            return state, ledger.with_daily_target_hit()
        if outcome == Outcome.WIN:
            return _enter_gain_mode(state, ledger, pnl_cents, tree)
    return state, ledger


def step(
    state: AdvancedState,
    index: int,
    trade: HistoricalTrade,
    params: AdvancedSimulationParams,
    timezone: str = DEFAULT_TIMEZONE,
) -> tuple[AdvancedState, SimulatedTrade]:
    tree = params.decision_tree
    keys = PeriodKeys.for_trade(trade, timezone)
    if state.ledger.is_new_day(keys):
        state = state.new_day(tree)
    ledger = state.ledger.rolled(keys).entered(trade)
    state = replace(state, ledger=ledger)

    status = cascade_status(trade, ledger, params)
    decision = None
    if status is None:
        decided = decide_risk(state, tree)
        if isinstance(decided, TradeStatus):
            status = decided
        else:
            decision = decided

    if status is not None:
        if status == TradeStatus.SKIPPED_DAILY_LIMIT:
            ledger = ledger.with_daily_limit_hit()
        elif status == TradeStatus.SKIPPED_DAILY_TARGET:
            ledger = ledger.with_daily_target_hit()
        logger.debug("trade %s on %s: %s (%s)", index, keys.day, status.value, state.phase.value)
        row = skipped_row(
            index,
            trade,
            ledger,
            status,
            consecutive_losses=state.consecutive_losses,
            day_phase=state.phase,
        )
        return replace(state, ledger=ledger), row

    decision = apply_constraints(decision, state, tree)
    sizing = calculate_tick_based_position_size(
        risk_budget_cents=decision.risk_cents,
        entry_price=trade.entry_price,
        stop_loss=trade.stop_loss,
        tick_size=trade.tick_size,
        tick_value=trade.tick_value,
        max_contracts=decision.max_contracts,
    )
    repriced = reprice(trade, sizing)

    ledger = ledger.booked(repriced.pnl_cents)
    streak = state.consecutive_losses
    if repriced.outcome == Outcome.LOSS:
        streak += 1
    elif repriced.outcome == Outcome.WIN:
        streak = 0
    state = replace(state, previous_risk_cents=decision.risk_cents, consecutive_losses=streak)

    state, ledger = transition(state, ledger, decision, repriced.outcome, repriced.pnl_cents, tree)
    ledger = ledger.check_daily_bounds(params.daily_loss_cents, params.daily_profit_target_cents)

    row = executed_row(
        index,
        trade,
        ledger,
        sizing,
        repriced,
        decision.reason,
        consecutive_losses=streak,
        day_phase=decision.phase,
        recovery_step_index=decision.recovery_step_index,
    )
    return replace(state, ledger=ledger), row


def run_advanced_simulation(
    trades: Sequence[HistoricalTrade],
    params: AdvancedSimulationParams,
    timezone: str = DEFAULT_TIMEZONE,
) -> SimulationResult:
    state = AdvancedState.opening(params)
    rows: list[SimulatedTrade] = []
    for index, trade in enumerate(trades):
        state, row = step(state, index, trade, params, timezone)
        rows.append(row)

    logger.info("advanced simulation: %s trades, final equity %s", len(rows), state.ledger.equity_cents)
    return build_simulation_result(
        trades=trades,
        rows=rows,
        params=params,
        limit_days=state.ledger.limit_days,
        target_days=state.ledger.target_days,
        timezone=timezone,
    )
