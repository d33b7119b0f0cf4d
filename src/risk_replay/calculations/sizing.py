"""Tick-based position sizing from a risk budget."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from risk_replay.calculations.money import round_half_up


@dataclass(frozen=True)
class RiskSizingResult:
    contracts: int
    ticks_at_risk: int
    risk_per_contract_cents: int
    actual_risk_cents: int


ZERO_SIZING = RiskSizingResult(contracts=0, ticks_at_risk=0, risk_per_contract_cents=0, actual_risk_cents=0)


def ticks_between(price_a: float, price_b: float, tick_size: float) -> int:
    if tick_size <= 0:
        return 0
    return round_half_up(abs(price_a - price_b) / tick_size)


def calculate_tick_based_position_size(
    risk_budget_cents: int,
    entry_price: float,
    stop_loss: Optional[float],
    tick_size: float,
    tick_value: int,
    max_contracts: Optional[int] = None,
) -> RiskSizingResult:
    """Size a position so that the stop-out loss fits the risk budget.

    ``tick_value`` is in cents per tick per contract. A budget that is too
    small for a single contract still yields one contract, so
    ``actual_risk_cents`` may exceed the budget in that case only.
    ``max_contracts`` of ``None`` or ``0`` leaves the size uncapped.
    """
    if stop_loss is None:
        return ZERO_SIZING

    ticks_at_risk = ticks_between(entry_price, stop_loss, tick_size)
    if ticks_at_risk == 0 or tick_value == 0:
        return ZERO_SIZING

    risk_per_contract = round_half_up(ticks_at_risk * tick_value)
    if risk_per_contract <= 0:
        return RiskSizingResult(0, ticks_at_risk, 0, 0)

    contracts = max(0, math.floor(risk_budget_cents / risk_per_contract))
    if contracts == 0 and risk_budget_cents > 0:
        contracts = 1

    if max_contracts is not None and max_contracts > 0:
        contracts = min(contracts, max_contracts)

    return RiskSizingResult(
        contracts=contracts,
        ticks_at_risk=ticks_at_risk,
        risk_per_contract_cents=risk_per_contract,
        actual_risk_cents=contracts * risk_per_contract,
    )
