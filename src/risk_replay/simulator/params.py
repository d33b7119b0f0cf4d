"""Simulation parameters for the simple and advanced engines."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from risk_replay.calculations.money import round_half_up
from risk_replay.profile.models import DecisionTreeConfig


class SimulationMode(str, Enum):
    SIMPLE = "simple"
    ADVANCED = "advanced"


class ConsecutiveLossScope(str, Enum):
    DAILY = "daily"
    GLOBAL = "global"


def _check_percent(value: Optional[float], name: str, low: float = 0.01, high: float = 100) -> None:
    if value is None:
        return
    if not low <= value <= high:
        raise ValueError(f"{name} must be between {low} and {high}, got {value!r}")


def _check_positive_int(value: Optional[int], name: str, required: bool = False) -> None:
    if value is None:
        if required:
            raise ValueError(f"{name} is required")
        return
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"{name} must be a positive integer, got {value!r}")


@dataclass(frozen=True)
class SimpleSimulationParams:
    account_balance_cents: int
    risk_per_trade_percent: float
    daily_loss_percent: float
    daily_profit_target_percent: Optional[float] = None
    max_daily_trades: Optional[int] = None
    max_consecutive_losses: Optional[int] = None
    consecutive_loss_scope: ConsecutiveLossScope = ConsecutiveLossScope.DAILY
    reduce_risk_after_loss: bool = False
    risk_reduction_factor: float = 0.5
    increase_risk_after_win: bool = False
    profit_reinvestment_percent: Optional[float] = None
    monthly_loss_percent: Optional[float] = None
    weekly_loss_percent: Optional[float] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "consecutive_loss_scope", ConsecutiveLossScope(self.consecutive_loss_scope))
        _check_positive_int(self.account_balance_cents, "account_balance_cents", required=True)
        _check_percent(self.risk_per_trade_percent, "risk_per_trade_percent")
        _check_percent(self.daily_loss_percent, "daily_loss_percent")
        _check_percent(self.daily_profit_target_percent, "daily_profit_target_percent")
        _check_percent(self.monthly_loss_percent, "monthly_loss_percent")
        _check_percent(self.weekly_loss_percent, "weekly_loss_percent")
        _check_percent(self.profit_reinvestment_percent, "profit_reinvestment_percent", low=0)
        _check_percent(self.risk_reduction_factor, "risk_reduction_factor", high=1)
        _check_positive_int(self.max_daily_trades, "max_daily_trades")
        _check_positive_int(self.max_consecutive_losses, "max_consecutive_losses")

    @property
    def mode(self) -> SimulationMode:
        return SimulationMode.SIMPLE

    def percent_of_balance(self, percent: Optional[float]) -> Optional[int]:
        if not percent:
            return None
        return round_half_up(self.account_balance_cents * percent / 100)

    def base_risk_cents(self) -> int:
        return self.percent_of_balance(self.risk_per_trade_percent) or 0

    def daily_loss_cents(self) -> int:
        return self.percent_of_balance(self.daily_loss_percent) or 0

    def daily_profit_target_cents(self) -> Optional[int]:
        return self.percent_of_balance(self.daily_profit_target_percent)

    def weekly_loss_cents(self) -> Optional[int]:
        return self.percent_of_balance(self.weekly_loss_percent)

    def monthly_loss_cents(self) -> Optional[int]:
        return self.percent_of_balance(self.monthly_loss_percent)


@dataclass(frozen=True)
class AdvancedSimulationParams:
    account_balance_cents: int
    decision_tree: DecisionTreeConfig
    daily_loss_cents: int
    monthly_loss_cents: int
    daily_profit_target_cents: Optional[int] = None
    weekly_loss_cents: Optional[int] = None

    def __post_init__(self) -> None:
        if not isinstance(self.decision_tree, DecisionTreeConfig):
            raise ValueError("decision_tree must be a DecisionTreeConfig")
        _check_positive_int(self.account_balance_cents, "account_balance_cents", required=True)
        _check_positive_int(self.daily_loss_cents, "daily_loss_cents", required=True)
        _check_positive_int(self.monthly_loss_cents, "monthly_loss_cents", required=True)
        _check_positive_int(self.daily_profit_target_cents, "daily_profit_target_cents")
        _check_positive_int(self.weekly_loss_cents, "weekly_loss_cents")

    @property
    def mode(self) -> SimulationMode:
        return SimulationMode.ADVANCED

    # Profile-level and tree-level ceilings can both be set; the tighter one binds.

    def effective_weekly_loss_cents(self) -> Optional[int]:
        limits = [
            value
            for value in (self.weekly_loss_cents, self.decision_tree.cascading_limits.weekly_loss_cents)
            if value is not None
        ]
        return min(limits) if limits else None

    def effective_monthly_loss_cents(self) -> int:
        return min(self.monthly_loss_cents, self.decision_tree.cascading_limits.monthly_loss_cents)


SimulationParams = Union[SimpleSimulationParams, AdvancedSimulationParams]
