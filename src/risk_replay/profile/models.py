"""Decision tree configuration for the advanced engine.

The tree governs day-level behavior: the first trade of a day uses the base
risk, a losing first trade starts the loss recovery sequence, a winning one
switches the day into gain mode, and cascading limits stop trading for the
rest of a day, week or month.

Every dataclass validates itself on construction and raises ``ValueError``
for malformed values, so a tree that exists is a tree the engine can walk.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import time
from enum import Enum
from typing import Optional, Union

from risk_replay.calculations.money import round_half_up

MAX_RECOVERY_STEPS = 10
MAX_DRAWDOWN_TIERS = 5

_HOURS_PATTERN = re.compile(r"^\d{2}:\d{2}$")


def _require_positive_int(value: Optional[int], name: str, allow_none: bool = True) -> None:
    if value is None:
        if allow_none:
            return
        raise ValueError(f"{name} is required")
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"{name} must be a positive integer, got {value!r}")


def _require_range(value: float, low: float, high: float, name: str) -> None:
    if not low <= value <= high:
        raise ValueError(f"{name} must be between {low} and {high}, got {value!r}")


class LimitAction(str, Enum):
    STOP_TRADING = "stopTrading"
    REDUCE_RISK = "reduceRisk"


class DrawdownAction(str, Enum):
    REDUCE_RISK = "reduceRisk"
    PAUSE = "pause"


# Risk calculation variants for a loss recovery step.


@dataclass(frozen=True)
class PercentOfBase:
    percent: float

    def __post_init__(self) -> None:
        _require_range(self.percent, 1, 200, "percentOfBase.percent")


@dataclass(frozen=True)
class FixedCents:
    amount_cents: int

    def __post_init__(self) -> None:
        _require_positive_int(self.amount_cents, "fixedCents.amount_cents", allow_none=False)


@dataclass(frozen=True)
class SameAsPrevious:
    pass


RiskCalculation = Union[PercentOfBase, FixedCents, SameAsPrevious]


def resolve_risk_calculation(calc: RiskCalculation, base_risk_cents: int, previous_risk_cents: int) -> int:
    if isinstance(calc, PercentOfBase):
        return round_half_up(base_risk_cents * calc.percent / 100)
    if isinstance(calc, FixedCents):
        return calc.amount_cents
    if isinstance(calc, SameAsPrevious):
        return previous_risk_cents
    raise TypeError(f"Unknown risk calculation: {calc!r}")


def describe_risk_calculation(calc: RiskCalculation) -> str:
    if isinstance(calc, PercentOfBase):
        return f"{calc.percent:g}% of base"
    if isinstance(calc, FixedCents):
        return f"{calc.amount_cents / 100:.2f} fixed"
    if isinstance(calc, SameAsPrevious):
        return "same as previous"
    raise TypeError(f"Unknown risk calculation: {calc!r}")


@dataclass(frozen=True)
class LossRecoveryStep:
    risk_calculation: RiskCalculation
    max_contracts_override: Optional[int] = None

    def __post_init__(self) -> None:
        if not isinstance(self.risk_calculation, (PercentOfBase, FixedCents, SameAsPrevious)):
            raise ValueError(f"Invalid risk calculation: {self.risk_calculation!r}")
        _require_positive_int(self.max_contracts_override, "max_contracts_override")


# Gain mode variants, entered after a winning trade.


@dataclass(frozen=True)
class Compounding:
    reinvestment_percent: float
    stop_on_first_loss: bool = False
    daily_target_cents: Optional[int] = None

    def __post_init__(self) -> None:
        _require_range(self.reinvestment_percent, 0, 100, "compounding.reinvestment_percent")
        _require_positive_int(self.daily_target_cents, "compounding.daily_target_cents")


@dataclass(frozen=True)
class SingleTarget:
    daily_target_cents: int

    def __post_init__(self) -> None:
        _require_positive_int(self.daily_target_cents, "singleTarget.daily_target_cents", allow_none=False)


GainMode = Union[Compounding, SingleTarget]


@dataclass(frozen=True)
class BaseTrade:
    risk_cents: int
    max_contracts: Optional[int] = None
    min_stop_points: Optional[int] = None

    def __post_init__(self) -> None:
        _require_positive_int(self.risk_cents, "base_trade.risk_cents", allow_none=False)
        _require_positive_int(self.max_contracts, "base_trade.max_contracts")
        _require_positive_int(self.min_stop_points, "base_trade.min_stop_points")


@dataclass(frozen=True)
class LossRecovery:
    sequence: tuple[LossRecoveryStep, ...] = ()
    execute_all_regardless: bool = False
    stop_after_sequence: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "sequence", tuple(self.sequence))
        if len(self.sequence) > MAX_RECOVERY_STEPS:
            raise ValueError(f"Maximum {MAX_RECOVERY_STEPS} recovery steps")

    def step_at(self, index: int) -> Optional[LossRecoveryStep]:
        if 0 <= index < len(self.sequence):
            return self.sequence[index]
        return None


@dataclass(frozen=True)
class CascadingLimits:
    monthly_loss_cents: int
    weekly_loss_cents: Optional[int] = None
    weekly_action: LimitAction = LimitAction.STOP_TRADING
    monthly_action: LimitAction = LimitAction.STOP_TRADING

    def __post_init__(self) -> None:
        _require_positive_int(self.monthly_loss_cents, "cascading_limits.monthly_loss_cents", allow_none=False)
        _require_positive_int(self.weekly_loss_cents, "cascading_limits.weekly_loss_cents")


@dataclass(frozen=True)
class ExecutionConstraints:
    min_stop_points: Optional[int] = None
    max_contracts: Optional[int] = None
    operating_hours_start: Optional[str] = None
    operating_hours_end: Optional[str] = None

    def __post_init__(self) -> None:
        _require_positive_int(self.min_stop_points, "execution_constraints.min_stop_points")
        _require_positive_int(self.max_contracts, "execution_constraints.max_contracts")
        for name in ("operating_hours_start", "operating_hours_end"):
            value = getattr(self, name)
            if value is None:
                continue
            if not _HOURS_PATTERN.match(value):
                raise ValueError(f"{name} must be HH:MM, got {value!r}")
            time.fromisoformat(value)


@dataclass(frozen=True)
class DrawdownTier:
    drawdown_percent: float
    action: DrawdownAction = DrawdownAction.REDUCE_RISK
    reduce_percent: float = 0.0

    def __post_init__(self) -> None:
        _require_range(self.drawdown_percent, 1, 99, "drawdown_tier.drawdown_percent")
        _require_range(self.reduce_percent, 0, 100, "drawdown_tier.reduce_percent")


@dataclass(frozen=True)
class DrawdownControl:
    tiers: tuple[DrawdownTier, ...] = ()
    recovery_threshold_percent: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "tiers", tuple(self.tiers))
        if len(self.tiers) > MAX_DRAWDOWN_TIERS:
            raise ValueError(f"Maximum {MAX_DRAWDOWN_TIERS} drawdown tiers")
        _require_range(self.recovery_threshold_percent, 0, 100, "drawdown_control.recovery_threshold_percent")

    def tier_for(self, drawdown_percent: float) -> Optional[DrawdownTier]:
        # Deepest tier first so a 12% drawdown picks the 10% tier over the 5% one.
        for tier in sorted(self.tiers, key=lambda item: item.drawdown_percent, reverse=True):
            if drawdown_percent >= tier.drawdown_percent and tier.action == DrawdownAction.REDUCE_RISK:
                return tier
        return None


@dataclass(frozen=True)
class DecisionTreeConfig:
    base_trade: BaseTrade
    cascading_limits: CascadingLimits
    loss_recovery: LossRecovery = field(default_factory=LossRecovery)
    gain_mode: GainMode = field(default_factory=lambda: Compounding(reinvestment_percent=50.0))
    execution_constraints: ExecutionConstraints = field(default_factory=ExecutionConstraints)
    drawdown_control: Optional[DrawdownControl] = None

    def __post_init__(self) -> None:
        if not isinstance(self.gain_mode, (Compounding, SingleTarget)):
            raise ValueError(f"Invalid gain mode: {self.gain_mode!r}")
