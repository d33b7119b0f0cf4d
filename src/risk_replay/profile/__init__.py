"""Risk management decision tree."""

from risk_replay.profile.models import (
    BaseTrade,
    CascadingLimits,
    Compounding,
    DecisionTreeConfig,
    DrawdownAction,
    DrawdownControl,
    DrawdownTier,
    ExecutionConstraints,
    FixedCents,
    GainMode,
    LimitAction,
    LossRecovery,
    LossRecoveryStep,
    PercentOfBase,
    RiskCalculation,
    SameAsPrevious,
    SingleTarget,
    describe_risk_calculation,
    resolve_risk_calculation,
)

__all__ = [
    "BaseTrade",
    "CascadingLimits",
    "Compounding",
    "DecisionTreeConfig",
    "DrawdownAction",
    "DrawdownControl",
    "DrawdownTier",
    "ExecutionConstraints",
    "FixedCents",
    "GainMode",
    "LimitAction",
    "LossRecovery",
    "LossRecoveryStep",
    "PercentOfBase",
    "RiskCalculation",
    "SameAsPrevious",
    "SingleTarget",
    "describe_risk_calculation",
    "resolve_risk_calculation",
]
