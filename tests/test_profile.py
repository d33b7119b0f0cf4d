import pytest

from risk_replay.profile import (
    BaseTrade,
    CascadingLimits,
    Compounding,
    DecisionTreeConfig,
    DrawdownAction,
    DrawdownControl,
    DrawdownTier,
    ExecutionConstraints,
    FixedCents,
    LossRecovery,
    LossRecoveryStep,
    PercentOfBase,
    SameAsPrevious,
    SingleTarget,
    describe_risk_calculation,
    resolve_risk_calculation,
)
from risk_replay.simulator import AdvancedSimulationParams, SimpleSimulationParams


def test_resolve_risk_calculation_variants():
    assert resolve_risk_calculation(PercentOfBase(150), 10000, 4000) == 15000
    assert resolve_risk_calculation(FixedCents(2500), 10000, 4000) == 2500
    assert resolve_risk_calculation(SameAsPrevious(), 10000, 4000) == 4000
    assert describe_risk_calculation(PercentOfBase(50)) == "50% of base"


def test_unknown_risk_calculation_is_rejected():
    with pytest.raises(TypeError):
        resolve_risk_calculation("half", 10000, 4000)
    with pytest.raises(ValueError):
        LossRecoveryStep("half")


@pytest.mark.parametrize(
    "factory",
    [
        lambda: PercentOfBase(0),
        lambda: PercentOfBase(201),
        lambda: FixedCents(0),
        lambda: BaseTrade(risk_cents=0),
        lambda: BaseTrade(risk_cents=100, max_contracts=-1),
        lambda: Compounding(reinvestment_percent=120),
        lambda: SingleTarget(daily_target_cents=0),
        lambda: CascadingLimits(monthly_loss_cents=0),
        lambda: ExecutionConstraints(operating_hours_start="9am"),
        lambda: ExecutionConstraints(operating_hours_end="25:00"),
        lambda: DrawdownTier(drawdown_percent=0),
        lambda: LossRecovery(sequence=[LossRecoveryStep(SameAsPrevious())] * 11),
        lambda: DrawdownControl(tiers=[DrawdownTier(drawdown_percent=10)] * 6),
    ],
)
def test_invalid_tree_parts_raise(factory):
    with pytest.raises(ValueError):
        factory()


def test_gain_mode_must_be_known_variant():
    with pytest.raises(ValueError):
        DecisionTreeConfig(
            base_trade=BaseTrade(risk_cents=100),
            cascading_limits=CascadingLimits(monthly_loss_cents=1000),
            gain_mode="compound",
        )


def test_drawdown_control_picks_deepest_reduce_tier():
    control = DrawdownControl(
        tiers=(
            DrawdownTier(drawdown_percent=5, reduce_percent=25),
            DrawdownTier(drawdown_percent=10, reduce_percent=50),
            DrawdownTier(drawdown_percent=15, action=DrawdownAction.PAUSE),
        )
    )
    assert control.tier_for(3) is None
    assert control.tier_for(7).reduce_percent == 25
    assert control.tier_for(12).reduce_percent == 50
    assert control.tier_for(20).reduce_percent == 50


def test_simple_params_validation_and_amounts():
    params = SimpleSimulationParams(
        account_balance_cents=1_000_000,
        risk_per_trade_percent=1.5,
        daily_loss_percent=3,
        weekly_loss_percent=5,
    )
    assert params.base_risk_cents() == 15000
    assert params.daily_loss_cents() == 30000
    assert params.weekly_loss_cents() == 50000
    assert params.monthly_loss_cents() is None

    with pytest.raises(ValueError):
        SimpleSimulationParams(account_balance_cents=0, risk_per_trade_percent=1, daily_loss_percent=3)
    with pytest.raises(ValueError):
        SimpleSimulationParams(account_balance_cents=100, risk_per_trade_percent=0, daily_loss_percent=3)
    with pytest.raises(ValueError):
        SimpleSimulationParams(
            account_balance_cents=100, risk_per_trade_percent=1, daily_loss_percent=3, max_daily_trades=0
        )


def test_advanced_params_take_tighter_limits():
    tree = DecisionTreeConfig(
        base_trade=BaseTrade(risk_cents=100),
        cascading_limits=CascadingLimits(monthly_loss_cents=8000, weekly_loss_cents=3000),
    )
    params = AdvancedSimulationParams(
        account_balance_cents=100000,
        decision_tree=tree,
        daily_loss_cents=1000,
        monthly_loss_cents=5000,
        weekly_loss_cents=4000,
    )
    assert params.effective_monthly_loss_cents() == 5000
    assert params.effective_weekly_loss_cents() == 3000
