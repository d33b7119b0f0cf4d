"""Load and freeze configuration files."""

from __future__ import annotations

import hashlib
import json
from dataclasses import asdict
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from risk_replay.config.models import MonitoringConfig, ReplayConfig
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
)
from risk_replay.simulator.params import (
    AdvancedSimulationParams,
    ConsecutiveLossScope,
    SimpleSimulationParams,
    SimulationMode,
    SimulationParams,
)
from risk_replay.simulator.time import DEFAULT_TIMEZONE


def load_config(path: str | Path) -> ReplayConfig:
    path = Path(path)
    data = _load_yaml(path)

    name = _require(data, "name")
    version = str(_require(data, "version"))
    run_id_prefix = data.get("run_id_prefix", name)
    tz_name = str(data.get("timezone", DEFAULT_TIMEZONE))
    try:
        ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Invalid timezone: {tz_name}") from exc

    params = _parse_simulation(_require(data, "simulation"))
    monitoring = _parse_monitoring(data.get("monitoring", {}))

    return ReplayConfig(
        name=name,
        version=version,
        run_id_prefix=run_id_prefix,
        params=params,
        timezone=tz_name,
        monitoring=monitoring,
    )


def compute_config_hash(path: str | Path) -> str:
    path = Path(path)
    content = path.read_bytes()
    return hashlib.sha256(content).hexdigest()


def freeze_config(path: str | Path, lock_path: Optional[str | Path] = None) -> Path:
    path = Path(path)
    config_hash = compute_config_hash(path)
    if lock_path is None:
        lock_path = path.with_suffix(path.suffix + ".lock.json")
    lock_path = Path(lock_path)

    payload = {
        "config_path": str(path),
        "config_hash": config_hash,
        "frozen_at_utc": datetime.now(timezone.utc).isoformat(),
    }
    lock_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return lock_path


def verify_config_lock(path: str | Path, lock_path: Optional[str | Path] = None) -> bool:
    path = Path(path)
    if lock_path is None:
        lock_path = path.with_suffix(path.suffix + ".lock.json")
    lock_path = Path(lock_path)
    if not lock_path.exists():
        return False
    payload = json.loads(lock_path.read_text(encoding="utf-8"))
    expected = payload.get("config_hash")
    return expected == compute_config_hash(path)


def _load_yaml(path: Path) -> dict[str, Any]:
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("Config must be a mapping")
    return data


def _require(data: dict[str, Any], key: str) -> Any:
    if key not in data:
        raise ValueError(f"Missing required config key: {key}")
    return data[key]


def _parse_enum(enum_cls, value: Any, key: str):
    try:
        return enum_cls(value)
    except ValueError as exc:
        raise ValueError(f"Invalid {key}: {value}") from exc


def _parse_int(value: Any, key: str) -> int:
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValueError(f"Invalid {key}: {value}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid {key}: {value}") from exc


def _parse_float(value: Any, key: str) -> float:
    if isinstance(value, bool):
        raise ValueError(f"Invalid {key}: {value}")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid {key}: {value}") from exc


def _require_int(data: dict[str, Any], key: str) -> int:
    return _parse_int(_require(data, key), key)


def _require_float(data: dict[str, Any], key: str) -> float:
    return _parse_float(_require(data, key), key)


def _optional_int(data: dict[str, Any], key: str) -> Optional[int]:
    value = data.get(key)
    if value is None:
        return None
    return _parse_int(value, key)


def _optional_float(data: dict[str, Any], key: str) -> Optional[float]:
    value = data.get(key)
    if value is None:
        return None
    return _parse_float(value, key)


def _parse_simulation(data: dict[str, Any]) -> SimulationParams:
    mode = _parse_enum(SimulationMode, _require(data, "mode"), "mode")
    if mode == SimulationMode.SIMPLE:
        return _parse_simple(data)
    return _parse_advanced(data)


def _parse_simple(data: dict[str, Any]) -> SimpleSimulationParams:
    return SimpleSimulationParams(
        account_balance_cents=_require_int(data, "account_balance_cents"),
        risk_per_trade_percent=_require_float(data, "risk_per_trade_percent"),
        daily_loss_percent=_require_float(data, "daily_loss_percent"),
        daily_profit_target_percent=_optional_float(data, "daily_profit_target_percent"),
        max_daily_trades=_optional_int(data, "max_daily_trades"),
        max_consecutive_losses=_optional_int(data, "max_consecutive_losses"),
        consecutive_loss_scope=_parse_enum(
            ConsecutiveLossScope, data.get("consecutive_loss_scope", "daily"), "consecutive_loss_scope"
        ),
        reduce_risk_after_loss=bool(data.get("reduce_risk_after_loss", False)),
        risk_reduction_factor=_parse_float(data.get("risk_reduction_factor", 0.5), "risk_reduction_factor"),
        increase_risk_after_win=bool(data.get("increase_risk_after_win", False)),
        profit_reinvestment_percent=_optional_float(data, "profit_reinvestment_percent"),
        monthly_loss_percent=_optional_float(data, "monthly_loss_percent"),
        weekly_loss_percent=_optional_float(data, "weekly_loss_percent"),
    )


def _parse_advanced(data: dict[str, Any]) -> AdvancedSimulationParams:
    return AdvancedSimulationParams(
        account_balance_cents=_require_int(data, "account_balance_cents"),
        decision_tree=_parse_decision_tree(_require(data, "decision_tree")),
        daily_loss_cents=_require_int(data, "daily_loss_cents"),
        monthly_loss_cents=_require_int(data, "monthly_loss_cents"),
        daily_profit_target_cents=_optional_int(data, "daily_profit_target_cents"),
        weekly_loss_cents=_optional_int(data, "weekly_loss_cents"),
    )


def _parse_decision_tree(data: dict[str, Any]) -> DecisionTreeConfig:
    base = _require(data, "base_trade")
    limits = _require(data, "cascading_limits")
    recovery = data.get("loss_recovery", {})
    constraints = data.get("execution_constraints", {})

    drawdown_control = None
    if data.get("drawdown_control") is not None:
        drawdown_control = _parse_drawdown_control(data["drawdown_control"])

    return DecisionTreeConfig(
        base_trade=BaseTrade(
            risk_cents=_require_int(base, "risk_cents"),
            max_contracts=_optional_int(base, "max_contracts"),
            min_stop_points=_optional_int(base, "min_stop_points"),
        ),
        cascading_limits=CascadingLimits(
            monthly_loss_cents=_require_int(limits, "monthly_loss_cents"),
            weekly_loss_cents=_optional_int(limits, "weekly_loss_cents"),
            weekly_action=_parse_enum(LimitAction, limits.get("weekly_action", "stopTrading"), "weekly_action"),
            monthly_action=_parse_enum(LimitAction, limits.get("monthly_action", "stopTrading"), "monthly_action"),
        ),
        loss_recovery=LossRecovery(
            sequence=tuple(_parse_recovery_step(step) for step in recovery.get("sequence", [])),
            execute_all_regardless=bool(recovery.get("execute_all_regardless", False)),
            stop_after_sequence=bool(recovery.get("stop_after_sequence", True)),
        ),
        gain_mode=_parse_gain_mode(data.get("gain_mode", {"type": "compounding", "reinvestment_percent": 50})),
        execution_constraints=ExecutionConstraints(
            min_stop_points=_optional_int(constraints, "min_stop_points"),
            max_contracts=_optional_int(constraints, "max_contracts"),
            operating_hours_start=constraints.get("operating_hours_start"),
            operating_hours_end=constraints.get("operating_hours_end"),
        ),
        drawdown_control=drawdown_control,
    )


def _parse_recovery_step(data: dict[str, Any]) -> LossRecoveryStep:
    return LossRecoveryStep(
        risk_calculation=_parse_risk_calculation(_require(data, "risk_calculation")),
        max_contracts_override=_optional_int(data, "max_contracts_override"),
    )


def _parse_risk_calculation(data: dict[str, Any]) -> RiskCalculation:
    kind = _require(data, "type")
    if kind == "percentOfBase":
        return PercentOfBase(percent=_require_float(data, "percent"))
    if kind == "fixedCents":
        return FixedCents(amount_cents=_require_int(data, "amount_cents"))
    if kind == "sameAsPrevious":
        return SameAsPrevious()
    raise ValueError(f"Invalid risk_calculation.type: {kind}")


def _parse_gain_mode(data: dict[str, Any]) -> GainMode:
    kind = _require(data, "type")
    if kind == "compounding":
        return Compounding(
            reinvestment_percent=_require_float(data, "reinvestment_percent"),
            stop_on_first_loss=bool(data.get("stop_on_first_loss", False)),
            daily_target_cents=_optional_int(data, "daily_target_cents"),
        )
    if kind == "singleTarget":
        return SingleTarget(daily_target_cents=_require_int(data, "daily_target_cents"))
    raise ValueError(f"Invalid gain_mode.type: {kind}")


def _parse_drawdown_control(data: dict[str, Any]) -> DrawdownControl:
    tiers = []
    for tier in data.get("tiers", []):
        tiers.append(
            DrawdownTier(
                drawdown_percent=_require_float(tier, "drawdown_percent"),
                action=_parse_enum(DrawdownAction, tier.get("action", "reduceRisk"), "drawdown_tier.action"),
                reduce_percent=_parse_float(tier.get("reduce_percent", 0.0), "reduce_percent"),
            )
        )
    return DrawdownControl(
        tiers=tuple(tiers),
        recovery_threshold_percent=_parse_float(
            data.get("recovery_threshold_percent", 0.0), "recovery_threshold_percent"
        ),
    )


def _parse_monitoring(data: dict[str, Any]) -> MonitoringConfig:
    return MonitoringConfig(
        audit_log_path=str(data.get("audit_log_path", "runtime/audit.log")),
    )


def serialize_config(config: ReplayConfig) -> dict[str, Any]:
    payload = asdict(config)
    payload["params"] = _plain(payload["params"])
    payload["params"]["mode"] = config.params.mode.value
    if isinstance(config.params, AdvancedSimulationParams):
        tree = payload["params"]["decision_tree"]
        tree["gain_mode"]["type"] = _gain_mode_type(config.params.decision_tree.gain_mode)
        for step, source in zip(tree["loss_recovery"]["sequence"], config.params.decision_tree.loss_recovery.sequence):
            step["risk_calculation"]["type"] = _risk_calculation_type(source.risk_calculation)
    return payload


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    return value


def _gain_mode_type(gain_mode: GainMode) -> str:
    if isinstance(gain_mode, SingleTarget):
        return "singleTarget"
    return "compounding"


def _risk_calculation_type(calc: RiskCalculation) -> str:
    if isinstance(calc, PercentOfBase):
        return "percentOfBase"
    if isinstance(calc, FixedCents):
        return "fixedCents"
    return "sameAsPrevious"
