import json
from pathlib import Path

import pytest

yaml = pytest.importorskip("yaml")

from risk_replay.config import freeze_config, load_config, serialize_config, verify_config_lock
from risk_replay.profile import Compounding, DrawdownAction, FixedCents, PercentOfBase, SingleTarget
from risk_replay.simulator import AdvancedSimulationParams, SimpleSimulationParams, SimulationMode

CONFIG_DIR = Path(__file__).resolve().parent.parent / "configs"


def _write(tmp_path, payload) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(payload), encoding="utf-8")
    return path


def test_load_simple_config_sample():
    config = load_config(CONFIG_DIR / "simple_example.yaml")
    assert isinstance(config.params, SimpleSimulationParams)
    assert config.params.mode == SimulationMode.SIMPLE
    assert config.params.max_daily_trades == 4
    assert config.timezone == "America/Sao_Paulo"
    assert config.monitoring.audit_log_path == "runtime/audit.log"


def test_load_advanced_config_sample():
    config = load_config(CONFIG_DIR / "advanced_example.yaml")
    params = config.params
    assert isinstance(params, AdvancedSimulationParams)
    assert config.run_id_prefix == config.name

    tree = params.decision_tree
    assert tree.base_trade.risk_cents == 10000
    assert isinstance(tree.loss_recovery.sequence[0].risk_calculation, PercentOfBase)
    assert tree.loss_recovery.sequence[1].max_contracts_override == 5
    assert isinstance(tree.gain_mode, Compounding)
    assert tree.gain_mode.stop_on_first_loss is True
    assert tree.execution_constraints.operating_hours_end == "17:30"
    assert tree.drawdown_control.tiers[2].action == DrawdownAction.PAUSE


def test_serialize_config_is_json_ready():
    config = load_config(CONFIG_DIR / "advanced_example.yaml")
    payload = serialize_config(config)

    assert payload["params"]["mode"] == "advanced"
    tree = payload["params"]["decision_tree"]
    assert tree["gain_mode"]["type"] == "compounding"
    assert tree["loss_recovery"]["sequence"][1]["risk_calculation"]["type"] == "fixedCents"
    assert tree["cascading_limits"]["weekly_action"] == "stopTrading"
    json.dumps(payload)


def test_single_target_gain_mode(tmp_path):
    path = _write(
        tmp_path,
        {
            "name": "single",
            "version": 1,
            "simulation": {
                "mode": "advanced",
                "account_balance_cents": 500000,
                "daily_loss_cents": 20000,
                "monthly_loss_cents": 60000,
                "decision_tree": {
                    "base_trade": {"risk_cents": 5000},
                    "cascading_limits": {"monthly_loss_cents": 60000},
                    "gain_mode": {"type": "singleTarget", "daily_target_cents": 15000},
                },
            },
        },
    )
    config = load_config(path)
    assert config.version == "1"
    assert isinstance(config.params.decision_tree.gain_mode, SingleTarget)
    assert config.params.decision_tree.loss_recovery.sequence == ()


def test_missing_key_is_reported(tmp_path):
    path = _write(tmp_path, {"name": "broken", "version": 1})
    with pytest.raises(ValueError, match="Missing required config key: simulation"):
        load_config(path)


def test_invalid_enum_is_reported(tmp_path):
    path = _write(tmp_path, {"name": "broken", "version": 1, "simulation": {"mode": "turbo"}})
    with pytest.raises(ValueError, match="Invalid mode: turbo"):
        load_config(path)


def test_invalid_timezone_is_reported(tmp_path):
    path = _write(
        tmp_path,
        {"name": "broken", "version": 1, "timezone": "Mars/Olympus", "simulation": {"mode": "simple"}},
    )
    with pytest.raises(ValueError, match="Invalid timezone"):
        load_config(path)


def test_freeze_and_verify(tmp_path):
    source = CONFIG_DIR / "simple_example.yaml"
    target = tmp_path / "simple_example.yaml"
    target.write_text(source.read_text(encoding="utf-8"), encoding="utf-8")

    lock_path = freeze_config(target)
    assert verify_config_lock(target, lock_path)

    target.write_text(target.read_text(encoding="utf-8") + "\n# edited\n", encoding="utf-8")
    assert not verify_config_lock(target, lock_path)


def _advanced_payload(**simulation) -> dict:
    values = {
        "mode": "advanced",
        "account_balance_cents": 500000,
        "daily_loss_cents": 20000,
        "monthly_loss_cents": 60000,
        "decision_tree": {
            "base_trade": {"risk_cents": 5000},
            "cascading_limits": {"monthly_loss_cents": 60000},
            "loss_recovery": {
                "sequence": [{"risk_calculation": {"type": "fixedCents", "amount_cents": 2500}}],
            },
        },
    }
    values.update(simulation)
    return {"name": "tree", "version": 1, "simulation": values}


def test_fixed_cents_recovery_step(tmp_path):
    config = load_config(_write(tmp_path, _advanced_payload()))
    step = config.params.decision_tree.loss_recovery.sequence[0]

    assert isinstance(step.risk_calculation, FixedCents)
    assert step.risk_calculation.amount_cents == 2500
    sequence = serialize_config(config)["params"]["decision_tree"]["loss_recovery"]["sequence"]
    assert sequence[0]["risk_calculation"]["type"] == "fixedCents"


@pytest.mark.parametrize("value", ["lots", None, 12.5, True])
def test_bad_number_is_reported_with_its_key(tmp_path, value):
    path = _write(tmp_path, _advanced_payload(daily_loss_cents=value))
    with pytest.raises(ValueError, match="Invalid daily_loss_cents"):
        load_config(path)


def test_bad_nested_number_is_reported_with_its_key(tmp_path):
    payload = _advanced_payload()
    payload["simulation"]["decision_tree"]["base_trade"]["risk_cents"] = "ten"
    with pytest.raises(ValueError, match="Invalid risk_cents: ten"):
        load_config(_write(tmp_path, payload))
