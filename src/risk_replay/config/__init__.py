"""Config loading and freezing."""

from risk_replay.config.loader import (
    compute_config_hash,
    freeze_config,
    load_config,
    serialize_config,
    verify_config_lock,
)
from risk_replay.config.models import MonitoringConfig, ReplayConfig

__all__ = [
    "MonitoringConfig",
    "ReplayConfig",
    "compute_config_hash",
    "freeze_config",
    "load_config",
    "serialize_config",
    "verify_config_lock",
]
