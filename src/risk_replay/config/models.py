"""Configuration models for reproducible simulation runs."""

from __future__ import annotations

from dataclasses import dataclass, field

from risk_replay.simulator.params import SimulationParams
from risk_replay.simulator.time import DEFAULT_TIMEZONE


@dataclass(frozen=True)
class MonitoringConfig:
    audit_log_path: str = "runtime/audit.log"


@dataclass(frozen=True)
class ReplayConfig:
    name: str
    version: str
    run_id_prefix: str
    params: SimulationParams
    timezone: str = DEFAULT_TIMEZONE
    monitoring: MonitoringConfig = field(default_factory=MonitoringConfig)
