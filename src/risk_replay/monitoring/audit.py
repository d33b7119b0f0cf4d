"""Append-only audit log for simulation runs."""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from risk_replay.simulator.models import SimulationResult


class AuditLog:
    def __init__(self, path: str | Path, run_id: str | None = None, config_hash: str | None = None) -> None:
        self.path = Path(path)
        self.run_id = run_id
        self.config_hash = config_hash
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def log(self, event: str, payload: dict[str, Any]) -> None:
        record = {
            "ts": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "run_id": self.run_id,
            "config_hash": self.config_hash,
            "event": event,
            "payload": payload,
        }
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record, default=str))
            handle.write("\n")

    def log_simulation(self, result: SimulationResult, trades_path: str | Path | None = None) -> None:
        """One ``simulation_completed`` record with the run's headline numbers."""
        summary = asdict(result.summary)
        summary["skipped_trades"] = result.summary.skipped_trades
        self.log(
            "simulation_completed",
            {
                "mode": result.params.mode.value,
                "trades_path": str(trades_path) if trades_path is not None else None,
                "date_range": asdict(result.date_range),
                "summary": summary,
            },
        )
