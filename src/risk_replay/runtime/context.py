"""Run context creation and metadata."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from risk_replay.config.loader import compute_config_hash


@dataclass(frozen=True)
class RunContext:
    run_id: str
    config_path: Path
    config_hash: str
    started_at: datetime
    trades_path: Optional[Path] = None
    trades_hash: Optional[str] = None


def create_run_context(
    config_path: str | Path,
    run_id_prefix: str,
    run_id: Optional[str] = None,
    trades_path: Optional[str | Path] = None,
) -> RunContext:
    path = Path(config_path)
    config_hash = compute_config_hash(path)
    started_at = datetime.now(timezone.utc)
    if run_id is None:
        stamp = started_at.strftime("%Y%m%dT%H%M%SZ")
        run_id = f"{run_id_prefix}-{stamp}-{config_hash[:8]}"

    trades_hash = None
    if trades_path is not None:
        trades_path = Path(trades_path)
        # Same sha256 digest as the config, so a report pins both inputs.
        trades_hash = compute_config_hash(trades_path)

    return RunContext(
        run_id=run_id,
        config_path=path,
        config_hash=config_hash,
        started_at=started_at,
        trades_path=trades_path,
        trades_hash=trades_hash,
    )
