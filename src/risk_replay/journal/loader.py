"""Load historical trades from CSV or JSON exports.

Both formats use the same field names, one trade per row (CSV) or per
object in a top-level list (JSON):

    trade_id, asset, direction, entry_price, exit_price, stop_loss,
    position_size, pnl_cents, tick_size, tick_value, entry_date,
    exit_date, commission_per_execution, fees_per_execution,
    contracts_executed

``tick_value``, ``pnl_cents`` and the per-execution costs are integer
cents. An empty ``stop_loss`` means the trade had none. Dates are ISO 8601;
a trailing ``Z`` is accepted.
"""

from __future__ import annotations

import csv
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from risk_replay.calculations.pnl import Direction
from risk_replay.simulator.models import HistoricalTrade

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = (
    "asset",
    "direction",
    "entry_price",
    "exit_price",
    "position_size",
    "pnl_cents",
    "tick_size",
    "tick_value",
    "entry_date",
)


def load_trades(path: str | Path) -> list[HistoricalTrade]:
    """Read a trade file and return its trades ordered by entry date."""
    path = Path(path)
    if path.suffix.lower() == ".json":
        rows = _read_json(path)
    else:
        rows = _read_csv(path)

    trades = []
    aware = None
    for number, row in enumerate(rows, start=1):
        try:
            trade = parse_trade(row)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"Invalid trade at row {number} of {path.name}: {exc}") from exc

        # Naive and offset-aware entry dates cannot be ordered against each other.
        row_aware = trade.entry_date.tzinfo is not None
        if aware is None:
            aware = row_aware
        elif row_aware != aware:
            raise ValueError(
                f"Invalid trade at row {number} of {path.name}: "
                "entry_date mixes naive and timezone-aware timestamps"
            )
        trades.append(trade)

    trades.sort(key=lambda trade: trade.entry_date)
    logger.info("loaded %s trades from %s", len(trades), path)
    return trades


def parse_trade(row: dict[str, Any]) -> HistoricalTrade:
    missing = [key for key in REQUIRED_FIELDS if _blank(row.get(key))]
    if missing:
        raise ValueError(f"missing {', '.join(missing)}")

    return HistoricalTrade(
        trade_id=_optional_str(row.get("trade_id")),
        asset=str(row["asset"]),
        direction=Direction(str(row["direction"]).strip().lower()),
        entry_price=float(row["entry_price"]),
        exit_price=float(row["exit_price"]),
        stop_loss=_optional_float(row.get("stop_loss")),
        position_size=float(row["position_size"]),
        pnl_cents=int(row["pnl_cents"]),
        tick_size=float(row["tick_size"]),
        tick_value=int(row["tick_value"]),
        entry_date=_parse_ts(str(row["entry_date"])),
        exit_date=_parse_optional_ts(row.get("exit_date")),
        commission_per_execution=int(row.get("commission_per_execution") or 0),
        fees_per_execution=int(row.get("fees_per_execution") or 0),
        contracts_executed=_optional_float(row.get("contracts_executed")),
    )


def _read_csv(path: Path) -> list[dict[str, Any]]:
    with path.open("r", encoding="utf-8", newline="") as handle:
        return list(csv.DictReader(handle))


def _read_json(path: Path) -> list[dict[str, Any]]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError("Trade file must contain a list of trades")
    return data


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _optional_str(value: Any) -> Optional[str]:
    if _blank(value):
        return None
    return str(value)


def _optional_float(value: Any) -> Optional[float]:
    if _blank(value):
        return None
    return float(value)


def _parse_ts(value: str) -> datetime:
    if value.endswith("Z"):
        value = value.replace("Z", "+00:00")
    return datetime.fromisoformat(value)


def _parse_optional_ts(value: Any) -> Optional[datetime]:
    if _blank(value):
        return None
    return _parse_ts(str(value))
