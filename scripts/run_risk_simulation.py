from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path

from risk_replay import run_simulation
from risk_replay.config import load_config, serialize_config
from risk_replay.journal import load_trades
from risk_replay.monitoring import AuditLog
from risk_replay.runtime import create_run_context


def _serialize_weeks(weeks):
    return [
        {
            "week_key": week.week_key,
            "week_label": week.week_label,
            "week_pnl_cents": week.week_pnl_cents,
            "executed_count": week.executed_count,
            "skipped_count": week.skipped_count,
            "days": [{"day_key": day.day_key, **asdict(day.result)} for day in week.days],
        }
        for week in weeks
    ]


def main() -> None:
    parser = argparse.ArgumentParser(description="Replay a trade history under a risk profile")
    parser.add_argument("--config", required=True)
    parser.add_argument("--trades", required=True, help="CSV or JSON trade export")
    parser.add_argument("--output", required=True)
    parser.add_argument("--audit-log", default=None, help="Overrides monitoring.audit_log_path")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config_path = Path(args.config)
    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    config = load_config(config_path)
    context = create_run_context(config_path, config.run_id_prefix, trades_path=args.trades)
    audit = AuditLog(args.audit_log or config.monitoring.audit_log_path, context.run_id, context.config_hash)

    trades = load_trades(args.trades)
    result = run_simulation(trades, config.params, timezone=config.timezone)
    audit.log_simulation(result, trades_path=args.trades)

    summary = asdict(result.summary)
    summary["skipped_trades"] = result.summary.skipped_trades
    report = {
        "generated_at_utc": datetime.now(timezone.utc).isoformat(),
        "run_id": context.run_id,
        "config_path": str(config_path),
        "config_hash": context.config_hash,
        "trades_path": str(context.trades_path),
        "trades_hash": context.trades_hash,
        "config": serialize_config(config),
        "date_range": asdict(result.date_range),
        "summary": summary,
        "trades": [asdict(row) for row in result.trades],
        "equity_curve": [asdict(point) for point in result.equity_curve],
        "weeks": _serialize_weeks(result.weeks),
    }

    output_path.write_text(json.dumps(report, indent=2, default=str), encoding="utf-8")
    print(f"Wrote {output_path}")
    print(
        f"Executed {result.summary.executed_trades}/{result.summary.total_trades} trades, "
        f"simulated P&L {result.summary.simulated_total_pnl_cents / 100:.2f} "
        f"(original {result.summary.original_total_pnl_cents / 100:.2f})"
    )


if __name__ == "__main__":
    main()
