from __future__ import annotations

import argparse
import logging

from risk_replay import build_preview
from risk_replay.journal import load_trades
from risk_replay.simulator.time import DEFAULT_TIMEZONE


def main() -> None:
    parser = argparse.ArgumentParser(description="Summarize a trade file before simulating it")
    parser.add_argument("--trades", required=True, help="CSV or JSON trade export")
    parser.add_argument("--timezone", default=DEFAULT_TIMEZONE)
    args = parser.parse_args()

    logging.basicConfig(level=logging.WARNING)

    preview = build_preview(load_trades(args.trades), timezone=args.timezone)
    print(f"Trades: {preview.total_trades}")
    print(f"With stop loss: {preview.trades_with_sl}")
    print(f"Without stop loss: {preview.trades_without_sl}")
    print(f"Trading days: {preview.day_count}")
    print(f"Assets: {', '.join(preview.assets) or '-'}")


if __name__ == "__main__":
    main()
