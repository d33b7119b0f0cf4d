"""Trade file loading."""

from risk_replay.journal.loader import load_trades, parse_trade

__all__ = ["load_trades", "parse_trade"]
