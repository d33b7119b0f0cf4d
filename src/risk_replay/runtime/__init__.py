"""Runtime context exports."""

from risk_replay.runtime.context import RunContext, create_run_context

__all__ = ["RunContext", "create_run_context"]
