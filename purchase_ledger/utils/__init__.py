"""Shared helpers: logging configuration and phase timing."""

from purchase_ledger.utils.logging import configure_logging, get_logger
from purchase_ledger.utils.timing import PhaseStats, timed_phase

__all__ = ["configure_logging", "get_logger", "PhaseStats", "timed_phase"]
