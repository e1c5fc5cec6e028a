"""
Phase timing utilities for the HCS Purchase Ledger demo.

Usage:
    from purchase_ledger.utils.timing import timed_phase

    with timed_phase("submit") as stats:
        submit_everything()

    print(stats.duration_seconds)
"""

from __future__ import annotations

import contextlib
import time
from dataclasses import dataclass
from typing import Generator


@dataclass
class PhaseStats:
    """
    Wall-clock measurement of one simulation phase.
    """

    label: str
    duration_seconds: float = 0.0


@contextlib.contextmanager
def timed_phase(label: str) -> Generator[PhaseStats, None, None]:
    """
    Measure the wall-clock duration of a block (perf_counter).

    The stats are filled in even when the block raises.
    """
    stats = PhaseStats(label=label)
    start = time.perf_counter()
    try:
        yield stats
    finally:
        stats.duration_seconds = time.perf_counter() - start


__all__ = ["PhaseStats", "timed_phase"]
