"""
HCS Purchase Ledger - purchase events on Hedera Consensus Service topics.

This package demonstrates a write-through-consensus, read-through-mirror
pattern:

- Ephemeral accounts provisioned and paid for by an operator
- Topic reuse or creation with verification
- JSON purchase records signed by each ephemeral account
- Paginated mirror node reads filtered per identity
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from purchase_ledger.config import Settings, get_settings
from purchase_ledger.domain import FetchedRecord, MirrorMessage, PurchaseRecord, project_for_identity
from purchase_ledger.errors import (
    ConfigurationError,
    MirrorNodeError,
    PurchaseLedgerError,
    SubmissionError,
    TopicVerificationError,
)
from purchase_ledger.queries import fetch_identity_records, fetch_records_for_identity
from purchase_ledger.simulation import SimulationConfig, SimulationReport, run_demo, run_simulation
from purchase_ledger.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "FetchedRecord",
    "MirrorMessage",
    "PurchaseRecord",
    "project_for_identity",
    # Errors
    "ConfigurationError",
    "MirrorNodeError",
    "PurchaseLedgerError",
    "SubmissionError",
    "TopicVerificationError",
    # Read path
    "fetch_identity_records",
    "fetch_records_for_identity",
    # Simulation
    "SimulationConfig",
    "SimulationReport",
    "run_demo",
    "run_simulation",
    # Logging
    "configure_logging",
    "get_logger",
]
