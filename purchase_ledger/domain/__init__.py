"""
Domain package for the HCS Purchase Ledger demo.

Exports the purchase/mirror data models and the identity-filtered projection.
Keep this package free of network I/O.
"""

from purchase_ledger.domain.models import FetchedRecord, MirrorMessage, PurchaseRecord
from purchase_ledger.domain.projection import project_for_identity

__all__ = [
    "FetchedRecord",
    "MirrorMessage",
    "PurchaseRecord",
    "project_for_identity",
]
