"""
Exception hierarchy for the HCS Purchase Ledger demo.

Every failure the package raises on purpose derives from PurchaseLedgerError so
the CLI can report them uniformly; decode failures are never raised, they are
logged and the offending mirror entry is skipped.
"""

from __future__ import annotations

from typing import Optional


class PurchaseLedgerError(Exception):
    """Base class for all package errors."""


class ConfigurationError(PurchaseLedgerError):
    """Operator credentials or other settings are missing or malformed."""


class TopicVerificationError(PurchaseLedgerError):
    """A topic could not be confirmed to exist after creation."""

    def __init__(self, topic_id: str) -> None:
        super().__init__(f"Topic {topic_id} could not be verified even after waiting.")
        self.topic_id = topic_id


class MirrorNodeError(PurchaseLedgerError):
    """A paginated mirror node read failed; no partial result is available."""

    def __init__(self, message: str, url: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.url = url
        self.status = status


class SubmissionError(PurchaseLedgerError):
    """The ledger rejected a signed message submission."""

    def __init__(self, sequence: int, status: str) -> None:
        super().__init__(f"Submission #{sequence} rejected with status {status}")
        self.sequence = sequence
        self.status = status


__all__ = [
    "PurchaseLedgerError",
    "ConfigurationError",
    "TopicVerificationError",
    "MirrorNodeError",
    "SubmissionError",
]
