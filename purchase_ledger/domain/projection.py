"""
Identity-filtered projection over decoded mirror messages.
"""

from __future__ import annotations

from typing import Iterable, List

from pydantic import ValidationError

from purchase_ledger.domain.models import FetchedRecord, MirrorMessage, PurchaseRecord
from purchase_ledger.utils.logging import get_logger

log = get_logger(__name__)

IDENTITY_FIELD = "did_id"


def project_for_identity(messages: Iterable[MirrorMessage], identity: str) -> List[FetchedRecord]:
    """
    Select the messages whose payload identity equals `identity`, in read order.

    Duplicates are kept: uniqueness of (topic, sequence_number) is upheld by the
    remote log and is not re-checked here. Returns an empty list when nothing
    matches.
    """
    found: List[FetchedRecord] = []
    for message in messages:
        if message.payload.get(IDENTITY_FIELD) != identity:
            continue
        try:
            record = PurchaseRecord.model_validate(message.payload)
        except ValidationError as exc:
            log.warning(
                f"[FETCH] Skipping malformed purchase record at {message.consensus_timestamp}",
                extra={"consensus_timestamp": message.consensus_timestamp, "errors": exc.error_count()},
            )
            continue
        found.append(
            FetchedRecord(
                consensus_timestamp=message.consensus_timestamp,
                sequence_number=message.sequence_number,
                data=record,
            )
        )
    return found


__all__ = ["IDENTITY_FIELD", "project_for_identity"]
