"""
Domain models for the HCS Purchase Ledger demo.

PurchaseRecord is the JSON document submitted to the topic; MirrorMessage and
FetchedRecord are read-side projections rebuilt from the mirror node on every
query and never persisted.
"""
from __future__ import annotations

import datetime as dt
from typing import Any, Dict, Union

from pydantic import BaseModel, Field


class PurchaseRecord(BaseModel):
    """
    A single purchase event as serialized into an HCS message.
    """

    identity: str = Field(..., alias="did_id", description="Opaque identity filter key.")
    date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$", description="Purchase date (YYYY-MM-DD).")
    item: str = Field(..., description="Purchased item label.")
    price: Union[int, float] = Field(..., description="Purchase price.")
    order_id: str = Field(..., description="Order identifier.")
    sequence: int = Field(..., ge=1, description="Per-identity submission sequence (1..M).")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
    }

    @classmethod
    def build(cls, identity: str, sequence: int, on: dt.date | None = None) -> "PurchaseRecord":
        """
        Build the synthetic record an identity submits for a given sequence number.
        """
        short = identity.split(":")[-1]
        return cls(
            identity=identity,
            date=(on or dt.datetime.now(dt.timezone.utc).date()).isoformat(),
            item=f"Product {sequence}",
            price=100 + sequence * 10,
            order_id=f"ORDER-{short}-{sequence}",
            sequence=sequence,
        )

    def to_message(self) -> str:
        """Serialize to the JSON text submitted on the topic."""
        return self.model_dump_json(by_alias=True)


class MirrorMessage(BaseModel):
    """
    One decoded topic message as returned by the mirror node.
    """

    consensus_timestamp: str
    sequence_number: int
    payload: Dict[str, Any]

    model_config = {"frozen": True}


class FetchedRecord(BaseModel):
    """
    A purchase record matched for one identity, with its consensus position.
    """

    consensus_timestamp: str
    sequence_number: int
    data: PurchaseRecord

    model_config = {"frozen": True}


__all__ = ["PurchaseRecord", "MirrorMessage", "FetchedRecord"]
