"""
In-memory stand-ins for the ledger gateway and the mirror node HTTP session.
"""

from __future__ import annotations

import base64
import json
from typing import Any, Dict, List, Optional, Set
from urllib.parse import parse_qs, urlsplit

from purchase_ledger.infrastructure.ledger_client import LedgerReceipt, ProvisionedAccount

MIRROR_BASE = "https://mirror.test"


def encode_entry(payload: Any, sequence_number: int, timestamp: Optional[str] = None) -> Dict[str, Any]:
    """Build a raw mirror entry the way the REST API returns it."""
    text = payload if isinstance(payload, str) else json.dumps(payload)
    return {
        "consensus_timestamp": timestamp or f"1700000000.{sequence_number:09d}",
        "sequence_number": sequence_number,
        "message": base64.b64encode(text.encode("utf-8")).decode("ascii"),
    }


async def no_sleep(seconds: float) -> None:
    del seconds


class FakeResponse:
    def __init__(self, status: int, body: Any = None, error: Optional[Exception] = None) -> None:
        self.status = status
        self._body = body
        self._error = error

    async def __aenter__(self) -> "FakeResponse":
        if self._error is not None:
            raise self._error
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        del exc_type, exc, tb
        return False

    async def json(self, content_type: Optional[str] = "application/json") -> Any:
        del content_type
        return self._body


class PagedMirrorSession:
    """
    Serves pre-built envelopes keyed by absolute URL and records every request.
    """

    def __init__(self, pages: Dict[str, FakeResponse]) -> None:
        self.pages = pages
        self.requested: List[str] = []

    def get(self, url: str) -> FakeResponse:
        self.requested.append(url)
        return self.pages.get(url, FakeResponse(404, {"_status": {"messages": [{"message": "Not found"}]}}))


class FakeLedger:
    """
    In-memory ledger: accounts, topics, and an append-only message log per topic.
    """

    def __init__(self, existing_topics: Optional[Set[str]] = None) -> None:
        self.topics: Dict[str, List[Dict[str, Any]]] = {t: [] for t in existing_topics or set()}
        self.accounts: List[ProvisionedAccount] = []
        self.verify_calls: List[str] = []
        self.reject_sequences: Set[int] = set()
        self.raise_on_sequences: Set[int] = set()
        self.hidden_topics: Set[str] = set()
        self.signers: List[Any] = []
        self._next_num = 1000

    def _allocate(self) -> str:
        self._next_num += 1
        return f"0.0.{self._next_num}"

    def create_account(self) -> ProvisionedAccount:
        account_id = self._allocate()
        account = ProvisionedAccount(account_id=account_id, private_key=f"key-{account_id}")
        self.accounts.append(account)
        return account

    def create_topic(self, memo: str = "") -> str:
        del memo
        topic_id = self._allocate()
        self.topics[topic_id] = []
        return topic_id

    def topic_exists(self, topic_id: str) -> bool:
        self.verify_calls.append(topic_id)
        return topic_id in self.topics and topic_id not in self.hidden_topics

    def submit_message(self, topic_id: str, message: str, signer_key: Any) -> LedgerReceipt:
        sequence = json.loads(message)["sequence"]
        if sequence in self.raise_on_sequences:
            raise RuntimeError("INVALID_SIGNATURE")
        if sequence in self.reject_sequences:
            return LedgerReceipt(status="INVALID_TOPIC_MESSAGE")
        log = self.topics[topic_id]
        log.append(encode_entry(message, len(log) + 1))
        self.signers.append(signer_key)
        return LedgerReceipt(status="SUCCESS")


class LedgerMirrorSession:
    """
    Mirror node view over a FakeLedger, paginating with `sequencenumber=gt:N`.
    """

    def __init__(self, ledger: FakeLedger, fail_after: Optional[int] = None) -> None:
        self.ledger = ledger
        self.requested: List[str] = []
        self.fail_after = fail_after

    def get(self, url: str) -> FakeResponse:
        self.requested.append(url)
        if self.fail_after is not None and len(self.requested) > self.fail_after:
            return FakeResponse(500, {"_status": {"messages": [{"message": "Internal error"}]}})

        parts = urlsplit(url)
        topic_id = parts.path.split("/")[-2]
        query = parse_qs(parts.query)
        limit = int(query["limit"][0])
        after = int(query.get("sequencenumber", ["gt:0"])[0].split(":")[1])

        log = self.ledger.topics.get(topic_id, [])
        page = [entry for entry in log if entry["sequence_number"] > after][:limit]
        next_link = None
        if page and page[-1]["sequence_number"] < len(log):
            next_link = (
                f"/api/v1/topics/{topic_id}/messages?limit={limit}&order=asc"
                f"&sequencenumber=gt:{page[-1]['sequence_number']}"
            )
        return FakeResponse(200, {"messages": page, "links": {"next": next_link}})
