"""
Read path: fetch a topic from the mirror node and project it for one identity.

`fetch_records_for_identity` returns None when the scan failed, which callers
must keep distinct from an empty list (scan succeeded, nothing matched).
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, List, Optional

from tenacity import AsyncRetrying, retry_if_result, stop_after_attempt, wait_exponential

from purchase_ledger.config import Settings, get_settings
from purchase_ledger.domain.models import FetchedRecord
from purchase_ledger.domain.projection import project_for_identity
from purchase_ledger.errors import MirrorNodeError
from purchase_ledger.infrastructure.mirror_node import MirrorNodeReader, mirror_reader
from purchase_ledger.utils.logging import get_logger

log = get_logger(__name__)


async def fetch_records_for_identity(
    reader: MirrorNodeReader, topic_id: str, identity: str
) -> Optional[List[FetchedRecord]]:
    """
    Scan the whole topic and keep the records stamped with `identity`.

    Returns
    -------
    list[FetchedRecord] | None
        Matching records in consensus order, or None if the mirror read failed.
    """
    try:
        messages = await reader.fetch_messages(topic_id)
    except MirrorNodeError as exc:
        log.error(
            f"[FETCH] Error fetching from Mirror Node: {exc}",
            extra={"topic_id": topic_id, "url": exc.url, "status": exc.status},
        )
        return None
    return project_for_identity(messages, identity)


async def poll_records_for_identity(
    reader: MirrorNodeReader,
    topic_id: str,
    identity: str,
    expected: int,
    attempts: int = 6,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> Optional[List[FetchedRecord]]:
    """
    Re-read until `expected` records are visible for `identity`.

    Backs off exponentially between attempts. When attempts run out the last
    observed result is returned rather than raised.
    """

    def _not_ready(result: Optional[List[FetchedRecord]]) -> bool:
        ready = result is not None and len(result) >= expected
        if not ready:
            found = "read failed" if result is None else f"{len(result)}/{expected}"
            log.info(
                f"[SYNC] Mirror not caught up for {identity} ({found}); retrying",
                extra={"identity": identity, "expected": expected},
            )
        return not ready

    retrying = AsyncRetrying(
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=1, min=1, max=30),
        retry=retry_if_result(_not_ready),
        retry_error_callback=lambda state: state.outcome.result(),
        sleep=sleep,
    )
    return await retrying(fetch_records_for_identity, reader, topic_id, identity)


async def fetch_identity_records(
    topic_id: str, identity: str, settings: Settings | None = None
) -> Optional[List[FetchedRecord]]:
    """
    One-off read for a single identity using a fresh mirror session.
    """
    settings = settings or get_settings()
    async with mirror_reader(settings) as reader:
        return await fetch_records_for_identity(reader, topic_id, identity)


__all__ = ["fetch_identity_records", "fetch_records_for_identity", "poll_records_for_identity"]
