"""
Topic lifecycle guard: reuse a configured topic or create a new one, then
confirm it is visible before any message is submitted.
"""

from __future__ import annotations

import asyncio
import enum
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from purchase_ledger.errors import TopicVerificationError
from purchase_ledger.infrastructure.ledger_client import Ledger
from purchase_ledger.utils.logging import get_logger

log = get_logger(__name__)

TOPIC_MEMO = "HCS purchase records"


class TopicOutcome(str, enum.Enum):
    REUSED = "reused"
    CREATED = "created"
    # A configured topic failed verification and was abandoned for a new one.
    REPLACED = "replaced"


@dataclass(frozen=True)
class TopicResolution:
    topic_id: str
    outcome: TopicOutcome
    abandoned_topic_id: Optional[str] = None


def _create(ledger: Ledger) -> str:
    topic_id = ledger.create_topic(memo=TOPIC_MEMO)
    log.info(f"[TOPIC] New Topic ID: {topic_id}", extra={"topic_id": topic_id})
    return topic_id


def _verify(ledger: Ledger, topic_id: str) -> bool:
    log.info(f"[TOPIC] Verifying topic {topic_id} information...", extra={"topic_id": topic_id})
    verified = ledger.topic_exists(topic_id)
    if verified:
        log.info(f"[TOPIC] Topic {topic_id} verified.", extra={"topic_id": topic_id})
    return verified


async def acquire_topic(
    ledger: Ledger,
    configured_topic_id: Optional[str],
    propagation_seconds: float = 5.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> TopicResolution:
    """
    Resolve the topic the run will write to.

    Parameters
    ----------
    ledger : Ledger
        Gateway used for topic creation and info queries.
    configured_topic_id : str | None
        Topic id supplied through configuration, if any.
    propagation_seconds : float
        Fixed wait before the final verification.
    sleep : callable
        Awaitable sleep, injectable for tests.

    Returns
    -------
    TopicResolution
        The topic id and whether it was reused, created, or replaced.

    Raises
    ------
    TopicVerificationError
        If the resolved topic still cannot be verified after the wait.
    """
    abandoned: Optional[str] = None
    if configured_topic_id:
        log.info(
            f"[TOPIC] Using existing Topic ID from configuration: {configured_topic_id}",
            extra={"topic_id": configured_topic_id},
        )
        if _verify(ledger, configured_topic_id):
            topic_id = configured_topic_id
            outcome = TopicOutcome.REUSED
        else:
            log.warning(
                f"[TOPIC] The configured Topic ID {configured_topic_id} could not be verified. "
                "Creating a new one; records will NOT be written to the configured topic.",
                extra={"topic_id": configured_topic_id},
            )
            abandoned = configured_topic_id
            topic_id = _create(ledger)
            outcome = TopicOutcome.REPLACED
    else:
        log.info("[TOPIC] No TOPIC_ID configured. Creating a new topic...")
        topic_id = _create(ledger)
        outcome = TopicOutcome.CREATED

    log.info(
        f"[TOPIC] Waiting {propagation_seconds:g} seconds for Topic ID to propagate across the network...",
        extra={"topic_id": topic_id, "wait_seconds": propagation_seconds},
    )
    await sleep(propagation_seconds)

    if not _verify(ledger, topic_id):
        raise TopicVerificationError(topic_id)

    return TopicResolution(topic_id=topic_id, outcome=outcome, abandoned_topic_id=abandoned)


__all__ = ["TOPIC_MEMO", "TopicOutcome", "TopicResolution", "acquire_topic"]
