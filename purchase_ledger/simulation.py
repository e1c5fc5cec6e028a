"""
Simulation driver: provision users, submit signed purchase records, wait for
the mirror node, and read every user's records back.

Usage (example from CLI):
    import asyncio
    from purchase_ledger.simulation import SimulationConfig, run_demo

    report = asyncio.run(run_demo(SimulationConfig(users=2, records_per_user=3)))
    print(report.to_dict())

Every step runs sequentially; the only suspension points are network awaits
and the configured waits.
"""

from __future__ import annotations

import asyncio
import datetime as dt
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, TypedDict

from purchase_ledger.config import Settings, get_settings
from purchase_ledger.domain.models import FetchedRecord, PurchaseRecord
from purchase_ledger.errors import SubmissionError
from purchase_ledger.identity import IdentityProvider, select_identity_provider
from purchase_ledger.infrastructure.ledger_client import Ledger, ledger_session
from purchase_ledger.infrastructure.mirror_node import MirrorNodeReader, mirror_reader
from purchase_ledger.infrastructure.topics import TopicResolution, acquire_topic
from purchase_ledger.queries import fetch_records_for_identity, poll_records_for_identity
from purchase_ledger.utils.logging import get_logger
from purchase_ledger.utils.timing import timed_phase

log = get_logger(__name__)

Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class SimulationConfig:
    """
    Parameters of one simulation run.

    Attributes
    ----------
    users : int
        Number of ephemeral accounts to provision.
    records_per_user : int
        Records each account submits (sequences 1..records_per_user).
    topic_id : str | None
        Topic to reuse; a new topic is created when None or unverifiable.
    sync_policy : str
        "fixed" waits `sync_wait_seconds` once; "poll" re-reads each identity
        with exponential backoff up to `poll_attempts` times.
    """

    users: int = 4
    records_per_user: int = 10
    topic_id: Optional[str] = None
    sync_policy: str = "fixed"
    sync_wait_seconds: float = 10.0
    poll_attempts: int = 6
    propagation_seconds: float = 5.0

    @classmethod
    def from_settings(cls, settings: Settings | None = None, **overrides: Any) -> "SimulationConfig":
        settings = settings or get_settings()
        values: Dict[str, Any] = {
            "users": settings.simulation_users,
            "records_per_user": settings.simulation_records_per_user,
            "topic_id": settings.configured_topic_id,
            "sync_policy": settings.mirror_sync_policy,
            "sync_wait_seconds": settings.mirror_sync_wait_seconds,
            "poll_attempts": settings.mirror_poll_attempts,
            "propagation_seconds": settings.topic_propagation_seconds,
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)


@dataclass(frozen=True)
class SimulatedUser:
    account_id: str
    private_key: Any
    identity: str

    @property
    def short_id(self) -> str:
        return self.identity.split(":")[-1]


class IdentityReport(TypedDict):
    """
    Per-identity outcome of a run.

    `found` is None when the mirror read failed for this identity.
    """

    identity: str
    account_id: str
    submitted: int
    rejected: int
    expected: int
    found: Optional[int]
    records: List[FetchedRecord]


@dataclass
class SimulationReport:
    topic: TopicResolution
    identities: List[IdentityReport] = field(default_factory=list)
    phases: Dict[str, float] = field(default_factory=dict)

    @property
    def complete(self) -> bool:
        """True when every identity read back exactly the records it submitted."""
        return all(entry["found"] == entry["expected"] for entry in self.identities)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "topic_id": self.topic.topic_id,
            "topic_outcome": self.topic.outcome.value,
            "abandoned_topic_id": self.topic.abandoned_topic_id,
            "complete": self.complete,
            "phases": {name: round(seconds, 2) for name, seconds in self.phases.items()},
            "identities": [
                {
                    "identity": entry["identity"],
                    "account_id": entry["account_id"],
                    "submitted": entry["submitted"],
                    "rejected": entry["rejected"],
                    "expected": entry["expected"],
                    "found": entry["found"],
                    "records": [record.model_dump(mode="json", by_alias=True) for record in entry["records"]],
                }
                for entry in self.identities
            ],
        }


def _banner(title: str) -> None:
    log.info(f"{'=' * 20} {title} {'=' * 20}")


async def provision_users(
    ledger: Ledger, identity_provider: IdentityProvider, count: int
) -> List[SimulatedUser]:
    """
    Create `count` ephemeral accounts, each exactly once, and derive their identities.
    """
    users: List[SimulatedUser] = []
    for _ in range(count):
        account = ledger.create_account()
        identity = await identity_provider.identity_for(account.account_id, account.private_key)
        users.append(SimulatedUser(account.account_id, account.private_key, identity))
        log.info(
            f"[ACCOUNT] New Account ID: {account.account_id} | Identity: {identity}",
            extra={"account_id": account.account_id, "identity": identity},
        )
    return users


def submit_records(
    ledger: Ledger,
    topic_id: str,
    user: SimulatedUser,
    count: int,
    on: dt.date | None = None,
) -> tuple[int, int]:
    """
    Submit records 1..count for one user, each as its own signed transaction.

    Returns
    -------
    tuple[int, int]
        (accepted, rejected). Rejections are logged and do not stop the loop.
    """
    accepted = rejected = 0
    for sequence in range(1, count + 1):
        record = PurchaseRecord.build(user.identity, sequence, on=on)
        try:
            receipt = ledger.submit_message(topic_id, record.to_message(), user.private_key)
        except Exception as exc:  # noqa: BLE001 - best-effort submissions, keep simulating
            log.error(
                f"[SUBMIT] DID {user.short_id} - {sequence}: failed ({exc})",
                extra={"identity": user.identity, "sequence": sequence},
            )
            rejected += 1
            continue

        if receipt.ok:
            accepted += 1
            log.info(
                f"[SUBMIT] DID {user.short_id} - {sequence}: {receipt.status}",
                extra={"identity": user.identity, "sequence": sequence},
            )
        else:
            rejected += 1
            log.error(
                f"[SUBMIT] {SubmissionError(sequence, receipt.status)}",
                extra={"identity": user.identity, "sequence": sequence, "status": receipt.status},
            )
    return accepted, rejected


def _log_records(user: SimulatedUser, expected: int, records: Optional[List[FetchedRecord]]) -> None:
    if records is None:
        log.warning(
            f"[FETCH] Mirror read failed for DID {user.short_id}; result undefined.",
            extra={"identity": user.identity},
        )
        return

    log.info(
        f"[FETCH] Total records found for this user DID in topic: {len(records)} (Expected: {expected})",
        extra={"identity": user.identity, "found": len(records), "expected": expected},
    )
    for record in records:
        log.info(
            f"   [Rec #{record.data.sequence} | Time: {record.consensus_timestamp}] "
            f"Item: {record.data.item}, Price: {record.data.price}, Order ID: {record.data.order_id}"
        )
    if len(records) != expected:
        log.warning(
            f"[FETCH] Expected {expected} records but found {len(records)} for DID {user.short_id}. "
            "The mirror node may not have indexed every message yet.",
            extra={"identity": user.identity, "found": len(records), "expected": expected},
        )


async def run_simulation(
    ledger: Ledger,
    reader: MirrorNodeReader,
    identity_provider: IdentityProvider,
    config: SimulationConfig,
    sleep: Sleep = asyncio.sleep,
) -> SimulationReport:
    """
    Run topic acquisition, provisioning, submission, and read-back in order.

    Raises
    ------
    TopicVerificationError
        If the topic cannot be verified after creation.
    """
    with timed_phase("topic") as topic_stats:
        topic = await acquire_topic(ledger, config.topic_id, config.propagation_seconds, sleep=sleep)
    report = SimulationReport(topic=topic)
    report.phases[topic_stats.label] = topic_stats.duration_seconds

    total = config.users * config.records_per_user
    _banner(
        f"Simulation Start ({config.users} Users, {config.records_per_user} Records each)"
    )

    _banner("1. Creating Users")
    with timed_phase("provision") as stats:
        users = await provision_users(ledger, identity_provider, config.users)
    report.phases[stats.label] = stats.duration_seconds

    _banner("2. Submitting Purchase Records")
    submissions: Dict[str, tuple[int, int]] = {}
    with timed_phase("submit") as stats:
        for user in users:
            log.info(
                f"[SUBMIT] User DID {user.short_id} submitting {config.records_per_user} records...",
                extra={"identity": user.identity},
            )
            submissions[user.identity] = submit_records(
                ledger, topic.topic_id, user, config.records_per_user
            )
    report.phases[stats.label] = stats.duration_seconds

    if config.sync_policy == "fixed":
        log.info(
            f"[SYNC] Waiting {config.sync_wait_seconds:g} seconds for all {total} messages "
            "to appear on the Mirror Node...",
            extra={"wait_seconds": config.sync_wait_seconds, "messages": total},
        )
        with timed_phase("sync") as stats:
            await sleep(config.sync_wait_seconds)
        report.phases[stats.label] = stats.duration_seconds

    _banner("3. Fetching and Verifying Records")
    with timed_phase("fetch") as stats:
        for user in users:
            log.info(
                f"[FETCH] Fetching Records for User DID: {user.short_id} (Full DID: {user.identity})",
                extra={"identity": user.identity},
            )
            if config.sync_policy == "poll":
                records = await poll_records_for_identity(
                    reader,
                    topic.topic_id,
                    user.identity,
                    expected=config.records_per_user,
                    attempts=config.poll_attempts,
                    sleep=sleep,
                )
            else:
                records = await fetch_records_for_identity(reader, topic.topic_id, user.identity)
            _log_records(user, config.records_per_user, records)

            accepted, rejected = submissions[user.identity]
            report.identities.append(
                IdentityReport(
                    identity=user.identity,
                    account_id=user.account_id,
                    submitted=accepted,
                    rejected=rejected,
                    expected=config.records_per_user,
                    found=None if records is None else len(records),
                    records=records or [],
                )
            )
    report.phases[stats.label] = stats.duration_seconds

    return report


async def run_demo(config: SimulationConfig, settings: Settings | None = None) -> SimulationReport:
    """
    Open the ledger and mirror sessions from settings and run one simulation.

    The ledger client is closed whether the run succeeds or fails.
    """
    settings = settings or get_settings()
    with ledger_session(settings) as ledger:
        identity_provider = select_identity_provider(ledger.client, settings)
        async with mirror_reader(settings) as reader:
            report = await run_simulation(ledger, reader, identity_provider, config)
    log.info("[SESSION] Process finished.")
    return report


__all__ = [
    "IdentityReport",
    "SimulatedUser",
    "SimulationConfig",
    "SimulationReport",
    "provision_users",
    "run_demo",
    "run_simulation",
    "submit_records",
]
