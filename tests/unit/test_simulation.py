from __future__ import annotations

import asyncio
import datetime as dt

from purchase_ledger.identity.derived import DerivedIdentityProvider
from purchase_ledger.infrastructure.mirror_node import MirrorNodeReader
from purchase_ledger.infrastructure.topics import TopicOutcome
from purchase_ledger.simulation import (
    SimulatedUser,
    SimulationConfig,
    run_simulation,
    submit_records,
)
from tests.fakes import MIRROR_BASE, FakeLedger, LedgerMirrorSession, no_sleep

USERS = 2
RECORDS = 3


def _config(**overrides) -> SimulationConfig:
    values = dict(
        users=USERS,
        records_per_user=RECORDS,
        sync_wait_seconds=0,
        propagation_seconds=0,
    )
    values.update(overrides)
    return SimulationConfig(**values)


def _run(ledger: FakeLedger, reader: MirrorNodeReader, config: SimulationConfig):
    return asyncio.run(
        run_simulation(ledger, reader, DerivedIdentityProvider(), config, sleep=no_sleep)
    )


def test_two_users_three_records_each_round_trip(fake_ledger, ledger_reader) -> None:
    report = _run(fake_ledger, ledger_reader, _config())

    assert report.topic.outcome is TopicOutcome.CREATED
    assert len(report.identities) == USERS
    assert report.complete
    for entry, account in zip(report.identities, fake_ledger.accounts):
        assert entry["account_id"] == account.account_id
        assert entry["identity"] == f"did:hedera:testnet:{account.account_id}"
        assert entry["submitted"] == RECORDS
        assert entry["found"] == RECORDS
        assert {r.data.sequence for r in entry["records"]} == {1, 2, 3}
        for record in entry["records"]:
            expected_sequence = record.data.sequence
            assert record.data.identity == entry["identity"]
            assert record.data.item == f"Product {expected_sequence}"
            assert record.data.price == 100 + expected_sequence * 10
            assert record.data.order_id == f"ORDER-{account.account_id}-{expected_sequence}"


def test_each_record_is_signed_by_its_own_account(fake_ledger, ledger_reader) -> None:
    _run(fake_ledger, ledger_reader, _config())

    expected = [account.private_key for account in fake_ledger.accounts for _ in range(RECORDS)]
    assert fake_ledger.signers == expected


def test_rejected_submissions_do_not_abort_the_run(fake_ledger, ledger_reader) -> None:
    fake_ledger.reject_sequences = {2}
    fake_ledger.raise_on_sequences = {3}

    report = _run(fake_ledger, ledger_reader, _config())

    assert len(report.identities) == USERS
    for entry in report.identities:
        assert entry["submitted"] == 1
        assert entry["rejected"] == 2
        assert entry["found"] == 1
    assert not report.complete


def test_failed_read_is_reported_and_other_identities_still_read(fake_ledger) -> None:
    # First identity scans 3 pages of 2 messages; every later request fails.
    session = LedgerMirrorSession(fake_ledger, fail_after=3)
    reader = MirrorNodeReader(session, base_url=MIRROR_BASE, page_size=2)  # type: ignore[arg-type]

    report = _run(fake_ledger, reader, _config())

    assert report.identities[0]["found"] == RECORDS
    assert report.identities[1]["found"] is None
    assert report.identities[1]["records"] == []
    assert not report.complete


def test_poll_policy_retries_until_records_visible(fake_ledger) -> None:
    class _LaggingSession(LedgerMirrorSession):
        """Hides every message until the mirror has been asked a few times."""

        def __init__(self, ledger: FakeLedger, lag: int) -> None:
            super().__init__(ledger)
            self.lag = lag
            self.hidden = FakeLedger()

        def get(self, url: str):
            if len(self.requested) < self.lag:
                self.requested.append(url)
                self.hidden.topics = {topic: [] for topic in self.ledger.topics}
                return LedgerMirrorSession(self.hidden).get(url)
            return super().get(url)

    sleeps: list[float] = []

    async def recording_sleep(seconds: float) -> None:
        sleeps.append(seconds)

    session = _LaggingSession(fake_ledger, lag=2)
    reader = MirrorNodeReader(session, base_url=MIRROR_BASE, page_size=100)  # type: ignore[arg-type]
    config = _config(sync_policy="poll", poll_attempts=5)

    report = asyncio.run(
        run_simulation(fake_ledger, reader, DerivedIdentityProvider(), config, sleep=recording_sleep)
    )

    assert report.complete
    assert "sync" not in report.phases
    # propagation wait, then two backoff waits for the first identity
    assert len(sleeps) == 3


def test_poll_policy_reports_last_result_when_attempts_exhausted(fake_ledger) -> None:
    session = LedgerMirrorSession(fake_ledger, fail_after=0)
    reader = MirrorNodeReader(session, base_url=MIRROR_BASE, page_size=100)  # type: ignore[arg-type]

    report = _run(fake_ledger, reader, _config(sync_policy="poll", poll_attempts=2))

    assert [entry["found"] for entry in report.identities] == [None, None]
    assert len(session.requested) == USERS * 2


def test_submit_records_uses_sequences_one_to_m() -> None:
    ledger = FakeLedger(existing_topics={"0.0.5"})
    user = SimulatedUser("0.0.9", "key-0.0.9", "did:hedera:testnet:0.0.9")

    accepted, rejected = submit_records(ledger, "0.0.5", user, 4, on=dt.date(2024, 5, 1))

    assert (accepted, rejected) == (4, 0)
    assert [entry["sequence_number"] for entry in ledger.topics["0.0.5"]] == [1, 2, 3, 4]


def test_config_from_settings_applies_overrides(test_settings) -> None:
    config = SimulationConfig.from_settings(test_settings, users=7, topic_id=None)

    assert config.users == 7
    assert config.records_per_user == test_settings.simulation_records_per_user
    assert config.sync_policy == "fixed"


def test_report_to_dict_is_json_friendly(fake_ledger, ledger_reader) -> None:
    report = _run(fake_ledger, ledger_reader, _config())

    payload = report.to_dict()

    assert payload["topic_outcome"] == "created"
    assert payload["complete"] is True
    first_record = payload["identities"][0]["records"][0]
    assert first_record["data"]["did_id"] == payload["identities"][0]["identity"]
