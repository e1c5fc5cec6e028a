"""
Pytest configuration for the HCS Purchase Ledger demo.

Provides fixtures for:
- Settings isolated from the developer's environment and `.env`
- An in-memory ledger that records submitted topic messages
- A mirror node reader paging over that ledger
"""

from __future__ import annotations

import pytest

from purchase_ledger.config import Settings, get_settings
from purchase_ledger.infrastructure.mirror_node import MirrorNodeReader
from tests.fakes import MIRROR_BASE, FakeLedger, LedgerMirrorSession

SETTINGS_ENV = (
    "OPERATOR_ID",
    "OPERATOR_KEY",
    "OPERATOR_KEY_TYPE",
    "TOPIC_ID",
    "HEDERA_NETWORK",
    "MIRROR_NODE_URL",
    "MIRROR_SYNC_POLICY",
    "MIRROR_SYNC_WAIT_SECONDS",
    "SIMULATION_USERS",
    "SIMULATION_RECORDS_PER_USER",
    "IDENTITY_PROVIDER",
    "LOG_LEVEL",
    "LOG_JSON",
)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """
    Keep tests independent of the host environment and any local `.env`.
    """
    for name in SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def test_settings() -> Settings:
    """
    Settings with zero waits, a fake mirror host, and derived identities.
    """
    return Settings(
        operator_id="0.0.2",
        operator_key="302e020100300506032b657004220420" + "11" * 32,
        mirror_node_url=MIRROR_BASE,
        mirror_sync_wait_seconds=0,
        topic_propagation_seconds=0,
        identity_provider="derived",
        log_level="DEBUG",
    )


@pytest.fixture
def fake_ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture
def ledger_reader(fake_ledger: FakeLedger) -> MirrorNodeReader:
    """Reader paging two messages at a time over the fake ledger."""
    session = LedgerMirrorSession(fake_ledger)
    return MirrorNodeReader(session, base_url=MIRROR_BASE, page_size=2)  # type: ignore[arg-type]
