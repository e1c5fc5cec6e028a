"""
Infrastructure package for the HCS Purchase Ledger demo.

Centralizes network concerns: the operator-bound ledger client, the topic
lifecycle guard, and the mirror node REST reader. Keep this layer focused on
I/O and resource management, decoupled from the simulation driver.
"""

from purchase_ledger.infrastructure.ledger_client import (
    Ledger,
    LedgerGateway,
    LedgerReceipt,
    ProvisionedAccount,
    create_client,
    ledger_session,
)
from purchase_ledger.infrastructure.mirror_node import MirrorNodeReader, mirror_reader
from purchase_ledger.infrastructure.topics import TopicOutcome, TopicResolution, acquire_topic

__all__ = [
    "Ledger",
    "LedgerGateway",
    "LedgerReceipt",
    "ProvisionedAccount",
    "create_client",
    "ledger_session",
    "MirrorNodeReader",
    "mirror_reader",
    "TopicOutcome",
    "TopicResolution",
    "acquire_topic",
]
