"""
Deterministic identity derived from the account id.
"""

from __future__ import annotations

from typing import Any

from purchase_ledger.identity.abstract import AbstractIdentityProvider


def derive_identity(account_id: str, network: str = "testnet") -> str:
    return f"did:hedera:{network}:{account_id}"


class DerivedIdentityProvider(AbstractIdentityProvider):
    """
    Builds `did:hedera:<network>:<account_id>` without touching the network.
    """

    name: str = "derived"
    description: str = "Account-derived did:hedera identifier (no DID SDK)."

    def __init__(self, network: str = "testnet") -> None:
        self.network = network

    async def identity_for(self, account_id: str, private_key: Any) -> str:
        del private_key
        return derive_identity(account_id, self.network)


__all__ = ["DerivedIdentityProvider", "derive_identity"]
