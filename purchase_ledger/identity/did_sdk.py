"""
Identity provider backed by the optional Hiero DID SDK.

Registers a DID document for each new account on HCS and uses the resulting
DID identifier. Any failure while building or registering the DID falls back
to the account-derived identity so the simulation keeps going.
"""

from __future__ import annotations

import importlib
from typing import Any

from purchase_ledger.identity.abstract import AbstractIdentityProvider
from purchase_ledger.identity.derived import derive_identity
from purchase_ledger.utils.logging import get_logger

log = get_logger(__name__)

DID_SDK_MODULE = "hiero_did_sdk_python"


class DidSdkIdentityProvider(AbstractIdentityProvider):
    """
    Register a HederaDid per account via `hiero_did_sdk_python`.
    """

    name: str = "did_sdk"
    description: str = "HederaDid registered on HCS through the Hiero DID SDK."

    def __init__(self, client: Any, network: str = "testnet") -> None:
        self.client = client
        self.network = network
        self._did_class = importlib.import_module(DID_SDK_MODULE).HederaDid

    async def identity_for(self, account_id: str, private_key: Any) -> str:
        fallback = derive_identity(account_id, self.network)
        try:
            did = self._did_class(client=self.client, private_key_der=private_key.to_string_der())
            await did.register()
        except Exception as exc:  # noqa: BLE001 - optional capability, degrade gracefully
            log.warning(
                f"[ACCOUNT] DID registration failed for {account_id} (falling back to "
                f"account-based DID): {exc}",
                extra={"account_id": account_id},
            )
            return fallback

        identifier = getattr(did, "identifier", None)
        if not identifier:
            log.warning(
                f"[ACCOUNT] DID SDK returned no identifier for {account_id}; using {fallback}",
                extra={"account_id": account_id},
            )
            return fallback

        log.info(
            f"[ACCOUNT] DID Document registered on HCS: {identifier}",
            extra={"account_id": account_id, "identity": identifier},
        )
        return identifier


__all__ = ["DID_SDK_MODULE", "DidSdkIdentityProvider"]
