"""
Identity providers for the HCS Purchase Ledger demo.

The provider is selected once per run by `select_identity_provider` and never
re-checked mid-run.
"""

from __future__ import annotations

import importlib.util
from typing import Any, Optional

from purchase_ledger.config import Settings, get_settings
from purchase_ledger.identity.abstract import AbstractIdentityProvider, IdentityProvider
from purchase_ledger.identity.derived import DerivedIdentityProvider, derive_identity
from purchase_ledger.identity.did_sdk import DID_SDK_MODULE, DidSdkIdentityProvider
from purchase_ledger.utils.logging import get_logger

log = get_logger(__name__)


def did_sdk_available() -> bool:
    """Return True when the optional DID SDK package can be imported."""
    return importlib.util.find_spec(DID_SDK_MODULE) is not None


def select_identity_provider(
    client: Optional[Any] = None, settings: Settings | None = None
) -> IdentityProvider:
    """
    Pick the identity provider for this run.

    Uses the DID SDK when it is installed, a client is available, and
    IDENTITY_PROVIDER is not forced to "derived"; otherwise the derived provider.
    """
    settings = settings or get_settings()
    network = settings.hedera_network

    if settings.identity_provider == "derived":
        log.info("[IDENTITY] Derived identities forced by configuration.")
        return DerivedIdentityProvider(network)

    if client is None:
        log.info("[IDENTITY] No ledger client for DID registration; using derived identities.")
        return DerivedIdentityProvider(network)

    if not did_sdk_available():
        log.warning(
            f"[IDENTITY] {DID_SDK_MODULE} is not installed. Continuing without DID SDK "
            "(install the 'did' extra to enable DID features)."
        )
        return DerivedIdentityProvider(network)

    try:
        provider = DidSdkIdentityProvider(client, network)
    except (ImportError, AttributeError) as exc:
        log.warning(
            f"[IDENTITY] {DID_SDK_MODULE} loaded but HederaDid not usable ({exc}). "
            "Continuing without DID SDK."
        )
        return DerivedIdentityProvider(network)

    log.info("[IDENTITY] Using Hiero DID SDK for account identities.")
    return provider


__all__ = [
    "AbstractIdentityProvider",
    "DerivedIdentityProvider",
    "DidSdkIdentityProvider",
    "IdentityProvider",
    "derive_identity",
    "did_sdk_available",
    "select_identity_provider",
]
