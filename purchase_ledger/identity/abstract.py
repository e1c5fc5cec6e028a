"""
Identity provider interfaces for the HCS Purchase Ledger demo.

An identity provider turns a freshly provisioned account into the opaque
identity string stamped on that account's purchase records. Two variants
exist: the DID SDK provider (when the optional package is installed) and the
derived provider, which needs nothing beyond the account id.
"""

from __future__ import annotations

import abc
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class IdentityProvider(Protocol):
    """
    Common interface for identity providers.

    Attributes
    ----------
    name : str
        A short machine-friendly identifier.
    description : str
        A human-friendly summary of the approach.
    """

    name: str
    description: str

    async def identity_for(self, account_id: str, private_key: Any) -> str:
        """
        Return the identity for a newly created account.

        Parameters
        ----------
        account_id : str
            Ledger account id (e.g. "0.0.1234").
        private_key : Any
            The account's SDK private key.
        """
        ...


class AbstractIdentityProvider(abc.ABC):
    """
    Optional ABC helper for class-based implementations.
    """

    name: str
    description: str

    @abc.abstractmethod
    async def identity_for(self, account_id: str, private_key: Any) -> str:  # pragma: no cover
        """Derive the identity for an account."""
        raise NotImplementedError


__all__ = ["IdentityProvider", "AbstractIdentityProvider"]
