"""
Ledger client factory and gateway for the HCS Purchase Ledger demo.

Builds the operator-bound hiero SDK client and wraps the four ledger operations
the demo consumes (create account, create topic, topic info, submit message)
behind LedgerGateway, so the simulation driver deals in plain ids and receipts.

Includes retry logic for transient network failures using tenacity.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Generator, Optional, Protocol, runtime_checkable

from hiero_sdk_python import (
    AccountCreateTransaction,
    AccountId,
    Client,
    Network,
    PrivateKey,
    TopicCreateTransaction,
    TopicId,
    TopicInfoQuery,
    TopicMessageSubmitTransaction,
)
from hiero_sdk_python.exceptions import MaxAttemptsError
from hiero_sdk_python.response_code import ResponseCode
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from purchase_ledger.config import Settings, get_settings
from purchase_ledger.errors import ConfigurationError, PurchaseLedgerError
from purchase_ledger.utils.logging import get_logger

log = get_logger(__name__)

_TRANSIENT_ERRORS = (ConnectionError, TimeoutError, MaxAttemptsError)


@dataclass(frozen=True)
class LedgerReceipt:
    """
    Acknowledgment of a write operation.

    `entity_id` carries the newly assigned account/topic id for creation
    operations and is None otherwise.
    """

    status: str
    entity_id: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == ResponseCode.SUCCESS.name


@dataclass(frozen=True)
class ProvisionedAccount:
    """A freshly created ephemeral account and the key that controls it."""

    account_id: str
    private_key: Any


@runtime_checkable
class Ledger(Protocol):
    """
    Ledger operations consumed by the topic guard and the simulation driver.
    """

    def create_account(self) -> ProvisionedAccount:
        ...

    def create_topic(self, memo: str = "") -> str:
        ...

    def topic_exists(self, topic_id: str) -> bool:
        ...

    def submit_message(self, topic_id: str, message: str, signer_key: Any) -> LedgerReceipt:
        ...


def _status_name(status: Any) -> str:
    try:
        return ResponseCode(status).name
    except ValueError:
        return str(status)


def parse_operator_key(raw: str, key_type: str = "ecdsa") -> PrivateKey:
    """
    Parse an operator private key string according to the configured key type.
    """
    if key_type == "ecdsa":
        return PrivateKey.from_string_ecdsa(raw)
    if key_type == "ed25519":
        return PrivateKey.from_string_ed25519(raw)
    return PrivateKey.from_string(raw)


def create_client(settings: Settings | None = None) -> Client:
    """
    Build an SDK client for the configured network with the operator set.

    Raises
    ------
    ConfigurationError
        If the operator id or key is missing or cannot be parsed. Raised before
        any network activity.
    """
    settings = settings or get_settings()
    if not settings.operator_id or not settings.operator_key:
        raise ConfigurationError("OPERATOR_ID and OPERATOR_KEY must be set (environment or .env).")

    try:
        operator_id = AccountId.from_string(settings.operator_id.strip())
    except Exception as exc:  # noqa: BLE001 - SDK raises assorted parse errors
        raise ConfigurationError(
            "Invalid OPERATOR_ID format. Expected account id like '0.0.1234'."
        ) from exc

    try:
        operator_key = parse_operator_key(settings.operator_key.strip(), settings.operator_key_type)
    except Exception as exc:  # noqa: BLE001 - SDK raises assorted parse errors
        raise ConfigurationError("Invalid OPERATOR_KEY format. Use a valid private key string.") from exc

    client = Client(Network(network=settings.hedera_network))
    client.set_operator(operator_id, operator_key)
    log.info(
        f"[SESSION] Client ready for operator {operator_id} on {settings.hedera_network}",
        extra={"operator_id": str(operator_id), "network": settings.hedera_network},
    )
    return client


class LedgerGateway:
    """
    Thin adapter over an operator-bound hiero Client.
    """

    def __init__(self, client: Client) -> None:
        self.client = client

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type(_TRANSIENT_ERRORS),
        reraise=True,
    )
    def create_account(self) -> ProvisionedAccount:
        """
        Create an ECDSA-keyed account with zero initial balance, paid by the operator.
        """
        private_key = PrivateKey.generate_ecdsa()
        receipt = (
            AccountCreateTransaction()
            .set_key_without_alias(private_key.public_key())
            .set_initial_balance(0)
            .execute(self.client)
        )
        status = _status_name(receipt.status)
        if receipt.account_id is None:
            raise PurchaseLedgerError(f"Account creation failed with status {status}")
        return ProvisionedAccount(account_id=str(receipt.account_id), private_key=private_key)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type(_TRANSIENT_ERRORS),
        reraise=True,
    )
    def create_topic(self, memo: str = "") -> str:
        """Create a public topic and return its id."""
        transaction = TopicCreateTransaction()
        if memo:
            transaction.set_memo(memo)
        receipt = transaction.execute(self.client)
        if receipt.topic_id is None:
            raise PurchaseLedgerError(
                f"Topic creation failed with status {_status_name(receipt.status)}"
            )
        return str(receipt.topic_id)

    def topic_exists(self, topic_id: str) -> bool:
        """
        Return True when a topic-info query for `topic_id` succeeds.
        """
        try:
            TopicInfoQuery().set_topic_id(TopicId.from_string(topic_id)).execute(self.client)
        except Exception as exc:  # noqa: BLE001 - any failure means "not verifiable"
            log.error(
                f"[TOPIC] Failed to retrieve info for topic {topic_id}. Error: {exc}",
                extra={"topic_id": topic_id},
            )
            return False
        return True

    def submit_message(self, topic_id: str, message: str, signer_key: Any) -> LedgerReceipt:
        """
        Submit `message` signed by `signer_key`; the operator pays the fee.
        """
        transaction = (
            TopicMessageSubmitTransaction()
            .set_topic_id(TopicId.from_string(topic_id))
            .set_message(message)
            .freeze_with(self.client)
            .sign(signer_key)
        )
        receipt = transaction.execute(self.client)
        return LedgerReceipt(status=_status_name(receipt.status))

    def close(self) -> None:
        self.client.close()


@contextmanager
def ledger_session(settings: Settings | None = None) -> Generator[LedgerGateway, None, None]:
    """
    Yield a gateway over a fresh client and always close the client afterwards.

    Example
    -------
        with ledger_session() as ledger:
            topic_id = ledger.create_topic()
    """
    gateway = LedgerGateway(create_client(settings))
    try:
        yield gateway
    finally:
        gateway.close()
        log.info("[SESSION] Client closed.")


__all__ = [
    "Ledger",
    "LedgerGateway",
    "LedgerReceipt",
    "ProvisionedAccount",
    "create_client",
    "ledger_session",
    "parse_operator_key",
]
