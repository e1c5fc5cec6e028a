"""
Configuration settings for the HCS Purchase Ledger demo.

Uses Pydantic Settings to load operator credentials, network endpoints, and
simulation defaults from environment variables (or a local `.env` file).
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from purchase_ledger.errors import ConfigurationError


class Settings(BaseSettings):
    # Operator
    operator_id: Optional[str] = Field(None, alias="OPERATOR_ID")
    operator_key: Optional[str] = Field(None, alias="OPERATOR_KEY")
    operator_key_type: Literal["ecdsa", "ed25519", "auto"] = Field(
        "ecdsa", alias="OPERATOR_KEY_TYPE"
    )
    topic_id: Optional[str] = Field(None, alias="TOPIC_ID")

    # Network
    hedera_network: str = Field("testnet", alias="HEDERA_NETWORK")
    mirror_node_url: str = Field("https://testnet.mirrornode.hedera.com", alias="MIRROR_NODE_URL")
    mirror_page_size: int = Field(100, alias="MIRROR_PAGE_SIZE", gt=0, le=100)
    mirror_request_timeout: float = Field(30.0, alias="MIRROR_REQUEST_TIMEOUT", gt=0)

    # Synchronization
    mirror_sync_policy: Literal["fixed", "poll"] = Field("fixed", alias="MIRROR_SYNC_POLICY")
    mirror_sync_wait_seconds: float = Field(10.0, alias="MIRROR_SYNC_WAIT_SECONDS", ge=0)
    mirror_poll_attempts: int = Field(6, alias="MIRROR_POLL_ATTEMPTS", ge=1)
    topic_propagation_seconds: float = Field(5.0, alias="TOPIC_PROPAGATION_SECONDS", ge=0)

    # Simulation defaults
    simulation_users: int = Field(4, alias="SIMULATION_USERS", ge=1)
    simulation_records_per_user: int = Field(10, alias="SIMULATION_RECORDS_PER_USER", ge=1)
    identity_provider: Literal["auto", "derived"] = Field("auto", alias="IDENTITY_PROVIDER")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def configured_topic_id(self) -> Optional[str]:
        """Configured topic id with surrounding whitespace removed, or None when blank."""
        if self.topic_id and self.topic_id.strip():
            return self.topic_id.strip()
        return None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


def load_settings() -> Settings:
    """
    Like `get_settings`, but report invalid environment values as ConfigurationError.
    """
    try:
        return get_settings()
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc


__all__ = ["Settings", "get_settings", "load_settings"]
