"""
Runtime configuration, read from the environment.

    ZK_BOUNTY_NODE_URL      ledger REST API base URL
    ZK_BOUNTY_NETWORK       "main" or "test"
    ZK_BOUNTY_API_KEY       optional API key sent with node requests
    ZK_BOUNTY_TIMEOUT       HTTP timeout in seconds
    ZK_BOUNTY_DATA_LENGTH   plaintext length (field elements) of this deployment
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from zk_bounty.crypto.cipher import ciphertext_length
from zk_bounty.zk.binding import CIPHERTEXT_WORDS
from zk_bounty.zk.relation import DEFAULT_DATA_LENGTH

PUBLIC_NODE_URL = "https://api.whatsonchain.com/v1/bsv"


class ConfigError(ValueError):
    """Raised for invalid configuration values."""
    pass


@dataclass(frozen=True)
class BountyConfig:
    node_url: str = PUBLIC_NODE_URL
    network: str = "main"
    api_key: str | None = None
    timeout: float = 15.0
    data_length: int = DEFAULT_DATA_LENGTH

    def __post_init__(self) -> None:
        if self.network not in ("main", "test"):
            raise ConfigError(f"network must be 'main' or 'test', got {self.network!r}")
        if self.timeout <= 0:
            raise ConfigError(f"timeout must be positive, got {self.timeout}")
        if self.data_length <= 0 or ciphertext_length(self.data_length) != CIPHERTEXT_WORDS:
            raise ConfigError(
                f"data_length {self.data_length} does not encrypt to {CIPHERTEXT_WORDS} elements"
            )

    @property
    def base_url(self) -> str:
        return f"{self.node_url.rstrip('/')}/{self.network}"

    @classmethod
    def from_env(cls) -> BountyConfig:
        try:
            return cls(
                node_url=os.getenv("ZK_BOUNTY_NODE_URL", PUBLIC_NODE_URL),
                network=os.getenv("ZK_BOUNTY_NETWORK", "main"),
                api_key=os.getenv("ZK_BOUNTY_API_KEY") or None,
                timeout=float(os.getenv("ZK_BOUNTY_TIMEOUT", "15.0")),
                data_length=int(os.getenv("ZK_BOUNTY_DATA_LENGTH", str(DEFAULT_DATA_LENGTH))),
            )
        except ValueError as e:
            if isinstance(e, ConfigError):
                raise
            raise ConfigError(f"Invalid numeric setting: {e}") from e
