"""Configuration for Toncoin Wallet."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from toncoin_wallet.shared.network import RetryConfig, TimeoutConfig

logger = logging.getLogger(__name__)

DEFAULT_NODE_URL = "https://ton.coin.space"
DEFAULT_PLATFORM_API_URL = "https://api.coin.space"
DEFAULT_DERIVATION_PATH = "m/44'/607'/0'"


def resolve_storage_dir(storage_dir: str | Path | None = None) -> Path:
    if storage_dir:
        return Path(storage_dir).expanduser()

    env_dir = os.getenv("TONCOIN_WALLET_DIR")
    if env_dir:
        return Path(env_dir).expanduser()

    return Path.home() / ".config" / "toncoin-wallet"


@dataclass
class WalletConfig:
    node_url: str = DEFAULT_NODE_URL
    platform_api_url: str = DEFAULT_PLATFORM_API_URL
    network: str = "mainnet"
    tx_per_page: int = 10
    token_transfer_fee: int = 50_000_000
    timeout_config: TimeoutConfig = field(default_factory=TimeoutConfig)
    retry_config: RetryConfig = field(default_factory=RetryConfig)

    @property
    def development(self) -> bool:
        return self.network == "testnet"

    def to_dict(self) -> dict:
        return {
            "node_url": self.node_url,
            "platform_api_url": self.platform_api_url,
            "network": self.network,
            "tx_per_page": self.tx_per_page,
            "token_transfer_fee": self.token_transfer_fee,
            "timeout": {
                "connect_timeout": self.timeout_config.connect_timeout,
                "read_timeout": self.timeout_config.read_timeout,
            },
            "retry": {
                "max_retries": self.retry_config.max_retries,
                "base_delay": self.retry_config.base_delay,
                "max_delay": self.retry_config.max_delay,
            },
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WalletConfig":
        timeout_cfg = data.get("timeout", {})
        retry_cfg = data.get("retry", {})
        return cls(
            node_url=data.get("node_url", DEFAULT_NODE_URL),
            platform_api_url=data.get("platform_api_url", DEFAULT_PLATFORM_API_URL),
            network=data.get("network", "mainnet"),
            tx_per_page=int(data.get("tx_per_page", 10)),
            token_transfer_fee=int(data.get("token_transfer_fee", 50_000_000)),
            timeout_config=TimeoutConfig(
                connect_timeout=timeout_cfg.get("connect_timeout", 5.0),
                read_timeout=timeout_cfg.get("read_timeout", 15.0),
            ),
            retry_config=RetryConfig(
                max_retries=retry_cfg.get("max_retries", 3),
                base_delay=retry_cfg.get("base_delay", 1.0),
                max_delay=retry_cfg.get("max_delay", 30.0),
            ),
        )


def load_config(storage_dir: str | Path | None = None) -> WalletConfig:
    """Read ``config.json`` from the wallet directory, creating it on first run."""
    config_dir = resolve_storage_dir(storage_dir)
    config_file = config_dir / "config.json"
    if config_file.exists():
        with open(config_file, "r") as f:
            return WalletConfig.from_dict(json.load(f))

    config = WalletConfig()
    save_config(config, config_dir)
    return config


def save_config(config: WalletConfig, storage_dir: str | Path | None = None) -> None:
    config_dir = resolve_storage_dir(storage_dir)
    config_dir.mkdir(parents=True, exist_ok=True)
    with open(config_dir / "config.json", "w") as f:
        json.dump(config.to_dict(), f, indent=2)
    logger.info("Configuration saved to %s", config_dir)
