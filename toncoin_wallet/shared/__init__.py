"""Shared utilities for Toncoin Wallet."""

from toncoin_wallet.shared.amount import Amount
from toncoin_wallet.shared.assets import NativeAsset, TokenAsset
from toncoin_wallet.shared.config import WalletConfig, load_config, save_config
from toncoin_wallet.shared.logging import (
    ContextAdapter,
    LoggingConfig,
    describe_error,
    get_logger,
    redact,
    setup_logging,
)
from toncoin_wallet.shared.memoize import RequestCache
from toncoin_wallet.shared.network import (
    NetworkClient,
    NetworkError,
    NetworkErrorType,
    NodeTransport,
    RetryConfig,
    TimeoutConfig,
)
from toncoin_wallet.shared.storage import JsonFileStorage, MemoryStorage
from toncoin_wallet.shared.validation import (
    DerivationPathValidator,
    MemoValidator,
    ValidationResult,
)

__all__ = [
    "Amount",
    "NativeAsset",
    "TokenAsset",
    "WalletConfig",
    "load_config",
    "save_config",
    "RequestCache",
    "NetworkClient",
    "NetworkError",
    "NetworkErrorType",
    "NodeTransport",
    "RetryConfig",
    "TimeoutConfig",
    "JsonFileStorage",
    "MemoryStorage",
    "DerivationPathValidator",
    "MemoValidator",
    "ValidationResult",
    "ContextAdapter",
    "LoggingConfig",
    "describe_error",
    "get_logger",
    "redact",
    "setup_logging",
]
