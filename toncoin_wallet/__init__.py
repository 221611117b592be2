"""Toncoin Wallet - account state, fees and transfers for the TON chain.

This package is organized into feature-based modules:
- features.account: Account state queries against the node
- features.fees: Miner fee estimation and the platform fee schedule
- features.transfer: Jetton envelopes and the max amount solver
- features.history: Transaction history paging and classification
- shared: Shared utilities (network, logging, addresses, etc.)
"""

from toncoin_wallet.transaction import SignedTransfer, TransferBuilder, TransferRequest
from toncoin_wallet.wallet import WalletAccount, WalletState
from toncoin_wallet.shared import (
    Amount,
    NativeAsset,
    NetworkClient,
    NetworkError,
    NetworkErrorType,
    RetryConfig,
    TimeoutConfig,
    TokenAsset,
    WalletConfig,
)

__version__ = "0.1.0"
__all__ = [
    "WalletAccount",
    "WalletState",
    "TransferBuilder",
    "TransferRequest",
    "SignedTransfer",
    "Amount",
    "NativeAsset",
    "TokenAsset",
    "WalletConfig",
    "NetworkClient",
    "NetworkError",
    "NetworkErrorType",
    "RetryConfig",
    "TimeoutConfig",
]
