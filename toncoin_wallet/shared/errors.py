"""Exception hierarchy for Toncoin Wallet."""

from __future__ import annotations

from typing import Any

from toncoin_wallet.shared.amount import Amount


class WalletError(Exception):
    """Base exception for all errors raised by the wallet core."""


class AddressError(WalletError):
    def __init__(self, message: str, address: str | None = None):
        super().__init__(message)
        self.address = address


class InvalidAddressError(AddressError):
    def __init__(self, address: str | None):
        super().__init__(f'Invalid address "{address}"', address)


class InvalidNetworkAddressError(AddressError):
    def __init__(self, address: str):
        super().__init__(f'Invalid network "{address}"', address)


class DestinationEqualsSourceError(AddressError):
    def __init__(self, address: str | None = None):
        super().__init__("Destination address equals source address", address)


class AmountError(WalletError):
    def __init__(self, message: str, amount: Amount):
        super().__init__(message)
        self.amount = amount


class SmallAmountError(AmountError):
    def __init__(self, amount: Amount):
        super().__init__("Small amount", amount)


class BigAmountError(AmountError):
    def __init__(self, amount: Amount):
        super().__init__("Big amount", amount)


class InsufficientCoinForTransactionFeeError(AmountError):
    def __init__(self, amount: Amount):
        super().__init__("Insufficient funds to pay the transaction fee", amount)


class InvalidMetaError(WalletError):
    def __init__(self, message: str, meta: str):
        super().__init__(message)
        self.meta = meta


class InvalidMemoError(InvalidMetaError):
    def __init__(self, memo: str):
        super().__init__(f'Invalid Memo: "{memo}"', meta="memo")
        self.memo = memo


class NodeError(WalletError):
    """Raised for any failed or malformed upstream response."""

    def __init__(self, message: str, payload: Any = None):
        super().__init__(message)
        self.payload = payload


class InternalError(WalletError):
    """Raised when an internal invariant is violated."""


__all__ = [
    "WalletError",
    "AddressError",
    "InvalidAddressError",
    "InvalidNetworkAddressError",
    "DestinationEqualsSourceError",
    "AmountError",
    "SmallAmountError",
    "BigAmountError",
    "InsufficientCoinForTransactionFeeError",
    "InvalidMetaError",
    "InvalidMemoError",
    "NodeError",
    "InternalError",
]
