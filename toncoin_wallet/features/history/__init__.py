"""Transaction history feature for Toncoin Wallet."""

from toncoin_wallet.features.history.service import (
    HistoryPage,
    TransactionHistoryReader,
    TransactionRecord,
)

__all__ = ["HistoryPage", "TransactionHistoryReader", "TransactionRecord"]
