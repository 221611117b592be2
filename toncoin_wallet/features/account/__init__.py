"""Account state feature for Toncoin Wallet."""

from toncoin_wallet.features.account.service import (
    AccountState,
    AccountStateClient,
    Cursor,
    DeployPayload,
)

__all__ = ["AccountState", "AccountStateClient", "Cursor", "DeployPayload"]
