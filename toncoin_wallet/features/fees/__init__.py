"""Fee feature for Toncoin Wallet."""

from toncoin_wallet.features.fees.schedule import (
    FeeScheduleClient,
    FeeScheduleConfig,
    calculate_platform_fee,
    calculate_platform_fee_for_max_amount,
)

__all__ = [
    "FeeScheduleClient",
    "FeeScheduleConfig",
    "calculate_platform_fee",
    "calculate_platform_fee_for_max_amount",
]
