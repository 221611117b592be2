"""Largest amount an account can send after fees."""

from __future__ import annotations

import logging
from decimal import Decimal

from toncoin_wallet.features.fees.schedule import (
    FeeScheduleClient,
    calculate_platform_fee_for_max_amount,
)
from toncoin_wallet.features.fees.service import FeeEstimator
from toncoin_wallet.shared.assets import Asset, TokenAsset
from toncoin_wallet.transaction import TransferRequest

logger = logging.getLogger(__name__)


class MaxAmountSolver:
    """Single-pass solver.

    The miner fee is estimated once with the whole balance and a nominal
    platform fee of one atom. It is not iterated to a fixed point: the
    native message size does not depend on the value, so that estimate is
    close enough, and a percentage platform fee is only approximated.
    """

    def __init__(self, fee_estimator: FeeEstimator, fee_schedule: FeeScheduleClient):
        self.fee_estimator = fee_estimator
        self.fee_schedule = fee_schedule

    async def solve(
        self,
        asset: Asset,
        balance: int,
        destination: str,
        price: float | Decimal | None = None,
        memo: str | None = None,
    ) -> int:
        if isinstance(asset, TokenAsset):
            # miner fee is paid from the native balance
            return balance

        if balance == 0:
            return 0

        schedule = await self.fee_schedule.get_config()
        trial = TransferRequest(
            destination=destination,
            value=balance,
            memo=memo,
            platform_fee_value=1 if schedule.active else 0,
            platform_fee_address=schedule.address if schedule.active else None,
        )
        miner_fee = await self.fee_estimator.estimate_miner_fee(asset, trial)
        if balance < miner_fee:
            logger.debug("Balance %d does not cover miner fee %d", balance, miner_fee)
            return 0

        platform_fee = calculate_platform_fee_for_max_amount(
            balance - miner_fee, schedule, price, asset.decimals
        )
        return max(balance - miner_fee - platform_fee, 0)
