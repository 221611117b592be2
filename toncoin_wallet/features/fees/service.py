"""Miner fee estimation by simulating the transfer on the node."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from toncoin_wallet.features.account.service import AccountStateClient
from toncoin_wallet.shared.amount import multiply_atom
from toncoin_wallet.shared.assets import Asset, TokenAsset
from toncoin_wallet.shared.errors import NodeError
from toncoin_wallet.shared.memoize import RequestCache
from toncoin_wallet.transaction import TransferBuilder, TransferRequest, native_messages

logger = logging.getLogger(__name__)

FEE_FACTOR = Decimal("1.05")
FEE_COMPONENTS = ("storage_fee", "in_fwd_fee", "fwd_fee", "gas_fee")
DEFAULT_TOKEN_TRANSFER_FEE = 50_000_000


@dataclass(frozen=True)
class FeeEstimate:
    miner_fee: int
    platform_fee: int = 0

    @property
    def total(self) -> int:
        return self.miner_fee + self.platform_fee


def sum_source_fees(fees: dict) -> int:
    try:
        return sum(int(fees.get(name) or 0) for name in FEE_COMPONENTS)
    except (TypeError, ValueError) as e:
        raise NodeError("Malformed fee components", fees) from e


class FeeEstimator:
    def __init__(
        self,
        builder: TransferBuilder,
        account_client: AccountStateClient,
        own_address: str,
        cache: RequestCache | None = None,
        token_fee: int = DEFAULT_TOKEN_TRANSFER_FEE,
    ):
        self.builder = builder
        self.account_client = account_client
        self.own_address = own_address
        self.cache = cache if cache is not None else RequestCache()
        self.token_fee = token_fee

    async def _estimate_native_fee(self, request: TransferRequest) -> int:
        transfer = await self.builder.build(native_messages(request))
        result = await self.account_client.estimate_fee(
            self.own_address, transfer.body_boc, transfer.init
        )
        fees = result["source_fees"]
        fee = sum_source_fees(fees)
        miner_fee = multiply_atom(fee, FEE_FACTOR)
        logger.debug(
            "Estimated fees: %s sum=%d miner_fee=%d platform_fee=%d",
            {name: fees.get(name) for name in FEE_COMPONENTS},
            fee,
            miner_fee,
            request.platform_fee_value,
        )
        return miner_fee

    async def estimate_miner_fee(self, asset: Asset, request: TransferRequest) -> int:
        if isinstance(asset, TokenAsset):
            return self.token_fee
        return await self.cache.call("estimateMinerFee", self._estimate_native_fee, request)

    async def estimate(self, asset: Asset, request: TransferRequest) -> FeeEstimate:
        """Native cost of ``request``: miner fee plus the platform fee it carries."""
        miner_fee = await self.estimate_miner_fee(asset, request)
        return FeeEstimate(miner_fee=miner_fee, platform_fee=request.platform_fee_value)
