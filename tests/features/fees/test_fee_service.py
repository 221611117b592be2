"""Tests for miner fee estimation."""

import pytest

from conftest import (
    ADDRESS,
    PLATFORM_FEE_ADDRESS,
    PUBLIC_KEY_HEX,
    SECOND_ADDRESS,
    WALLET_INFORMATION_UNINITIALIZED,
    FakeTransport,
)
from toncoin_wallet.features.account.service import AccountStateClient
from toncoin_wallet.features.fees.service import FeeEstimate, FeeEstimator, sum_source_fees
from toncoin_wallet.shared.errors import NodeError
from toncoin_wallet.shared.memoize import RequestCache
from toncoin_wallet.transaction import TransferBuilder, TransferRequest, WalletContract


def make_estimator(transport):
    client = AccountStateClient(transport, RequestCache())
    contract = WalletContract(bytes.fromhex(PUBLIC_KEY_HEX))
    builder = TransferBuilder(contract, client, ADDRESS, clock=lambda: 1_700_000_000)
    return FeeEstimator(builder, client, ADDRESS, client.cache)


@pytest.mark.unit
class TestSumSourceFees:
    def test_sum(self):
        fees = {"in_fwd_fee": 1284800, "storage_fee": 1572, "gas_fee": 3308000, "fwd_fee": 134741000}
        assert sum_source_fees(fees) == 139_335_372

    def test_missing_components_count_as_zero(self):
        assert sum_source_fees({"gas_fee": "10"}) == 10

    def test_malformed(self):
        with pytest.raises(NodeError):
            sum_source_fees({"gas_fee": "lots"})

    def test_estimate_total(self):
        assert FeeEstimate(miner_fee=10, platform_fee=5).total == 15


@pytest.mark.unit
class TestFeeEstimator:
    async def test_native_fee_applies_factor(self, native_asset, node_transport):
        estimator = make_estimator(node_transport)
        fee = await estimator.estimate_miner_fee(
            native_asset, TransferRequest(SECOND_ADDRESS, 1_000_000_000)
        )
        assert fee == 146_302_140

    async def test_estimate_is_memoized_per_request(self, native_asset, node_transport):
        estimator = make_estimator(node_transport)
        request = TransferRequest(SECOND_ADDRESS, 1_000_000_000)

        await estimator.estimate_miner_fee(native_asset, request)
        await estimator.estimate_miner_fee(native_asset, request)
        assert len(node_transport.calls_to("api/v1/estimateFee")) == 1

        await estimator.estimate_miner_fee(native_asset, TransferRequest(SECOND_ADDRESS, 2))
        assert len(node_transport.calls_to("api/v1/estimateFee")) == 2

    async def test_token_uses_fixed_fee(self, token_asset, node_transport):
        estimator = make_estimator(node_transport)
        fee = await estimator.estimate_miner_fee(token_asset, TransferRequest(SECOND_ADDRESS, 1))
        assert fee == 50_000_000
        assert node_transport.calls == []

    async def test_initialized_account_sends_no_code(self, native_asset, node_transport):
        await make_estimator(node_transport).estimate_miner_fee(
            native_asset, TransferRequest(SECOND_ADDRESS, 1)
        )
        _, _, _, data = node_transport.calls_to("api/v1/estimateFee")[0]
        assert data["address"] == ADDRESS
        assert data["init_code"] is None
        assert data["init_data"] is None
        assert data["ignore_chksig"] is True

    async def test_uninitialized_account_sends_code(self, native_asset, node_routes):
        node_routes[("GET", "api/v1/getWalletInformation")] = WALLET_INFORMATION_UNINITIALIZED
        transport = FakeTransport(node_routes)
        await make_estimator(transport).estimate_miner_fee(
            native_asset, TransferRequest(SECOND_ADDRESS, 1)
        )
        _, _, _, data = transport.calls_to("api/v1/estimateFee")[0]
        assert data["init_code"]
        assert data["init_data"]

    async def test_estimate_adds_platform_fee(self, native_asset, node_transport):
        estimator = make_estimator(node_transport)
        request = TransferRequest(
            SECOND_ADDRESS,
            1_000_000_000,
            platform_fee_value=233_644_859,
            platform_fee_address=PLATFORM_FEE_ADDRESS,
        )
        estimate = await estimator.estimate(native_asset, request)
        assert estimate.miner_fee == 146_302_140
        assert estimate.platform_fee == 233_644_859
        assert estimate.total == 146_302_140 + 233_644_859

    async def test_estimate_without_platform_fee(self, native_asset, token_asset, node_transport):
        estimator = make_estimator(node_transport)
        request = TransferRequest(SECOND_ADDRESS, 1_000_000_000)
        assert (await estimator.estimate(native_asset, request)).total == 146_302_140
        assert (await estimator.estimate(token_asset, request)).total == 50_000_000
