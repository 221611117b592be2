import copy
import tempfile
from pathlib import Path

import pytest

from toncoin_wallet.shared.assets import NativeAsset, TokenAsset
from toncoin_wallet.wallet import WalletAccount

# either dismiss upset disease clump hazard paddle twist fetch tissue hello buyer
SEED = bytes.fromhex(
    "2b48a48a752f6c49772bf97205660411cd2163fe6ce2de19537e9c94d3648c85"
    "c0d7f405660c20253115aaf1799b1c41cdd62b4cfbb6845bc9475495fc64b874"
)
PUBLIC_KEY_HEX = "3551dd99b8e909ffa2388f92c67357e1840b3a6d93f6031119f2286b4fac43eb"
SEED_PUB_KEY = {
    "data": PUBLIC_KEY_HEX,
    "settings": {"bip44": "m/44'/607'/0'"},
}
PRIVATE_KEY_HEX = (
    "24c3f92d74f59cc10f0918dc0660c3caaea002a6ceb0f72f0f4b5d0942babae6"
    "3551dd99b8e909ffa2388f92c67357e1840b3a6d93f6031119f2286b4fac43eb"
)
ADDRESS = "UQBa1jalGfCwrast5gg_PB-U2cdCHg2mPy2gUO-_4u_vuboO"
JETTON_WALLET_ADDRESS = "EQB1asV3k_H0eCB3NIIe-5YpLbeJvQ9HAiO-c6ECljhZ6Y4V"
SECOND_ADDRESS = "UQBj8pDDn0TAuiZ_EI4npXVtNJTUrdAtRpit6UPiy0cnWnMj"
SECOND_ADDRESS_BOUNCEABLE = "EQBj8pDDn0TAuiZ_EI4npXVtNJTUrdAtRpit6UPiy0cnWi7m"
TESTNET_ADDRESS = "0QARFlgfJwwwL2q_3sTkZ4PuhiKdsw8YqhIgvyJIR3VSIrvv"
PLATFORM_FEE_ADDRESS = "EQAM1kRWS2ta7nKTxVGN9tz_AmWeGOXwTLJnhd5kFhshsBnA"
TETHER_MASTER = "EQCxE6mUtQJKFnGfaROTKOt1lZbDiiX1kCixRv7Nw2Id_sDs"
TON_PRICE = 2.14

WALLET_INFORMATION = {
    "ok": True,
    "result": {
        "wallet": True,
        "balance": "4936421995",
        "account_state": "active",
        "wallet_type": "wallet v4 r2",
        "seqno": 7,
        "wallet_id": 698983191,
    },
}
WALLET_INFORMATION_UNINITIALIZED = {
    "ok": True,
    "result": {
        "wallet": False,
        "balance": "0",
        "account_state": "uninitialized",
    },
}
ESTIMATE_FEE = {
    "ok": True,
    "result": {
        "@type": "query.fees",
        "source_fees": {
            "@type": "fees",
            "in_fwd_fee": 1284800,
            "storage_fee": 1572,
            "gas_fee": 3308000,
            "fwd_fee": 134741000,
        },
        "destination_fees": [],
    },
}
JETTON_WALLET = {"ok": True, "result": JETTON_WALLET_ADDRESS}
JETTON_DATA = {
    "ok": True,
    "result": {
        "balance": "7000000",
        "owner": ADDRESS,
        "jetton": TETHER_MASTER,
    },
}
CSFEE_DISABLED = {
    "address": PLATFORM_FEE_ADDRESS,
    "disabled": True,
    "fee": 0.005,
    "minFee": 0.5,
    "maxFee": 100,
}
CSFEE_ENABLED = {
    "address": PLATFORM_FEE_ADDRESS,
    "disabled": False,
    "fee": 0.005,
    "minFee": 0.5,
    "maxFee": 100,
}


class FakeTransport:
    """Async transport answering from a route table.

    A route maps ``(method, endpoint)`` to a response, an exception to
    raise, or a callable taking ``params`` and ``data``.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []

    async def request(self, method, endpoint, params=None, data=None, context=""):
        self.calls.append((method, endpoint, params, data))
        if (method, endpoint) not in self.routes:
            raise AssertionError(f"Unexpected request: {method} {endpoint}")
        handler = self.routes[(method, endpoint)]
        if isinstance(handler, Exception):
            raise handler
        if callable(handler):
            return handler(params=params, data=data)
        return copy.deepcopy(handler)

    def calls_to(self, endpoint):
        return [call for call in self.calls if call[1] == endpoint]


@pytest.fixture
def native_asset():
    return NativeAsset()


@pytest.fixture
def token_asset():
    return TokenAsset(crypto_id="tether@toncoin", jetton_master=TETHER_MASTER, decimals=6)


@pytest.fixture
def node_routes():
    return {
        ("GET", "api/v1/getWalletInformation"): WALLET_INFORMATION,
        ("POST", "api/v1/estimateFee"): ESTIMATE_FEE,
        ("POST", "api/v1/sendBoc"): {"ok": True, "result": {"@type": "ok"}},
        ("GET", "api/v1/getJettonWalletAddress"): JETTON_WALLET,
        ("GET", "api/v1/getJettonData"): JETTON_DATA,
    }


@pytest.fixture
def node_transport(node_routes):
    return FakeTransport(node_routes)


@pytest.fixture
def fee_transport():
    return FakeTransport({("GET", "api/v4/csfee"): CSFEE_DISABLED})


@pytest.fixture(autouse=True)
def isolate_wallet_storage(monkeypatch):
    """Run tests with an isolated wallet directory."""
    with tempfile.TemporaryDirectory(prefix="toncoin-wallet-test-") as tmp_dir:
        monkeypatch.setenv("TONCOIN_WALLET_DIR", str(Path(tmp_dir)))
        yield


@pytest.fixture
def make_wallet(native_asset, node_transport, fee_transport):
    def factory(asset=None, transport=None, **kwargs):
        kwargs.setdefault("fee_transport", fee_transport)
        return WalletAccount(
            asset=asset or native_asset,
            transport=transport or node_transport,
            clock=lambda: 1_700_000_000,
            **kwargs,
        )

    return factory


@pytest.fixture
async def wallet(make_wallet):
    account = make_wallet()
    await account.open(SEED_PUB_KEY)
    await account.load()
    return account


@pytest.fixture
async def token_wallet(make_wallet, token_asset):
    account = make_wallet(asset=token_asset)
    await account.open(SEED_PUB_KEY)
    await account.load()
    return account
