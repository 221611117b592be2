from __future__ import annotations

import time
from decimal import Decimal
from enum import Enum
from typing import Any, Callable

from toncoin_wallet.features.account.service import (
    AccountStateClient,
    Cursor,
    TransportProtocol,
)
from toncoin_wallet.features.fees.schedule import FeeScheduleClient, calculate_platform_fee
from toncoin_wallet.features.fees.service import FeeEstimator
from toncoin_wallet.features.history.service import HistoryPage, TransactionHistoryReader
from toncoin_wallet.features.transfer.max_amount import MaxAmountSolver
from toncoin_wallet.keys import KeyPair, ensure_seed, keypair_from_seed
from toncoin_wallet.shared.address import canonicalize, parse_address, validate_network
from toncoin_wallet.shared.amount import Amount
from toncoin_wallet.shared.assets import NATIVE_DECIMALS, Asset, NativeAsset, TokenAsset
from toncoin_wallet.shared.config import DEFAULT_DERIVATION_PATH, WalletConfig
from toncoin_wallet.shared.errors import (
    BigAmountError,
    DestinationEqualsSourceError,
    InsufficientCoinForTransactionFeeError,
    InternalError,
    InvalidMemoError,
    SmallAmountError,
)
from toncoin_wallet.shared.logging import describe_error, get_logger
from toncoin_wallet.shared.memoize import RequestCache
from toncoin_wallet.shared.network import NetworkClient, NodeTransport
from toncoin_wallet.shared.storage import KeyValueStorage, MemoryStorage
from toncoin_wallet.shared.validation import DerivationPathValidator, MemoValidator
from toncoin_wallet.transaction import (
    TransferBuilder,
    TransferRequest,
    WalletContract,
    native_messages,
    token_messages,
)


class WalletState(Enum):
    CREATED = "created"
    INITIALIZING = "initializing"
    INITIALIZED = "initialized"
    NEED_INITIALIZATION = "need_initialization"
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


def token_url(jetton_master: str) -> str:
    return f"https://tonscan.org/jetton/{jetton_master}"


class WalletAccount:
    DUST_THRESHOLD = 1
    META_NAMES = ["memo"]
    DUMMY_EXCHANGE_DEPOSIT_ADDRESS = "UQBa1jalGfCwrast5gg_PB-U2cdCHg2mPy2gUO-_4u_vuboO"

    def __init__(
        self,
        asset: Asset | None = None,
        storage: KeyValueStorage | None = None,
        config: WalletConfig | None = None,
        settings: dict[str, Any] | None = None,
        transport: TransportProtocol | None = None,
        fee_transport: TransportProtocol | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.asset = asset or NativeAsset()
        self.config = config or WalletConfig()
        self.storage = storage or MemoryStorage()
        self.settings = settings or {}
        self.clock = clock
        self.state = WalletState.CREATED
        self.log = get_logger(__name__, crypto_id=self.asset.crypto_id)

        if transport is None:
            transport = NodeTransport(
                NetworkClient(
                    self.config.node_url,
                    timeout_config=self.config.timeout_config,
                    retry_config=self.config.retry_config,
                )
            )
        if fee_transport is None:
            fee_transport = NodeTransport(
                NetworkClient(
                    self.config.platform_api_url,
                    timeout_config=self.config.timeout_config,
                    retry_config=self.config.retry_config,
                )
            )

        self.cache = RequestCache()
        self.account_client = AccountStateClient(transport, self.cache)
        self.fee_schedule = FeeScheduleClient(fee_transport, self.asset.crypto_id, self.cache)

        self._public_key: bytes | None = None
        self._contract: WalletContract | None = None
        self._balance = 0
        self._native_balance = 0

    @property
    def development(self) -> bool:
        return self.config.development

    @property
    def default_settings(self) -> dict[str, Any]:
        return {"bip44": DEFAULT_DERIVATION_PATH}

    @property
    def settings(self) -> dict[str, Any]:
        return dict(self._settings)

    @settings.setter
    def settings(self, value: dict[str, Any]) -> None:
        merged = {**self.default_settings, **(value or {})}
        if not self.validate_derivation_path(merged["bip44"]):
            raise ValueError(f"Invalid derivation path: {merged['bip44']}")
        self._settings = merged

    @property
    def is_settings_supported(self) -> bool:
        return isinstance(self.asset, NativeAsset)

    @property
    def meta_names(self) -> list[str]:
        return list(self.META_NAMES)

    @property
    def dummy_exchange_deposit_address(self) -> str:
        return self.DUMMY_EXCHANGE_DEPOSIT_ADDRESS

    @property
    def token_url(self) -> str | None:
        if isinstance(self.asset, TokenAsset):
            return token_url(self.asset.jetton_master)
        return None

    @property
    def balance(self) -> Amount:
        return Amount(self._balance, self.asset.decimals)

    @property
    def native_balance(self) -> Amount:
        return Amount(self._native_balance, NATIVE_DECIMALS)

    @property
    def contract(self) -> WalletContract:
        if self._contract is None:
            raise InternalError("Wallet is not initialized")
        return self._contract

    @property
    def address(self) -> str:
        return self.contract.address.to_str(
            is_user_friendly=True,
            is_url_safe=True,
            is_bounceable=False,
            is_test_only=self.development,
        )

    def _keypair_from_seed(self, seed: bytes) -> KeyPair:
        return keypair_from_seed(seed, self._settings["bip44"])

    def _init_account(self, public_key: bytes) -> None:
        self._public_key = public_key
        self._contract = WalletContract(public_key)

        own_address = self.address
        self.builder = TransferBuilder(
            self._contract, self.account_client, own_address, clock=self.clock
        )
        self.fee_estimator = FeeEstimator(
            self.builder,
            self.account_client,
            own_address,
            self.cache,
            token_fee=self.config.token_transfer_fee,
        )
        self.max_amount_solver = MaxAmountSolver(self.fee_estimator, self.fee_schedule)
        self.history = TransactionHistoryReader(
            self.account_client, own_address, development=self.development
        )

        stored = self.storage.get("balance")
        try:
            self._balance = int(stored or 0)
        except (TypeError, ValueError):
            self.log.warning("Ignoring malformed stored balance: %r", stored)
            self._balance = 0

    async def create(self, seed: bytes) -> None:
        seed = ensure_seed(seed)
        self.state = WalletState.INITIALIZING
        self._init_account(self._keypair_from_seed(seed).public_key)
        self.state = WalletState.INITIALIZED

    async def open(self, public_key: dict[str, Any]) -> None:
        if not isinstance(public_key, dict) or not isinstance(public_key.get("data"), str):
            raise TypeError("public_key must be a dict with hex 'data' and 'settings'")
        self.state = WalletState.INITIALIZING
        settings = public_key.get("settings") or {}
        if settings.get("bip44") == self._settings["bip44"]:
            self._init_account(bytes.fromhex(public_key["data"]))
            self.state = WalletState.INITIALIZED
        else:
            self.log.info("Public key was exported with other settings, re-initialization needed")
            self.state = WalletState.NEED_INITIALIZATION

    async def _get_jetton_wallet(self) -> str:
        if not isinstance(self.asset, TokenAsset):
            raise InternalError("Jetton wallet is only available for tokens")
        return await self.account_client.get_token_subaccount_address(
            self.address, self.asset.jetton_master
        )

    async def load(self) -> None:
        self.state = WalletState.LOADING
        try:
            account = await self.account_client.get_account_state(self.address)
            self._native_balance = account.balance
            if isinstance(self.asset, TokenAsset):
                jetton_wallet = await self._get_jetton_wallet()
                self._balance = await self.account_client.get_token_balance(jetton_wallet)
            else:
                self._balance = account.balance
            self.storage.set("balance", str(self._balance))
            await self.storage.save()
            self.state = WalletState.LOADED
            self.log.with_context(balance=str(self.balance)).info("Wallet loaded")
        except Exception as e:
            self.state = WalletState.ERROR
            self.log.warning("Wallet load failed: %s", describe_error(e))
            raise

    async def cleanup(self) -> None:
        self.cache.clear()

    def get_public_key(self) -> dict[str, Any]:
        if self._public_key is None:
            raise InternalError("Wallet is not initialized")
        return {"settings": self.settings, "data": self._public_key.hex()}

    def get_private_key(self, seed: bytes) -> list[dict[str, str]]:
        keypair = self._keypair_from_seed(ensure_seed(seed))
        self.log.info("Private key exported for %s", self.address)
        return [{"address": self.address, "privatekey": keypair.secret_key.hex()}]

    def validate_derivation_path(self, path: str) -> bool:
        return DerivationPathValidator.validate(path).is_valid

    async def validate_address(self, address: str) -> bool:
        parsed = parse_address(address)
        validate_network(parsed, self.development)
        if parsed.address == self.contract.address:
            raise DestinationEqualsSourceError(address)
        return True

    async def validate_amount(
        self,
        address: str,
        amount: Amount,
        price: float | Decimal | None = None,
        memo: str | None = None,
    ) -> bool:
        value = amount.value
        if value < self.DUST_THRESHOLD:
            raise SmallAmountError(Amount(self.DUST_THRESHOLD, self.asset.decimals))
        if isinstance(self.asset, TokenAsset):
            token_fee = self.config.token_transfer_fee
            if self._native_balance < token_fee:
                raise InsufficientCoinForTransactionFeeError(Amount(token_fee, NATIVE_DECIMALS))
        max_amount = await self._estimate_max_amount(address, price, memo)
        if value > max_amount:
            raise BigAmountError(Amount(max_amount, self.asset.decimals))
        return True

    async def validate_meta(self, address: str, memo: str | None = None) -> bool:
        if memo is not None and not MemoValidator.validate(memo).is_valid:
            raise InvalidMemoError(memo)
        return True

    async def _platform_fee_request(
        self, address: str, value: int, price, memo: str | None
    ) -> TransferRequest:
        schedule = await self.fee_schedule.get_config()
        platform_fee = calculate_platform_fee(value, schedule, price, self.asset.decimals)
        return TransferRequest(
            destination=address,
            value=value,
            memo=memo,
            platform_fee_value=platform_fee,
            platform_fee_address=schedule.address if platform_fee > 0 else None,
        )

    async def estimate_transaction_fee(
        self,
        address: str,
        amount: Amount,
        price: float | Decimal | None = None,
        memo: str | None = None,
    ) -> Amount:
        if isinstance(self.asset, TokenAsset):
            request = TransferRequest(destination=address, value=amount.value, memo=memo)
        else:
            request = await self._platform_fee_request(address, amount.value, price, memo)
        estimate = await self.fee_estimator.estimate(self.asset, request)
        return Amount(estimate.total, NATIVE_DECIMALS)

    async def _estimate_max_amount(self, address: str, price, memo: str | None) -> int:
        return await self.max_amount_solver.solve(
            self.asset, self._balance, address, price=price, memo=memo
        )

    async def estimate_max_amount(
        self,
        address: str,
        price: float | Decimal | None = None,
        memo: str | None = None,
    ) -> Amount:
        max_amount = await self._estimate_max_amount(address, price, memo)
        return Amount(max_amount, self.asset.decimals)

    async def create_transaction(
        self,
        address: str,
        amount: Amount,
        seed: bytes,
        price: float | Decimal | None = None,
        memo: str | None = None,
    ) -> str:
        """Sign, submit and account for a transfer.

        Returns the submission receipt id, not the on-chain transaction hash.
        """
        keypair = self._keypair_from_seed(ensure_seed(seed))
        value = amount.value

        if isinstance(self.asset, TokenAsset):
            request = TransferRequest(destination=address, value=value, memo=memo)
            estimate = await self.fee_estimator.estimate(self.asset, request)
            jetton_wallet = await self._get_jetton_wallet()
            messages = token_messages(
                request, jetton_wallet, self.contract.address, estimate.miner_fee
            )
        else:
            request = await self._platform_fee_request(address, value, price, memo)
            estimate = await self.fee_estimator.estimate(self.asset, request)
            messages = native_messages(request)

        transfer = (await self.builder.build(messages, keypair.sign)).signed()
        try:
            await self.account_client.send_boc(transfer.boc)
        except Exception as e:
            self.log.warning("Transfer %s was not submitted: %s", transfer.id, describe_error(e))
            raise

        if isinstance(self.asset, TokenAsset):
            self._balance = max(self._balance - value, 0)
            self._native_balance = max(self._native_balance - estimate.total, 0)
        else:
            self._balance = max(self._balance - value - estimate.total, 0)
            self._native_balance = self._balance

        self.storage.set("balance", str(self._balance))
        await self.storage.save()
        self.log.info("Transaction submitted: %s", transfer.id)
        return transfer.id

    async def load_transactions(self, cursor: Cursor | None = None) -> HistoryPage:
        if isinstance(self.asset, TokenAsset):
            address = await self._get_jetton_wallet()
        else:
            address = self.address
        return await self.history.load_page(
            self.asset, address, cursor, self.config.tx_per_page
        )

    async def unalias(self, address: str) -> dict[str, str] | None:
        canonical = canonicalize(address)
        if canonical is None:
            return None
        result = {"address": canonical.primary}
        if canonical.alias is not None:
            result["alias"] = canonical.alias
        return result
