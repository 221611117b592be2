"""Account state access for Toncoin Wallet.

All upstream calls go through a single envelope check: the node answers
``{"ok": true, "result": ...}`` and anything else is a ``NodeError``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Protocol

from toncoin_wallet.shared.errors import NodeError
from toncoin_wallet.shared.memoize import RequestCache
from toncoin_wallet.shared.network import NetworkError

logger = logging.getLogger(__name__)

UNINITIALIZED_STATE = "uninitialized"


class TransportProtocol(Protocol):
    """Protocol defining the async transport used to reach the node."""

    async def request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
        context: str = "",
    ) -> Any: ...


@dataclass(frozen=True)
class AccountState:
    seqno: int
    initialized: bool
    balance: int


@dataclass(frozen=True)
class DeployPayload:
    """Base64 BOCs of the wallet contract code and initial data."""

    code: str
    data: str


@dataclass(frozen=True)
class Cursor:
    lt: str
    hash: str


def _parse_int(value: Any, field_name: str, payload: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError) as e:
        raise NodeError(f'Invalid "{field_name}" in response', payload) from e


class AccountStateClient:
    def __init__(self, transport: TransportProtocol, cache: RequestCache | None = None):
        self.transport = transport
        self.cache = cache if cache is not None else RequestCache()

    async def _request_node(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
        context: str = "",
    ) -> Any:
        try:
            payload = await self.transport.request(
                method, endpoint, params=params, data=data, context=context
            )
        except NetworkError as e:
            logger.error("Node request failed: %s", e.message)
            raise NodeError(e.message, payload=e.response_text) from e

        if not isinstance(payload, dict) or payload.get("ok") is not True:
            raise NodeError(
                f'Invalid response "{json.dumps(payload, default=str)}"', payload
            )
        return payload.get("result")

    async def _get_wallet_information(self, address: str) -> dict[str, Any]:
        result = await self._request_node(
            "GET",
            "api/v1/getWalletInformation",
            params={"address": address},
            context="Fetch wallet information",
        )
        if not isinstance(result, dict):
            raise NodeError("Malformed wallet information", result)
        return result

    async def get_wallet_information(self, address: str) -> dict[str, Any]:
        return await self.cache.call(
            "getWalletInformation", self._get_wallet_information, address
        )

    async def get_account_state(self, address: str) -> AccountState:
        info = await self.get_wallet_information(address)
        return AccountState(
            seqno=_parse_int(info.get("seqno"), "seqno", info),
            initialized=info.get("account_state") != UNINITIALIZED_STATE,
            balance=_parse_int(info.get("balance"), "balance", info),
        )

    async def _get_token_subaccount_address(self, owner: str, jetton: str) -> str:
        result = await self._request_node(
            "GET",
            "api/v1/getJettonWalletAddress",
            params={"address": owner, "jetton": jetton},
            context="Fetch jetton wallet address",
        )
        if isinstance(result, dict):
            result = result.get("address")
        if not isinstance(result, str) or not result:
            raise NodeError("Malformed jetton wallet address", result)
        return result

    async def get_token_subaccount_address(self, owner: str, jetton: str) -> str:
        return await self.cache.call(
            "getJettonWalletAddress", self._get_token_subaccount_address, owner, jetton
        )

    async def get_token_balance(self, subaccount: str) -> int:
        result = await self._request_node(
            "GET",
            "api/v1/getJettonData",
            params={"address": subaccount},
            context="Fetch jetton data",
        )
        if not isinstance(result, dict):
            raise NodeError("Malformed jetton data", result)
        return _parse_int(result.get("balance"), "balance", result)

    async def estimate_fee(
        self, address: str, body: str, init: DeployPayload | None = None
    ) -> dict[str, Any]:
        result = await self._request_node(
            "POST",
            "api/v1/estimateFee",
            data={
                "address": address,
                "body": body,
                "init_code": init.code if init else None,
                "init_data": init.data if init else None,
                "ignore_chksig": True,
            },
            context="Estimate fee",
        )
        if not isinstance(result, dict) or not isinstance(result.get("source_fees"), dict):
            raise NodeError("Malformed fee estimate", result)
        return result

    async def send_boc(self, boc: str) -> Any:
        result = await self._request_node(
            "POST",
            "api/v1/sendBoc",
            data={"boc": boc},
            context="Send transaction",
        )
        logger.info("Transaction submitted to node")
        return result

    async def get_transactions(
        self, address: str, cursor: Cursor | None, limit: int
    ) -> list[dict[str, Any]]:
        result = await self._request_node(
            "GET",
            "api/v1/getTransactions",
            params={
                "address": address,
                "lt": cursor.lt if cursor else None,
                "hash": cursor.hash if cursor else None,
                "limit": limit,
            },
            context="Fetch transactions",
        )
        if not isinstance(result, list):
            raise NodeError("Malformed transaction list", result)
        return result
