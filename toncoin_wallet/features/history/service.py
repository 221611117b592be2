"""Transaction history paging and classification."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from toncoin_wallet.features.account.service import AccountStateClient, Cursor
from toncoin_wallet.features.transfer.jetton import (
    INTERNAL_TRANSFER,
    TRANSFER,
    JettonEnvelope,
    decode_envelope_boc,
)
from toncoin_wallet.shared.address import format_address
from toncoin_wallet.shared.amount import Amount
from toncoin_wallet.shared.assets import NATIVE_DECIMALS, Asset, TokenAsset

logger = logging.getLogger(__name__)

STATUS_SUCCESS = "success"
ACTION_TRANSFER = "transfer"
ACTION_TOKEN_TRANSFER = "token_transfer"


def explorer_tx_url(tx_id: str, development: bool) -> str:
    if development:
        return f"https://testnet.tonscan.org/tx/{tx_id}"
    return f"https://tonscan.org/tx/{tx_id}"


@dataclass(frozen=True)
class TransactionRecord:
    id: str
    from_address: str | None
    to_address: str | None
    amount: Amount
    fee: Amount
    incoming: bool
    timestamp: datetime
    memo: str | None = None
    status: str = STATUS_SUCCESS
    action: str = ACTION_TRANSFER
    development: bool = False

    @property
    def url(self) -> str:
        return explorer_tx_url(self.id, self.development)


@dataclass
class HistoryPage:
    records: list[TransactionRecord] = field(default_factory=list)
    next_cursor: Cursor | None = None
    has_more: bool = False


def _as_int(value: Any) -> int:
    return int(value or 0)


def _message_body(message: dict[str, Any] | None) -> str | None:
    if not message:
        return None
    return (message.get("msg_data") or {}).get("body")


def _timestamp(tx: dict[str, Any]) -> datetime:
    return datetime.fromtimestamp(_as_int(tx.get("utime")), tz=timezone.utc)


class TransactionHistoryReader:
    def __init__(
        self,
        account_client: AccountStateClient,
        own_address: str,
        development: bool = False,
    ):
        self.account_client = account_client
        self.own_address = own_address
        self.development = development

    async def load_page(
        self,
        asset: Asset,
        address: str,
        cursor: Cursor | None = None,
        page_size: int = 10,
    ) -> HistoryPage:
        """Load one page of history for ``address``, newest first.

        With a cursor one extra record is requested and the first one,
        which repeats the end of the previous page, is dropped.
        """
        limit = page_size + 1 if cursor else page_size
        data = await self.account_client.get_transactions(address, cursor, limit)
        if cursor:
            data = data[1:]

        records = []
        for tx in data:
            record = self._transform(asset, tx)
            if record is not None:
                records.append(record)

        next_cursor = None
        if data:
            tx_id = data[-1].get("transaction_id") or {}
            next_cursor = Cursor(lt=tx_id.get("lt"), hash=tx_id.get("hash"))

        return HistoryPage(
            records=records,
            next_cursor=next_cursor,
            has_more=len(data) >= page_size,
        )

    def _transform(self, asset: Asset, tx: dict[str, Any]) -> TransactionRecord | None:
        if isinstance(asset, TokenAsset):
            return self._transform_token(asset, tx)
        return self._transform_native(tx)

    def _render(self, address) -> str | None:
        if address is None:
            return None
        return format_address(address, self.development, bounceable=False)

    def _transform_native(self, tx: dict[str, Any]) -> TransactionRecord:
        in_msg = tx.get("in_msg") or {}
        tx_id = (tx.get("transaction_id") or {}).get("hash")

        if in_msg.get("source"):
            return TransactionRecord(
                id=tx_id,
                from_address=in_msg.get("source"),
                to_address=in_msg.get("destination"),
                amount=Amount(_as_int(in_msg.get("value")), NATIVE_DECIMALS),
                fee=Amount(_as_int(tx.get("fee")), NATIVE_DECIMALS),
                incoming=True,
                timestamp=_timestamp(tx),
                memo=in_msg.get("message") or None,
                development=self.development,
            )

        out_msgs = tx.get("out_msgs") or []
        msg = out_msgs[0] if out_msgs else {}
        fee = _as_int(tx.get("fee"))
        if len(out_msgs) > 1 and out_msgs[1].get("csfee") is True:
            fee += _as_int(out_msgs[1].get("value"))

        envelope = decode_envelope_boc(_message_body(msg))
        action = ACTION_TOKEN_TRANSFER if envelope and envelope.kind == TRANSFER else ACTION_TRANSFER
        return TransactionRecord(
            id=tx_id,
            from_address=msg.get("source"),
            to_address=msg.get("destination"),
            amount=Amount(_as_int(msg.get("value")), NATIVE_DECIMALS),
            fee=Amount(fee, NATIVE_DECIMALS),
            incoming=False,
            timestamp=_timestamp(tx),
            memo=msg.get("message") or None,
            action=action,
            development=self.development,
        )

    def _transform_token(
        self, asset: TokenAsset, tx: dict[str, Any]
    ) -> TransactionRecord | None:
        in_msg = tx.get("in_msg") or {}
        envelope: JettonEnvelope | None = decode_envelope_boc(_message_body(in_msg))
        if envelope is None or envelope.kind not in (TRANSFER, INTERNAL_TRANSFER):
            return None

        tx_id = (tx.get("transaction_id") or {}).get("hash")
        incoming = envelope.kind == INTERNAL_TRANSFER
        if incoming:
            from_address = self._render(envelope.address)
            to_address = self.own_address
            fee = 0
        else:
            from_address = self.own_address
            to_address = self._render(envelope.address)
            # the owner funds the jetton wallet hop with the attached value
            fee = _as_int(in_msg.get("value"))

        return TransactionRecord(
            id=tx_id,
            from_address=from_address,
            to_address=to_address,
            amount=Amount(envelope.amount, asset.decimals),
            fee=Amount(fee, NATIVE_DECIMALS),
            incoming=incoming,
            timestamp=_timestamp(tx),
            memo=envelope.memo,
            action=ACTION_TOKEN_TRANSFER,
            development=self.development,
        )
