from __future__ import annotations

import base64
import logging
import time
from dataclasses import dataclass
from typing import Callable

from pytoniq import Address, Cell, begin_cell
from pytoniq.contract.wallets.wallet import WALLET_V4_R2_CODE

from toncoin_wallet.features.account.service import AccountStateClient, DeployPayload
from toncoin_wallet.features.transfer.jetton import comment_cell, encode_transfer
from toncoin_wallet.keys import SIGNATURE_LENGTH
from toncoin_wallet.shared.address import parse_address

logger = logging.getLogger(__name__)

Signer = Callable[[bytes], bytes]


def _to_base64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


class WalletContract:
    """Wallet v4r2 contract bound to one public key in the basechain."""

    WORKCHAIN = 0
    WALLET_ID = 698983191

    def __init__(self, public_key: bytes):
        if len(public_key) != 32:
            raise ValueError("Public key must be 32 bytes")
        self.public_key = bytes(public_key)
        self.code = WALLET_V4_R2_CODE
        self.data = (
            begin_cell()
            .store_uint(0, 32)  # seqno
            .store_uint(self.WALLET_ID, 32)
            .store_bytes(self.public_key)
            .store_bit(0)  # plugins
            .end_cell()
        )
        self.state_init = (
            begin_cell()
            .store_bit(0)  # split_depth
            .store_bit(0)  # special
            .store_maybe_ref(self.code)
            .store_maybe_ref(self.data)
            .store_bit(0)  # library
            .end_cell()
        )
        self.address = Address((self.WORKCHAIN, self.state_init.hash))

    def deploy_payload(self) -> DeployPayload:
        return DeployPayload(
            code=_to_base64(self.code.to_boc()),
            data=_to_base64(self.data.to_boc()),
        )


@dataclass(frozen=True)
class TransferRequest:
    destination: str
    value: int
    memo: str | None = None
    platform_fee_value: int = 0
    platform_fee_address: str | None = None


@dataclass(frozen=True)
class OutgoingMessage:
    destination: Address
    value: int
    body: Cell | None = None


@dataclass(frozen=True)
class SignedTransfer:
    """Wire-ready transfer.

    ``id`` is the hash of the external message, a submission receipt that
    differs from the on-chain transaction hash.
    """

    boc: str
    id: str


@dataclass(frozen=True)
class BuiltTransfer:
    body: Cell
    external: Cell
    init: DeployPayload | None

    @property
    def body_boc(self) -> str:
        return _to_base64(self.body.to_boc())

    def signed(self) -> SignedTransfer:
        return SignedTransfer(
            boc=_to_base64(self.external.to_boc()),
            id=_to_base64(self.external.hash),
        )


def internal_message(message: OutgoingMessage) -> Cell:
    builder = (
        begin_cell()
        .store_bit(0)  # int_msg_info
        .store_bit(1)  # ihr_disabled
        .store_bit(0)  # bounce
        .store_bit(0)  # bounced
        .store_uint(0, 2)  # src: addr_none
        .store_address(message.destination)
        .store_coins(message.value)
        .store_bit(0)  # extra currencies
        .store_coins(0)  # ihr_fee
        .store_coins(0)  # fwd_fee
        .store_uint(0, 64)  # created_lt
        .store_uint(0, 32)  # created_at
        .store_bit(0)  # state init
    )
    if message.body is None:
        builder.store_bit(0)
    else:
        builder.store_bit(1).store_ref(message.body)
    return builder.end_cell()


def native_messages(request: TransferRequest) -> list[OutgoingMessage]:
    messages = [
        OutgoingMessage(
            destination=parse_address(request.destination).address,
            value=request.value,
            body=comment_cell(request.memo),
        )
    ]
    if request.platform_fee_value > 0:
        if not request.platform_fee_address:
            raise ValueError("Platform fee address is required")
        messages.append(
            OutgoingMessage(
                destination=parse_address(request.platform_fee_address).address,
                value=request.platform_fee_value,
            )
        )
    return messages


def token_messages(
    request: TransferRequest,
    jetton_wallet: str,
    owner: Address,
    token_fee: int,
) -> list[OutgoingMessage]:
    body = encode_transfer(
        amount=request.value,
        destination=parse_address(request.destination).address,
        response_address=owner,
        memo=request.memo,
    )
    return [
        OutgoingMessage(
            destination=parse_address(jetton_wallet).address,
            value=token_fee,
            body=body,
        )
    ]


class TransferBuilder:
    SEND_MODE = 3  # pay fees separately, ignore errors
    VALID_UNTIL_UNBOUNDED = 0xFFFFFFFF
    VALIDITY_SECONDS = 60

    def __init__(
        self,
        contract: WalletContract,
        account_client: AccountStateClient,
        own_address: str,
        clock: Callable[[], float] = time.time,
    ):
        self.contract = contract
        self.account_client = account_client
        self.own_address = own_address
        self.clock = clock

    def _valid_until(self, seqno: int) -> int:
        if seqno == 0:
            return self.VALID_UNTIL_UNBOUNDED
        return int(self.clock()) + self.VALIDITY_SECONDS

    def _store_order(
        self, builder, seqno: int, valid_until: int, messages: list[OutgoingMessage]
    ):
        builder.store_uint(self.contract.WALLET_ID, 32)
        builder.store_uint(valid_until, 32)
        builder.store_uint(seqno, 32)
        builder.store_uint(0, 8)  # simple send
        for message in messages:
            builder.store_uint(self.SEND_MODE, 8)
            builder.store_ref(internal_message(message))
        return builder

    async def build(
        self, messages: list[OutgoingMessage], signer: Signer | None = None
    ) -> BuiltTransfer:
        """Assemble the external message for ``messages``.

        Without a signer a zero signature of the same length is used, which
        is what fee estimation submits.
        """
        state = await self.account_client.get_account_state(self.own_address)

        valid_until = self._valid_until(state.seqno)
        order = self._store_order(
            begin_cell(), state.seqno, valid_until, messages
        ).end_cell()
        if signer is None:
            signature = bytes(SIGNATURE_LENGTH)
        else:
            signature = signer(order.hash)
        body = self._store_order(
            begin_cell().store_bytes(signature), state.seqno, valid_until, messages
        ).end_cell()

        external = (
            begin_cell()
            .store_uint(0b10, 2)  # ext_in_msg_info
            .store_uint(0, 2)  # src: addr_none
            .store_address(self.contract.address)
            .store_coins(0)  # import_fee
        )
        if state.initialized:
            external.store_bit(0)
            init = None
        else:
            external.store_bit(1).store_bit(1).store_ref(self.contract.state_init)
            init = self.contract.deploy_payload()
        external.store_bit(1).store_ref(body)

        logger.debug(
            "Built transfer: seqno=%d messages=%d deploy=%s",
            state.seqno,
            len(messages),
            init is not None,
        )
        return BuiltTransfer(body=body, external=external.end_cell(), init=init)
