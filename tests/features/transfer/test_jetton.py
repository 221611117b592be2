"""Tests for jetton envelopes and comment payloads."""

import base64

import pytest
from pytoniq import Cell, begin_cell

from conftest import ADDRESS, SECOND_ADDRESS
from toncoin_wallet.features.transfer.jetton import (
    CELL_BYTES,
    COMMENT_HEAD_BYTES,
    INTERNAL_TRANSFER,
    JETTON_INTERNAL_TRANSFER_OP,
    SNAKE_MAX_CELLS,
    TRANSFER,
    comment_cell,
    decode_envelope,
    decode_envelope_boc,
    encode_transfer,
    read_comment,
)
from toncoin_wallet.shared.address import parse_address
from toncoin_wallet.shared.validation import MemoValidator

OWNER = parse_address(ADDRESS).address
PEER = parse_address(SECOND_ADDRESS).address


def internal_transfer(amount, memo=None, inline=False):
    builder = (
        begin_cell()
        .store_uint(JETTON_INTERNAL_TRANSFER_OP, 32)
        .store_uint(42, 64)
        .store_coins(amount)
        .store_address(PEER)
        .store_address(OWNER)
        .store_coins(1)
    )
    if memo is None:
        builder.store_bit(0)
    elif inline:
        builder.store_bit(0).store_uint(0, 32).store_snake_string(memo)
    else:
        builder.store_bit(1).store_ref(comment_cell(memo))
    return builder.end_cell()


@pytest.mark.unit
class TestComment:
    def test_comment_roundtrip(self):
        assert read_comment(comment_cell("hello")) == "hello"

    def test_empty_memo_has_no_payload(self):
        assert comment_cell("") is None
        assert comment_cell(None) is None

    def test_non_comment_payload(self):
        assert read_comment(begin_cell().store_uint(7, 32).end_cell()) is None
        assert read_comment(begin_cell().store_uint(1, 8).end_cell()) is None

    def test_snake_matches_standard_layout(self):
        memo = "thanks for lunch " * 100
        standard = begin_cell().store_uint(0, 32).store_snake_string(memo).end_cell()
        assert comment_cell(memo).hash == standard.hash

    def test_longest_snake(self):
        memo = "b" * (COMMENT_HEAD_BYTES + (SNAKE_MAX_CELLS - 1) * CELL_BYTES)
        cell = comment_cell(memo)
        assert len(cell.refs) == 1
        assert read_comment(cell) == memo

    def test_wide_layout_for_long_memo(self):
        memo = "b" * (COMMENT_HEAD_BYTES + SNAKE_MAX_CELLS * CELL_BYTES)
        cell = comment_cell(memo)
        assert len(cell.refs) == 4
        assert read_comment(cell) == memo

    def test_largest_memo_survives_boc(self):
        # distinct, multi-byte text so chunks split inside characters
        memo = "".join(f"{i}é" for i in range(200_000)).encode()[: MemoValidator.MAX_MEMO_BYTES]
        memo = memo.decode("utf-8", errors="ignore")
        boc = comment_cell(memo).to_boc()
        assert read_comment(Cell.one_from_boc(boc)) == memo

    def test_misaligned_payload(self):
        cell = begin_cell().store_uint(0, 32).store_uint(1, 3).end_cell()
        assert read_comment(cell) is None


@pytest.mark.unit
class TestTransferEnvelope:
    def test_encode_decode(self):
        envelope = decode_envelope(encode_transfer(1_000_000, PEER, OWNER, memo="invoice 7"))
        assert envelope.kind == TRANSFER
        assert envelope.amount == 1_000_000
        assert envelope.address == PEER
        assert envelope.response_address == OWNER
        assert envelope.memo == "invoice 7"

    def test_without_memo(self):
        envelope = decode_envelope(encode_transfer(5, PEER, OWNER))
        assert envelope.memo is None
        assert envelope.forward_amount == 1

    def test_query_id(self):
        assert decode_envelope(encode_transfer(5, PEER, OWNER, query_id=9)).query_id == 9


@pytest.mark.unit
class TestInternalTransferEnvelope:
    def test_referenced_comment(self):
        envelope = decode_envelope(internal_transfer(2_500_000, memo="thanks"))
        assert envelope.kind == INTERNAL_TRANSFER
        assert envelope.query_id == 42
        assert envelope.amount == 2_500_000
        assert envelope.address == PEER
        assert envelope.memo == "thanks"

    def test_inline_comment(self):
        assert decode_envelope(internal_transfer(1, memo="inline", inline=True)).memo == "inline"

    def test_no_comment(self):
        assert decode_envelope(internal_transfer(1)).memo is None


@pytest.mark.unit
class TestUnknownBodies:
    def test_other_opcode(self):
        assert decode_envelope(begin_cell().store_uint(0x7362D09C, 32).end_cell()) is None

    def test_truncated_body(self):
        assert decode_envelope(begin_cell().store_uint(0x0F8A7EA5, 32).end_cell()) is None

    def test_boc_helpers(self):
        cell = encode_transfer(3, PEER, OWNER)
        boc = base64.b64encode(cell.to_boc()).decode()
        assert decode_envelope_boc(boc).amount == 3
        assert decode_envelope_boc(None) is None
        assert decode_envelope_boc("not a boc") is None
