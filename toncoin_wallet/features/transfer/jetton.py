"""Jetton transfer envelopes and text comment payloads.

Two jetton wallet opcodes matter to a holder: ``transfer`` is what the
owner sends to its own jetton wallet, ``internal_transfer`` is what a
jetton wallet receives from its peer when tokens arrive.
"""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass

from pytoniq import Address, Cell, begin_cell

logger = logging.getLogger(__name__)

TEXT_COMMENT_OP = 0
JETTON_TRANSFER_OP = 0x0F8A7EA5
JETTON_INTERNAL_TRANSFER_OP = 0x178D4519
FORWARD_AMOUNT = 1

CELL_BYTES = 127
COMMENT_HEAD_BYTES = CELL_BYTES - 4
# longest chain stored as a plain snake, well below the 1024 cell depth limit
SNAKE_MAX_CELLS = 256
COMMENT_TREE_ARITY = 4

TRANSFER = "transfer"
INTERNAL_TRANSFER = "internal_transfer"


@dataclass(frozen=True)
class JettonEnvelope:
    kind: str
    query_id: int
    amount: int
    # Destination for ``transfer``, sender for ``internal_transfer``.
    address: Address | None
    response_address: Address | None
    forward_amount: int
    memo: str | None = None


def _comment_chunks(data: bytes) -> list[bytes]:
    chunks = [data[:COMMENT_HEAD_BYTES]]
    for start in range(COMMENT_HEAD_BYTES, len(data), CELL_BYTES):
        chunks.append(data[start:start + CELL_BYTES])
    return chunks


def _comment_node(chunks: list[bytes], index: int):
    builder = begin_cell()
    if index == 0:
        builder.store_uint(TEXT_COMMENT_OP, 32)
    return builder.store_bytes(chunks[index])


def _snake(chunks: list[bytes]) -> Cell:
    tail = None
    for index in range(len(chunks) - 1, -1, -1):
        builder = _comment_node(chunks, index)
        if tail is not None:
            builder.store_ref(tail)
        tail = builder.end_cell()
    return tail


def _tree(chunks: list[bytes], lo: int, hi: int) -> Cell:
    builder = _comment_node(chunks, lo)
    rest = hi - lo - 1
    if rest:
        step = -(-rest // COMMENT_TREE_ARITY)
        for start in range(lo + 1, hi, step):
            builder.store_ref(_tree(chunks, start, min(start + step, hi)))
    return builder.end_cell()


def comment_cell(memo: str | None) -> Cell | None:
    """Text comment payload.

    Short comments are a standard snake. Longer ones, which a snake
    cannot hold within the cell depth limit, are laid out as a tree of
    up to four refs per cell and read back in pre-order.
    """
    if not memo:
        return None
    chunks = _comment_chunks(memo.encode("utf-8"))
    if len(chunks) <= SNAKE_MAX_CELLS:
        return _snake(chunks)
    return _tree(chunks, 0, len(chunks))


def _read_text(body) -> str:
    parts = []
    stack = [body]
    while stack:
        node = stack.pop()
        if node.remaining_bits % 8:
            raise ValueError(f"Comment is not byte aligned: {node.remaining_bits} bits")
        parts.append(node.load_bytes(node.remaining_bits // 8))
        refs = [node.load_ref() for _ in range(node.remaining_refs)]
        stack.extend(ref.begin_parse() for ref in reversed(refs))
    return b"".join(parts).decode("utf-8")


def _read_comment_slice(body) -> str | None:
    try:
        if body.remaining_bits < 32 or body.load_uint(32) != TEXT_COMMENT_OP:
            return None
        return _read_text(body)
    except Exception:
        logger.debug("Payload is not a text comment")
        return None


def read_comment(cell: Cell | None) -> str | None:
    if cell is None:
        return None
    return _read_comment_slice(cell.begin_parse())


def encode_transfer(
    amount: int,
    destination: Address,
    response_address: Address,
    memo: str | None = None,
    query_id: int = 0,
) -> Cell:
    builder = (
        begin_cell()
        .store_uint(JETTON_TRANSFER_OP, 32)
        .store_uint(query_id, 64)
        .store_coins(amount)
        .store_address(destination)
        .store_address(response_address)
        .store_bit(0)  # custom_payload
        .store_coins(FORWARD_AMOUNT)
    )
    payload = comment_cell(memo)
    if payload is None:
        builder.store_bit(0)
    else:
        builder.store_bit(1).store_ref(payload)
    return builder.end_cell()


def _load_forward_payload(body) -> str | None:
    if body.remaining_bits < 1:
        return None
    if body.load_bit():
        return read_comment(body.load_ref())
    if body.remaining_bits == 0:
        return None
    return _read_comment_slice(body)


def decode_envelope(cell: Cell) -> JettonEnvelope | None:
    """Decode a jetton wallet message body.

    Returns ``None`` for any other opcode or a body that does not parse.
    """
    try:
        body = cell.begin_parse()
        op = body.load_uint(32)
        if op == JETTON_TRANSFER_OP:
            query_id = body.load_uint(64)
            amount = body.load_coins()
            destination = body.load_address()
            response_address = body.load_address()
            body.load_maybe_ref()
            forward_amount = body.load_coins()
            return JettonEnvelope(
                kind=TRANSFER,
                query_id=query_id,
                amount=amount,
                address=destination,
                response_address=response_address,
                forward_amount=forward_amount,
                memo=_load_forward_payload(body),
            )
        if op == JETTON_INTERNAL_TRANSFER_OP:
            query_id = body.load_uint(64)
            amount = body.load_coins()
            sender = body.load_address()
            response_address = body.load_address()
            forward_amount = body.load_coins()
            return JettonEnvelope(
                kind=INTERNAL_TRANSFER,
                query_id=query_id,
                amount=amount,
                address=sender,
                response_address=response_address,
                forward_amount=forward_amount,
                memo=_load_forward_payload(body),
            )
    except Exception as e:
        logger.debug("Failed to decode jetton envelope: %s", str(e))
        return None
    return None


def decode_envelope_boc(boc: str | None) -> JettonEnvelope | None:
    if not boc:
        return None
    try:
        cell = Cell.one_from_boc(base64.b64decode(boc))
    except Exception as e:
        logger.debug("Failed to parse message body: %s", str(e))
        return None
    return decode_envelope(cell)
