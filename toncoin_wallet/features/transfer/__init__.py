"""Transfer feature for Toncoin Wallet."""

from toncoin_wallet.features.transfer.jetton import (
    JettonEnvelope,
    decode_envelope,
    decode_envelope_boc,
    encode_transfer,
)

__all__ = ["JettonEnvelope", "decode_envelope", "decode_envelope_boc", "encode_transfer"]
