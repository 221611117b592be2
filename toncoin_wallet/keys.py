"""Key material for Toncoin Wallet.

Keys are derived with SLIP-10 (Ed25519, hardened indexes only) from the
wallet seed and never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass

from bip_utils import Bip32Slip10Ed25519
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

SIGNATURE_LENGTH = 64


def ensure_seed(seed) -> bytes:
    if not isinstance(seed, (bytes, bytearray)):
        raise TypeError(
            f"seed must be an instance of bytes or bytearray, {type(seed).__name__} provided"
        )
    return bytes(seed)


@dataclass(frozen=True)
class KeyPair:
    private_key: bytes
    public_key: bytes

    @property
    def secret_key(self) -> bytes:
        """Private key followed by the public key, the 64-byte export format."""
        return self.private_key + self.public_key

    def sign(self, data: bytes) -> bytes:
        return Ed25519PrivateKey.from_private_bytes(self.private_key).sign(data)


def keypair_from_private_key(private_key: bytes) -> KeyPair:
    public_key = (
        Ed25519PrivateKey.from_private_bytes(private_key)
        .public_key()
        .public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )
    )
    return KeyPair(private_key=private_key, public_key=public_key)


def keypair_from_seed(seed: bytes, derivation_path: str) -> KeyPair:
    node = Bip32Slip10Ed25519.FromSeed(ensure_seed(seed)).DerivePath(derivation_path)
    return keypair_from_private_key(node.PrivateKey().Raw().ToBytes())
