"""Asset modes a wallet account can operate in."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

NATIVE_DECIMALS = 9


@dataclass(frozen=True)
class NativeAsset:
    crypto_id: str = "toncoin@toncoin"
    decimals: int = NATIVE_DECIMALS


@dataclass(frozen=True)
class TokenAsset:
    """A jetton, identified by its master contract address."""

    crypto_id: str
    jetton_master: str
    decimals: int


Asset = Union[NativeAsset, TokenAsset]
