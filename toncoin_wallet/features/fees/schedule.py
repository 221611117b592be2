"""Platform fee schedule and calculator."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from fractions import Fraction
from typing import Any

from toncoin_wallet.features.account.service import TransportProtocol
from toncoin_wallet.shared.amount import multiply_atom, to_atom
from toncoin_wallet.shared.memoize import RequestCache

logger = logging.getLogger(__name__)

DUST_THRESHOLD = 1


@dataclass(frozen=True)
class FeeScheduleConfig:
    """Platform fee settings for one asset.

    ``minimum`` and ``maximum`` are fiat values, converted to atoms with
    the price supplied by the caller.
    """

    address: str | None
    disabled: bool
    rate: Decimal
    minimum: Decimal = Decimal(0)
    maximum: Decimal | None = None

    @classmethod
    def from_response(cls, data: dict[str, Any]) -> "FeeScheduleConfig":
        """Parse a ``csfee`` response; a schedule without an address is disabled."""
        maximum = data.get("maxFee")
        address = data.get("address") or None
        disabled = bool(data.get("disabled", False))
        if not disabled and address is None:
            logger.warning("Platform fee schedule has no address, fee disabled")
            disabled = True
        return cls(
            address=address,
            disabled=disabled,
            rate=Decimal(str(data.get("fee") or 0)),
            minimum=Decimal(str(data.get("minFee") or 0)),
            maximum=Decimal(str(maximum)) if maximum is not None else None,
        )

    @property
    def active(self) -> bool:
        return not self.disabled and self.address is not None

    @classmethod
    def disabled_schedule(cls) -> "FeeScheduleConfig":
        return cls(address=None, disabled=True, rate=Decimal(0))


def _fiat_to_atoms(value: Decimal, price: float | Decimal | None, decimals: int) -> int | None:
    if price is None:
        return None
    price_decimal = Decimal(str(price))
    if price_decimal <= 0:
        return None
    return to_atom(value / price_decimal, decimals)


def _clamp(
    fee: int,
    config: FeeScheduleConfig,
    price: float | Decimal | None,
    decimals: int,
    dust_threshold: int,
) -> int:
    minimum = _fiat_to_atoms(config.minimum, price, decimals)
    if minimum is not None:
        fee = max(fee, minimum)
    if config.maximum is not None:
        maximum = _fiat_to_atoms(config.maximum, price, decimals)
        if maximum is not None:
            fee = min(fee, maximum)
    return max(fee, dust_threshold)


def calculate_platform_fee(
    value: int,
    config: FeeScheduleConfig,
    price: float | Decimal | None,
    decimals: int,
    dust_threshold: int = DUST_THRESHOLD,
) -> int:
    """Fee charged on a transfer of ``value`` atoms."""
    if not config.active:
        return 0
    fee = multiply_atom(value, config.rate)
    return _clamp(fee, config, price, decimals, dust_threshold)


def calculate_platform_fee_for_max_amount(
    value: int,
    config: FeeScheduleConfig,
    price: float | Decimal | None,
    decimals: int,
    dust_threshold: int = DUST_THRESHOLD,
) -> int:
    """Fee for sending everything: ``value`` must cover the amount plus its fee.

    Solves ``amount + amount * rate = value`` for the fee part.
    """
    if not config.active:
        return 0
    rate = Fraction(config.rate)
    share = rate / (1 + rate)
    fee = (value * share.numerator) // share.denominator
    return _clamp(fee, config, price, decimals, dust_threshold)


class FeeScheduleClient:
    def __init__(
        self,
        transport: TransportProtocol,
        crypto_id: str,
        cache: RequestCache | None = None,
    ):
        self.transport = transport
        self.crypto_id = crypto_id
        self.cache = cache if cache is not None else RequestCache()

    async def _fetch(self, crypto_id: str) -> FeeScheduleConfig:
        data = await self.transport.request(
            "GET",
            "api/v4/csfee",
            params={"crypto": crypto_id},
            context="Fetch platform fee schedule",
        )
        config = FeeScheduleConfig.from_response(data or {})
        logger.debug(
            "Platform fee schedule for %s: disabled=%s rate=%s",
            crypto_id,
            config.disabled,
            config.rate,
        )
        return config

    async def get_config(self) -> FeeScheduleConfig:
        return await self.cache.call("csfee", self._fetch, self.crypto_id)
