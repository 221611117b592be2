"""Address parsing, network checks and canonical forms for TON accounts.

Only the user-friendly (base64, 48 character) representation is accepted
from users; raw ``wc:hex`` forms never have that length. It carries two
flags that raw addresses do not: whether the address is bounceable and
whether it belongs to the test network.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pytoniq import Address

from toncoin_wallet.shared.errors import InvalidAddressError, InvalidNetworkAddressError

logger = logging.getLogger(__name__)

USER_FRIENDLY_LENGTH = 48


@dataclass(frozen=True)
class ParsedAddress:
    text: str
    address: Address
    bounceable: bool
    test_only: bool

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParsedAddress):
            return NotImplemented
        return self.address == other.address

    def __hash__(self) -> int:
        return hash((self.address.wc, self.address.hash_part))


@dataclass(frozen=True)
class CanonicalAddress:
    primary: str
    alias: str | None = None


def parse_address(text: str) -> ParsedAddress:
    if not isinstance(text, str) or len(text.strip()) != USER_FRIENDLY_LENGTH:
        raise InvalidAddressError(text)
    value = text.strip()
    try:
        address = Address(value)
    except Exception as e:
        raise InvalidAddressError(text) from e
    return ParsedAddress(
        text=value,
        address=address,
        bounceable=bool(address.is_bounceable),
        test_only=bool(address.is_test_only),
    )


def validate_network(parsed: ParsedAddress, is_test_environment: bool) -> None:
    if parsed.test_only != is_test_environment:
        raise InvalidNetworkAddressError(parsed.text)


def format_address(address: Address, testnet: bool, bounceable: bool) -> str:
    return address.to_str(
        is_user_friendly=True,
        is_url_safe=True,
        is_bounceable=bounceable,
        is_test_only=testnet,
    )


def canonicalize(text: str) -> CanonicalAddress | None:
    """Return the bounceable form of ``text`` with the original as alias.

    Unparseable input yields ``None`` so callers can skip unaliasing.
    """
    try:
        parsed = parse_address(text)
    except InvalidAddressError:
        logger.debug("Skipping unalias for unparseable address: %s", text)
        return None
    if parsed.bounceable:
        return CanonicalAddress(primary=parsed.text)
    return CanonicalAddress(
        primary=format_address(parsed.address, parsed.test_only, bounceable=True),
        alias=parsed.text,
    )


def addresses_equal(a: str, b: str) -> bool:
    try:
        return parse_address(a) == parse_address(b)
    except InvalidAddressError:
        return False
