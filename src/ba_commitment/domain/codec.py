"""Commitment hash — binds a trader to an order without revealing it.

commitment = keccak256(encodePacked(
    bytes32 COMMITMENT_DOMAIN, address trader, uint128 amount,
    uint128 limitPrice, bool isBuy, bytes32 salt,
))

Wallets compute the same value client-side, so the packed layout and the
domain constant are wire format. The order leaf hash (ba_accumulator) is a
different primitive under a different domain; never reuse one for the other.
"""

import secrets

from eth_abi.packed import encode_packed
from eth_utils import keccak

from src.ba_common.addresses import UINT128_MAX, normalize_address, to_hex32
from src.ba_common.errors import CommitmentMismatchError, InvalidOrderError

COMMITMENT_DOMAIN: bytes = keccak(text="LATCH_COMMITMENT_V1")

_COMMITMENT_TYPES = ["bytes32", "address", "uint128", "uint128", "bool", "bytes32"]


def _check_uint128(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidOrderError(f"{name} must be an integer, got {type(value).__name__}")
    if not (0 <= value <= UINT128_MAX):
        raise InvalidOrderError(f"{name} out of uint128 range: {value}")


def as_bytes32(value: bytes | str) -> bytes:
    """Accept raw 32 bytes or a 0x-prefixed 64-hex-digit string."""
    if isinstance(value, str):
        try:
            value = bytes.fromhex(value.removeprefix("0x"))
        except ValueError as exc:
            raise InvalidOrderError(f"not a hex word: {value!r}") from exc
    if len(value) != 32:
        raise InvalidOrderError(f"expected 32 bytes, got {len(value)}")
    return value


def generate_salt() -> bytes:
    return secrets.token_bytes(32)


def compute_commitment(
    trader: str,
    amount: int,
    limit_price: int,
    is_buy: bool,
    salt: bytes | str,
) -> bytes:
    """Deterministic 32-byte commitment for an order."""
    _check_uint128("amount", amount)
    _check_uint128("limit_price", limit_price)
    if not isinstance(is_buy, bool):
        raise InvalidOrderError(f"is_buy must be a bool, got {type(is_buy).__name__}")
    encoded = encode_packed(
        _COMMITMENT_TYPES,
        [
            COMMITMENT_DOMAIN,
            normalize_address(trader),
            amount,
            limit_price,
            is_buy,
            as_bytes32(salt),
        ],
    )
    return keccak(encoded)


def verify_reveal(
    stored: bytes,
    trader: str,
    amount: int,
    limit_price: int,
    is_buy: bool,
    salt: bytes | str,
) -> None:
    """Raise CommitmentMismatchError unless the plaintext reproduces `stored`.

    The error carries the two full hashes only, never the individual fields.
    """
    recomputed = compute_commitment(trader, amount, limit_price, is_buy, salt)
    if recomputed != stored:
        raise CommitmentMismatchError(expected=to_hex32(stored), actual=to_hex32(recomputed))
