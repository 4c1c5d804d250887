"""Address and 32-byte word helpers shared by both hash domains.

Addresses are carried as EIP-55 checksummed strings everywhere in the engine
so dict keys never split on letter case.
"""

from eth_utils import is_address, to_canonical_address, to_checksum_address

from src.ba_common.errors import InvalidAddressError

ZERO_HASH = b"\x00" * 32
UINT128_MAX = (1 << 128) - 1


def normalize_address(value: str) -> str:
    """Validate and checksum an address: '0xabc…' -> '0xAbC…'."""
    if not isinstance(value, str) or not is_address(value):
        raise InvalidAddressError(str(value))
    return to_checksum_address(value)


def address_to_int(value: str) -> int:
    """uint256(uint160(address)) — the field representation used by the circuit."""
    return int.from_bytes(to_canonical_address(normalize_address(value)), "big")


def to_hex32(value: bytes | int) -> str:
    """Render a 32-byte word (bytes or int) as 0x-prefixed 64-hex-digit string."""
    if isinstance(value, int):
        return "0x" + value.to_bytes(32, "big").hex()
    return "0x" + value.hex()
