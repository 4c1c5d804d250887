"""Poseidon hashing for circuit-side values.

Every value handed to the circuit is a BN254 field element, so leaves and
internal nodes use the circomlib Poseidon rather than keccak. Each use gets
its own domain separator, placed as the first sponge input; the separators
are the ASCII tags read as big-endian integers and are wire format:

  ORDER_DOMAIN   leaf    = H(domain, trader, amount, limitPrice, isBuy)
  MERKLE_DOMAIN  node    = H(domain, min(a, b), max(a, b))   (sorted pair)
  TRADER_DOMAIN  member  = H(domain, trader)                  (allow-list leaf)
"""

from circomlibpy.poseidon import PoseidonHash

from src.ba_common.addresses import address_to_int

ORDER_DOMAIN = int.from_bytes(b"LATCH_ORDER_V1", "big")
MERKLE_DOMAIN = int.from_bytes(b"LATCH_MERKLE_V1", "big")
TRADER_DOMAIN = int.from_bytes(b"LATCH_TRADER", "big")

_poseidon = PoseidonHash()


def poseidon(inputs: list[int]) -> int:
    return _poseidon.hash(len(inputs), list(inputs))


def encode_order_leaf(trader: str, amount: int, limit_price: int, is_buy: bool) -> int:
    return poseidon(
        [ORDER_DOMAIN, address_to_int(trader), amount, limit_price, 1 if is_buy else 0]
    )


def hash_pair(left: int, right: int) -> int:
    """Commutative: hash_pair(a, b) == hash_pair(b, a)."""
    lo, hi = (left, right) if left < right else (right, left)
    return poseidon([MERKLE_DOMAIN, lo, hi])


def hash_trader(trader: str) -> int:
    return poseidon([TRADER_DOMAIN, address_to_int(trader)])
