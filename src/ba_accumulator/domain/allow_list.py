"""Allow-list membership for GATED pools.

Members are leaves H(TRADER_DOMAIN, trader) in a sorted-pair Poseidon tree
padded to the next power of two; a proof is the sibling path.
"""

from typing import Protocol

from src.ba_accumulator.domain.poseidon import hash_trader
from src.ba_accumulator.domain.tree import build_path, compute_root, fold_path
from src.ba_common.addresses import normalize_address
from src.ba_common.errors import NotAllowListedError


class AllowListProtocol(Protocol):
    def require_member(self, account: str, root: int, proof: list[int]) -> None: ...


def _width_for(count: int) -> int:
    width = 1
    while width < count:
        width *= 2
    return width


def build_allow_list(accounts: list[str]) -> tuple[int, dict[str, list[int]]]:
    """Return (root, {checksummed account: proof}) for an allow-list."""
    if not accounts:
        raise ValueError("allow-list must contain at least one account")
    members = list(dict.fromkeys(normalize_address(a) for a in accounts))
    leaves = [hash_trader(a) for a in members]
    width = _width_for(len(leaves))
    root = compute_root(leaves, width)
    proofs = {a: build_path(leaves, i, width) for i, a in enumerate(members)}
    return root, proofs


class MerkleAllowList:
    def require_member(self, account: str, root: int, proof: list[int]) -> None:
        if root == 0 or fold_path(hash_trader(account), list(proof)) != root:
            raise NotAllowListedError(account)
