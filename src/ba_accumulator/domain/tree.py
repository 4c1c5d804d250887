"""Fixed-capacity sorted-pair Merkle accumulator over revealed orders.

The proving circuit is compiled for exactly `capacity` leaves, so the tree is
an arena of `capacity` slots filled in reveal order and zero-padded; it never
resizes. Root of an empty arena is 0 and a lone leaf is its own root; any
other count is padded to the full width before hashing.
"""

import logging

from config.settings import settings
from src.ba_accumulator.domain.poseidon import hash_pair
from src.ba_common.errors import AccumulatorFullError

logger = logging.getLogger(__name__)

EMPTY_ROOT = 0


def _check_width(width: int) -> None:
    if width < 1 or width & (width - 1) != 0:
        raise ValueError(f"tree width must be a power of two, got {width}")


def compute_root(leaves: list[int], width: int) -> int:
    """Root of `leaves` zero-padded to `width` slots."""
    _check_width(width)
    if not leaves:
        return EMPTY_ROOT
    if len(leaves) > width:
        raise ValueError(f"{len(leaves)} leaves do not fit width {width}")
    if len(leaves) == 1:
        return leaves[0]
    layer = list(leaves) + [0] * (width - len(leaves))
    while len(layer) > 1:
        layer = [hash_pair(layer[i], layer[i + 1]) for i in range(0, len(layer), 2)]
    return layer[0]


def build_path(leaves: list[int], index: int, width: int) -> list[int]:
    """Sibling hashes from leaf `index` up to (excluding) the root."""
    _check_width(width)
    if not (0 <= index < width):
        raise IndexError(f"leaf index {index} outside width {width}")
    if len(leaves) == 1:
        return []
    layer = list(leaves) + [0] * (width - len(leaves))
    path: list[int] = []
    while len(layer) > 1:
        path.append(layer[index ^ 1])
        layer = [hash_pair(layer[i], layer[i + 1]) for i in range(0, len(layer), 2)]
        index //= 2
    return path


def fold_path(leaf: int, siblings: list[int]) -> int:
    """Recompute a root from a leaf and its siblings. Pairs are sorted, so no direction bits."""
    node = leaf
    for sibling in siblings:
        node = hash_pair(node, sibling)
    return node


class OrderAccumulator:
    def __init__(self, capacity: int | None = None) -> None:
        capacity = settings.BATCH_CAPACITY if capacity is None else capacity
        _check_width(capacity)
        self._capacity = capacity
        self._slots: list[int] = [0] * capacity
        self._count = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def depth(self) -> int:
        return self._capacity.bit_length() - 1

    @property
    def leaves(self) -> list[int]:
        return self._slots[: self._count]

    def __len__(self) -> int:
        return self._count

    def append(self, leaf: int) -> int:
        """Store `leaf` in the next free slot; returns the slot index."""
        if self._count >= self._capacity:
            raise AccumulatorFullError(self._capacity)
        index = self._count
        self._slots[index] = leaf
        self._count += 1
        logger.debug("Accumulator append: slot=%d leaf=%#x", index, leaf)
        return index

    def root(self) -> int:
        return compute_root(self.leaves, self._capacity)

    def _path_length(self) -> int:
        return 0 if self._count == 1 else self.depth

    def siblings(self, index: int) -> list[int]:
        if not (0 <= index < self._count):
            raise IndexError(f"slot {index} is empty (count={self._count})")
        return build_path(self.leaves, index, self._capacity)

    def prove_inclusion(self, leaf: int, siblings: list[int], index: int) -> bool:
        """True iff `leaf` sits at occupied slot `index` and `siblings` fold to root()."""
        if not (0 <= index < self._count) or len(siblings) != self._path_length():
            return False
        if self._slots[index] != leaf:
            return False
        return fold_path(leaf, siblings) == self.root()
