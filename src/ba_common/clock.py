"""Ledger height source.

All deadlines are ledger heights supplied by the host; the engine never
reads wall-clock time.
"""

from typing import Protocol


class LedgerClockProtocol(Protocol):
    def current_height(self) -> int: ...


class ManualLedgerClock:
    """Externally driven height counter. Heights are monotonic."""

    def __init__(self, height: int = 0) -> None:
        if height < 0:
            raise ValueError(f"height must be >= 0, got {height}")
        self._height = height

    def current_height(self) -> int:
        return self._height

    def advance(self, blocks: int = 1) -> int:
        if blocks < 0:
            raise ValueError(f"cannot advance by {blocks} blocks")
        self._height += blocks
        return self._height

    def advance_to(self, height: int) -> int:
        if height < self._height:
            raise ValueError(f"height must not decrease: {self._height} -> {height}")
        self._height = height
        return self._height
