# src/ba_custody/domain/custody.py
"""Custody Protocol — the engine's only way to move tokens.

Both calls are atomic: on failure they raise TransferFailedError and move
nothing. `escrow` pulls from the account into engine custody; `payout` pushes
from engine custody to the account. A payout may run caller-controlled code,
so the engine finishes all bookkeeping before calling it.

`transaction()` scopes every movement of one engine call: if the block raises,
all movements made inside it are undone.
"""

from contextlib import AbstractContextManager
from typing import Protocol


class CustodyProtocol(Protocol):
    def escrow(self, token: str, account: str, amount: int) -> None: ...

    def payout(self, token: str, account: str, amount: int) -> None: ...

    def transaction(self) -> AbstractContextManager[None]: ...
