"""In-memory token custody with a journal of every movement."""

import logging
from collections import defaultdict
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from src.ba_common.enums import CustodyEntryType
from src.ba_common.errors import TransferFailedError

logger = logging.getLogger(__name__)

VAULT = "VAULT"


@dataclass(frozen=True)
class CustodyEntry:
    id: int
    entry_type: str          # CustodyEntryType value
    token: str
    account: str
    amount: int
    balance_after: int       # account balance snapshot after the movement


class InMemoryCustody:
    """Balances keyed by (token, account); the engine's holdings sit under VAULT."""

    def __init__(self) -> None:
        self._balances: dict[tuple[str, str], int] = defaultdict(int)
        self.entries: list[CustodyEntry] = []

    def mint(self, token: str, account: str, amount: int) -> None:
        """Fund an account from outside the system (test/bootstrap only)."""
        if amount < 0:
            raise ValueError(f"mint amount must be >= 0, got {amount}")
        self._balances[(token, account)] += amount

    def balance_of(self, token: str, account: str) -> int:
        return self._balances.get((token, account), 0)

    def vault_balance(self, token: str) -> int:
        return self.balance_of(token, VAULT)

    @contextmanager
    def transaction(self) -> Iterator[None]:
        balances = dict(self._balances)
        journal_length = len(self.entries)
        try:
            yield
        except Exception:
            self._balances = defaultdict(int, balances)
            del self.entries[journal_length:]
            raise

    def escrow(self, token: str, account: str, amount: int) -> None:
        self._move(CustodyEntryType.ESCROW, token, account, VAULT, amount, account)

    def payout(self, token: str, account: str, amount: int) -> None:
        self._move(CustodyEntryType.PAYOUT, token, VAULT, account, amount, account)

    def _move(
        self,
        entry_type: CustodyEntryType,
        token: str,
        source: str,
        dest: str,
        amount: int,
        account: str,
    ) -> None:
        if amount < 0 or self.balance_of(token, source) < amount:
            raise TransferFailedError(entry_type.value, token, account, amount)
        self._balances[(token, source)] -= amount
        self._balances[(token, dest)] += amount
        self.entries.append(
            CustodyEntry(
                id=len(self.entries) + 1,
                entry_type=entry_type.value,
                token=token,
                account=account,
                amount=amount,
                balance_after=self.balance_of(token, account),
            )
        )
        logger.debug("%s %d %s account=%s", entry_type.value, amount, token, account)
