"""Domain events for ba_batch — exactly one per state transition.

OrderRevealed carries only trader and side so individual orders stay
confidential after reveal; OrderRevealedAudit carries the full order and is
for audit consumers only. Events raised inside a call that later fails are
discarded together with the call's state changes.
"""

from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class BatchEvent:
    event_type: ClassVar[str] = "BATCH_EVENT"

    market_id: str
    batch_id: int
    height: int


@dataclass(frozen=True)
class BatchOpened(BatchEvent):
    event_type: ClassVar[str] = "BATCH_OPENED"

    commit_end: int
    reveal_end: int
    settle_end: int
    claim_end: int


@dataclass(frozen=True)
class OrderCommitted(BatchEvent):
    event_type: ClassVar[str] = "ORDER_COMMITTED"

    trader: str
    commitment_hash: str
    bond: int


@dataclass(frozen=True)
class OrderRevealed(BatchEvent):
    event_type: ClassVar[str] = "ORDER_REVEALED"

    trader: str
    is_buy: bool
    slot: int


@dataclass(frozen=True)
class OrderRevealedAudit(BatchEvent):
    event_type: ClassVar[str] = "ORDER_REVEALED_AUDIT"

    trader: str
    amount: int
    limit_price: int
    is_buy: bool
    deposit: int


@dataclass(frozen=True)
class BatchSettled(BatchEvent):
    event_type: ClassVar[str] = "BATCH_SETTLED"

    settler: str
    clearing_price: int
    buy_volume: int
    sell_volume: int
    orders_root: int
    protocol_fee: int


@dataclass(frozen=True)
class TokensClaimed(BatchEvent):
    event_type: ClassVar[str] = "TOKENS_CLAIMED"

    trader: str
    amount0: int
    amount1: int


@dataclass(frozen=True)
class DepositRefunded(BatchEvent):
    event_type: ClassVar[str] = "DEPOSIT_REFUNDED"

    trader: str
    amount0: int
    amount1: int
    revealed: bool


@dataclass(frozen=True)
class BatchFinalized(BatchEvent):
    event_type: ClassVar[str] = "BATCH_FINALIZED"

    unclaimed0: int
    unclaimed1: int
