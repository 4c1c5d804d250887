"""Pydantic schemas for the ba_batch read API.

Field elements (orders root, allow-list root) are rendered as 0x-prefixed
32-byte hex so they survive JSON consumers without 256-bit integers.
Revealed slots expose trader and side only; amounts and prices are never
part of the read surface.
"""

from pydantic import BaseModel

from src.ba_batch.domain.models import (
    Batch,
    Claimable,
    Commitment,
    PoolConfig,
    RevealedSlot,
    SettledBatchData,
)
from src.ba_common.addresses import to_hex32
from src.ba_common.enums import BatchPhase, ClaimStatus, CommitmentStatus

# ---------------------------------------------------------------------------
# Pool
# ---------------------------------------------------------------------------


class PoolConfigOut(BaseModel):
    market_id: str
    mode: str
    commit_duration: int
    reveal_duration: int
    settle_duration: int
    claim_duration: int
    fee_rate_bps: int
    token0: str
    token1: str
    allow_list_root: str
    current_batch_id: int

    @classmethod
    def from_domain(
        cls, market_id: str, c: PoolConfig, current_batch_id: int
    ) -> "PoolConfigOut":
        return cls(
            market_id=market_id,
            mode=c.mode.value,
            commit_duration=c.commit_duration,
            reveal_duration=c.reveal_duration,
            settle_duration=c.settle_duration,
            claim_duration=c.claim_duration,
            fee_rate_bps=c.fee_rate,
            token0=c.token0,
            token1=c.token1,
            allow_list_root=to_hex32(c.allow_list_root),
            current_batch_id=current_batch_id,
        )


# ---------------------------------------------------------------------------
# Batch
# ---------------------------------------------------------------------------


class BatchOut(BaseModel):
    market_id: str
    batch_id: int
    phase: str
    start_height: int
    commit_end: int
    reveal_end: int
    settle_end: int
    claim_end: int
    order_count: int
    revealed_count: int
    settled: bool
    finalized: bool
    clearing_price: int
    buy_volume: int
    sell_volume: int
    orders_root: str
    protocol_fee: int
    settled_height: int | None

    @classmethod
    def from_domain(cls, b: Batch, phase: BatchPhase) -> "BatchOut":
        return cls(
            market_id=b.market_id,
            batch_id=b.batch_id,
            phase=phase.value,
            start_height=b.start_height,
            commit_end=b.commit_end,
            reveal_end=b.reveal_end,
            settle_end=b.settle_end,
            claim_end=b.claim_end,
            order_count=b.order_count,
            revealed_count=b.revealed_count,
            settled=b.settled,
            finalized=b.finalized,
            clearing_price=b.clearing_price,
            buy_volume=b.buy_volume,
            sell_volume=b.sell_volume,
            orders_root=to_hex32(b.orders_root),
            protocol_fee=b.protocol_fee,
            settled_height=b.settled_height,
        )


class PhaseOut(BaseModel):
    market_id: str
    batch_id: int
    phase: str


class RevealedSlotOut(BaseModel):
    slot: int
    trader: str
    is_buy: bool


class RevealedSlotsOut(BaseModel):
    batch_id: int
    orders_root: str
    slots: list[RevealedSlotOut]

    @classmethod
    def from_domain(
        cls, batch_id: int, orders_root: int, slots: list[RevealedSlot]
    ) -> "RevealedSlotsOut":
        return cls(
            batch_id=batch_id,
            orders_root=to_hex32(orders_root),
            slots=[
                RevealedSlotOut(slot=i, trader=s.trader, is_buy=s.is_buy)
                for i, s in enumerate(slots)
            ],
        )


# ---------------------------------------------------------------------------
# Per-trader records
# ---------------------------------------------------------------------------


class CommitmentOut(BaseModel):
    batch_id: int
    trader: str
    status: str
    commitment_hash: str | None
    bond: int
    deposit: int

    @classmethod
    def from_domain(
        cls,
        batch_id: int,
        trader: str,
        commitment: Commitment | None,
        status: CommitmentStatus,
    ) -> "CommitmentOut":
        return cls(
            batch_id=batch_id,
            trader=trader,
            status=status.value,
            commitment_hash=to_hex32(commitment.commitment_hash) if commitment else None,
            bond=commitment.bond if commitment else 0,
            deposit=commitment.deposit if commitment else 0,
        )


class ClaimableOut(BaseModel):
    batch_id: int
    trader: str
    status: str
    amount0: int
    amount1: int

    @classmethod
    def from_domain(
        cls,
        batch_id: int,
        trader: str,
        claimable: Claimable | None,
        status: ClaimStatus,
    ) -> "ClaimableOut":
        return cls(
            batch_id=batch_id,
            trader=trader,
            status=status.value,
            amount0=claimable.amount0 if claimable else 0,
            amount1=claimable.amount1 if claimable else 0,
        )


# ---------------------------------------------------------------------------
# Settlement history
# ---------------------------------------------------------------------------


class SettledBatchOut(BaseModel):
    batch_id: int
    clearing_price: int
    buy_volume: int
    sell_volume: int
    matched_volume: int
    order_count: int
    orders_root: str
    protocol_fee: int
    settled_height: int

    @classmethod
    def from_domain(cls, s: SettledBatchData) -> "SettledBatchOut":
        return cls(
            batch_id=s.batch_id,
            clearing_price=s.clearing_price,
            buy_volume=s.buy_volume,
            sell_volume=s.sell_volume,
            matched_volume=s.matched_volume,
            order_count=s.order_count,
            orders_root=to_hex32(s.orders_root),
            protocol_fee=s.protocol_fee,
            settled_height=s.settled_height,
        )


class BatchHistoryOut(BaseModel):
    items: list[SettledBatchOut]
    offset: int
    limit: int


class PricePointOut(BaseModel):
    batch_id: int
    clearing_price: int


class PriceHistoryOut(BaseModel):
    items: list[PricePointOut]
