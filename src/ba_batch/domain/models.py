"""Domain models for ba_batch — pure dataclasses plus the phase function.

Phase is never stored: it is derived from the ledger height and the batch's
phase-end heights, so reading it has no side effects and no code path can
forget to advance it.
"""

from dataclasses import dataclass, field

from config.settings import settings
from src.ba_accumulator.domain.tree import OrderAccumulator
from src.ba_common.enums import BatchPhase, ClaimStatus, CommitmentStatus, PoolMode
from src.ba_common.errors import InvalidPoolConfigError, InvalidStatusTransitionError


@dataclass(frozen=True)
class PoolConfig:
    mode: PoolMode
    commit_duration: int
    reveal_duration: int
    settle_duration: int
    claim_duration: int
    fee_rate: int            # bps
    token0: str              # base: deposited by sellers, paid to buyers
    token1: str              # quote: every bond, and buyers' deposits
    allow_list_root: int = 0

    def validate(self) -> None:
        durations = {
            "commit_duration": self.commit_duration,
            "reveal_duration": self.reveal_duration,
            "settle_duration": self.settle_duration,
            "claim_duration": self.claim_duration,
        }
        for name, value in durations.items():
            if not (settings.MIN_PHASE_DURATION <= value <= settings.MAX_PHASE_DURATION):
                raise InvalidPoolConfigError(
                    f"{name}={value} outside [{settings.MIN_PHASE_DURATION}, "
                    f"{settings.MAX_PHASE_DURATION}]"
                )
        if not (0 <= self.fee_rate <= settings.MAX_FEE_RATE):
            raise InvalidPoolConfigError(
                f"fee_rate={self.fee_rate} outside [0, {settings.MAX_FEE_RATE}]"
            )
        if self.mode == PoolMode.GATED and self.allow_list_root == 0:
            raise InvalidPoolConfigError("GATED pool requires a non-zero allow_list_root")
        if self.mode == PoolMode.OPEN and self.allow_list_root != 0:
            raise InvalidPoolConfigError("OPEN pool must not set allow_list_root")
        if not self.token0 or not self.token1 or self.token0 == self.token1:
            raise InvalidPoolConfigError("token0 and token1 must be distinct and non-empty")


@dataclass
class Batch:
    market_id: str
    batch_id: int
    start_height: int
    commit_end: int
    reveal_end: int
    settle_end: int
    claim_end: int
    order_count: int = 0
    revealed_count: int = 0
    settled: bool = False
    finalized: bool = False
    # Populated at settlement
    clearing_price: int = 0
    buy_volume: int = 0
    sell_volume: int = 0
    orders_root: int = 0
    protocol_fee: int = 0
    settled_height: int | None = None

    @classmethod
    def open(cls, market_id: str, batch_id: int, height: int, config: PoolConfig) -> "Batch":
        commit_end = height + config.commit_duration
        reveal_end = commit_end + config.reveal_duration
        settle_end = reveal_end + config.settle_duration
        return cls(
            market_id=market_id,
            batch_id=batch_id,
            start_height=height,
            commit_end=commit_end,
            reveal_end=reveal_end,
            settle_end=settle_end,
            claim_end=settle_end + config.claim_duration,
        )


def batch_phase(batch: Batch | None, height: int) -> BatchPhase:
    """Current phase of `batch` at ledger `height`.

    Boundaries are inclusive: a batch is in COMMIT up to and including
    commit_end. A settled batch is in CLAIM from settlement until claim_end;
    an unsettled batch past settle_end is FINALIZED (degenerate).
    """
    if batch is None:
        return BatchPhase.INACTIVE
    if batch.finalized:
        return BatchPhase.FINALIZED
    if height <= batch.commit_end:
        return BatchPhase.COMMIT
    if height <= batch.reveal_end:
        return BatchPhase.REVEAL
    if batch.settled:
        return BatchPhase.CLAIM if height <= batch.claim_end else BatchPhase.FINALIZED
    if height <= batch.settle_end:
        return BatchPhase.SETTLE
    return BatchPhase.FINALIZED


_COMMITMENT_TRANSITIONS: dict[CommitmentStatus, frozenset[CommitmentStatus]] = {
    CommitmentStatus.NONE: frozenset({CommitmentStatus.PENDING}),
    CommitmentStatus.PENDING: frozenset({CommitmentStatus.REVEALED, CommitmentStatus.REFUNDED}),
    CommitmentStatus.REVEALED: frozenset({CommitmentStatus.REFUNDED}),
    CommitmentStatus.REFUNDED: frozenset(),
}


@dataclass
class Commitment:
    trader: str
    commitment_hash: bytes
    bond: int                 # token1, escrowed at commit
    deposit: int = 0          # escrowed at reveal: token1 for a buy, token0 for a sell
    is_buy: bool | None = None  # known from reveal onwards
    status: CommitmentStatus = CommitmentStatus.PENDING

    @property
    def escrowed0(self) -> int:
        return self.deposit if self.is_buy is False else 0

    @property
    def escrowed1(self) -> int:
        return self.bond + (self.deposit if self.is_buy else 0)

    def transition(self, target: CommitmentStatus) -> None:
        if target not in _COMMITMENT_TRANSITIONS[self.status]:
            raise InvalidStatusTransitionError(self.status.value, target.value)
        self.status = target


@dataclass(frozen=True)
class RevealedSlot:
    """On-ledger record of a reveal. Amount/price live only in the audit event."""

    trader: str
    is_buy: bool


@dataclass
class Claimable:
    amount0: int = 0
    amount1: int = 0
    status: ClaimStatus = ClaimStatus.PENDING

    @property
    def claimed(self) -> bool:
        return self.status == ClaimStatus.CLAIMED

    @property
    def is_empty(self) -> bool:
        return self.amount0 == 0 and self.amount1 == 0

    def mark_claimed(self) -> None:
        if self.status != ClaimStatus.PENDING:
            raise InvalidStatusTransitionError(self.status.value, ClaimStatus.CLAIMED.value)
        self.status = ClaimStatus.CLAIMED


@dataclass(frozen=True)
class SettledBatchData:
    market_id: str
    batch_id: int
    clearing_price: int
    buy_volume: int
    sell_volume: int
    order_count: int
    orders_root: int
    protocol_fee: int
    settled_height: int

    @property
    def matched_volume(self) -> int:
        return min(self.buy_volume, self.sell_volume)


@dataclass
class BatchRecord:
    """Everything the engine keeps for one batch."""

    batch: Batch
    commitments: dict[str, Commitment] = field(default_factory=dict)
    slots: list[RevealedSlot] = field(default_factory=list)
    accumulator: OrderAccumulator = field(default_factory=OrderAccumulator)
    claimables: dict[str, Claimable] = field(default_factory=dict)
