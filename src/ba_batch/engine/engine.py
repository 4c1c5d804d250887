"""BatchEngine — stateful orchestrator for the commit/reveal/settle/claim lifecycle.

Every public mutating call runs inside `_atomic`: on any error the market's
state, the call's custody movements and its buffered events are all undone.
Within a call the order is always: guards -> inbound escrow -> bookkeeping ->
outbound payouts, so a payout that re-enters the engine sees settled state.
"""

import copy
import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field, replace

from config.settings import settings
from src.ba_accumulator.domain.allow_list import AllowListProtocol, MerkleAllowList
from src.ba_accumulator.domain.poseidon import encode_order_leaf
from src.ba_accumulator.domain.tree import OrderAccumulator
from src.ba_batch.domain.events import (
    BatchEvent,
    BatchFinalized,
    BatchOpened,
    BatchSettled,
    DepositRefunded,
    OrderCommitted,
    OrderRevealed,
    OrderRevealedAudit,
    TokensClaimed,
)
from src.ba_batch.domain.models import (
    Batch,
    BatchRecord,
    Claimable,
    Commitment,
    PoolConfig,
    RevealedSlot,
    SettledBatchData,
    batch_phase,
)
from src.ba_batch.domain.settlement import plan_settlement
from src.ba_commitment.domain.codec import as_bytes32, verify_reveal
from src.ba_common.addresses import ZERO_HASH, normalize_address, to_hex32
from src.ba_common.clock import LedgerClockProtocol
from src.ba_common.enums import BatchPhase, ClaimStatus, CommitmentStatus, PoolMode
from src.ba_common.errors import (
    ActiveBatchExistsError,
    AlreadyClaimedError,
    AlreadyRefundedError,
    BatchAlreadyFinalizedError,
    BatchAlreadySettledError,
    BatchFullError,
    BatchNotFoundError,
    BatchNotSettledError,
    CommitmentExistsError,
    CommitmentNotFoundError,
    InsufficientDepositError,
    InvalidOrderError,
    InvalidProofError,
    InvalidStatusTransitionError,
    MarketAlreadyConfiguredError,
    MarketNotConfiguredError,
    NothingToClaimError,
    WrongPhaseError,
    ZeroCommitmentError,
)
from src.ba_custody.domain.custody import CustodyProtocol
from src.ba_proof.domain.gate import ProofGate
from src.ba_proof.domain.public_inputs import (
    ExpectedInputs,
    expected_length,
    validate_against_expected,
)

logger = logging.getLogger(__name__)


@dataclass
class MarketState:
    """Per-market view: immutable config, batches by id, settled history."""

    config: PoolConfig
    current_batch_id: int = 0
    batches: dict[int, BatchRecord] = field(default_factory=dict)
    history: list[SettledBatchData] = field(default_factory=list)

    @property
    def current(self) -> BatchRecord | None:
        return self.batches.get(self.current_batch_id)


class BatchEngine:
    def __init__(
        self,
        custody: CustodyProtocol,
        gate: ProofGate,
        clock: LedgerClockProtocol,
        allow_list: AllowListProtocol | None = None,
        capacity: int | None = None,
    ) -> None:
        self._custody = custody
        self._gate = gate
        self._clock = clock
        self._allow_list: AllowListProtocol = allow_list or MerkleAllowList()
        self._capacity = settings.BATCH_CAPACITY if capacity is None else capacity
        self._markets: dict[str, MarketState] = {}
        self._pending: list[BatchEvent] = []
        self._subscribers: list[Callable[[BatchEvent], None]] = []
        self.events: list[BatchEvent] = []

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def gate(self) -> ProofGate:
        return self._gate

    def subscribe(self, handler: Callable[[BatchEvent], None]) -> None:
        self._subscribers.append(handler)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @contextmanager
    def _atomic(self, market_id: str, operation: str) -> Iterator[None]:
        snapshot = copy.deepcopy(self._markets.get(market_id))
        self._pending = []
        try:
            with self._custody.transaction():
                yield
        except Exception as exc:
            if snapshot is None:
                self._markets.pop(market_id, None)
            else:
                self._markets[market_id] = snapshot
            self._pending = []
            logger.warning("%s rolled back: market=%s reason=%s", operation, market_id, exc)
            raise
        emitted, self._pending = self._pending, []
        for event in emitted:
            self.events.append(event)
            for handler in self._subscribers:
                handler(event)

    def _emit(self, event: BatchEvent) -> None:
        self._pending.append(event)

    def _market(self, market_id: str) -> MarketState:
        state = self._markets.get(market_id)
        if state is None:
            raise MarketNotConfiguredError(market_id)
        return state

    def _record(self, market_id: str, batch_id: int) -> BatchRecord:
        record = self._market(market_id).batches.get(batch_id)
        if record is None:
            raise BatchNotFoundError(market_id, batch_id)
        return record

    def _current_in_phase(self, market_id: str, expected: BatchPhase) -> BatchRecord:
        record = self._market(market_id).current
        actual = batch_phase(record.batch if record else None, self._clock.current_height())
        if record is None or actual != expected:
            raise WrongPhaseError(expected.value, actual.value)
        return record

    def _new_accumulator(self) -> OrderAccumulator:
        return OrderAccumulator(self._capacity)

    # ------------------------------------------------------------------
    # Pool configuration
    # ------------------------------------------------------------------

    def configure_pool(self, market_id: str, config: PoolConfig) -> None:
        if market_id in self._markets:
            raise MarketAlreadyConfiguredError(market_id)
        config.validate()
        self._markets[market_id] = MarketState(config=config)
        logger.info(
            "Pool configured: market=%s mode=%s fee_rate=%d", market_id, config.mode.value, config.fee_rate
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open_batch(self, market_id: str) -> int:
        """Start the next batch. Requires the previous one to be FINALIZED."""
        with self._atomic(market_id, "open_batch"):
            state = self._market(market_id)
            height = self._clock.current_height()
            current = state.current
            if current is not None and batch_phase(current.batch, height) != BatchPhase.FINALIZED:
                raise ActiveBatchExistsError(market_id, current.batch.batch_id)

            batch_id = state.current_batch_id + 1
            batch = Batch.open(market_id, batch_id, height, state.config)
            state.batches[batch_id] = BatchRecord(batch=batch, accumulator=self._new_accumulator())
            state.current_batch_id = batch_id

            self._emit(
                BatchOpened(
                    market_id=market_id,
                    batch_id=batch_id,
                    height=height,
                    commit_end=batch.commit_end,
                    reveal_end=batch.reveal_end,
                    settle_end=batch.settle_end,
                    claim_end=batch.claim_end,
                )
            )
            logger.info("Batch opened: market=%s batch=%d height=%d", market_id, batch_id, height)
            return batch_id

    def commit_order(
        self,
        market_id: str,
        trader: str,
        commitment_hash: bytes | str,
        bond: int = 0,
        allow_list_proof: list[int] | None = None,
    ) -> None:
        with self._atomic(market_id, "commit_order"):
            trader = normalize_address(trader)
            state = self._market(market_id)
            record = self._current_in_phase(market_id, BatchPhase.COMMIT)
            batch = record.batch

            digest = as_bytes32(commitment_hash)
            if digest == ZERO_HASH:
                raise ZeroCommitmentError()
            if bond < 0:
                raise InvalidOrderError(f"bond must be >= 0, got {bond}")
            if batch.order_count >= self._capacity:
                raise BatchFullError(self._capacity)
            if state.config.mode == PoolMode.GATED:
                self._allow_list.require_member(
                    trader, state.config.allow_list_root, allow_list_proof or []
                )
            if trader in record.commitments:
                raise CommitmentExistsError(trader, batch.batch_id)

            if bond > 0:
                self._custody.escrow(state.config.token1, trader, bond)

            record.commitments[trader] = Commitment(
                trader=trader, commitment_hash=digest, bond=bond
            )
            batch.order_count += 1

            self._emit(
                OrderCommitted(
                    market_id=market_id,
                    batch_id=batch.batch_id,
                    height=self._clock.current_height(),
                    trader=trader,
                    commitment_hash=to_hex32(digest),
                    bond=bond,
                )
            )
            logger.debug("Order committed: market=%s batch=%d trader=%s", market_id, batch.batch_id, trader)

    def reveal_order(
        self,
        market_id: str,
        trader: str,
        amount: int,
        limit_price: int,
        is_buy: bool,
        salt: bytes | str,
        deposit: int,
    ) -> int:
        """Disclose a committed order; returns its slot (= accumulator leaf index)."""
        with self._atomic(market_id, "reveal_order"):
            trader = normalize_address(trader)
            state = self._market(market_id)
            record = self._current_in_phase(market_id, BatchPhase.REVEAL)
            batch = record.batch

            commitment = record.commitments.get(trader)
            if commitment is None:
                raise CommitmentNotFoundError(trader, batch.batch_id)
            if commitment.status != CommitmentStatus.PENDING:
                raise InvalidStatusTransitionError(
                    commitment.status.value, CommitmentStatus.REVEALED.value
                )
            verify_reveal(commitment.commitment_hash, trader, amount, limit_price, is_buy, salt)
            if amount == 0 or limit_price == 0:
                raise InvalidOrderError(
                    f"amount and limit_price must be non-zero (amount={amount}, "
                    f"limit_price={limit_price})"
                )
            if deposit < amount:
                raise InsufficientDepositError(required=amount, provided=deposit)

            deposit_token = state.config.token1 if is_buy else state.config.token0
            self._custody.escrow(deposit_token, trader, deposit)

            slot = record.accumulator.append(
                encode_order_leaf(trader, amount, limit_price, is_buy)
            )
            record.slots.append(RevealedSlot(trader=trader, is_buy=is_buy))
            batch.revealed_count += 1
            commitment.deposit = deposit
            commitment.is_buy = is_buy
            commitment.transition(CommitmentStatus.REVEALED)

            height = self._clock.current_height()
            self._emit(
                OrderRevealed(
                    market_id=market_id,
                    batch_id=batch.batch_id,
                    height=height,
                    trader=trader,
                    is_buy=is_buy,
                    slot=slot,
                )
            )
            self._emit(
                OrderRevealedAudit(
                    market_id=market_id,
                    batch_id=batch.batch_id,
                    height=height,
                    trader=trader,
                    amount=amount,
                    limit_price=limit_price,
                    is_buy=is_buy,
                    deposit=deposit,
                )
            )
            logger.debug(
                "Order revealed: market=%s batch=%d trader=%s slot=%d",
                market_id, batch.batch_id, trader, slot,
            )
            return slot

    def settle_batch(
        self,
        market_id: str,
        settler: str,
        proof: bytes,
        public_inputs: list[int],
    ) -> SettledBatchData:
        with self._atomic(market_id, "settle_batch"):
            settler = normalize_address(settler)
            state = self._market(market_id)
            current = state.current
            if current is not None and current.batch.settled:
                raise BatchAlreadySettledError(current.batch.batch_id)
            record = self._current_in_phase(market_id, BatchPhase.SETTLE)
            batch = record.batch
            length = expected_length(self._capacity)

            orders_root = record.accumulator.root()
            inputs = validate_against_expected(
                public_inputs,
                ExpectedInputs(
                    batch_id=batch.batch_id,
                    order_count=batch.revealed_count,
                    orders_root=orders_root,
                    allow_list_root=state.config.allow_list_root,
                    fee_rate=state.config.fee_rate,
                ),
                length,
            )
            if not self._gate.verify(proof, public_inputs, length):
                raise InvalidProofError()

            plan = plan_settlement(inputs, record.slots, record.commitments)

            if plan.supply0 > 0:
                self._custody.escrow(state.config.token0, settler, plan.supply0)
            if plan.supply1 > 0:
                self._custody.escrow(state.config.token1, settler, plan.supply1)

            height = self._clock.current_height()
            batch.settled = True
            batch.clearing_price = inputs.clearing_price
            batch.buy_volume = inputs.buy_volume
            batch.sell_volume = inputs.sell_volume
            batch.orders_root = orders_root
            batch.protocol_fee = inputs.protocol_fee
            batch.settled_height = height
            record.claimables = plan.claimables
            settled = SettledBatchData(
                market_id=market_id,
                batch_id=batch.batch_id,
                clearing_price=inputs.clearing_price,
                buy_volume=inputs.buy_volume,
                sell_volume=inputs.sell_volume,
                order_count=batch.revealed_count,
                orders_root=orders_root,
                protocol_fee=inputs.protocol_fee,
                settled_height=height,
            )
            state.history.append(settled)

            if plan.surplus0 > 0:
                self._custody.payout(state.config.token0, settler, plan.surplus0)
            if plan.surplus1 > 0:
                self._custody.payout(state.config.token1, settler, plan.surplus1)

            self._emit(
                BatchSettled(
                    market_id=market_id,
                    batch_id=batch.batch_id,
                    height=height,
                    settler=settler,
                    clearing_price=inputs.clearing_price,
                    buy_volume=inputs.buy_volume,
                    sell_volume=inputs.sell_volume,
                    orders_root=orders_root,
                    protocol_fee=inputs.protocol_fee,
                )
            )
            logger.info(
                "Batch settled: market=%s batch=%d price=%d matched=%d supply0=%d "
                "supply1=%d surplus0=%d surplus1=%d",
                market_id, batch.batch_id, inputs.clearing_price, inputs.matched_volume,
                plan.supply0, plan.supply1, plan.surplus0, plan.surplus1,
            )
            return settled

    def claim_tokens(self, market_id: str, batch_id: int, trader: str) -> Claimable:
        """Pay out a settled claimable. Stays legal after the batch is finalized."""
        with self._atomic(market_id, "claim_tokens"):
            trader = normalize_address(trader)
            state = self._market(market_id)
            record = self._record(market_id, batch_id)
            if not record.batch.settled:
                raise BatchNotSettledError(batch_id)

            claimable = record.claimables.get(trader)
            if claimable is None:
                raise NothingToClaimError(trader, batch_id)
            if claimable.claimed:
                raise AlreadyClaimedError(trader, batch_id)
            if claimable.is_empty:
                raise NothingToClaimError(trader, batch_id)

            claimable.mark_claimed()
            commitment = record.commitments.get(trader)
            if commitment is not None and commitment.status == CommitmentStatus.PENDING:
                # bond-only claimable: the claim is the refund
                commitment.transition(CommitmentStatus.REFUNDED)

            if claimable.amount0 > 0:
                self._custody.payout(state.config.token0, trader, claimable.amount0)
            if claimable.amount1 > 0:
                self._custody.payout(state.config.token1, trader, claimable.amount1)

            self._emit(
                TokensClaimed(
                    market_id=market_id,
                    batch_id=batch_id,
                    height=self._clock.current_height(),
                    trader=trader,
                    amount0=claimable.amount0,
                    amount1=claimable.amount1,
                )
            )
            logger.debug(
                "Tokens claimed: market=%s batch=%d trader=%s amount0=%d amount1=%d",
                market_id, batch_id, trader, claimable.amount0, claimable.amount1,
            )
            return replace(claimable)

    def refund_deposit(self, market_id: str, batch_id: int, trader: str) -> tuple[int, int]:
        """Return escrow to a trader who cannot claim; returns (token0, token1) refunded.

        Two distinct paths:
          - never revealed: from SETTLE onwards, the token1 bond is returned;
          - revealed in a batch that was never settled: once the settle
            window has lapsed, the bond and the deposit are returned, the
            deposit in the token it was made in.
        A revealed trader in a settled batch is paid through claim_tokens.
        """
        with self._atomic(market_id, "refund_deposit"):
            trader = normalize_address(trader)
            state = self._market(market_id)
            record = self._record(market_id, batch_id)
            batch = record.batch
            phase = batch_phase(batch, self._clock.current_height())

            commitment = record.commitments.get(trader)
            if commitment is None:
                raise CommitmentNotFoundError(trader, batch_id)
            if commitment.status == CommitmentStatus.REFUNDED:
                raise AlreadyRefundedError(trader, batch_id)

            revealed = commitment.status == CommitmentStatus.REVEALED
            if revealed:
                if batch.settled:
                    raise BatchAlreadySettledError(batch_id)
                if phase != BatchPhase.FINALIZED:
                    raise WrongPhaseError(BatchPhase.FINALIZED.value, phase.value)
                amount0, amount1 = commitment.escrowed0, commitment.escrowed1
            else:
                if phase.rank < BatchPhase.SETTLE.rank:
                    raise WrongPhaseError(BatchPhase.SETTLE.value, phase.value)
                amount0, amount1 = 0, commitment.bond
                claimable = record.claimables.get(trader)
                if claimable is not None and claimable.status == ClaimStatus.PENDING:
                    claimable.mark_claimed()

            commitment.transition(CommitmentStatus.REFUNDED)

            if amount0 > 0:
                self._custody.payout(state.config.token0, trader, amount0)
            if amount1 > 0:
                self._custody.payout(state.config.token1, trader, amount1)

            self._emit(
                DepositRefunded(
                    market_id=market_id,
                    batch_id=batch_id,
                    height=self._clock.current_height(),
                    trader=trader,
                    amount0=amount0,
                    amount1=amount1,
                    revealed=revealed,
                )
            )
            logger.debug(
                "Deposit refunded: market=%s batch=%d trader=%s amount0=%d amount1=%d "
                "revealed=%s",
                market_id, batch_id, trader, amount0, amount1, revealed,
            )
            return amount0, amount1

    def finalize_batch(self, market_id: str, batch_id: int) -> tuple[int, int]:
        """Close a settled batch after its claim window; returns unclaimed (token0, token1).

        Unclaimed funds are not swept — they remain claimable.
        """
        with self._atomic(market_id, "finalize_batch"):
            record = self._record(market_id, batch_id)
            batch = record.batch
            height = self._clock.current_height()
            if batch.finalized:
                raise BatchAlreadyFinalizedError(batch_id)
            if not batch.settled:
                raise BatchNotSettledError(batch_id)
            if height <= batch.claim_end:
                raise WrongPhaseError(
                    BatchPhase.FINALIZED.value, batch_phase(batch, height).value
                )

            batch.finalized = True
            pending = [c for c in record.claimables.values() if not c.claimed]
            unclaimed0 = sum(c.amount0 for c in pending)
            unclaimed1 = sum(c.amount1 for c in pending)

            self._emit(
                BatchFinalized(
                    market_id=market_id,
                    batch_id=batch_id,
                    height=height,
                    unclaimed0=unclaimed0,
                    unclaimed1=unclaimed1,
                )
            )
            logger.info(
                "Batch finalized: market=%s batch=%d unclaimed0=%d unclaimed1=%d",
                market_id, batch_id, unclaimed0, unclaimed1,
            )
            return unclaimed0, unclaimed1

    # ------------------------------------------------------------------
    # Read surface: no side effects, mutable records returned as copies
    # ------------------------------------------------------------------

    def current_height(self) -> int:
        return self._clock.current_height()

    def get_pool_config(self, market_id: str) -> PoolConfig:
        return self._market(market_id).config

    def get_current_batch_id(self, market_id: str) -> int:
        return self._market(market_id).current_batch_id

    def get_batch(self, market_id: str, batch_id: int) -> Batch:
        return replace(self._record(market_id, batch_id).batch)

    def get_batch_phase(self, market_id: str, batch_id: int | None = None) -> BatchPhase:
        state = self._market(market_id)
        record = state.current if batch_id is None else state.batches.get(batch_id)
        return batch_phase(record.batch if record else None, self._clock.current_height())

    def get_commitment(
        self, market_id: str, batch_id: int, trader: str
    ) -> tuple[Commitment | None, CommitmentStatus]:
        commitment = self._record(market_id, batch_id).commitments.get(normalize_address(trader))
        if commitment is None:
            return None, CommitmentStatus.NONE
        return replace(commitment), commitment.status

    def get_claimable(
        self, market_id: str, batch_id: int, trader: str
    ) -> tuple[Claimable | None, ClaimStatus]:
        claimable = self._record(market_id, batch_id).claimables.get(normalize_address(trader))
        if claimable is None:
            return None, ClaimStatus.NONE
        return replace(claimable), claimable.status

    def get_revealed_slots(self, market_id: str, batch_id: int) -> list[RevealedSlot]:
        return list(self._record(market_id, batch_id).slots)

    def get_orders_root(self, market_id: str, batch_id: int | None = None) -> int:
        state = self._market(market_id)
        record = state.current if batch_id is None else self._record(market_id, batch_id)
        return record.accumulator.root() if record else 0

    def get_settled_batch(self, market_id: str, batch_id: int) -> SettledBatchData | None:
        for settled in self._market(market_id).history:
            if settled.batch_id == batch_id:
                return settled
        return None

    def get_batch_history(
        self, market_id: str, offset: int = 0, limit: int = 10
    ) -> list[SettledBatchData]:
        """Settled batches, newest first."""
        if offset < 0 or limit < 0:
            raise ValueError("offset and limit must be >= 0")
        newest_first = list(reversed(self._market(market_id).history))
        return newest_first[offset : offset + limit]

    def get_price_history(self, market_id: str, limit: int = 10) -> list[tuple[int, int]]:
        """(batch_id, clearing_price) for the most recent settled batches, newest first."""
        return [(s.batch_id, s.clearing_price) for s in self.get_batch_history(market_id, 0, limit)]
