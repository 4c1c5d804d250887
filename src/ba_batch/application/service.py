"""BatchQueryService — thin composition layer over the engine's read surface.

All methods are read-only. The caller (router) passes the engine; the
service normalises addresses and turns domain records into schemas.
"""

from src.ba_batch.application.schemas import (
    BatchHistoryOut,
    BatchOut,
    ClaimableOut,
    CommitmentOut,
    PhaseOut,
    PoolConfigOut,
    PriceHistoryOut,
    PricePointOut,
    RevealedSlotsOut,
    SettledBatchOut,
)
from src.ba_batch.engine.engine import BatchEngine
from src.ba_common.addresses import normalize_address
from src.ba_common.errors import BatchNotFoundError, BatchNotSettledError


class BatchQueryService:
    def get_pool(self, engine: BatchEngine, market_id: str) -> PoolConfigOut:
        config = engine.get_pool_config(market_id)
        return PoolConfigOut.from_domain(
            market_id, config, engine.get_current_batch_id(market_id)
        )

    def get_current_batch(self, engine: BatchEngine, market_id: str) -> BatchOut:
        batch_id = engine.get_current_batch_id(market_id)
        if batch_id == 0:
            raise BatchNotFoundError(market_id, batch_id)
        return self.get_batch(engine, market_id, batch_id)

    def get_batch(self, engine: BatchEngine, market_id: str, batch_id: int) -> BatchOut:
        batch = engine.get_batch(market_id, batch_id)
        return BatchOut.from_domain(batch, engine.get_batch_phase(market_id, batch_id))

    def get_phase(self, engine: BatchEngine, market_id: str) -> PhaseOut:
        # batch_id 0 means no batch was ever opened -> INACTIVE
        return PhaseOut(
            market_id=market_id,
            batch_id=engine.get_current_batch_id(market_id),
            phase=engine.get_batch_phase(market_id).value,
        )

    def get_revealed_slots(
        self, engine: BatchEngine, market_id: str, batch_id: int
    ) -> RevealedSlotsOut:
        slots = engine.get_revealed_slots(market_id, batch_id)
        return RevealedSlotsOut.from_domain(
            batch_id, engine.get_orders_root(market_id, batch_id), slots
        )

    def get_commitment(
        self, engine: BatchEngine, market_id: str, batch_id: int, trader: str
    ) -> CommitmentOut:
        trader = normalize_address(trader)
        commitment, status = engine.get_commitment(market_id, batch_id, trader)
        return CommitmentOut.from_domain(batch_id, trader, commitment, status)

    def get_claimable(
        self, engine: BatchEngine, market_id: str, batch_id: int, trader: str
    ) -> ClaimableOut:
        trader = normalize_address(trader)
        claimable, status = engine.get_claimable(market_id, batch_id, trader)
        return ClaimableOut.from_domain(batch_id, trader, claimable, status)

    def get_settlement(
        self, engine: BatchEngine, market_id: str, batch_id: int
    ) -> SettledBatchOut:
        settled = engine.get_settled_batch(market_id, batch_id)
        if settled is None:
            # distinguish "no such batch" from "not settled yet"
            engine.get_batch(market_id, batch_id)
            raise BatchNotSettledError(batch_id)
        return SettledBatchOut.from_domain(settled)

    def get_history(
        self, engine: BatchEngine, market_id: str, offset: int, limit: int
    ) -> BatchHistoryOut:
        items = engine.get_batch_history(market_id, offset, limit)
        return BatchHistoryOut(
            items=[SettledBatchOut.from_domain(s) for s in items],
            offset=offset,
            limit=limit,
        )

    def get_prices(self, engine: BatchEngine, market_id: str, limit: int) -> PriceHistoryOut:
        return PriceHistoryOut(
            items=[
                PricePointOut(batch_id=batch_id, clearing_price=price)
                for batch_id, price in engine.get_price_history(market_id, limit)
            ]
        )
