"""ba_batch REST endpoints (read-only).

GET /markets/{market_id}/pool                                   — pool config
GET /markets/{market_id}/phase                                  — current batch phase
GET /markets/{market_id}/batches/current                        — current batch
GET /markets/{market_id}/batches/history                        — settled batches, newest first
GET /markets/{market_id}/prices                                 — clearing prices, newest first
GET /markets/{market_id}/batches/{batch_id}                     — batch detail
GET /markets/{market_id}/batches/{batch_id}/slots               — revealed slots (trader, side)
GET /markets/{market_id}/batches/{batch_id}/settlement          — settlement record
GET /markets/{market_id}/batches/{batch_id}/commitments/{trader}
GET /markets/{market_id}/batches/{batch_id}/claimables/{trader}
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, Request

from src.ba_batch.application.service import BatchQueryService
from src.ba_batch.engine.engine import BatchEngine
from src.ba_batch.infrastructure.runtime import get_engine
from src.ba_common.response import ApiResponse, success_response

router = APIRouter(prefix="/markets", tags=["batches"])

_service = BatchQueryService()

EngineDep = Annotated[BatchEngine, Depends(get_engine)]


def _respond(request: Request, engine: BatchEngine, data: Any) -> ApiResponse:
    resp = success_response(data, height=engine.current_height())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{market_id}/pool")
async def get_pool(market_id: str, request: Request, engine: EngineDep) -> ApiResponse:
    result = _service.get_pool(engine, market_id)
    return _respond(request, engine, result.model_dump())


@router.get("/{market_id}/phase")
async def get_phase(market_id: str, request: Request, engine: EngineDep) -> ApiResponse:
    result = _service.get_phase(engine, market_id)
    return _respond(request, engine, result.model_dump())


@router.get("/{market_id}/batches/current")
async def get_current_batch(market_id: str, request: Request, engine: EngineDep) -> ApiResponse:
    result = _service.get_current_batch(engine, market_id)
    return _respond(request, engine, result.model_dump())


@router.get("/{market_id}/batches/history")
async def get_batch_history(
    market_id: str,
    request: Request,
    engine: EngineDep,
    offset: int = Query(0, ge=0),
    limit: int = Query(10, ge=1, le=100),
) -> ApiResponse:
    result = _service.get_history(engine, market_id, offset, limit)
    return _respond(request, engine, result.model_dump())


@router.get("/{market_id}/prices")
async def get_price_history(
    market_id: str,
    request: Request,
    engine: EngineDep,
    limit: int = Query(10, ge=1, le=100),
) -> ApiResponse:
    result = _service.get_prices(engine, market_id, limit)
    return _respond(request, engine, result.model_dump())


@router.get("/{market_id}/batches/{batch_id}")
async def get_batch(
    market_id: str, batch_id: int, request: Request, engine: EngineDep
) -> ApiResponse:
    result = _service.get_batch(engine, market_id, batch_id)
    return _respond(request, engine, result.model_dump())


@router.get("/{market_id}/batches/{batch_id}/slots")
async def get_revealed_slots(
    market_id: str, batch_id: int, request: Request, engine: EngineDep
) -> ApiResponse:
    result = _service.get_revealed_slots(engine, market_id, batch_id)
    return _respond(request, engine, result.model_dump())


@router.get("/{market_id}/batches/{batch_id}/settlement")
async def get_settlement(
    market_id: str, batch_id: int, request: Request, engine: EngineDep
) -> ApiResponse:
    result = _service.get_settlement(engine, market_id, batch_id)
    return _respond(request, engine, result.model_dump())


@router.get("/{market_id}/batches/{batch_id}/commitments/{trader}")
async def get_commitment(
    market_id: str, batch_id: int, trader: str, request: Request, engine: EngineDep
) -> ApiResponse:
    result = _service.get_commitment(engine, market_id, batch_id, trader)
    return _respond(request, engine, result.model_dump())


@router.get("/{market_id}/batches/{batch_id}/claimables/{trader}")
async def get_claimable(
    market_id: str, batch_id: int, trader: str, request: Request, engine: EngineDep
) -> ApiResponse:
    result = _service.get_claimable(engine, market_id, batch_id, trader)
    return _respond(request, engine, result.model_dump())
