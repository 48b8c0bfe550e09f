"""pm_pool REST endpoints. The bearer token's subject is the caller identity.

POST /pools                           CreatePool (caller becomes authority)
GET  /pools                           list with cursor pagination
GET  /pools/{pool_id}                 full detail
POST /pools/{pool_id}/mint            MintPosition
POST /pools/{pool_id}/propose         ProposeSolution (authority)
POST /pools/{pool_id}/dispute         DisputeSolution (losing-side staker)
POST /pools/{pool_id}/resolve         ResolveDispute (authority)
POST /pools/{pool_id}/finalize        FinalizePool
POST /pools/{pool_id}/claim           ClaimWinnings
GET  /pools/{pool_id}/position        caller's YES/NO balances
GET  /pools/{pool_id}/claims          claim receipts
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.database import get_db_session
from src.pm_common.enums import Side
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.dependencies import get_caller_identity
from src.pm_pool.application.schemas import (
    CreatePoolRequest,
    MintRequest,
    ProposeRequest,
    ResolveRequest,
)
from src.pm_pool.application.service import PoolApplicationService

router = APIRouter(prefix="/pools", tags=["pools"])

_service = PoolApplicationService()

Caller = Annotated[str, Depends(get_caller_identity)]
Db = Annotated[AsyncSession, Depends(get_db_session)]


@router.post("")
async def create_pool(
    body: CreatePoolRequest, request: Request, caller: Caller, db: Db
) -> ApiResponse:
    result = await _service.create_pool(
        db,
        authority=caller,
        end_time=body.end_time,
        dispute_period_seconds=body.dispute_period_seconds,
        dispute_threshold=body.dispute_threshold,
        name=body.name,
        description=body.description,
    )
    return success_response(result.model_dump(), request)


@router.get("")
async def list_pools(
    request: Request,
    caller: Caller,
    db: Db,
    phase: str | None = Query(
        None, description="FUNDING, PROPOSED, DISPUTED or FINALIZED. Default: all."
    ),
    limit: int = Query(20, ge=1, le=100),
    cursor: str | None = Query(None),
) -> ApiResponse:
    result = await _service.list_pools(db, phase, cursor, limit)
    return success_response(result.model_dump(), request)


@router.get("/{pool_id}")
async def get_pool(pool_id: str, request: Request, caller: Caller, db: Db) -> ApiResponse:
    result = await _service.get_pool(db, pool_id)
    return success_response(result.model_dump(), request)


@router.post("/{pool_id}/mint")
async def mint_position(
    pool_id: str, body: MintRequest, request: Request, caller: Caller, db: Db
) -> ApiResponse:
    result = await _service.mint_position(db, pool_id, caller, body.amount, Side(body.side))
    return success_response(result.model_dump(), request)


@router.post("/{pool_id}/propose")
async def propose_solution(
    pool_id: str, body: ProposeRequest, request: Request, caller: Caller, db: Db
) -> ApiResponse:
    result = await _service.propose_solution(db, pool_id, caller, Side(body.winner))
    return success_response(result.model_dump(), request)


@router.post("/{pool_id}/dispute")
async def dispute_solution(
    pool_id: str, request: Request, caller: Caller, db: Db
) -> ApiResponse:
    result = await _service.dispute_solution(db, pool_id, caller)
    return success_response(result.model_dump(), request)


@router.post("/{pool_id}/resolve")
async def resolve_dispute(
    pool_id: str, body: ResolveRequest, request: Request, caller: Caller, db: Db
) -> ApiResponse:
    result = await _service.resolve_dispute(db, pool_id, caller, Side(body.winner))
    return success_response(result.model_dump(), request)


@router.post("/{pool_id}/finalize")
async def finalize_pool(
    pool_id: str, request: Request, caller: Caller, db: Db
) -> ApiResponse:
    result = await _service.finalize_pool(db, pool_id, caller)
    return success_response(result.model_dump(), request)


@router.post("/{pool_id}/claim")
async def claim_winnings(
    pool_id: str, request: Request, caller: Caller, db: Db
) -> ApiResponse:
    result = await _service.claim_winnings(db, pool_id, caller)
    return success_response(result.model_dump(), request)


@router.get("/{pool_id}/position")
async def get_position(
    pool_id: str, request: Request, caller: Caller, db: Db
) -> ApiResponse:
    result = await _service.get_position(db, pool_id, caller)
    return success_response(result.model_dump(), request)


@router.get("/{pool_id}/claims")
async def list_claims(
    pool_id: str, request: Request, caller: Caller, db: Db
) -> ApiResponse:
    result = await _service.list_claims(db, pool_id)
    return success_response(result.model_dump(), request)
