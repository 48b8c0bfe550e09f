"""Pydantic schemas for pm_pool API requests and responses.

Cursor format for pools (VARCHAR PK, not sequential):
  {"ts": "<created_at ISO>", "id": "<pool_id>"}
  Encoded as Base64 JSON string.

Amounts are plain ints on purpose: non-positive amounts must reach the engine
and be rejected there as InvalidAmount, not as a request validation error.
"""

import base64
import json
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from src.pm_pool.domain.models import ClaimReceipt, Pool, UserPosition

# ---------------------------------------------------------------------------
# Cursor utilities
# ---------------------------------------------------------------------------


def cursor_encode(last_pool: Pool) -> str:
    """Encode composite cursor from last pool in page."""
    assert last_pool.created_at is not None
    payload = {
        "ts": last_pool.created_at.isoformat(),
        "id": last_pool.id,
    }
    return base64.b64encode(json.dumps(payload).encode()).decode()


def cursor_decode(cursor: str | None) -> tuple[str | None, str | None]:
    """Decode composite cursor -> (ts_iso, pool_id), or (None, None) on error."""
    if cursor is None:
        return None, None
    try:
        data = json.loads(base64.b64decode(cursor.encode()).decode())
        return data["ts"], data["id"]
    except Exception:
        return None, None


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class CreatePoolRequest(BaseModel):
    name: str
    description: str = ""
    end_time: datetime
    dispute_period_seconds: int = Field(..., description="Dispute window length, > 0")
    dispute_threshold: int = Field(..., description="Losing-side tokens needed to dispute")


class MintRequest(BaseModel):
    amount: int
    side: Literal["YES", "NO"]


class ProposeRequest(BaseModel):
    winner: Literal["YES", "NO"]


class ResolveRequest(BaseModel):
    winner: Literal["YES", "NO"]


# ---------------------------------------------------------------------------
# Pool detail / list
# ---------------------------------------------------------------------------


def _iso(dt: datetime | None) -> str | None:
    return dt.isoformat() if dt is not None else None


class PoolDetail(BaseModel):
    id: str
    phase: str
    authority: str
    yes_mint: str
    no_mint: str
    name: str
    description: str
    end_time: str
    dispute_period_seconds: int
    dispute_threshold: int
    total_yes_tokens: int
    total_no_tokens: int
    total_collateral: int
    solution_proposed: bool
    solution_winner: str | None
    is_disputed: bool
    disputer: str | None
    proposed_at: str | None
    dispute_period_end: str | None
    is_finalized: bool
    finalized_at: str | None
    total_claimed_tokens: int
    total_paid_out: int
    created_at: str | None

    @classmethod
    def from_domain(cls, p: Pool) -> "PoolDetail":
        return cls(
            id=p.id,
            phase=p.phase.value,
            authority=p.authority,
            yes_mint=p.yes_mint,
            no_mint=p.no_mint,
            name=p.name,
            description=p.description,
            end_time=p.end_time.isoformat(),
            dispute_period_seconds=p.dispute_period_seconds,
            dispute_threshold=p.dispute_threshold,
            total_yes_tokens=p.total_yes_tokens,
            total_no_tokens=p.total_no_tokens,
            total_collateral=p.total_collateral,
            solution_proposed=p.solution_proposed,
            solution_winner=p.solution_winner.value if p.solution_winner else None,
            is_disputed=p.is_disputed,
            disputer=p.disputer,
            proposed_at=_iso(p.proposed_at),
            dispute_period_end=_iso(p.dispute_period_end),
            is_finalized=p.is_finalized,
            finalized_at=_iso(p.finalized_at),
            total_claimed_tokens=p.total_claimed_tokens,
            total_paid_out=p.total_paid_out,
            created_at=_iso(p.created_at),
        )


class PoolListItem(BaseModel):
    """Lightweight row: no dispute bookkeeping."""

    id: str
    phase: str
    name: str
    end_time: str
    total_yes_tokens: int
    total_no_tokens: int
    solution_winner: str | None

    @classmethod
    def from_domain(cls, p: Pool) -> "PoolListItem":
        return cls(
            id=p.id,
            phase=p.phase.value,
            name=p.name,
            end_time=p.end_time.isoformat(),
            total_yes_tokens=p.total_yes_tokens,
            total_no_tokens=p.total_no_tokens,
            solution_winner=p.solution_winner.value if p.solution_winner else None,
        )


class PoolListResponse(BaseModel):
    items: list[PoolListItem]
    next_cursor: str | None
    has_more: bool


# ---------------------------------------------------------------------------
# Positions / claims
# ---------------------------------------------------------------------------


class MintResponse(BaseModel):
    pool: PoolDetail
    side: str
    minted: int
    new_balance: int


class PositionResponse(BaseModel):
    pool_id: str
    user_id: str
    yes_balance: int
    no_balance: int

    @classmethod
    def from_domain(cls, pos: UserPosition) -> "PositionResponse":
        return cls(
            pool_id=pos.pool_id,
            user_id=pos.user_id,
            yes_balance=pos.yes_balance,
            no_balance=pos.no_balance,
        )


class ClaimResponse(BaseModel):
    id: int | None
    pool_id: str
    user_id: str
    side: str
    tokens_burned: int
    payout: int
    claimed_at: str

    @classmethod
    def from_domain(cls, r: ClaimReceipt) -> "ClaimResponse":
        return cls(
            id=r.id,
            pool_id=r.pool_id,
            user_id=r.user_id,
            side=r.side.value,
            tokens_burned=r.tokens_burned,
            payout=r.payout,
            claimed_at=r.claimed_at.isoformat(),
        )


class ClaimListResponse(BaseModel):
    items: list[ClaimResponse]
    total: int
