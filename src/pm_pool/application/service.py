"""PoolApplicationService: transaction boundary around the settlement engine.

Every mutating operation follows the same shape:
  1. SELECT ... FOR UPDATE the pool row (serializes operations on one pool)
  2. bind a token ledger to the same session and run the engine
  3. persist the pool (and claim receipt), then commit
Any exception rolls the whole transaction back, so a rejected operation leaves
neither the pool row nor any token balance changed.

Read operations run without an explicit transaction.
"""

import uuid
from collections.abc import Callable
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.pm_common.datetime_utils import Clock, SystemClock
from src.pm_common.enums import PoolPhase, Side
from src.pm_common.errors import InvalidParametersError, PoolNotFoundError
from src.pm_pool.application.schemas import (
    ClaimListResponse,
    ClaimResponse,
    MintResponse,
    PoolDetail,
    PoolListItem,
    PoolListResponse,
    PositionResponse,
    cursor_decode,
    cursor_encode,
)
from src.pm_pool.domain.engine import SettlementEngine
from src.pm_pool.domain.models import Pool, UserPosition
from src.pm_pool.domain.repository import PoolRepositoryProtocol
from src.pm_pool.infrastructure.persistence import PoolRepository
from src.pm_token.domain.ledger import TokenLedgerProtocol
from src.pm_token.infrastructure.persistence import SqlTokenLedger

LedgerFactory = Callable[[AsyncSession], TokenLedgerProtocol]


def _new_pool_id() -> str:
    return f"POOL-{uuid.uuid4().hex[:12].upper()}"


class PoolApplicationService:
    def __init__(
        self,
        repo: PoolRepositoryProtocol | None = None,
        clock: Clock | None = None,
        ledger_factory: LedgerFactory | None = None,
    ) -> None:
        self._repo: PoolRepositoryProtocol = repo or PoolRepository()
        self._clock: Clock = clock or SystemClock()
        self._ledger_factory: LedgerFactory = ledger_factory or SqlTokenLedger

    def _engine(self, ledger: TokenLedgerProtocol) -> SettlementEngine:
        return SettlementEngine(
            ledger,
            self._clock,
            reset_window_on_resolve=settings.DISPUTE_WINDOW_RESETS_ON_RESOLVE,
            name_max_length=settings.POOL_NAME_MAX_LENGTH,
            description_max_length=settings.POOL_DESCRIPTION_MAX_LENGTH,
        )

    async def _load_locked(self, db: AsyncSession, pool_id: str) -> Pool:
        pool = await self._repo.get_pool_for_update(db, pool_id)
        if pool is None:
            raise PoolNotFoundError(pool_id)
        return pool

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def create_pool(
        self,
        db: AsyncSession,
        authority: str,
        end_time: datetime,
        dispute_period_seconds: int,
        dispute_threshold: int,
        name: str,
        description: str,
    ) -> PoolDetail:
        engine = self._engine(self._ledger_factory(db))
        try:
            pool = engine.create_pool(
                _new_pool_id(),
                authority,
                end_time,
                dispute_period_seconds,
                dispute_threshold,
                name,
                description,
            )
            await self._repo.insert_pool(db, pool)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return PoolDetail.from_domain(pool)

    async def mint_position(
        self, db: AsyncSession, pool_id: str, user_id: str, amount: int, side: Side
    ) -> MintResponse:
        ledger = self._ledger_factory(db)
        try:
            pool = await self._load_locked(db, pool_id)
            await self._engine(ledger).mint_position(pool, user_id, amount, side)
            await self._repo.save_pool(db, pool)
            new_balance = await ledger.balance_of(pool.mint_for(side), user_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return MintResponse(
            pool=PoolDetail.from_domain(pool),
            side=side.value,
            minted=amount,
            new_balance=new_balance,
        )

    async def propose_solution(
        self, db: AsyncSession, pool_id: str, caller: str, winner: Side
    ) -> PoolDetail:
        ledger = self._ledger_factory(db)
        try:
            pool = await self._load_locked(db, pool_id)
            await self._engine(ledger).propose_solution(pool, caller, winner)
            await self._repo.save_pool(db, pool)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return PoolDetail.from_domain(pool)

    async def dispute_solution(
        self, db: AsyncSession, pool_id: str, caller: str
    ) -> PoolDetail:
        ledger = self._ledger_factory(db)
        try:
            pool = await self._load_locked(db, pool_id)
            await self._engine(ledger).dispute_solution(pool, caller)
            await self._repo.save_pool(db, pool)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return PoolDetail.from_domain(pool)

    async def resolve_dispute(
        self, db: AsyncSession, pool_id: str, caller: str, new_winner: Side
    ) -> PoolDetail:
        ledger = self._ledger_factory(db)
        try:
            pool = await self._load_locked(db, pool_id)
            await self._engine(ledger).resolve_dispute(pool, caller, new_winner)
            await self._repo.save_pool(db, pool)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return PoolDetail.from_domain(pool)

    async def finalize_pool(
        self, db: AsyncSession, pool_id: str, caller: str
    ) -> PoolDetail:
        ledger = self._ledger_factory(db)
        try:
            pool = await self._load_locked(db, pool_id)
            await self._engine(ledger).finalize_pool(pool, caller)
            await self._repo.save_pool(db, pool)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return PoolDetail.from_domain(pool)

    async def claim_winnings(
        self, db: AsyncSession, pool_id: str, user_id: str
    ) -> ClaimResponse:
        ledger = self._ledger_factory(db)
        try:
            pool = await self._load_locked(db, pool_id)
            receipt = await self._engine(ledger).claim_winnings(pool, user_id)
            await self._repo.save_pool(db, pool)
            receipt = await self._repo.insert_claim(db, receipt)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return ClaimResponse.from_domain(receipt)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_pool(self, db: AsyncSession, pool_id: str) -> PoolDetail:
        pool = await self._repo.get_pool_by_id(db, pool_id)
        if pool is None:
            raise PoolNotFoundError(pool_id)
        return PoolDetail.from_domain(pool)

    async def list_pools(
        self,
        db: AsyncSession,
        phase: str | None,
        cursor: str | None,
        limit: int,
    ) -> PoolListResponse:
        if phase is not None and phase not in PoolPhase.__members__:
            raise InvalidParametersError(f"unknown phase {phase}")
        cursor_ts, cursor_id = cursor_decode(cursor)

        # Fetch limit+1 to detect has_more without COUNT(*)
        pools = await self._repo.list_pools(db, phase, cursor_ts, cursor_id, limit + 1)
        has_more = len(pools) > limit
        page = pools[:limit]

        items = [PoolListItem.from_domain(p) for p in page]
        next_cursor = cursor_encode(page[-1]) if has_more and page else None
        return PoolListResponse(items=items, next_cursor=next_cursor, has_more=has_more)

    async def get_position(
        self, db: AsyncSession, pool_id: str, user_id: str
    ) -> PositionResponse:
        pool = await self._repo.get_pool_by_id(db, pool_id)
        if pool is None:
            raise PoolNotFoundError(pool_id)
        ledger = self._ledger_factory(db)
        position = UserPosition(
            pool_id=pool.id,
            user_id=user_id,
            yes_balance=await ledger.balance_of(pool.yes_mint, user_id),
            no_balance=await ledger.balance_of(pool.no_mint, user_id),
        )
        return PositionResponse.from_domain(position)

    async def list_claims(self, db: AsyncSession, pool_id: str) -> ClaimListResponse:
        pool = await self._repo.get_pool_by_id(db, pool_id)
        if pool is None:
            raise PoolNotFoundError(pool_id)
        receipts = await self._repo.list_claims(db, pool_id)
        return ClaimListResponse(
            items=[ClaimResponse.from_domain(r) for r in receipts],
            total=len(receipts),
        )
