"""PoolRepository: concrete implementation of PoolRepositoryProtocol.

All queries use raw text() SQL (no ORM).
asyncpg NULL parameter pattern: CAST(:param AS TYPE) IS NULL required for None values.

Phase is derived, not stored; the list filter translates it back into the
flag combination it stands for.
"""

from datetime import datetime

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.enums import Side
from src.pm_pool.domain.models import ClaimReceipt, Pool

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_POOL_COLUMNS = """
    id, authority, yes_mint, no_mint, name, description,
    end_time, dispute_period_seconds, dispute_threshold,
    total_yes_tokens, total_no_tokens,
    solution_proposed, solution_winner,
    is_disputed, disputer,
    proposed_at, dispute_period_end,
    is_finalized, finalized_at,
    total_claimed_tokens, total_paid_out,
    created_at, updated_at
"""

_INSERT_POOL_SQL = text("""
    INSERT INTO pools
        (id, authority, yes_mint, no_mint, name, description,
         end_time, dispute_period_seconds, dispute_threshold,
         created_at, updated_at)
    VALUES
        (:id, :authority, :yes_mint, :no_mint, :name, :description,
         :end_time, :dispute_period_seconds, :dispute_threshold,
         :created_at, :updated_at)
""")

_GET_POOL_SQL = text(f"SELECT {_POOL_COLUMNS} FROM pools WHERE id = :pool_id")

_GET_POOL_FOR_UPDATE_SQL = text(
    f"SELECT {_POOL_COLUMNS} FROM pools WHERE id = :pool_id FOR UPDATE"
)

# Only the mutable columns; configuration columns are written once on insert.
_SAVE_POOL_SQL = text("""
    UPDATE pools
    SET total_yes_tokens     = :total_yes_tokens,
        total_no_tokens      = :total_no_tokens,
        solution_proposed    = :solution_proposed,
        solution_winner      = :solution_winner,
        is_disputed          = :is_disputed,
        disputer             = :disputer,
        proposed_at          = :proposed_at,
        dispute_period_end   = :dispute_period_end,
        is_finalized         = :is_finalized,
        finalized_at         = :finalized_at,
        total_claimed_tokens = :total_claimed_tokens,
        total_paid_out       = :total_paid_out,
        updated_at           = :updated_at
    WHERE id = :id
""")

_LIST_POOLS_SQL = text(f"""
    SELECT {_POOL_COLUMNS}
    FROM pools
    WHERE
        (
            CAST(:phase AS TEXT) IS NULL
            OR (CAST(:phase AS TEXT) = 'FUNDING' AND NOT solution_proposed)
            OR (CAST(:phase AS TEXT) = 'PROPOSED'
                AND solution_proposed AND NOT is_disputed AND NOT is_finalized)
            OR (CAST(:phase AS TEXT) = 'DISPUTED' AND is_disputed AND NOT is_finalized)
            OR (CAST(:phase AS TEXT) = 'FINALIZED' AND is_finalized)
        )
        AND (
            CAST(:cursor_ts AS TIMESTAMPTZ) IS NULL
            OR created_at < CAST(:cursor_ts AS TIMESTAMPTZ)
            OR (
                created_at = CAST(:cursor_ts AS TIMESTAMPTZ)
                AND id < CAST(:cursor_id AS TEXT)
            )
        )
    ORDER BY created_at DESC, id DESC
    LIMIT :limit
""")

_LIST_ALL_POOLS_SQL = text(f"SELECT {_POOL_COLUMNS} FROM pools ORDER BY created_at, id")

_INSERT_CLAIM_SQL = text("""
    INSERT INTO pool_claims
        (pool_id, user_id, side, tokens_burned, payout, claimed_at)
    VALUES
        (:pool_id, :user_id, :side, :tokens_burned, :payout, :claimed_at)
    RETURNING id
""")

_LIST_CLAIMS_SQL = text("""
    SELECT id, pool_id, user_id, side, tokens_burned, payout, claimed_at
    FROM pool_claims
    WHERE pool_id = :pool_id
    ORDER BY id
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_pool(row: object) -> Pool:
    winner = row.solution_winner  # type: ignore[attr-defined]
    return Pool(
        id=row.id,  # type: ignore[attr-defined]
        authority=row.authority,  # type: ignore[attr-defined]
        yes_mint=row.yes_mint,  # type: ignore[attr-defined]
        no_mint=row.no_mint,  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        end_time=row.end_time,  # type: ignore[attr-defined]
        dispute_period_seconds=row.dispute_period_seconds,  # type: ignore[attr-defined]
        dispute_threshold=row.dispute_threshold,  # type: ignore[attr-defined]
        total_yes_tokens=row.total_yes_tokens,  # type: ignore[attr-defined]
        total_no_tokens=row.total_no_tokens,  # type: ignore[attr-defined]
        solution_proposed=row.solution_proposed,  # type: ignore[attr-defined]
        solution_winner=Side(winner) if winner is not None else None,
        is_disputed=row.is_disputed,  # type: ignore[attr-defined]
        disputer=row.disputer,  # type: ignore[attr-defined]
        proposed_at=row.proposed_at,  # type: ignore[attr-defined]
        dispute_period_end=row.dispute_period_end,  # type: ignore[attr-defined]
        is_finalized=row.is_finalized,  # type: ignore[attr-defined]
        finalized_at=row.finalized_at,  # type: ignore[attr-defined]
        total_claimed_tokens=row.total_claimed_tokens,  # type: ignore[attr-defined]
        total_paid_out=row.total_paid_out,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _row_to_claim(row: object) -> ClaimReceipt:
    return ClaimReceipt(
        id=row.id,  # type: ignore[attr-defined]
        pool_id=row.pool_id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        side=Side(row.side),  # type: ignore[attr-defined]
        tokens_burned=row.tokens_burned,  # type: ignore[attr-defined]
        payout=row.payout,  # type: ignore[attr-defined]
        claimed_at=row.claimed_at,  # type: ignore[attr-defined]
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class PoolRepository:
    """Concrete repository. Never commits; the application service does."""

    async def insert_pool(self, db: AsyncSession, pool: Pool) -> None:
        await db.execute(
            _INSERT_POOL_SQL,
            {
                "id": pool.id,
                "authority": pool.authority,
                "yes_mint": pool.yes_mint,
                "no_mint": pool.no_mint,
                "name": pool.name,
                "description": pool.description,
                "end_time": pool.end_time,
                "dispute_period_seconds": pool.dispute_period_seconds,
                "dispute_threshold": pool.dispute_threshold,
                "created_at": pool.created_at,
                "updated_at": pool.updated_at,
            },
        )

    async def get_pool_by_id(self, db: AsyncSession, pool_id: str) -> Pool | None:
        result = await db.execute(_GET_POOL_SQL, {"pool_id": pool_id})
        row = result.fetchone()
        return _row_to_pool(row) if row else None

    async def get_pool_for_update(self, db: AsyncSession, pool_id: str) -> Pool | None:
        """Row-locks the pool until the surrounding transaction ends."""
        result = await db.execute(_GET_POOL_FOR_UPDATE_SQL, {"pool_id": pool_id})
        row = result.fetchone()
        return _row_to_pool(row) if row else None

    async def save_pool(self, db: AsyncSession, pool: Pool) -> None:
        await db.execute(
            _SAVE_POOL_SQL,
            {
                "id": pool.id,
                "total_yes_tokens": pool.total_yes_tokens,
                "total_no_tokens": pool.total_no_tokens,
                "solution_proposed": pool.solution_proposed,
                "solution_winner": (
                    pool.solution_winner.value if pool.solution_winner else None
                ),
                "is_disputed": pool.is_disputed,
                "disputer": pool.disputer,
                "proposed_at": pool.proposed_at,
                "dispute_period_end": pool.dispute_period_end,
                "is_finalized": pool.is_finalized,
                "finalized_at": pool.finalized_at,
                "total_claimed_tokens": pool.total_claimed_tokens,
                "total_paid_out": pool.total_paid_out,
                "updated_at": pool.updated_at,
            },
        )

    async def list_pools(
        self,
        db: AsyncSession,
        phase: str | None,
        cursor_ts: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Pool]:
        # asyncpg requires a real datetime object for TIMESTAMPTZ parameters,
        # not an ISO string.
        cursor_ts_dt: datetime | None = None
        if cursor_ts is not None:
            cursor_ts_dt = datetime.fromisoformat(cursor_ts)

        result = await db.execute(
            _LIST_POOLS_SQL,
            {
                "phase": phase,
                "cursor_ts": cursor_ts_dt,
                "cursor_id": cursor_id,
                "limit": limit,
            },
        )
        return [_row_to_pool(row) for row in result.fetchall()]

    async def list_all_pools(self, db: AsyncSession) -> list[Pool]:
        result = await db.execute(_LIST_ALL_POOLS_SQL)
        return [_row_to_pool(row) for row in result.fetchall()]

    async def insert_claim(self, db: AsyncSession, receipt: ClaimReceipt) -> ClaimReceipt:
        result = await db.execute(
            _INSERT_CLAIM_SQL,
            {
                "pool_id": receipt.pool_id,
                "user_id": receipt.user_id,
                "side": receipt.side.value,
                "tokens_burned": receipt.tokens_burned,
                "payout": receipt.payout,
                "claimed_at": receipt.claimed_at,
            },
        )
        receipt.id = result.scalar_one()
        return receipt

    async def list_claims(self, db: AsyncSession, pool_id: str) -> list[ClaimReceipt]:
        result = await db.execute(_LIST_CLAIMS_SQL, {"pool_id": pool_id})
        return [_row_to_claim(row) for row in result.fetchall()]
