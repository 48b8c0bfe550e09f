# tests/unit/test_pool_persistence.py
"""Unit tests for PoolRepository using MagicMock AsyncSession."""
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.pm_common.enums import Side
from src.pm_pool.domain.models import ClaimReceipt, Pool
from src.pm_pool.infrastructure.persistence import PoolRepository


def _make_pool_row(**kwargs):
    """Build a mock DB row with all pool columns."""
    now = datetime.now(UTC)
    row = MagicMock()
    row.id = kwargs.get("id", "POOL-TEST")
    row.authority = kwargs.get("authority", "auth")
    row.yes_mint = f"{row.id}:YES"
    row.no_mint = f"{row.id}:NO"
    row.name = "Test Pool"
    row.description = ""
    row.end_time = now + timedelta(days=1)
    row.dispute_period_seconds = 86400
    row.dispute_threshold = 1000
    row.total_yes_tokens = kwargs.get("total_yes_tokens", 500)
    row.total_no_tokens = kwargs.get("total_no_tokens", 300)
    row.solution_proposed = kwargs.get("solution_proposed", False)
    row.solution_winner = kwargs.get("solution_winner")
    row.is_disputed = kwargs.get("is_disputed", False)
    row.disputer = kwargs.get("disputer")
    row.proposed_at = None
    row.dispute_period_end = None
    row.is_finalized = kwargs.get("is_finalized", False)
    row.finalized_at = None
    row.total_claimed_tokens = 0
    row.total_paid_out = 0
    row.created_at = now
    row.updated_at = now
    return row


def _make_pool(**kwargs) -> Pool:
    defaults = dict(
        id="POOL-TEST", authority="auth", yes_mint="POOL-TEST:YES", no_mint="POOL-TEST:NO",
        name="Test Pool", description="", end_time=datetime.now(UTC),
        dispute_period_seconds=86400, dispute_threshold=1000,
        created_at=datetime.now(UTC), updated_at=datetime.now(UTC),
    )
    defaults.update(kwargs)
    return Pool(**defaults)


@pytest.fixture
def db():
    return MagicMock()


class TestGetPool:
    @pytest.mark.asyncio
    async def test_returns_pool_when_found(self, db):
        row = _make_pool_row(id="POOL-BTC", solution_proposed=True, solution_winner="NO")
        result_mock = MagicMock()
        result_mock.fetchone.return_value = row
        db.execute = AsyncMock(return_value=result_mock)

        pool = await PoolRepository().get_pool_by_id(db, "POOL-BTC")

        assert pool is not None
        assert pool.id == "POOL-BTC"
        assert pool.solution_winner is Side.NO
        assert pool.total_collateral == 800

    @pytest.mark.asyncio
    async def test_returns_none_when_not_found(self, db):
        result_mock = MagicMock()
        result_mock.fetchone.return_value = None
        db.execute = AsyncMock(return_value=result_mock)

        assert await PoolRepository().get_pool_by_id(db, "POOL-MISSING") is None

    @pytest.mark.asyncio
    async def test_for_update_locks_row(self, db):
        result_mock = MagicMock()
        result_mock.fetchone.return_value = _make_pool_row()
        db.execute = AsyncMock(return_value=result_mock)

        pool = await PoolRepository().get_pool_for_update(db, "POOL-TEST")

        assert pool is not None
        sql = str(db.execute.call_args.args[0])
        assert "FOR UPDATE" in sql


class TestSavePool:
    @pytest.mark.asyncio
    async def test_writes_winner_as_text(self, db):
        db.execute = AsyncMock()
        pool = _make_pool(solution_proposed=True, solution_winner=Side.YES)

        await PoolRepository().save_pool(db, pool)

        params = db.execute.call_args.args[1]
        assert params["solution_winner"] == "YES"
        assert params["id"] == "POOL-TEST"
        # Configuration columns are never rewritten.
        assert "authority" not in params
        assert "dispute_threshold" not in params

    @pytest.mark.asyncio
    async def test_insert_pool_passes_config(self, db):
        db.execute = AsyncMock()
        await PoolRepository().insert_pool(db, _make_pool())

        params = db.execute.call_args.args[1]
        assert params["yes_mint"] == "POOL-TEST:YES"
        assert params["dispute_period_seconds"] == 86400


class TestListPools:
    @pytest.mark.asyncio
    async def test_converts_cursor_ts_to_datetime(self, db):
        result_mock = MagicMock()
        result_mock.fetchall.return_value = [_make_pool_row(id="POOL-A")]
        db.execute = AsyncMock(return_value=result_mock)

        pools = await PoolRepository().list_pools(
            db, "FUNDING", "2026-01-01T00:00:00+00:00", "POOL-Z", 21
        )

        assert [p.id for p in pools] == ["POOL-A"]
        params = db.execute.call_args.args[1]
        assert isinstance(params["cursor_ts"], datetime)
        assert params["phase"] == "FUNDING"
        assert params["limit"] == 21

    @pytest.mark.asyncio
    async def test_no_cursor_passes_none(self, db):
        result_mock = MagicMock()
        result_mock.fetchall.return_value = []
        db.execute = AsyncMock(return_value=result_mock)

        await PoolRepository().list_pools(db, None, None, None, 20)

        params = db.execute.call_args.args[1]
        assert params["cursor_ts"] is None
        assert params["phase"] is None


class TestClaims:
    @pytest.mark.asyncio
    async def test_insert_claim_assigns_id(self, db):
        result_mock = MagicMock()
        result_mock.scalar_one.return_value = 17
        db.execute = AsyncMock(return_value=result_mock)
        receipt = ClaimReceipt(
            pool_id="POOL-TEST", user_id="u", side=Side.NO,
            tokens_burned=3, payout=8, claimed_at=datetime.now(UTC),
        )

        stored = await PoolRepository().insert_claim(db, receipt)

        assert stored.id == 17
        assert db.execute.call_args.args[1]["side"] == "NO"

    @pytest.mark.asyncio
    async def test_list_claims_maps_rows(self, db):
        row = MagicMock()
        row.id = 1
        row.pool_id = "POOL-TEST"
        row.user_id = "u"
        row.side = "YES"
        row.tokens_burned = 5
        row.payout = 9
        row.claimed_at = datetime.now(UTC)
        result_mock = MagicMock()
        result_mock.fetchall.return_value = [row]
        db.execute = AsyncMock(return_value=result_mock)

        claims = await PoolRepository().list_claims(db, "POOL-TEST")

        assert len(claims) == 1
        assert claims[0].side is Side.YES
        assert claims[0].payout == 9
