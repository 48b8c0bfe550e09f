"""Unit tests for pm_pool conservation checks."""

from datetime import UTC, datetime

import pytest

from src.pm_common.enums import Side
from src.pm_pool.domain.invariants import verify_pool_invariants
from src.pm_pool.domain.models import Pool
from src.pm_token.infrastructure.memory import InMemoryTokenLedger


def _make_pool(**kwargs) -> Pool:
    defaults = dict(
        id="POOL-I", authority="auth", yes_mint="POOL-I:YES", no_mint="POOL-I:NO",
        name="i", description="", end_time=datetime(2026, 1, 1, tzinfo=UTC),
        dispute_period_seconds=60, dispute_threshold=0,
    )
    defaults.update(kwargs)
    return Pool(**defaults)


@pytest.fixture
def ledger() -> InMemoryTokenLedger:
    return InMemoryTokenLedger()


class TestPoolInvariants:
    async def test_passes_for_funded_pool(self, ledger: InMemoryTokenLedger) -> None:
        pool = _make_pool(total_yes_tokens=70, total_no_tokens=30)
        await ledger.mint(pool.yes_mint, "a", 70)
        await ledger.mint(pool.no_mint, "b", 30)
        await verify_pool_invariants(pool, ledger)  # no exception

    async def test_pool1_negative_total(self, ledger: InMemoryTokenLedger) -> None:
        pool = _make_pool(total_yes_tokens=-1)
        with pytest.raises(AssertionError, match=r"POOL-1"):
            await verify_pool_invariants(pool, ledger)

    async def test_pool2_supply_mismatch(self, ledger: InMemoryTokenLedger) -> None:
        pool = _make_pool(total_yes_tokens=70)
        await ledger.mint(pool.yes_mint, "a", 69)
        with pytest.raises(AssertionError, match=r"POOL-2"):
            await verify_pool_invariants(pool, ledger)

    async def test_pool2_counts_claimed_tokens(self, ledger: InMemoryTokenLedger) -> None:
        pool = _make_pool(
            total_yes_tokens=70, total_no_tokens=30,
            solution_proposed=True, solution_winner=Side.YES, is_finalized=True,
            total_claimed_tokens=70, total_paid_out=100,
        )
        await ledger.mint(pool.no_mint, "b", 30)
        await verify_pool_invariants(pool, ledger)  # YES supply 0 + claimed 70

    async def test_pool3_overpaid(self, ledger: InMemoryTokenLedger) -> None:
        pool = _make_pool(
            total_yes_tokens=10, total_no_tokens=10,
            solution_proposed=True, solution_winner=Side.YES, is_finalized=True,
            total_claimed_tokens=5, total_paid_out=21,
        )
        await ledger.mint(pool.yes_mint, "a", 5)
        await ledger.mint(pool.no_mint, "b", 10)
        with pytest.raises(AssertionError, match=r"POOL-3"):
            await verify_pool_invariants(pool, ledger)

    async def test_pool4_underpaid_after_all_claims(
        self, ledger: InMemoryTokenLedger
    ) -> None:
        pool = _make_pool(
            total_yes_tokens=10, total_no_tokens=10,
            solution_proposed=True, solution_winner=Side.YES, is_finalized=True,
            total_claimed_tokens=10, total_paid_out=19,
        )
        await ledger.mint(pool.no_mint, "b", 10)
        with pytest.raises(AssertionError, match=r"POOL-4"):
            await verify_pool_invariants(pool, ledger)
