"""Unit tests for pm_token ledgers (in-memory and SQL via mock session)."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.pm_common.errors import InsufficientTokenBalanceError
from src.pm_token.infrastructure.memory import InMemoryTokenLedger
from src.pm_token.infrastructure.persistence import SqlTokenLedger


class TestInMemoryTokenLedger:
    @pytest.mark.asyncio
    async def test_mint_accumulates(self) -> None:
        ledger = InMemoryTokenLedger()
        await ledger.mint("P:YES", "u", 5)
        assert await ledger.mint("P:YES", "u", 7) == 12
        assert await ledger.balance_of("P:YES", "u") == 12

    @pytest.mark.asyncio
    async def test_kinds_are_independent(self) -> None:
        ledger = InMemoryTokenLedger()
        await ledger.mint("P:YES", "u", 5)
        assert await ledger.balance_of("P:NO", "u") == 0
        assert await ledger.total_supply("P:NO") == 0

    @pytest.mark.asyncio
    async def test_total_supply_sums_holders(self) -> None:
        ledger = InMemoryTokenLedger()
        await ledger.mint("P:YES", "a", 5)
        await ledger.mint("P:YES", "b", 6)
        assert await ledger.total_supply("P:YES") == 11

    @pytest.mark.asyncio
    async def test_burn_reduces_balance(self) -> None:
        ledger = InMemoryTokenLedger()
        await ledger.mint("P:YES", "u", 5)
        assert await ledger.burn("P:YES", "u", 5) == 0
        assert await ledger.total_supply("P:YES") == 0

    @pytest.mark.asyncio
    async def test_overburn_raises_and_keeps_balance(self) -> None:
        ledger = InMemoryTokenLedger()
        await ledger.mint("P:YES", "u", 5)
        with pytest.raises(InsufficientTokenBalanceError):
            await ledger.burn("P:YES", "u", 6)
        assert await ledger.balance_of("P:YES", "u") == 5


class TestSqlTokenLedger:
    @pytest.mark.asyncio
    async def test_mint_upserts_and_returns_amount(self) -> None:
        db = AsyncMock()
        result = MagicMock()
        result.scalar_one.return_value = 12
        db.execute.return_value = result

        balance = await SqlTokenLedger(db).mint("P:YES", "u", 7)

        assert balance == 12
        sql, params = db.execute.call_args.args
        assert "ON CONFLICT" in str(sql)
        assert params == {"token_kind": "P:YES", "user_id": "u", "amount": 7}

    @pytest.mark.asyncio
    async def test_burn_returns_remaining(self) -> None:
        db = AsyncMock()
        result = MagicMock()
        result.fetchone.return_value = MagicMock(amount=3)
        db.execute.return_value = result

        assert await SqlTokenLedger(db).burn("P:YES", "u", 2) == 3

    @pytest.mark.asyncio
    async def test_burn_short_balance_raises(self) -> None:
        db = AsyncMock()
        burn_result = MagicMock()
        burn_result.fetchone.return_value = None
        balance_result = MagicMock()
        balance_result.scalar_one_or_none.return_value = 1
        db.execute.side_effect = [burn_result, balance_result]

        with pytest.raises(InsufficientTokenBalanceError) as exc_info:
            await SqlTokenLedger(db).burn("P:YES", "u", 2)
        assert "available 1" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_balance_of_missing_row_is_zero(self) -> None:
        db = AsyncMock()
        result = MagicMock()
        result.scalar_one_or_none.return_value = None
        db.execute.return_value = result

        assert await SqlTokenLedger(db).balance_of("P:NO", "ghost") == 0

    @pytest.mark.asyncio
    async def test_total_supply(self) -> None:
        db = AsyncMock()
        result = MagicMock()
        result.scalar_one.return_value = 40
        db.execute.return_value = result

        assert await SqlTokenLedger(db).total_supply("P:NO") == 40
