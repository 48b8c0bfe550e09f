"""SqlTokenLedger: token_balances table implementation of TokenLedgerProtocol.

One row per (token_kind, user_id). Mint is an upsert; burn is a guarded
UPDATE ... RETURNING where 0 rows means the holder's balance is short.

Transaction ownership: the ledger is bound to the caller's session and never
commits. The pool application service commits pool + balances together.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.errors import InsufficientTokenBalanceError

_MINT_SQL = text("""
    INSERT INTO token_balances (token_kind, user_id, amount)
    VALUES (:token_kind, :user_id, :amount)
    ON CONFLICT (token_kind, user_id) DO UPDATE
        SET amount = token_balances.amount + EXCLUDED.amount,
            updated_at = NOW()
    RETURNING amount
""")

_BURN_SQL = text("""
    UPDATE token_balances
    SET amount = amount - :amount,
        updated_at = NOW()
    WHERE token_kind = :token_kind
      AND user_id = :user_id
      AND amount >= :amount
    RETURNING amount
""")

_BALANCE_SQL = text("""
    SELECT amount
    FROM token_balances
    WHERE token_kind = :token_kind AND user_id = :user_id
""")

_TOTAL_SUPPLY_SQL = text("""
    SELECT COALESCE(SUM(amount), 0)
    FROM token_balances
    WHERE token_kind = :token_kind
""")


class SqlTokenLedger:
    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def mint(self, token_kind: str, to_user: str, amount: int) -> int:
        result = await self._db.execute(
            _MINT_SQL, {"token_kind": token_kind, "user_id": to_user, "amount": amount}
        )
        return int(result.scalar_one())

    async def burn(self, token_kind: str, from_user: str, amount: int) -> int:
        result = await self._db.execute(
            _BURN_SQL, {"token_kind": token_kind, "user_id": from_user, "amount": amount}
        )
        row = result.fetchone()
        if row is None:
            available = await self.balance_of(token_kind, from_user)
            raise InsufficientTokenBalanceError(token_kind, amount, available)
        return int(row.amount)

    async def balance_of(self, token_kind: str, user: str) -> int:
        result = await self._db.execute(
            _BALANCE_SQL, {"token_kind": token_kind, "user_id": user}
        )
        balance = result.scalar_one_or_none()
        return int(balance) if balance is not None else 0

    async def total_supply(self, token_kind: str) -> int:
        result = await self._db.execute(_TOTAL_SUPPLY_SQL, {"token_kind": token_kind})
        return int(result.scalar_one())
