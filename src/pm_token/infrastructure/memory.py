"""In-process token ledger backed by a dict.

Mirrors the SQL ledger's semantics (a burn never drives a balance negative)
without a database, so the settlement engine can run standalone.
"""

from collections import defaultdict

from src.pm_common.errors import InsufficientTokenBalanceError


class InMemoryTokenLedger:
    def __init__(self) -> None:
        self._balances: dict[str, dict[str, int]] = defaultdict(dict)

    async def mint(self, token_kind: str, to_user: str, amount: int) -> int:
        holders = self._balances[token_kind]
        holders[to_user] = holders.get(to_user, 0) + amount
        return holders[to_user]

    async def burn(self, token_kind: str, from_user: str, amount: int) -> int:
        holders = self._balances[token_kind]
        available = holders.get(from_user, 0)
        if available < amount:
            raise InsufficientTokenBalanceError(token_kind, amount, available)
        holders[from_user] = available - amount
        return holders[from_user]

    async def balance_of(self, token_kind: str, user: str) -> int:
        return self._balances[token_kind].get(user, 0)

    async def total_supply(self, token_kind: str) -> int:
        return sum(self._balances[token_kind].values())
