"""Token ledger Protocol: the external holder of per-user claim-token balances.

The settlement engine never stores per-user balances; it instructs a ledger
that conforms to this Protocol. Tests use InMemoryTokenLedger, the service
binds a SqlTokenLedger to the request's session.
"""

from typing import Protocol


class TokenLedgerProtocol(Protocol):
    async def mint(self, token_kind: str, to_user: str, amount: int) -> int:
        """Credit amount and return the new balance."""
        ...

    async def burn(self, token_kind: str, from_user: str, amount: int) -> int:
        """Debit amount and return the new balance. Raises if balance is short."""
        ...

    async def balance_of(self, token_kind: str, user: str) -> int: ...

    async def total_supply(self, token_kind: str) -> int: ...
