"""Caller capability checks.

Each operation declares the role it requires; check_capability evaluates it
the same way for every operation, after the phase and timing guards and
before anything is mutated.
"""

from src.pm_common.enums import PoolOperation, Role
from src.pm_common.errors import (
    InsufficientStakeToDisputeError,
    NothingToClaimError,
    UnauthorizedError,
)
from src.pm_pool.domain.models import Pool
from src.pm_token.domain.ledger import TokenLedgerProtocol

# CreatePool has no caller check: whoever creates a pool becomes its authority.
REQUIRED_ROLES: dict[PoolOperation, Role] = {
    PoolOperation.MINT: Role.ANY,
    PoolOperation.PROPOSE: Role.AUTHORITY,
    PoolOperation.DISPUTE: Role.LOSING_SIDE_STAKER,
    PoolOperation.RESOLVE: Role.AUTHORITY,
    PoolOperation.FINALIZE: Role.ANY,
    PoolOperation.CLAIM: Role.WINNING_SIDE_HOLDER,
}


async def check_capability(
    operation: PoolOperation,
    pool: Pool,
    caller: str,
    ledger: TokenLedgerProtocol,
) -> int:
    """Raise if caller lacks the role for operation.

    Returns the token balance that qualified the caller, 0 for roles that are
    not stake based. Balances are read at call time, never from a snapshot.
    """
    role = REQUIRED_ROLES[operation]

    if role is Role.ANY:
        return 0

    if role is Role.AUTHORITY:
        if caller != pool.authority:
            raise UnauthorizedError(caller)
        return 0

    if role is Role.LOSING_SIDE_STAKER:
        assert pool.losing_side is not None, "staker check requires a proposed winner"
        balance = await ledger.balance_of(pool.mint_for(pool.losing_side), caller)
        if balance < pool.dispute_threshold:
            raise InsufficientStakeToDisputeError(pool.dispute_threshold, balance)
        return balance

    # Role.WINNING_SIDE_HOLDER
    assert pool.winning_side is not None, "holder check requires a winner"
    balance = await ledger.balance_of(pool.mint_for(pool.winning_side), caller)
    if balance <= 0:
        raise NothingToClaimError(caller)
    return balance
