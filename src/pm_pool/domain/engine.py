"""Settlement state machine for a binary prediction pool.

Phases, strictly forward:

    FUNDING -> PROPOSED -> [DISPUTED -> PROPOSED]* -> FINALIZED

with a per-user "claimed" state on top of FINALIZED (the user's winning
balance burned to zero).

Every operation runs its guards in the same order: phase flags, then timing
against the injected clock, then the caller capability (see capabilities.py),
and only then mutates the Pool and issues at most one instruction to the token
ledger. A rejected operation leaves the Pool untouched.

The engine does no I/O of its own besides the ledger; serializing operations
on one pool is the caller's job (the application service holds a row lock).
"""

import logging
from datetime import datetime, timedelta, timezone

from src.pm_common.datetime_utils import Clock, SystemClock
from src.pm_common.enums import PoolOperation, Side
from src.pm_common.errors import (
    AlreadyDisputedError,
    AlreadyFinalizedError,
    AlreadyProposedError,
    DisputeWindowClosedError,
    InvalidAmountError,
    InvalidParametersError,
    NotDisputedError,
    NotProposedError,
    NotReadyError,
    PoolClosedError,
    PoolNotFinalizedError,
    TooEarlyError,
)
from src.pm_pool.domain.capabilities import check_capability
from src.pm_pool.domain.models import ClaimReceipt, Pool, mint_id_for
from src.pm_pool.domain.payout import compute_payout
from src.pm_token.domain.ledger import TokenLedgerProtocol

logger = logging.getLogger(__name__)

DEFAULT_NAME_MAX_LENGTH = 32
DEFAULT_DESCRIPTION_MAX_LENGTH = 256

# Token amounts and thresholds are stored as BIGINT.
MAX_TOKEN_AMOUNT = 2**63 - 1


def _as_utc(instant: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant


def _window_end(start: datetime, seconds: int) -> datetime:
    """start + seconds, or InvalidParametersError if not representable."""
    try:
        return start + timedelta(seconds=seconds)
    except OverflowError:
        raise InvalidParametersError(
            f"dispute window of {seconds}s from {start.isoformat()} is out of range"
        ) from None


class SettlementEngine:
    def __init__(
        self,
        ledger: TokenLedgerProtocol,
        clock: Clock | None = None,
        reset_window_on_resolve: bool = False,
        name_max_length: int = DEFAULT_NAME_MAX_LENGTH,
        description_max_length: int = DEFAULT_DESCRIPTION_MAX_LENGTH,
    ) -> None:
        self._ledger = ledger
        self._clock: Clock = clock or SystemClock()
        self._reset_window_on_resolve = reset_window_on_resolve
        self._name_max_length = name_max_length
        self._description_max_length = description_max_length

    # ------------------------------------------------------------------
    # CreatePool
    # ------------------------------------------------------------------

    def create_pool(
        self,
        pool_id: str,
        authority: str,
        end_time: datetime,
        dispute_period_seconds: int,
        dispute_threshold: int,
        name: str,
        description: str,
    ) -> Pool:
        now = self._clock.now()
        end_time = _as_utc(end_time)

        if end_time <= now:
            raise InvalidParametersError("end_time must be in the future")
        if dispute_period_seconds <= 0:
            raise InvalidParametersError("dispute_period_seconds must be positive")
        if dispute_threshold < 0:
            raise InvalidParametersError("dispute_threshold must not be negative")
        if dispute_threshold > MAX_TOKEN_AMOUNT:
            raise InvalidParametersError(
                f"dispute_threshold must not exceed {MAX_TOKEN_AMOUNT}"
            )
        # Every later window starts at or after end_time; the first must be representable.
        _window_end(end_time, dispute_period_seconds)
        if len(name) > self._name_max_length:
            raise InvalidParametersError(
                f"name longer than {self._name_max_length} characters"
            )
        if len(description) > self._description_max_length:
            raise InvalidParametersError(
                f"description longer than {self._description_max_length} characters"
            )

        pool = Pool(
            id=pool_id,
            authority=authority,
            yes_mint=mint_id_for(pool_id, Side.YES),
            no_mint=mint_id_for(pool_id, Side.NO),
            name=name,
            description=description,
            end_time=end_time,
            dispute_period_seconds=dispute_period_seconds,
            dispute_threshold=dispute_threshold,
            created_at=now,
            updated_at=now,
        )
        logger.info(
            "Pool created: pool=%s authority=%s end_time=%s",
            pool.id, authority, end_time.isoformat(),
        )
        return pool

    # ------------------------------------------------------------------
    # MintPosition
    # ------------------------------------------------------------------

    async def mint_position(self, pool: Pool, user: str, amount: int, side: Side) -> Pool:
        if amount <= 0:
            raise InvalidAmountError(amount)
        if pool.total_collateral + amount > MAX_TOKEN_AMOUNT:
            raise InvalidAmountError(
                amount, f"pool collateral would exceed {MAX_TOKEN_AMOUNT}"
            )
        now = self._clock.now()
        if pool.solution_proposed or pool.is_finalized or now >= pool.end_time:
            raise PoolClosedError(pool.id)
        await check_capability(PoolOperation.MINT, pool, user, self._ledger)

        await self._ledger.mint(pool.mint_for(side), user, amount)
        if side is Side.YES:
            pool.total_yes_tokens += amount
        else:
            pool.total_no_tokens += amount
        pool.updated_at = now

        logger.info(
            "Position minted: pool=%s user=%s side=%s amount=%d",
            pool.id, user, side.value, amount,
        )
        return pool

    # ------------------------------------------------------------------
    # ProposeSolution
    # ------------------------------------------------------------------

    async def propose_solution(self, pool: Pool, caller: str, winner: Side) -> Pool:
        if pool.solution_proposed:
            raise AlreadyProposedError(pool.id)
        now = self._clock.now()
        if now < pool.end_time:
            raise TooEarlyError(pool.id)
        await check_capability(PoolOperation.PROPOSE, pool, caller, self._ledger)

        window_end = _window_end(now, pool.dispute_period_seconds)
        pool.solution_proposed = True
        pool.solution_winner = winner
        pool.proposed_at = now
        pool.dispute_period_end = window_end
        pool.updated_at = now

        logger.info(
            "Solution proposed: pool=%s winner=%s dispute_period_end=%s",
            pool.id, winner.value, pool.dispute_period_end.isoformat(),
        )
        return pool

    # ------------------------------------------------------------------
    # DisputeSolution
    # ------------------------------------------------------------------

    async def dispute_solution(self, pool: Pool, caller: str) -> Pool:
        if pool.is_finalized:
            raise AlreadyFinalizedError(pool.id)
        if not pool.solution_proposed:
            raise NotProposedError(pool.id)
        if pool.is_disputed:
            raise AlreadyDisputedError(pool.id)
        now = self._clock.now()
        assert pool.dispute_period_end is not None
        if now >= pool.dispute_period_end:
            raise DisputeWindowClosedError(pool.id)
        stake = await check_capability(PoolOperation.DISPUTE, pool, caller, self._ledger)

        pool.is_disputed = True
        pool.disputer = caller
        pool.updated_at = now

        logger.info(
            "Solution disputed: pool=%s disputer=%s stake=%d", pool.id, caller, stake
        )
        return pool

    # ------------------------------------------------------------------
    # ResolveDispute
    # ------------------------------------------------------------------

    async def resolve_dispute(self, pool: Pool, caller: str, new_winner: Side) -> Pool:
        if pool.is_finalized:
            raise AlreadyFinalizedError(pool.id)
        if not pool.is_disputed:
            raise NotDisputedError(pool.id)
        await check_capability(PoolOperation.RESOLVE, pool, caller, self._ledger)

        now = self._clock.now()
        window_end = pool.dispute_period_end
        if self._reset_window_on_resolve:
            window_end = _window_end(now, pool.dispute_period_seconds)
            pool.proposed_at = now
        pool.solution_winner = new_winner
        pool.is_disputed = False
        pool.dispute_period_end = window_end
        pool.updated_at = now

        logger.info(
            "Dispute resolved: pool=%s winner=%s dispute_period_end=%s",
            pool.id, new_winner.value,
            pool.dispute_period_end.isoformat() if pool.dispute_period_end else None,
        )
        return pool

    # ------------------------------------------------------------------
    # FinalizePool
    # ------------------------------------------------------------------

    async def finalize_pool(self, pool: Pool, caller: str) -> Pool:
        if pool.is_finalized:
            raise AlreadyFinalizedError(pool.id)
        if not pool.solution_proposed:
            raise NotProposedError(pool.id)
        # Blocked for as long as a dispute is open, however much time has passed.
        if pool.is_disputed:
            raise NotReadyError(f"pool {pool.id} is disputed")
        now = self._clock.now()
        assert pool.dispute_period_end is not None
        if now < pool.dispute_period_end:
            raise NotReadyError(
                f"dispute window for {pool.id} open until "
                f"{pool.dispute_period_end.isoformat()}"
            )
        await check_capability(PoolOperation.FINALIZE, pool, caller, self._ledger)

        pool.is_finalized = True
        pool.finalized_at = now
        pool.updated_at = now

        logger.info(
            "Pool finalized: pool=%s winner=%s by=%s",
            pool.id, pool.solution_winner.value if pool.solution_winner else None, caller,
        )
        return pool

    # ------------------------------------------------------------------
    # ClaimWinnings
    # ------------------------------------------------------------------

    async def claim_winnings(self, pool: Pool, user: str) -> ClaimReceipt:
        if not pool.is_finalized:
            raise PoolNotFinalizedError(pool.id)
        balance = await check_capability(PoolOperation.CLAIM, pool, user, self._ledger)

        winner = pool.winning_side
        assert winner is not None
        payout = compute_payout(pool, balance)
        await self._ledger.burn(pool.mint_for(winner), user, balance)

        now = self._clock.now()
        pool.total_claimed_tokens += balance
        pool.total_paid_out += payout
        pool.updated_at = now

        logger.info(
            "Winnings claimed: pool=%s user=%s tokens=%d payout=%d",
            pool.id, user, balance, payout,
        )
        return ClaimReceipt(
            pool_id=pool.id,
            user_id=user,
            side=winner,
            tokens_burned=balance,
            payout=payout,
            claimed_at=now,
        )
