"""Domain models for pm_pool: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime

from src.pm_common.enums import PoolPhase, Side


def mint_id_for(pool_id: str, side: Side) -> str:
    """Token kind identifier for one side of a pool."""
    return f"{pool_id}:{side.value}"


@dataclass
class Pool:
    id: str
    authority: str
    yes_mint: str
    no_mint: str
    name: str
    description: str
    end_time: datetime
    dispute_period_seconds: int
    dispute_threshold: int
    total_yes_tokens: int = 0
    total_no_tokens: int = 0
    solution_proposed: bool = False
    solution_winner: Side | None = None
    is_disputed: bool = False
    disputer: str | None = None          # kept after resolution for audit
    proposed_at: datetime | None = None  # start of the dispute window
    dispute_period_end: datetime | None = None
    is_finalized: bool = False
    finalized_at: datetime | None = None
    total_claimed_tokens: int = 0        # winning tokens burned by claims
    total_paid_out: int = 0              # collateral released by claims
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def phase(self) -> PoolPhase:
        if self.is_finalized:
            return PoolPhase.FINALIZED
        if self.is_disputed:
            return PoolPhase.DISPUTED
        if self.solution_proposed:
            return PoolPhase.PROPOSED
        return PoolPhase.FUNDING

    @property
    def total_collateral(self) -> int:
        # One unit of collateral backs each minted token.
        return self.total_yes_tokens + self.total_no_tokens

    def mint_for(self, side: Side) -> str:
        return self.yes_mint if side is Side.YES else self.no_mint

    def total_for(self, side: Side) -> int:
        return self.total_yes_tokens if side is Side.YES else self.total_no_tokens

    @property
    def winning_side(self) -> Side | None:
        return self.solution_winner

    @property
    def losing_side(self) -> Side | None:
        return self.solution_winner.opposite if self.solution_winner is not None else None


@dataclass
class ClaimReceipt:
    """Audit record for one successful ClaimWinnings."""

    pool_id: str
    user_id: str
    side: Side
    tokens_burned: int
    payout: int
    claimed_at: datetime
    id: int | None = None  # BIGSERIAL, assigned on insert


@dataclass
class UserPosition:
    """Read model: a user's balances in one pool, as held by the token ledger."""

    pool_id: str
    user_id: str
    yes_balance: int
    no_balance: int
