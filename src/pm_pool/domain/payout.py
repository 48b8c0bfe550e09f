"""Claim payout arithmetic.

All amounts are integer token units; one unit of collateral backs each minted
token, so a pool's collateral is total_yes_tokens + total_no_tokens. Winners
split the whole collateral pro rata to their share of the winning side:

    payout = balance * total_collateral // winning_total

Floor division leaves a remainder of less than one unit per claimant. The
claim that burns the last outstanding winning token sweeps whatever is left,
so the sum of all payouts equals total_collateral exactly.
"""

from src.pm_pool.domain.models import Pool


def compute_payout(pool: Pool, balance: int) -> int:
    """Collateral released to a holder of `balance` winning tokens."""
    if pool.solution_winner is None:
        raise ValueError(f"Pool {pool.id} has no winner")
    winning_total = pool.total_for(pool.solution_winner)
    if balance <= 0 or winning_total <= 0:
        return 0

    collateral = pool.total_collateral
    outstanding = winning_total - pool.total_claimed_tokens
    if balance >= outstanding:
        return collateral - pool.total_paid_out
    return balance * collateral // winning_total
