"""Pool conservation checks against the token ledger."""

import logging

from src.pm_common.enums import Side
from src.pm_pool.domain.models import Pool
from src.pm_token.domain.ledger import TokenLedgerProtocol

logger = logging.getLogger(__name__)


async def verify_pool_invariants(pool: Pool, ledger: TokenLedgerProtocol) -> None:
    """Verify a pool's tallies against ledger supply. Raises AssertionError if violated.

    POOL-1: side totals are non-negative
    POOL-2: ledger supply of each side + tokens burned by claims == side total
    POOL-3: total_paid_out <= total collateral
    POOL-4: once every winning token is claimed, total_paid_out == total collateral
    """
    yes = pool.total_yes_tokens
    no = pool.total_no_tokens
    assert yes >= 0 and no >= 0, f"POOL-1 violated: pool={pool.id} yes={yes} no={no}"

    for side in (Side.YES, Side.NO):
        supply = await ledger.total_supply(pool.mint_for(side))
        burned = pool.total_claimed_tokens if side is pool.winning_side and pool.is_finalized else 0
        expected = pool.total_for(side)
        assert supply + burned == expected, (
            f"POOL-2 violated: pool={pool.id} side={side.value} "
            f"supply({supply}) + claimed({burned}) = {supply + burned} != total={expected}"
        )

    collateral = pool.total_collateral
    paid = pool.total_paid_out
    assert paid <= collateral, (
        f"POOL-3 violated: pool={pool.id} paid_out={paid} > collateral={collateral}"
    )

    if pool.is_finalized and pool.winning_side is not None:
        winning_total = pool.total_for(pool.winning_side)
        if winning_total > 0 and pool.total_claimed_tokens == winning_total:
            assert paid == collateral, (
                f"POOL-4 violated: pool={pool.id} all winners claimed but "
                f"paid_out={paid} != collateral={collateral}"
            )

    logger.debug(
        "Invariants OK: pool=%s yes=%d no=%d paid_out=%d", pool.id, yes, no, paid
    )
