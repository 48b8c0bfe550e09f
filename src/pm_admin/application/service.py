# src/pm_admin/application/service.py
"""Admin application service."""
import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_pool.application.service import LedgerFactory
from src.pm_pool.domain.invariants import verify_pool_invariants
from src.pm_pool.domain.repository import PoolRepositoryProtocol
from src.pm_pool.infrastructure.persistence import PoolRepository
from src.pm_token.infrastructure.persistence import SqlTokenLedger

logger = logging.getLogger(__name__)


class AdminService:
    def __init__(
        self,
        repo: PoolRepositoryProtocol | None = None,
        ledger_factory: LedgerFactory | None = None,
    ) -> None:
        self._repo: PoolRepositoryProtocol = repo or PoolRepository()
        self._ledger_factory: LedgerFactory = ledger_factory or SqlTokenLedger

    async def verify_all_invariants(self, db: AsyncSession) -> dict[str, Any]:
        """Run POOL-1..4 over every pool; collect violations instead of stopping."""
        violations: list[str] = []
        ledger = self._ledger_factory(db)
        pools = await self._repo.list_all_pools(db)
        for pool in pools:
            try:
                await verify_pool_invariants(pool, ledger)
            except AssertionError as e:
                logger.error("%s", e)
                violations.append(str(e))
        return {
            "ok": len(violations) == 0,
            "pools_checked": len(pools),
            "violations": violations,
        }
