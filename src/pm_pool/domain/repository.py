# src/pm_pool/domain/repository.py
"""Repository Protocol: dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_pool.domain.models import ClaimReceipt, Pool


class PoolRepositoryProtocol(Protocol):
    async def insert_pool(self, db: AsyncSession, pool: Pool) -> None: ...

    async def get_pool_by_id(self, db: AsyncSession, pool_id: str) -> Pool | None: ...

    async def get_pool_for_update(
        self, db: AsyncSession, pool_id: str
    ) -> Pool | None: ...

    async def save_pool(self, db: AsyncSession, pool: Pool) -> None: ...

    async def list_pools(
        self,
        db: AsyncSession,
        phase: str | None,
        cursor_ts: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Pool]: ...

    async def list_all_pools(self, db: AsyncSession) -> list[Pool]: ...

    async def insert_claim(self, db: AsyncSession, receipt: ClaimReceipt) -> ClaimReceipt: ...

    async def list_claims(self, db: AsyncSession, pool_id: str) -> list[ClaimReceipt]: ...
