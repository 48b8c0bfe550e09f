"""002: create pools table

Revision ID: 002
Revises: 001
Create Date: 2026-10-05
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE pools (
            id                      VARCHAR(64)     PRIMARY KEY,
            authority               VARCHAR(128)    NOT NULL,
            yes_mint                VARCHAR(80)     NOT NULL UNIQUE,
            no_mint                 VARCHAR(80)     NOT NULL UNIQUE,
            name                    VARCHAR(32)     NOT NULL,
            description             VARCHAR(256)    NOT NULL DEFAULT '',
            end_time                TIMESTAMPTZ     NOT NULL,
            dispute_period_seconds  BIGINT          NOT NULL,
            dispute_threshold       BIGINT          NOT NULL,
            total_yes_tokens        BIGINT          NOT NULL DEFAULT 0,
            total_no_tokens         BIGINT          NOT NULL DEFAULT 0,
            solution_proposed       BOOLEAN         NOT NULL DEFAULT FALSE,
            solution_winner         VARCHAR(3),
            is_disputed             BOOLEAN         NOT NULL DEFAULT FALSE,
            disputer                VARCHAR(128),
            proposed_at             TIMESTAMPTZ,
            dispute_period_end      TIMESTAMPTZ,
            is_finalized            BOOLEAN         NOT NULL DEFAULT FALSE,
            finalized_at            TIMESTAMPTZ,
            total_claimed_tokens    BIGINT          NOT NULL DEFAULT 0,
            total_paid_out          BIGINT          NOT NULL DEFAULT 0,
            created_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_pools_period_gt_0       CHECK (dispute_period_seconds > 0),
            CONSTRAINT ck_pools_threshold_gte_0   CHECK (dispute_threshold >= 0),
            CONSTRAINT ck_pools_yes_gte_0         CHECK (total_yes_tokens >= 0),
            CONSTRAINT ck_pools_no_gte_0          CHECK (total_no_tokens >= 0),
            CONSTRAINT ck_pools_paid_lte_collateral CHECK (
                total_paid_out <= total_yes_tokens + total_no_tokens
            ),
            CONSTRAINT ck_pools_winner CHECK (
                solution_winner IS NULL OR solution_winner IN ('YES', 'NO')
            ),
            CONSTRAINT ck_pools_proposal CHECK (
                solution_proposed = (solution_winner IS NOT NULL)
                AND solution_proposed = (dispute_period_end IS NOT NULL)
            ),
            CONSTRAINT ck_pools_disputed_requires_proposal CHECK (
                NOT is_disputed OR solution_proposed
            ),
            CONSTRAINT ck_pools_finalized CHECK (
                NOT is_finalized OR (solution_proposed AND NOT is_disputed)
            )
        );
    """)
    op.execute("CREATE INDEX idx_pools_created ON pools (created_at DESC, id DESC);")
    op.execute("""
        CREATE TRIGGER trg_pools_updated_at
            BEFORE UPDATE ON pools
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TRIGGER IF EXISTS trg_pools_updated_at ON pools;")
    op.execute("DROP TABLE IF EXISTS pools;")
