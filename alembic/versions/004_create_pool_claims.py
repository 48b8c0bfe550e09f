"""004: create pool_claims table

Revision ID: 004
Revises: 003
Create Date: 2026-10-05
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE pool_claims (
            id              BIGSERIAL       PRIMARY KEY,
            pool_id         VARCHAR(64)     NOT NULL REFERENCES pools(id),
            user_id         VARCHAR(128)    NOT NULL,
            side            VARCHAR(3)      NOT NULL,
            tokens_burned   BIGINT          NOT NULL,
            payout          BIGINT          NOT NULL,
            claimed_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_pool_claims_side CHECK (side IN ('YES', 'NO')),
            CONSTRAINT ck_pool_claims_tokens_gt_0 CHECK (tokens_burned > 0),
            CONSTRAINT ck_pool_claims_payout_gte_0 CHECK (payout >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_pool_claims_pool ON pool_claims (pool_id, id);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS pool_claims;")
