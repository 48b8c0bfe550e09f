"""003: create token_balances table

Revision ID: 003
Revises: 002
Create Date: 2026-10-05
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE token_balances (
            id          BIGSERIAL       PRIMARY KEY,
            token_kind  VARCHAR(80)     NOT NULL,
            user_id     VARCHAR(128)    NOT NULL,
            amount      BIGINT          NOT NULL DEFAULT 0,
            created_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_token_balances_kind_user UNIQUE (token_kind, user_id),
            CONSTRAINT ck_token_balances_amount_gte_0 CHECK (amount >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_token_balances_kind ON token_balances (token_kind);")
    op.execute("""
        CREATE TRIGGER trg_token_balances_updated_at
            BEFORE UPDATE ON token_balances
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TRIGGER IF EXISTS trg_token_balances_updated_at ON token_balances;")
    op.execute("DROP TABLE IF EXISTS token_balances;")
