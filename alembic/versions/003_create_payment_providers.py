"""003: create payment_providers table

Revision ID: 003
Revises: 002
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE payment_providers (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            name            VARCHAR(50)     NOT NULL,
            display_name    VARCHAR(100)    NOT NULL,
            is_active       BOOLEAN         NOT NULL DEFAULT TRUE,
            config          JSONB           NOT NULL DEFAULT '{}'::jsonb,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_payment_providers_name UNIQUE (name),
            CONSTRAINT ck_payment_providers_name_slug CHECK (name ~ '^[a-z0-9][a-z0-9_-]*$')
        );
    """)
    op.execute("CREATE INDEX idx_payment_providers_active ON payment_providers (is_active);")
    op.execute("""
        CREATE TRIGGER trg_payment_providers_updated_at
            BEFORE UPDATE ON payment_providers
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS payment_providers CASCADE;")
