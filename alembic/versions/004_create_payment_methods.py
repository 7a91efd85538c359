"""004: create payment_methods table

uq_payment_methods_one_default is a partial unique index: at most one row
per user may carry is_default = TRUE. ck_payment_methods_default_active keeps
an inactive method from being the default.

Revision ID: 004
Revises: 003
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE payment_methods (
            id                  UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id             UUID            NOT NULL,
            provider_id         UUID            NOT NULL,
            provider_method_id  VARCHAR(255)    NOT NULL,
            type                VARCHAR(20)     NOT NULL,
            last4               VARCHAR(4),
            expiry_month        SMALLINT,
            expiry_year         SMALLINT,
            brand               VARCHAR(50),
            is_active           BOOLEAN         NOT NULL DEFAULT TRUE,
            is_default          BOOLEAN         NOT NULL DEFAULT FALSE,
            metadata            JSONB           NOT NULL DEFAULT '{}'::jsonb,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT fk_payment_methods_user
                FOREIGN KEY (user_id) REFERENCES users (id) ON DELETE CASCADE,
            CONSTRAINT fk_payment_methods_provider
                FOREIGN KEY (provider_id) REFERENCES payment_providers (id) ON DELETE RESTRICT,
            CONSTRAINT uq_payment_methods_provider_method_user
                UNIQUE (provider_id, provider_method_id, user_id),
            CONSTRAINT ck_payment_methods_type CHECK (
                type IN ('CREDIT_CARD', 'DEBIT_CARD', 'BANK_ACCOUNT', 'DIGITAL_WALLET', 'OTHER')
            ),
            CONSTRAINT ck_payment_methods_last4 CHECK (last4 IS NULL OR last4 ~ '^[0-9]{4}$'),
            CONSTRAINT ck_payment_methods_expiry_month
                CHECK (expiry_month IS NULL OR expiry_month BETWEEN 1 AND 12),
            CONSTRAINT ck_payment_methods_default_active CHECK (is_active OR NOT is_default)
        );
    """)
    op.execute("""
        CREATE UNIQUE INDEX uq_payment_methods_one_default
            ON payment_methods (user_id) WHERE is_default;
    """)
    op.execute("CREATE INDEX idx_payment_methods_user ON payment_methods (user_id, is_active);")
    op.execute("CREATE INDEX idx_payment_methods_provider ON payment_methods (provider_id);")
    op.execute("""
        CREATE TRIGGER trg_payment_methods_updated_at
            BEFORE UPDATE ON payment_methods
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS payment_methods CASCADE;")
