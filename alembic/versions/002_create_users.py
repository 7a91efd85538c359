"""002: create users table

Revision ID: 002
Revises: 001
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE users (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            name            VARCHAR(100)    NOT NULL,
            phone           VARCHAR(20)     NOT NULL,
            email           VARCHAR(255),
            api_key         VARCHAR(128),
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_users_phone       UNIQUE (phone),
            CONSTRAINT uq_users_email       UNIQUE (email),
            CONSTRAINT uq_users_api_key     UNIQUE (api_key),
            CONSTRAINT ck_users_name_len    CHECK (LENGTH(name) >= 2)
        );
    """)
    op.execute("CREATE INDEX idx_users_created_at ON users (created_at DESC);")
    op.execute("""
        CREATE TRIGGER trg_users_updated_at
            BEFORE UPDATE ON users
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)
    op.execute("COMMENT ON TABLE users IS 'Account holders; api_key authenticates provider/method routes';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS users CASCADE;")
