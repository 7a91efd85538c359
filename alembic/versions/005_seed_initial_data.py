"""005: seed initial data

Sample users (two with API keys for local testing), the three built-in
providers, and a few payment methods. Idempotent via ON CONFLICT.

Revision ID: 005
Revises: 004
Create Date: 2026-10-12
"""

from typing import Sequence, Union

from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        INSERT INTO users (name, phone, email, api_key) VALUES
            ('John Doe',       '081234567890', 'john.doe@example.com',     'test-api-key-1'),
            ('Jane Smith',     '081987654321', 'jane.smith@example.com',   'test-api-key-2'),
            ('Ahmad Wijaya',   '082111222333', 'ahmad.wijaya@example.com', NULL),
            ('Siti Nurhaliza', '085444555666', NULL,                       NULL)
        ON CONFLICT (phone) DO NOTHING;
    """)

    op.execute("""
        INSERT INTO payment_providers (name, display_name, is_active, config) VALUES
            ('stripe',   'Stripe',   TRUE,
             '{"apiKey": "sk_test_...", "webhookSecret": "whsec_..."}'::jsonb),
            ('paypal',   'PayPal',   TRUE,
             '{"clientId": "test_client_id", "clientSecret": "test_client_secret", "sandbox": true}'::jsonb),
            ('midtrans', 'Midtrans', TRUE,
             '{"serverKey": "SB-Mid-server-...", "clientKey": "SB-Mid-client-...", "environment": "sandbox"}'::jsonb)
        ON CONFLICT (name) DO NOTHING;
    """)

    op.execute("""
        INSERT INTO payment_methods (
            user_id, provider_id, provider_method_id, type,
            last4, expiry_month, expiry_year, brand, is_default, metadata
        )
        SELECT u.id, p.id, v.provider_method_id, v.type,
               v.last4, v.expiry_month, v.expiry_year, v.brand, v.is_default, v.metadata::jsonb
        FROM (VALUES
            ('081234567890', 'stripe',   'pm_1234567890',    'CREDIT_CARD',
             '4242', 12::smallint, 2030::smallint, 'visa', TRUE,
             '{"fingerprint": "F1234567890ABCDEF", "country": "US"}'),
            ('081234567890', 'paypal',   'PAYPAL-ACCOUNT-1', 'DIGITAL_WALLET',
             NULL, NULL, NULL, NULL, FALSE,
             '{"email": "john.doe@example.com", "payerId": "PAYPAL-PAYER-ID-1"}'),
            ('081987654321', 'stripe',   'pm_0987654321',    'DEBIT_CARD',
             '5555', 8::smallint, 2029::smallint, 'mastercard', TRUE,
             '{"fingerprint": "F0987654321FEDCBA", "country": "US"}'),
            ('081987654321', 'midtrans', 'BCA-VA-12345',     'BANK_ACCOUNT',
             NULL, NULL, NULL, NULL, FALSE,
             '{"bankName": "BCA", "accountNumber": "1234567890", "accountHolder": "Jane Smith"}')
        ) AS v (phone, provider, provider_method_id, type,
                last4, expiry_month, expiry_year, brand, is_default, metadata)
        JOIN users u ON u.phone = v.phone
        JOIN payment_providers p ON p.name = v.provider
        ON CONFLICT (provider_id, provider_method_id, user_id) DO NOTHING;
    """)


def downgrade() -> None:
    op.execute("""
        DELETE FROM payment_methods
        WHERE provider_method_id IN
            ('pm_1234567890', 'PAYPAL-ACCOUNT-1', 'pm_0987654321', 'BCA-VA-12345');
    """)
    op.execute("DELETE FROM payment_providers WHERE name IN ('stripe', 'paypal', 'midtrans');")
    op.execute("""
        DELETE FROM users
        WHERE phone IN ('081234567890', '081987654321', '082111222333', '085444555666');
    """)
