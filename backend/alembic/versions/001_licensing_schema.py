"""Licensing schema — users, OAuth, RSL licenses, payments, audit, webhooks.

Revision ID: 001_licensing
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_licensing"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column("id", sa.String(36), primary_key=True)


def _created_at(name: str = "created_at") -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())


def upgrade() -> None:
    op.create_table(
        "users",
        _id(),
        sa.Column("email", sa.String(320), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(200), nullable=False),
        sa.Column("user_type", sa.String(20), nullable=False, server_default="individual"),
        sa.Column("country_code", sa.String(2), nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        _created_at(),
        _created_at("updated_at"),
    )

    op.create_table(
        "oauth_clients",
        _id(),
        sa.Column("client_id", sa.String(100), nullable=False, unique=True),
        sa.Column("client_secret", sa.String(200), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("redirect_uris", sa.JSON, nullable=False),
        sa.Column("grant_types", sa.JSON, nullable=False),
        sa.Column("scope", sa.String(200), nullable=False, server_default="read,write,license"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        _created_at(),
    )

    op.create_table(
        "oauth_tokens",
        _id(),
        sa.Column("access_token", sa.String(100), nullable=False, unique=True),
        sa.Column("refresh_token", sa.String(120), nullable=True, unique=True),
        sa.Column("client_id", sa.String(36), sa.ForeignKey("oauth_clients.id"), nullable=False),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("scope", sa.String(200), nullable=False, server_default=""),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        _created_at(),
    )
    op.create_index("idx_oauth_tokens_access_token", "oauth_tokens", ["access_token"])
    op.create_index("idx_oauth_tokens_user_id", "oauth_tokens", ["user_id"])

    op.create_table(
        "jwk_keys",
        _id(),
        sa.Column("key_id", sa.String(100), nullable=False, unique=True),
        sa.Column("key_type", sa.String(10), nullable=False),
        sa.Column("use_type", sa.String(10), nullable=False, server_default="sig"),
        sa.Column("algorithm", sa.String(20), nullable=False),
        sa.Column("public_key", sa.JSON, nullable=False),
        sa.Column("private_key", sa.Text, nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        _created_at(),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        "rsl_licenses",
        _id(),
        sa.Column("license_id", sa.String(100), nullable=False, unique=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("content_id", sa.String(200), nullable=False),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("file_type", sa.String(100), nullable=False),
        sa.Column("file_size", sa.Integer, nullable=False, server_default="0"),
        sa.Column("file_hash", sa.String(200), nullable=False),
        sa.Column("content_url", sa.String(2000), nullable=True),
        sa.Column("xml_content", sa.Text, nullable=False),
        sa.Column("permissions", sa.JSON, nullable=False),
        sa.Column("user_types", sa.JSON, nullable=False),
        sa.Column("geographic_restrictions", sa.JSON, nullable=False),
        sa.Column("payment_model", sa.JSON, nullable=False),
        sa.Column("warranty_declaration", sa.JSON, nullable=False),
        sa.Column("disclaimer_config", sa.JSON, nullable=False),
        _created_at(),
        _created_at("updated_at"),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
    )
    op.create_index("idx_rsl_licenses_user_id", "rsl_licenses", ["user_id"])
    op.create_index("idx_rsl_licenses_content_id", "rsl_licenses", ["content_id"])

    op.create_table(
        "file_metadata",
        _id(),
        sa.Column("license_id", sa.String(36), sa.ForeignKey("rsl_licenses.id"), nullable=False),
        sa.Column("file_path", sa.String(1000), nullable=False),
        sa.Column("metadata_type", sa.String(10), nullable=False),
        sa.Column("embedded_data", sa.Text, nullable=False),
        sa.Column("position", sa.Integer, nullable=True),
        sa.Column("size", sa.Integer, nullable=False, server_default="0"),
        _created_at(),
        sa.CheckConstraint(
            "metadata_type IN ('exif', 'xmp', 'id3', 'html', 'sidecar')",
            name="ck_file_metadata_type",
        ),
    )

    op.create_table(
        "content_encryption",
        _id(),
        sa.Column("license_id", sa.String(36), sa.ForeignKey("rsl_licenses.id"), nullable=False),
        sa.Column("key_id", sa.String(100), nullable=False),
        sa.Column("algorithm", sa.String(30), nullable=False, server_default="AES-128-CTR"),
        sa.Column("iv", sa.String(64), nullable=False),
        _created_at(),
    )

    op.create_table(
        "audit_trail",
        _id(),
        sa.Column("license_id", sa.String(36), sa.ForeignKey("rsl_licenses.id"), nullable=True),
        sa.Column("user_id", sa.String(100), nullable=True),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("ip_address", sa.String(64), nullable=True),
        sa.Column("user_agent", sa.String(500), nullable=True),
        sa.Column("details", sa.JSON, nullable=True),
        _created_at("timestamp"),
    )
    op.create_index("idx_audit_trail_license_id", "audit_trail", ["license_id"])
    op.create_index("idx_audit_trail_user_id", "audit_trail", ["user_id"])
    op.create_index("idx_audit_trail_timestamp", "audit_trail", ["timestamp"])

    op.create_table(
        "payment_transactions",
        _id(),
        sa.Column("license_id", sa.String(36), sa.ForeignKey("rsl_licenses.id"), nullable=False),
        sa.Column("user_id", sa.String(100), nullable=False),
        sa.Column("amount", sa.Numeric(12, 4), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default="USD"),
        sa.Column("payment_method", sa.String(20), nullable=False),
        sa.Column("payment_provider", sa.String(20), nullable=False),
        sa.Column("provider_transaction_id", sa.String(200), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        _created_at(),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "status IN ('pending', 'completed', 'failed', 'refunded')",
            name="ck_payment_transactions_status",
        ),
    )

    op.create_table(
        "license_templates",
        sa.Column("id", sa.String(50), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("permissions", sa.JSON, nullable=False),
        sa.Column("user_types", sa.JSON, nullable=False),
        sa.Column("payment_model", sa.JSON, nullable=False),
        sa.Column("geographic_restrictions", sa.JSON, nullable=False),
        sa.Column("is_default", sa.Boolean, nullable=False, server_default=sa.false()),
        _created_at(),
        _created_at("updated_at"),
    )

    op.create_table(
        "webhook_endpoints",
        _id(),
        sa.Column("owner_id", sa.String(36), nullable=False),
        sa.Column("url", sa.String(2000), nullable=False),
        sa.Column("events", sa.JSON, nullable=False),
        sa.Column("secret", sa.String(64), nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        _created_at(),
    )
    op.create_index("ix_webhook_endpoints_owner_id", "webhook_endpoints", ["owner_id"])

    op.create_table(
        "webhook_events",
        _id(),
        sa.Column(
            "webhook_id", sa.String(36),
            sa.ForeignKey("webhook_endpoints.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("event_type", sa.String(50), nullable=False),
        sa.Column("payload", sa.Text, nullable=False),
        sa.Column("status", sa.String(10), nullable=False, server_default="pending"),
        sa.Column("attempts", sa.Integer, nullable=False, server_default="0"),
        sa.Column("response_status", sa.Integer, nullable=True),
        sa.Column("last_attempt_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        sa.CheckConstraint(
            "status IN ('pending', 'sent', 'failed')",
            name="ck_webhook_events_status",
        ),
    )


def downgrade() -> None:
    op.drop_table("webhook_events")
    op.drop_index("ix_webhook_endpoints_owner_id", table_name="webhook_endpoints")
    op.drop_table("webhook_endpoints")
    op.drop_table("license_templates")
    op.drop_table("payment_transactions")
    op.drop_table("audit_trail")
    op.drop_table("content_encryption")
    op.drop_table("file_metadata")
    op.drop_table("rsl_licenses")
    op.drop_table("jwk_keys")
    op.drop_table("oauth_tokens")
    op.drop_table("oauth_clients")
    op.drop_table("users")
