"""initial billing schema: companies, shops, verifications, top-ups, ledger

Revision ID: 4f1c2a9d7e01
Revises: 
Create Date: 2026-10-19 09:00:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "4f1c2a9d7e01"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "companies",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=150), nullable=False),
        sa.Column("balance_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("currency", sa.String(length=10), nullable=False, server_default="CZK"),
        sa.Column("version", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
        sa.CheckConstraint("balance_cents >= 0", name="ck_companies_balance_non_negative"),
    )

    op.create_table(
        "shops",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("company_id", sa.String(length=36), sa.ForeignKey("companies.id"), nullable=False),
        sa.Column("name", sa.String(length=150), nullable=False),
        sa.Column("api_key", sa.String(length=100), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="active"),
        sa.Column("allowed_methods", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_shops_company_id", "shops", ["company_id"])
    op.create_index("ix_shops_api_key", "shops", ["api_key"], unique=True)

    op.create_table(
        "verifications",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("shop_id", sa.String(length=36), sa.ForeignKey("shops.id"), nullable=False),
        sa.Column("company_id", sa.String(length=36), sa.ForeignKey("companies.id"), nullable=False),
        sa.Column("method", sa.String(length=20), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("result", sa.String(length=20)),
        sa.Column("price_cents", sa.Integer(), nullable=False),
        sa.Column("user_identifier", sa.String(length=255)),
        sa.Column("redirect_url", sa.String(length=2048)),
        sa.Column("details", sa.Text()),
        sa.Column("error_message", sa.Text()),
        sa.Column("refunded", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("completed_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_verifications_shop_id", "verifications", ["shop_id"])
    op.create_index("ix_verifications_company_id", "verifications", ["company_id"])
    op.create_index("ix_verifications_user_identifier", "verifications", ["user_identifier"])

    op.create_table(
        "wallet_transactions",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("company_id", sa.String(length=36), sa.ForeignKey("companies.id"), nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("currency", sa.String(length=10), nullable=False, server_default="CZK"),
        sa.Column("external_reference", sa.String(length=20), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("confirmed_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_wallet_transactions_company_id", "wallet_transactions", ["company_id"])
    op.create_index(
        "ix_wallet_transactions_external_reference",
        "wallet_transactions",
        ["external_reference"],
        unique=True,
    )

    op.create_table(
        "ledger_entries",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("company_id", sa.String(length=36), sa.ForeignKey("companies.id"), nullable=False),
        sa.Column("kind", sa.String(length=20), nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("verification_id", sa.String(length=36), sa.ForeignKey("verifications.id")),
        sa.Column("wallet_transaction_id", sa.String(length=36), sa.ForeignKey("wallet_transactions.id")),
        sa.Column("description", sa.String(length=255)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("kind", "verification_id", name="uq_ledger_entries_kind_verification"),
        sa.UniqueConstraint("kind", "wallet_transaction_id", name="uq_ledger_entries_kind_wallet_transaction"),
    )
    op.create_index("ix_ledger_entries_company_id", "ledger_entries", ["company_id"])


def downgrade() -> None:
    op.drop_index("ix_ledger_entries_company_id", table_name="ledger_entries")
    op.drop_table("ledger_entries")
    op.drop_index("ix_wallet_transactions_external_reference", table_name="wallet_transactions")
    op.drop_index("ix_wallet_transactions_company_id", table_name="wallet_transactions")
    op.drop_table("wallet_transactions")
    op.drop_index("ix_verifications_user_identifier", table_name="verifications")
    op.drop_index("ix_verifications_company_id", table_name="verifications")
    op.drop_index("ix_verifications_shop_id", table_name="verifications")
    op.drop_table("verifications")
    op.drop_index("ix_shops_api_key", table_name="shops")
    op.drop_index("ix_shops_company_id", table_name="shops")
    op.drop_table("shops")
    op.drop_table("companies")
