"""initial creator, wallet, payout-account and payout schema

Revision ID: 0001_donutsme
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision = "0001_donutsme"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(255), nullable=False),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column("display_name", sa.String(100), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_email", "users", ["email"])

    op.create_table(
        "user_settings",
        sa.Column("user_id", sa.String(255), nullable=False),
        sa.Column("auto_convert_btc", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("payout_schedule", sa.String(50), nullable=False, server_default="manual"),
        sa.Column("notification_email", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("notification_transaction", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("notification_payout", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id"),
    )

    op.create_table(
        "wallets",
        sa.Column("id", sa.String(255), nullable=False),
        sa.Column("user_id", sa.String(255), nullable=False),
        sa.Column("address", sa.String(255), nullable=False),
        sa.Column("chain_type", sa.String(50), nullable=False),
        sa.Column("wallet_type", sa.String(50), nullable=False),
        sa.Column("is_primary", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_wallets_user_id", "wallets", ["user_id"])
    op.create_index("ix_wallets_address", "wallets", ["address"])

    op.create_table(
        "wallet_balances",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("wallet_id", sa.String(255), nullable=False),
        sa.Column("chain", sa.String(50), nullable=False),
        sa.Column("asset", sa.String(50), nullable=False),
        sa.Column("raw_value", sa.String(100), nullable=False),
        sa.Column("raw_value_decimals", sa.Integer(), nullable=False),
        sa.Column("display_value_native", sa.String(50), nullable=True),
        sa.Column("display_value_usd", sa.String(50), nullable=True),
        sa.Column("snapshot_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["wallet_id"], ["wallets.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_wallet_balances_wallet_id", "wallet_balances", ["wallet_id"])
    op.create_index("ix_wallet_balances_snapshot_at", "wallet_balances", ["snapshot_at"])

    op.create_table(
        "transactions",
        sa.Column("id", sa.String(255), nullable=False),
        sa.Column("wallet_id", sa.String(255), nullable=False),
        sa.Column("user_id", sa.String(255), nullable=False),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("status", sa.String(50), nullable=False),
        sa.Column("chain", sa.String(50), nullable=False),
        sa.Column("asset", sa.String(50), nullable=False),
        sa.Column("amount", sa.String(100), nullable=False),
        sa.Column("amount_decimals", sa.Integer(), nullable=False),
        sa.Column("display_amount_native", sa.String(50), nullable=True),
        sa.Column("display_amount_usd", sa.String(50), nullable=True),
        sa.Column("from_address", sa.String(255), nullable=True),
        sa.Column("to_address", sa.String(255), nullable=True),
        sa.Column("tx_hash", sa.String(255), nullable=True),
        sa.Column("metadata", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["wallet_id"], ["wallets.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_transactions_wallet_id", "transactions", ["wallet_id"])
    op.create_index("ix_transactions_user_id", "transactions", ["user_id"])
    op.create_index("ix_transactions_type", "transactions", ["type"])
    op.create_index("ix_transactions_status", "transactions", ["status"])
    op.create_index("ix_transactions_created_at", "transactions", ["created_at"])

    op.create_table(
        "btc_conversions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(255), nullable=False),
        sa.Column("wallet_id", sa.String(255), nullable=False),
        sa.Column("transaction_id", sa.String(255), nullable=True),
        sa.Column("from_asset", sa.String(50), nullable=False),
        sa.Column("to_asset", sa.String(50), nullable=False),
        sa.Column("from_amount", sa.String(100), nullable=False),
        sa.Column("to_amount", sa.String(100), nullable=False),
        sa.Column("exchange_rate", sa.String(50), nullable=True),
        sa.Column("exchange_provider", sa.String(50), nullable=True),
        sa.Column("status", sa.String(50), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["wallet_id"], ["wallets.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["transaction_id"], ["transactions.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_btc_conversions_user_id", "btc_conversions", ["user_id"])
    op.create_index("ix_btc_conversions_status", "btc_conversions", ["status"])
    op.create_index("ix_btc_conversions_created_at", "btc_conversions", ["created_at"])

    op.create_table(
        "stripe_accounts",
        sa.Column("id", sa.String(255), nullable=False),
        sa.Column("user_id", sa.String(255), nullable=False),
        sa.Column("account_type", sa.String(50), nullable=False, server_default="express"),
        sa.Column("onboarding_completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("charges_enabled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("payouts_enabled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("country", sa.String(10), nullable=True),
        sa.Column("currency", sa.String(10), nullable=True),
        sa.Column("metadata", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_stripe_accounts_user_id", "stripe_accounts", ["user_id"], unique=True)

    op.create_table(
        "payouts",
        sa.Column("id", sa.String(255), nullable=False),
        sa.Column("user_id", sa.String(255), nullable=False),
        sa.Column("stripe_account_id", sa.String(255), nullable=False),
        sa.Column("amount", sa.String(100), nullable=False),
        sa.Column("currency", sa.String(10), nullable=False),
        sa.Column("status", sa.String(50), nullable=False),
        sa.Column("arrival_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("method", sa.String(50), nullable=True),
        sa.Column("destination_type", sa.String(50), nullable=True),
        sa.Column("destination_id", sa.String(255), nullable=True),
        sa.Column("failure_code", sa.String(50), nullable=True),
        sa.Column("failure_message", sa.Text(), nullable=True),
        sa.Column("metadata", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("last_event_created", sa.BigInteger(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["stripe_account_id"], ["stripe_accounts.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_payouts_user_id", "payouts", ["user_id"])
    op.create_index("ix_payouts_stripe_account_id", "payouts", ["stripe_account_id"])
    op.create_index("ix_payouts_status", "payouts", ["status"])
    op.create_index("ix_payouts_created_at", "payouts", ["created_at"])

    op.create_table(
        "stripe_webhook_events",
        sa.Column("event_id", sa.String(255), nullable=False),
        sa.Column("event_type", sa.String(100), nullable=False),
        sa.Column("outcome", sa.String(50), nullable=False),
        sa.Column("received_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("event_id"),
    )
    op.create_index("ix_stripe_webhook_events_event_type", "stripe_webhook_events", ["event_type"])


def downgrade() -> None:
    op.drop_table("stripe_webhook_events")
    op.drop_table("payouts")
    op.drop_table("stripe_accounts")
    op.drop_table("btc_conversions")
    op.drop_table("transactions")
    op.drop_table("wallet_balances")
    op.drop_table("wallets")
    op.drop_table("user_settings")
    op.drop_table("users")
