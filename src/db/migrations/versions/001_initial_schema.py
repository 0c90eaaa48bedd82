"""Create members, loans, transactions and fraud_alerts tables.

Revision ID: 001
Revises:
Create Date: 2026-10-17
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

MONEY = sa.Numeric(14, 2)


def upgrade() -> None:
    op.create_table(
        "members",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("member_number", sa.String(), nullable=False),
        sa.Column("full_name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("phone_number", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="ACTIVE"),
        sa.Column("balance", MONEY, nullable=False, server_default="0"),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now()
        ),
    )
    op.create_index(op.f("ix_members_member_number"), "members", ["member_number"], unique=True)
    op.create_index(op.f("ix_members_email"), "members", ["email"], unique=True)

    op.create_table(
        "loans",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("loan_ref", sa.String(), nullable=False),
        sa.Column("member_id", sa.String(), sa.ForeignKey("members.id"), nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("interest_rate", sa.Numeric(5, 2), nullable=False),
        sa.Column("term_months", sa.Integer(), nullable=False),
        sa.Column("monthly_payment", MONEY, nullable=False),
        sa.Column("outstanding_balance", MONEY, nullable=False),
        sa.Column("total_repaid", MONEY, nullable=False, server_default="0"),
        sa.Column("purpose", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default="PENDING"),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now()
        ),
    )
    op.create_index(op.f("ix_loans_loan_ref"), "loans", ["loan_ref"], unique=True)
    op.create_index(op.f("ix_loans_member_id"), "loans", ["member_id"])
    op.create_index(op.f("ix_loans_status"), "loans", ["status"])

    op.create_table(
        "transactions",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("tx_ref", sa.String(), nullable=False),
        sa.Column("member_id", sa.String(), sa.ForeignKey("members.id"), nullable=False),
        sa.Column("loan_id", sa.String(), sa.ForeignKey("loans.id"), nullable=True),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("balance_before", MONEY, nullable=False),
        sa.Column("balance_after", MONEY, nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default="COMPLETED"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(op.f("ix_transactions_tx_ref"), "transactions", ["tx_ref"], unique=True)
    op.create_index(op.f("ix_transactions_member_id"), "transactions", ["member_id"])
    op.create_index(op.f("ix_transactions_type"), "transactions", ["type"])
    op.create_index(op.f("ix_transactions_status"), "transactions", ["status"])
    op.create_index(op.f("ix_transactions_created_at"), "transactions", ["created_at"])

    op.create_table(
        "fraud_alerts",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("severity", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("member_id", sa.String(), sa.ForeignKey("members.id"), nullable=False),
        sa.Column(
            "transaction_id", sa.String(), sa.ForeignKey("transactions.id"), nullable=False
        ),
        sa.Column("resolved", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("resolution_notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(op.f("ix_fraud_alerts_type"), "fraud_alerts", ["type"])
    op.create_index(op.f("ix_fraud_alerts_severity"), "fraud_alerts", ["severity"])
    op.create_index(op.f("ix_fraud_alerts_member_id"), "fraud_alerts", ["member_id"])
    op.create_index(op.f("ix_fraud_alerts_transaction_id"), "fraud_alerts", ["transaction_id"])
    op.create_index(op.f("ix_fraud_alerts_resolved"), "fraud_alerts", ["resolved"])


def downgrade() -> None:
    op.drop_table("fraud_alerts")
    op.drop_table("transactions")
    op.drop_table("loans")
    op.drop_table("members")
