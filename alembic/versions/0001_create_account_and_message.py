"""create account and message tables

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00
"""
from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "account",
        sa.Column("account_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(length=255), nullable=False),
        sa.Column("password", sa.String(length=255), nullable=False),
    )
    op.create_index("ix_account_username", "account", ["username"], unique=True)

    op.create_table(
        "message",
        sa.Column("message_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("posted_by", sa.Integer(), sa.ForeignKey("account.account_id"), nullable=False),
        sa.Column("message_text", sa.Text(), nullable=False),
        sa.Column("time_posted_epoch", sa.BigInteger(), nullable=False),
    )
    op.create_index("ix_message_posted_by", "message", ["posted_by"])


def downgrade() -> None:
    op.drop_index("ix_message_posted_by", table_name="message")
    op.drop_table("message")
    op.drop_index("ix_account_username", table_name="account")
    op.drop_table("account")
