"""Finance records, fund allocation and profit sharing schema.

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 09:30:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20261018_0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


FUND_CATEGORIES = ("technology", "growth", "team", "marketing", "emergency", "investments")


def upgrade() -> None:
    record_type = sa.Enum("income", "expense", name="record_type")
    cost_type = sa.Enum("fixed", "variable", name="cost_type")
    allocation_status = sa.Enum("pending", "approved", "distributed", name="allocation_status")
    fund_category = sa.Enum(*FUND_CATEGORIES, name="fund_category")

    record_type.create(op.get_bind(), checkfirst=True)
    cost_type.create(op.get_bind(), checkfirst=True)
    allocation_status.create(op.get_bind(), checkfirst=True)
    fund_category.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "financial_records",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("project_id", sa.String(length=100), nullable=False),
        sa.Column("user_id", sa.String(length=100), nullable=False, server_default=""),
        sa.Column("record_date", sa.Date(), nullable=False),
        sa.Column("record_type", record_type, nullable=False),
        sa.Column("amount", sa.Numeric(24, 2), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("cost_type", cost_type, nullable=True),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_financial_records_id", "financial_records", ["id"])
    op.create_index("ix_financial_records_project_id", "financial_records", ["project_id"])

    op.create_table(
        "team_members",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("availability", sa.Numeric(9, 4), nullable=False, server_default="100"),
    )
    op.create_index("ix_team_members_id", "team_members", ["id"])

    op.create_table(
        "budget_allocations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("project_id", sa.String(length=100), nullable=True),
        sa.Column("user_id", sa.String(length=100), nullable=False, server_default=""),
        sa.Column("total_budget", sa.Numeric(24, 2), nullable=False),
        sa.Column("allocations", sa.JSON(), nullable=False),
        sa.Column("status", allocation_status, nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_budget_allocations_id", "budget_allocations", ["id"])
    op.create_index("ix_budget_allocations_project_id", "budget_allocations", ["project_id"])

    op.create_table(
        "fund_accounts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("project_id", sa.String(length=100), nullable=True),
        sa.Column(
            "allocation_id",
            sa.Integer(),
            sa.ForeignKey("budget_allocations.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("name", fund_category, nullable=False),
        sa.Column("balance", sa.Numeric(30, 10), nullable=False),
        sa.Column("allocated", sa.Numeric(30, 10), nullable=False, server_default="0"),
        sa.Column("percentage", sa.Numeric(9, 6), nullable=False),
        sa.Column("purpose", sa.Text(), nullable=False, server_default=""),
        sa.Column("allocation_category", fund_category, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_fund_accounts_id", "fund_accounts", ["id"])
    op.create_index("ix_fund_accounts_project_id", "fund_accounts", ["project_id"])

    op.create_table(
        "profit_shares",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("project_id", sa.String(length=100), nullable=True),
        sa.Column("member_id", sa.String(length=100), nullable=False),
        sa.Column("member_name", sa.String(length=255), nullable=False),
        sa.Column("percentage", sa.Numeric(9, 6), nullable=False),
        sa.Column("amount", sa.Numeric(24, 2), nullable=False),
        sa.Column("user_id", sa.String(length=100), nullable=False, server_default=""),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("project_id", "member_id", name="uq_profit_share_member"),
    )
    op.create_index("ix_profit_shares_id", "profit_shares", ["id"])
    op.create_index("ix_profit_shares_project_id", "profit_shares", ["project_id"])


def downgrade() -> None:
    op.drop_table("profit_shares")
    op.drop_table("fund_accounts")
    op.drop_table("budget_allocations")
    op.drop_table("team_members")
    op.drop_table("financial_records")

    bind = op.get_bind()
    sa.Enum(name="fund_category").drop(bind, checkfirst=True)
    sa.Enum(name="allocation_status").drop(bind, checkfirst=True)
    sa.Enum(name="cost_type").drop(bind, checkfirst=True)
    sa.Enum(name="record_type").drop(bind, checkfirst=True)
