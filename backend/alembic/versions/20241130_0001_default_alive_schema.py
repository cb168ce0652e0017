"""Create payment, weekly financial entry and EBITDA snapshot tables."""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision = "20241130_0001"
down_revision = None
branch_labels = None
depends_on = None


PAYMENT_METHODS = ("cash", "venmo", "paypal", "zelle", "bank_transfer", "other")


def _uuid_type():
    bind = op.get_bind()
    if bind is not None and bind.dialect.name == "postgresql":
        return postgresql.UUID(as_uuid=True)
    return sa.CHAR(length=36)


def _timestamps(*, server_default: bool) -> list[sa.Column]:
    default = sa.func.now() if server_default else None
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=default),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=default),
    ]


def upgrade() -> None:
    uuid_type = _uuid_type()
    inspector = sa.inspect(op.get_bind())

    if not inspector.has_table("payments"):
        op.create_table(
            "payments",
            sa.Column("id", uuid_type, primary_key=True),
            sa.Column("user_id", sa.String(length=100), nullable=False),
            sa.Column("amount", sa.Numeric(10, 2), nullable=False),
            sa.Column("payment_date", sa.DateTime(), nullable=False),
            sa.Column(
                "payment_method",
                sa.Enum(*PAYMENT_METHODS, name="payment_method_enum"),
                nullable=False,
                server_default="cash",
            ),
            sa.Column("notes", sa.Text(), nullable=True),
            sa.Column("recorded_by", sa.String(length=100), nullable=False),
            sa.Column(
                "created_at",
                sa.DateTime(timezone=True),
                nullable=False,
                server_default=sa.func.now(),
            ),
            sa.CheckConstraint("amount > 0", name="ck_payments_amount_positive"),
        )
        op.create_index("payments_payment_date_idx", "payments", ["payment_date"])
        op.create_index("payments_user_id_idx", "payments", ["user_id"])

    if not inspector.has_table("financial_entries"):
        op.create_table(
            "financial_entries",
            sa.Column("id", uuid_type, primary_key=True),
            sa.Column("week_start_date", sa.Date(), nullable=False),
            sa.Column("operating_expenses", sa.Numeric(14, 2), nullable=False),
            sa.Column("depreciation", sa.Numeric(14, 2), nullable=False, server_default="0"),
            sa.Column("amortization", sa.Numeric(14, 2), nullable=False, server_default="0"),
            sa.Column("notes", sa.Text(), nullable=True),
            sa.Column("created_by", sa.String(length=100), nullable=True),
            *_timestamps(server_default=False),
            sa.UniqueConstraint("week_start_date", name="uq_financial_entries_week_start"),
            sa.CheckConstraint(
                "operating_expenses >= 0", name="ck_financial_entries_opex_non_negative"
            ),
            sa.CheckConstraint(
                "depreciation >= 0", name="ck_financial_entries_depreciation_non_negative"
            ),
            sa.CheckConstraint(
                "amortization >= 0", name="ck_financial_entries_amortization_non_negative"
            ),
        )

    if not inspector.has_table("ebitda_snapshots"):
        op.create_table(
            "ebitda_snapshots",
            sa.Column("id", uuid_type, primary_key=True),
            sa.Column("week_start_date", sa.Date(), nullable=False),
            sa.Column("revenue", sa.Numeric(14, 2), nullable=False),
            sa.Column("operating_expenses", sa.Numeric(14, 2), nullable=False),
            sa.Column("depreciation", sa.Numeric(14, 2), nullable=False),
            sa.Column("amortization", sa.Numeric(14, 2), nullable=False),
            sa.Column("ebitda", sa.Numeric(14, 2), nullable=False),
            sa.Column("current_funding", sa.Numeric(14, 2), nullable=True),
            sa.Column("is_default_alive", sa.Boolean(), nullable=False),
            *_timestamps(server_default=False),
            sa.UniqueConstraint("week_start_date", name="uq_ebitda_snapshots_week_start"),
        )

    if not inspector.has_table("pricing_tiers"):
        op.create_table(
            "pricing_tiers",
            sa.Column("id", uuid_type, primary_key=True),
            sa.Column("amount", sa.Numeric(10, 2), nullable=False),
            sa.Column(
                "effective_date",
                sa.DateTime(timezone=True),
                nullable=False,
                server_default=sa.func.now(),
            ),
            sa.Column(
                "is_current_tier", sa.Boolean(), nullable=False, server_default=sa.false()
            ),
            sa.Column(
                "created_at",
                sa.DateTime(timezone=True),
                nullable=False,
                server_default=sa.func.now(),
            ),
        )
        op.create_index(
            "pricing_tiers_current_idx", "pricing_tiers", ["is_current_tier", "effective_date"]
        )

    if not inspector.has_table("admin_action_logs"):
        op.create_table(
            "admin_action_logs",
            sa.Column("id", uuid_type, primary_key=True),
            sa.Column("admin_id", sa.String(length=100), nullable=False),
            sa.Column("action", sa.String(length=100), nullable=False),
            sa.Column("resource_type", sa.String(length=100), nullable=False),
            sa.Column("resource_id", sa.String(length=100), nullable=True),
            sa.Column("details", sa.JSON(), nullable=True),
            sa.Column(
                "created_at",
                sa.DateTime(timezone=True),
                nullable=False,
                server_default=sa.func.now(),
            ),
        )
        op.create_index("admin_action_logs_created_at_idx", "admin_action_logs", ["created_at"])


def downgrade() -> None:
    op.drop_index("admin_action_logs_created_at_idx", table_name="admin_action_logs")
    op.drop_table("admin_action_logs")
    op.drop_index("pricing_tiers_current_idx", table_name="pricing_tiers")
    op.drop_table("pricing_tiers")
    op.drop_table("ebitda_snapshots")
    op.drop_table("financial_entries")
    op.drop_index("payments_user_id_idx", table_name="payments")
    op.drop_index("payments_payment_date_idx", table_name="payments")
    op.drop_table("payments")
    sa.Enum(name="payment_method_enum").drop(op.get_bind(), checkfirst=True)
