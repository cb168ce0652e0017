"""Add dashboard announcements and allow a single current pricing tier."""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision = "20241207_0002"
down_revision = "20241130_0001"
branch_labels = None
depends_on = None


ANNOUNCEMENT_TYPES = ("info", "warning", "maintenance", "update", "promotion")
SINGLE_CURRENT_TIER_INDEX = "pricing_tiers_single_current_idx"


def _uuid_type():
    bind = op.get_bind()
    if bind is not None and bind.dialect.name == "postgresql":
        return postgresql.UUID(as_uuid=True)
    return sa.CHAR(length=36)


def _keep_latest_current_tier(bind) -> None:
    tiers = sa.table(
        "pricing_tiers",
        sa.column("id"),
        sa.column("effective_date", sa.DateTime(timezone=True)),
        sa.column("is_current_tier", sa.Boolean()),
    )
    current_ids = [
        row.id
        for row in bind.execute(
            sa.select(tiers.c.id)
            .where(tiers.c.is_current_tier.is_(True))
            .order_by(tiers.c.effective_date.desc())
        )
    ]
    if len(current_ids) > 1:
        bind.execute(
            tiers.update()
            .where(tiers.c.id.in_(current_ids[1:]))
            .values(is_current_tier=False)
        )


def upgrade() -> None:
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    if not inspector.has_table("announcements"):
        op.create_table(
            "announcements",
            sa.Column("id", _uuid_type(), primary_key=True),
            sa.Column("title", sa.String(length=200), nullable=False),
            sa.Column("content", sa.Text(), nullable=False),
            sa.Column(
                "type",
                sa.Enum(*ANNOUNCEMENT_TYPES, name="announcement_type_enum"),
                nullable=False,
                server_default="info",
            ),
            sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("created_by", sa.String(length=100), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        )
        op.create_index(
            "announcements_active_expiry_idx", "announcements", ["is_active", "expires_at"]
        )

    existing_indexes = {index["name"] for index in inspector.get_indexes("pricing_tiers")}
    if SINGLE_CURRENT_TIER_INDEX not in existing_indexes:
        _keep_latest_current_tier(bind)
        op.create_index(
            SINGLE_CURRENT_TIER_INDEX,
            "pricing_tiers",
            ["is_current_tier"],
            unique=True,
            postgresql_where=sa.text("is_current_tier"),
            sqlite_where=sa.text("is_current_tier"),
        )


def downgrade() -> None:
    op.drop_index(SINGLE_CURRENT_TIER_INDEX, table_name="pricing_tiers")
    op.drop_index("announcements_active_expiry_idx", table_name="announcements")
    op.drop_table("announcements")
    sa.Enum(name="announcement_type_enum").drop(op.get_bind(), checkfirst=True)
