"""
20261019_create_live_commerce_tables

Create live_sessions (one row per seller broadcast state) and the
append-only analytics_events log.

Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261019_live_commerce"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "live_sessions",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column("seller_id", sa.String(64), nullable=False),
        sa.Column("shop_slug", sa.String(255), nullable=False),
        sa.Column("active_product_id", sa.String(64), nullable=True),
        sa.Column("preloaded_products", sa.JSON(), nullable=False),
        sa.Column("is_live", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("live_started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("live_ended_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("flash_offer_active", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("flash_offer_type", sa.String(16), nullable=True),
        sa.Column("flash_offer_value", sa.Float(), server_default="0", nullable=False),
        sa.Column("flash_offer_ends_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("show_public_counter", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_live_sessions_seller_id", "live_sessions", ["seller_id"])
    op.create_index("ix_live_sessions_shop_slug", "live_sessions", ["shop_slug"])
    op.create_index("ix_live_sessions_seller_live", "live_sessions", ["seller_id", "is_live"])

    op.create_table(
        "analytics_events",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column("seller_id", sa.String(64), nullable=False),
        sa.Column("product_id", sa.String(64), nullable=True),
        sa.Column("event_type", sa.String(32), nullable=False),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_analytics_events_seller_id", "analytics_events", ["seller_id"])
    op.create_index("ix_analytics_events_event_type", "analytics_events", ["event_type"])
    op.create_index("ix_analytics_events_seller_created", "analytics_events", ["seller_id", "created_at"])


def downgrade():
    op.drop_index("ix_analytics_events_seller_created", table_name="analytics_events")
    op.drop_index("ix_analytics_events_event_type", table_name="analytics_events")
    op.drop_index("ix_analytics_events_seller_id", table_name="analytics_events")
    op.drop_table("analytics_events")

    op.drop_index("ix_live_sessions_seller_live", table_name="live_sessions")
    op.drop_index("ix_live_sessions_shop_slug", table_name="live_sessions")
    op.drop_index("ix_live_sessions_seller_id", table_name="live_sessions")
    op.drop_table("live_sessions")
