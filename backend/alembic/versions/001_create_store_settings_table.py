"""Create store_settings table with RLS

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "store_settings",
        sa.Column("id", sa.UUID(), server_default=sa.text("gen_random_uuid()"), primary_key=True),
        sa.Column("tenant_id", sa.UUID(), nullable=False, unique=True),
        sa.Column("store_slug", sa.String(63), nullable=False, unique=True),
        sa.Column("store_name", sa.String(120), nullable=True),
        sa.Column("store_description", sa.Text(), nullable=True),
        sa.Column("store_logo", sa.Text(), nullable=True),
        sa.Column("primary_color", sa.String(7), nullable=True),
        sa.Column("secondary_color", sa.String(7), nullable=True),
        sa.Column("template", sa.String(64), nullable=False, server_default="pro"),
        sa.Column("banner_url", sa.Text(), nullable=True),
        sa.Column("currency_code", sa.String(3), nullable=True),
        sa.Column("owner_name", sa.String(120), nullable=True),
        sa.Column("owner_email", sa.String(255), nullable=True),
        sa.Column("hero_main_url", sa.Text(), nullable=True),
        sa.Column("hero_tile1_url", sa.Text(), nullable=True),
        sa.Column("hero_tile2_url", sa.Text(), nullable=True),
        sa.Column("store_images", sa.Text(), nullable=True),
        sa.Column("template_hero_heading", sa.String(200), nullable=True),
        sa.Column("template_hero_subtitle", sa.String(500), nullable=True),
        sa.Column("template_button_text", sa.String(80), nullable=True),
        sa.Column("template_accent_color", sa.String(7), nullable=True),
        sa.Column("template_settings", sa.JSON(), nullable=True),
        sa.Column("template_settings_by_template", sa.JSON(), nullable=True),
        sa.Column("global_settings", sa.JSON(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
        ),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_store_settings_tenant_id", "store_settings", ["tenant_id"])

    # --- RLS ---
    op.execute("ALTER TABLE store_settings ENABLE ROW LEVEL SECURITY")
    op.execute("ALTER TABLE store_settings FORCE ROW LEVEL SECURITY")

    # Public storefront reads resolve the tenant by slug, so SELECT stays open;
    # writes are scoped to the tenant set on the transaction.
    op.execute("""
        CREATE POLICY store_settings_select ON store_settings
        FOR SELECT
        USING (true)
    """)
    op.execute("""
        CREATE POLICY tenant_isolation_insert ON store_settings
        FOR INSERT
        WITH CHECK (tenant_id = NULLIF(current_setting('app.current_tenant', true), '')::uuid)
    """)
    op.execute("""
        CREATE POLICY tenant_isolation_update ON store_settings
        FOR UPDATE
        USING (tenant_id = NULLIF(current_setting('app.current_tenant', true), '')::uuid)
        WITH CHECK (tenant_id = NULLIF(current_setting('app.current_tenant', true), '')::uuid)
    """)

    op.execute("GRANT SELECT, INSERT, UPDATE ON store_settings TO app_user")


def downgrade() -> None:
    op.execute("DROP POLICY IF EXISTS store_settings_select ON store_settings")
    op.execute("DROP POLICY IF EXISTS tenant_isolation_insert ON store_settings")
    op.execute("DROP POLICY IF EXISTS tenant_isolation_update ON store_settings")
    op.execute("ALTER TABLE store_settings DISABLE ROW LEVEL SECURITY")
    op.execute("REVOKE SELECT, INSERT, UPDATE ON store_settings FROM app_user")
    op.drop_index("ix_store_settings_tenant_id", table_name="store_settings")
    op.drop_table("store_settings")
