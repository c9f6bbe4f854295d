import uuid
from datetime import datetime

from sqlalchemy import JSON, DateTime, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from storefront.db.base import TenantScopedBase


class StoreSettings(TenantScopedBase):
    __tablename__ = "store_settings"
    __table_args__ = ()

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # tenant_id inherited from TenantScopedBase (UNIQUE enforced below and in migration)
    tenant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), nullable=False, unique=True, index=True
    )
    store_slug: Mapped[str] = mapped_column(String(63), unique=True, nullable=False)

    # Global columns, shared by every template
    store_name: Mapped[str | None] = mapped_column(String(120), nullable=True)
    store_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    store_logo: Mapped[str | None] = mapped_column(Text, nullable=True)
    primary_color: Mapped[str | None] = mapped_column(String(7), nullable=True)
    secondary_color: Mapped[str | None] = mapped_column(String(7), nullable=True)
    template: Mapped[str] = mapped_column(String(64), nullable=False, server_default="pro")
    banner_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    currency_code: Mapped[str | None] = mapped_column(String(3), nullable=True)
    owner_name: Mapped[str | None] = mapped_column(String(120), nullable=True)
    owner_email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Scoped columns, snapshotted per template
    hero_main_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    hero_tile1_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    hero_tile2_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    store_images: Mapped[str | None] = mapped_column(Text, nullable=True)
    template_hero_heading: Mapped[str | None] = mapped_column(String(200), nullable=True)
    template_hero_subtitle: Mapped[str | None] = mapped_column(String(500), nullable=True)
    template_button_text: Mapped[str | None] = mapped_column(String(80), nullable=True)
    template_accent_color: Mapped[str | None] = mapped_column(String(7), nullable=True)

    # JSON blobs
    template_settings: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    template_settings_by_template: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    global_settings: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), onupdate=func.now()
    )
