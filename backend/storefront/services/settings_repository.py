"""Storage access for ``store_settings`` rows.

Methods take the caller's session so a read-compute-write cycle runs inside
one transaction. Rows are handed to the pure planning code as plain dicts.
"""

import logging
import secrets
import string
import uuid
from collections.abc import Mapping
from typing import Any

from sqlalchemy import inspect, select, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.config import settings
from storefront.models.store_settings import StoreSettings
from storefront.services.snapshots import build_snapshot

logger = logging.getLogger(__name__)

SLUG_PREFIX = "store-"
SLUG_ALPHABET = string.ascii_lowercase + string.digits
SLUG_RANDOM_LENGTH = 8
MAX_SLUG_ATTEMPTS = 5


def generate_store_slug() -> str:
    return SLUG_PREFIX + "".join(secrets.choice(SLUG_ALPHABET) for _ in range(SLUG_RANDOM_LENGTH))


def row_to_dict(row: StoreSettings) -> dict[str, Any]:
    """Column values of ``row`` keyed by attribute name."""
    return {attr.key: getattr(row, attr.key) for attr in inspect(StoreSettings).column_attrs}


class SettingsRepository:
    async def scope_to_tenant(self, session: AsyncSession, tenant_id: uuid.UUID) -> None:
        """SET LOCAL app.current_tenant so RLS write policies admit the row (PostgreSQL only)."""
        bind = session.bind
        if bind is None or bind.dialect.name != "postgresql":
            return
        await session.execute(
            text("SELECT set_config('app.current_tenant', :tid, true)"),
            {"tid": str(tenant_id)},
        )

    async def get_settings_row(
        self,
        session: AsyncSession,
        tenant_id: uuid.UUID,
        *,
        for_update: bool = False,
    ) -> StoreSettings | None:
        stmt = select(StoreSettings).where(StoreSettings.tenant_id == tenant_id)
        if for_update:
            # reload attributes of an already-loaded row from the locked read
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_settings_row_by_slug(
        self, session: AsyncSession, slug: str
    ) -> StoreSettings | None:
        result = await session.execute(
            select(StoreSettings).where(StoreSettings.store_slug == slug)
        )
        return result.scalar_one_or_none()

    async def create_settings_row(
        self,
        session: AsyncSession,
        tenant_id: uuid.UUID,
        *,
        for_update: bool = False,
    ) -> StoreSettings:
        """Insert the default row for a tenant with a fresh unique slug.

        The transaction must already be scoped with ``scope_to_tenant``. A
        concurrent first read for the same tenant wins the unique constraint;
        in that case the row it created is returned (locked if ``for_update``).
        """
        template = settings.DEFAULT_TEMPLATE
        for _ in range(MAX_SLUG_ATTEMPTS):
            row = StoreSettings(
                tenant_id=tenant_id,
                store_slug=generate_store_slug(),
                template=template,
                template_settings={},
                global_settings={},
            )
            row.template_settings_by_template = {template: build_snapshot(row_to_dict(row))}
            try:
                async with session.begin_nested():
                    session.add(row)
                    await session.flush()
            except IntegrityError:
                existing = await self.get_settings_row(session, tenant_id, for_update=for_update)
                if existing is not None:
                    return existing
                logger.info("Store slug collision for tenant %s, retrying", tenant_id)
                continue
            await session.refresh(row)
            logger.info(
                "Created store settings for tenant %s (slug=%s)", tenant_id, row.store_slug
            )
            return row
        raise RuntimeError(f"Could not allocate a unique store slug for tenant {tenant_id}")

    async def get_or_create_settings_row(
        self,
        session: AsyncSession,
        tenant_id: uuid.UUID,
        *,
        for_update: bool = False,
    ) -> StoreSettings:
        row = await self.get_settings_row(session, tenant_id, for_update=for_update)
        if row is None:
            row = await self.create_settings_row(session, tenant_id, for_update=for_update)
        return row

    async def apply_settings_row(
        self,
        session: AsyncSession,
        row: StoreSettings,
        columns: Mapping[str, Any],
        json_blobs: Mapping[str, Any],
    ) -> StoreSettings:
        """Write column and JSON blob updates onto ``row``, already locked by the caller."""
        for key, value in columns.items():
            setattr(row, key, value)
        for key, value in json_blobs.items():
            # fresh objects so the JSON columns are flagged dirty
            setattr(row, key, dict(value) if isinstance(value, Mapping) else value)
        await session.flush()
        await session.refresh(row)
        return row
