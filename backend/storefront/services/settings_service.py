"""Store settings operations exposed to the API layer.

Each operation is one transaction per attempt: read the row, plan the change
in memory, write it back. Transient storage failures are retried on a fresh
session; anything else rolls the transaction back and propagates.

Concurrent writes to the same tenant are serialized by a row lock
(``SELECT ... FOR UPDATE``) held for the whole read-plan-write cycle, so each
update is planned against the committed result of the previous one.
"""

import logging
import uuid
from collections.abc import Mapping
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.core.cache import SettingsCache
from storefront.core.config import settings
from storefront.core.retry import run_with_retry
from storefront.services.config_merger import PAGE_DOCUMENT_KEY, effective_settings
from storefront.services.page_migrations import migrate_config_document
from storefront.services.page_render import asset_overrides, render_page
from storefront.services.settings_repository import SettingsRepository, row_to_dict
from storefront.services.template_switch import TemplateSwitchController

logger = logging.getLogger(__name__)

# Not shown on the public storefront
PRIVATE_KEYS: frozenset[str] = frozenset({"owner_email"})


class StoreSettingsService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        repository: SettingsRepository | None = None,
        cache: SettingsCache | None = None,
        controller: TemplateSwitchController | None = None,
    ):
        self.session_factory = session_factory
        self.repository = repository if repository is not None else SettingsRepository()
        self.cache = (
            cache if cache is not None else SettingsCache(settings.SETTINGS_CACHE_TTL_SECONDS)
        )
        self.controller = controller if controller is not None else TemplateSwitchController()

    async def get_effective_settings(self, tenant_id: uuid.UUID) -> dict[str, Any]:
        """Merged settings for the tenant, creating the default row on first read."""
        cached = self.cache.get(tenant_id)
        if cached is not None:
            return cached
        generation = self.cache.generation(tenant_id)

        async def _load() -> dict[str, Any]:
            async with self.session_factory() as session:
                async with session.begin():
                    await self.repository.scope_to_tenant(session, tenant_id)
                    row = await self.repository.get_or_create_settings_row(session, tenant_id)
                    return effective_settings(row_to_dict(row))

        result = await run_with_retry(_load)
        self.cache.set(tenant_id, result, generation=generation)
        return result

    async def apply_settings_update(
        self, tenant_id: uuid.UUID, payload: Mapping[str, Any]
    ) -> dict[str, Any]:
        """Apply field updates and/or a template switch atomically.

        Raises ``SettingsValidationError`` or ``TemplateNotAllowedError``
        without touching the row; ``StorageTransientError`` once retries are
        exhausted.
        """

        async def _apply() -> dict[str, Any]:
            async with self.session_factory() as session:
                async with session.begin():
                    # RLS must see the tenant before the locked read
                    await self.repository.scope_to_tenant(session, tenant_id)
                    row = await self.repository.get_or_create_settings_row(
                        session, tenant_id, for_update=True
                    )
                    plan = self.controller.plan_update(row_to_dict(row), payload)
                    updated = await self.repository.apply_settings_row(
                        session, row, plan.column_updates, plan.json_updates
                    )
                    return effective_settings(row_to_dict(updated))

        try:
            result = await run_with_retry(_apply)
        finally:
            # also on failure or cancellation, the commit may already have happened
            self.cache.invalidate(tenant_id)
        logger.info("Updated store settings for tenant %s (%d keys)", tenant_id, len(payload))
        return result

    async def find_tenant_by_slug(self, slug: str) -> uuid.UUID | None:
        async def _lookup() -> uuid.UUID | None:
            async with self.session_factory() as session:
                row = await self.repository.get_settings_row_by_slug(session, slug)
                return row.tenant_id if row is not None else None

        return await run_with_retry(_lookup)

    async def get_public_settings(self, slug: str) -> dict[str, Any] | None:
        """Effective settings for a public storefront, or ``None`` for an unknown slug."""
        tenant_id = await self.find_tenant_by_slug(slug)
        if tenant_id is None:
            return None
        effective = await self.get_effective_settings(tenant_id)
        for key in PRIVATE_KEYS:
            effective.pop(key, None)
        return effective

    async def render_public_page(self, slug: str, width: float) -> dict[str, Any] | None:
        effective = await self.get_public_settings(slug)
        if effective is None:
            return None
        return render_page(effective.get(PAGE_DOCUMENT_KEY), width, asset_overrides(effective))

    @staticmethod
    def migrate_config_document(doc: Any) -> Any:
        return migrate_config_document(doc)
