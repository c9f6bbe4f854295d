"""Tenant store settings endpoints (GET / PUT)."""

import uuid
from typing import Any

from fastapi import APIRouter, Body, Depends

from storefront.core.dependencies import get_current_tenant_id, get_settings_service
from storefront.services.settings_service import StoreSettingsService

router = APIRouter()


@router.get("")
async def get_store_settings(
    tenant_id: uuid.UUID = Depends(get_current_tenant_id),
    service: StoreSettingsService = Depends(get_settings_service),
) -> dict[str, Any]:
    """Effective settings for the current tenant. Creates defaults on first access."""
    return await service.get_effective_settings(tenant_id)


@router.put("")
async def update_store_settings(
    payload: dict[str, Any] = Body(...),
    tenant_id: uuid.UUID = Depends(get_current_tenant_id),
    service: StoreSettingsService = Depends(get_settings_service),
) -> dict[str, Any]:
    """Patch settings and/or switch template.

    Known columns are validated; unknown keys are stored with the active
    template. A ``__templateSwitch`` object (``toTemplate``, ``mode``,
    ``importKeys``) switches the active template.
    """
    return await service.apply_settings_update(tenant_id, payload)
