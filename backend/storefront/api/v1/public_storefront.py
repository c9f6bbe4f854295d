"""Public read-only storefront endpoints (anonymous, tenant resolved by slug)."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query

from storefront.core.dependencies import get_settings_service
from storefront.services.settings_service import StoreSettingsService

router = APIRouter()

DEFAULT_RENDER_WIDTH = 1280


@router.get("/{slug}/settings")
async def get_public_settings(
    slug: str,
    service: StoreSettingsService = Depends(get_settings_service),
) -> dict[str, Any]:
    """Effective settings used to render the storefront. No auth required."""
    effective = await service.get_public_settings(slug)
    if effective is None:
        raise HTTPException(status_code=404, detail="Storefront not found")
    return effective


@router.get("/{slug}/page")
async def get_public_page(
    slug: str,
    width: float = Query(DEFAULT_RENDER_WIDTH, ge=0, le=10000),
    service: StoreSettingsService = Depends(get_settings_service),
) -> dict[str, Any]:
    """Page document resolved for a container ``width`` (responsive values, asset URLs)."""
    page = await service.render_public_page(slug, width)
    if page is None:
        raise HTTPException(status_code=404, detail="Storefront not found")
    return page
