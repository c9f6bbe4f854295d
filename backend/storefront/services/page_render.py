"""Resolve a stored page document into concrete values for one container width."""

import logging
from collections.abc import Mapping
from typing import Any
from urllib.parse import urlparse

from storefront.core.config import settings
from storefront.services.assets import is_direct_url, resolve_asset_url
from storefront.services.page_migrations import migrate_page_document
from storefront.services.responsive import (
    Breakpoint,
    classify_breakpoint,
    resolve_responsive_number,
    resolve_responsive_style,
)
from storefront.services.storage import presign_get

logger = logging.getLogger(__name__)

RESPONSIVE_NUMBER_KEYS: frozenset[str] = frozenset(
    {
        "paddingX",
        "paddingY",
        "gap",
        "imageHeight",
        "minHeight",
        "columns",
        "posX",
        "posY",
        "size",
        "scaleX",
        "scaleY",
        "opacity",
    }
)

# asset key -> settings column whose value overrides the page's own asset
ASSET_OVERRIDE_COLUMNS: dict[str, str] = {
    "logo": "store_logo",
    "hero": "hero_main_url",
    "banner": "banner_url",
}


def _first_image(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return next((part.strip() for part in value.split(",") if part.strip()), "")


def _is_object_key(value: str) -> bool:
    return not is_direct_url(value) and not urlparse(value).scheme


def asset_overrides(effective: Mapping[str, Any]) -> dict[str, str]:
    """Asset overrides taken from the tenant's settings columns.

    Values that are bare object-storage keys are presigned when a bucket is
    configured, otherwise skipped.
    """
    overrides: dict[str, str] = {}
    for asset_key, column in ASSET_OVERRIDE_COLUMNS.items():
        value = _first_image(effective.get(column))
        if not value:
            continue
        if _is_object_key(value):
            if not settings.S3_BUCKET:
                continue
            value = presign_get(value)
        overrides[asset_key] = value
    return overrides


def _resolve_node(node: Any, breakpoint: Breakpoint, overrides, assets) -> Any:
    if isinstance(node, list):
        return [_resolve_node(item, breakpoint, overrides, assets) for item in node]
    if not isinstance(node, Mapping):
        return node

    resolved: dict[str, Any] = {}
    for key, value in node.items():
        if key in RESPONSIVE_NUMBER_KEYS and not isinstance(value, str | list):
            number = resolve_responsive_number(value, breakpoint)
            if number is not None:
                resolved[key] = number
        elif key == "style":
            resolved[key] = resolve_responsive_style(value, breakpoint)
        else:
            resolved[key] = _resolve_node(value, breakpoint, overrides, assets)

    asset_key = node.get("assetKey")
    if isinstance(asset_key, str):
        resolved["url"] = resolve_asset_url(asset_key, overrides, assets)
    return resolved


def render_page(
    document: Any,
    width: Any,
    overrides: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Migrated copy of ``document`` with responsive values and asset URLs resolved.

    Malformed documents render as an empty layout rather than failing.
    """
    migrated = migrate_page_document(document).document
    if not isinstance(migrated, Mapping):
        if document is not None:
            logger.warning(
                "Page document is not an object (%s), rendering empty layout",
                type(document).__name__,
            )
        migrated = {}

    breakpoint = classify_breakpoint(width)
    assets = migrated.get("assets")
    assets = assets if isinstance(assets, Mapping) else {}

    rendered = dict(migrated)
    layout = migrated.get("layout")
    rendered["layout"] = (
        _resolve_node(layout, breakpoint, overrides or {}, assets)
        if isinstance(layout, Mapping)
        else {}
    )
    rendered["breakpoint"] = breakpoint
    return rendered
