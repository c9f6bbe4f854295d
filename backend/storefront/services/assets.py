"""Asset key -> displayable URL resolution with placeholder fallback."""

import re
from collections.abc import Mapping
from typing import Any

from storefront.core.config import settings

_HTTP_URL_RE = re.compile(r"^https?://", re.IGNORECASE)

# Sample/placeholder hosts that ship with template demo content
PLACEHOLDER_URL_RE = re.compile(
    r"^(?:https?:)?//(?:[a-z0-9-]+\.)*"
    r"(?:example\.(?:com|org|net)|placehold\.co|placeholder\.com|picsum\.photos)"
    r"(?::\d+)?(?:[/?#]|$)",
    re.IGNORECASE,
)


def _as_str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def is_direct_url(value: str) -> bool:
    """Absolute http(s) URL or root-relative path."""
    return bool(_HTTP_URL_RE.match(value)) or value.startswith("/")


def is_placeholder_url(url: str) -> bool:
    return bool(PLACEHOLDER_URL_RE.match(url))


def resolve_asset_url(
    asset_key: Any,
    overrides: Mapping[str, Any] | None = None,
    assets: Mapping[str, Any] | None = None,
) -> str:
    """Resolve a symbolic asset key to a URL. Never raises, never returns ``""``.

    Order: non-empty override -> direct URL/path -> ``assets[key]["url"]`` ->
    ``/assets/{key}``. Registry URLs on sample hosts are replaced by the local
    placeholder; overrides and direct URLs are the tenant's own choice and are
    returned untouched.
    """
    placeholder = settings.PLACEHOLDER_IMAGE_URL or "/placeholder.png"
    key = _as_str(asset_key).strip()
    if not key:
        return placeholder

    override = _as_str(overrides.get(key)).strip() if isinstance(overrides, Mapping) else ""
    if override:
        return override
    if is_direct_url(key):
        return key

    entry = assets.get(key) if isinstance(assets, Mapping) else None
    url = _as_str(entry.get("url")).strip() if isinstance(entry, Mapping) else ""
    url = url or f"/assets/{key}"
    if is_placeholder_url(url):
        return placeholder
    return url
