"""Per-template configuration snapshots.

A snapshot is what a tenant had configured for one template: the extras in
``template_settings`` plus the scoped columns. Snapshots for every template
the tenant has used live in ``template_settings_by_template`` and are never
pruned, so switching back restores them.
"""

from collections.abc import Iterable, Mapping
from typing import Any

# Columns tracked per template. Everything else on the row is shared by all
# templates (store name, currency, colors, logo, banner, owner, slug).
SCOPED_FIELDS: tuple[str, ...] = (
    "template_hero_heading",
    "template_hero_subtitle",
    "template_button_text",
    "template_accent_color",
    "hero_main_url",
    "hero_tile1_url",
    "hero_tile2_url",
    "store_images",
)

# Editor-side spellings accepted in importKeys
SCOPED_FIELD_ALIASES: dict[str, str] = {
    "heroHeading": "template_hero_heading",
    "heroSubtitle": "template_hero_subtitle",
    "buttonText": "template_button_text",
    "accentColor": "template_accent_color",
    "heroImage": "hero_main_url",
    "heroTile1": "hero_tile1_url",
    "heroTile2": "hero_tile2_url",
    "storeImages": "store_images",
}

TEMPLATE_KEY = "template"


def _get(row: Any, name: str, default: Any = None) -> Any:
    if isinstance(row, Mapping):
        return row.get(name, default)
    return getattr(row, name, default)


def _has(row: Any, name: str) -> bool:
    if isinstance(row, Mapping):
        return name in row
    return hasattr(row, name)


def resolve_snapshot_key(key: str) -> str:
    return SCOPED_FIELD_ALIASES.get(key, key)


def build_snapshot(row: Any, scoped_fields: Iterable[str] = SCOPED_FIELDS) -> dict[str, Any]:
    """Snapshot of the row's active template.

    Starts from a shallow copy of ``template_settings``; scoped columns present
    on the row overwrite stale JSON copies (``None`` included).
    """
    settings_blob = _get(row, "template_settings")
    snapshot = dict(settings_blob) if isinstance(settings_blob, Mapping) else {}
    for field in scoped_fields:
        if _has(row, field):
            snapshot[field] = _get(row, field)
    snapshot.pop(TEMPLATE_KEY, None)
    return snapshot


def coerce_snapshot_map(value: Any) -> dict[str, Any]:
    """Stored map as a plain dict; anything malformed counts as empty."""
    if not isinstance(value, Mapping):
        return {}
    return {str(k): v for k, v in value.items()}


def read_snapshot(snapshots: Any, template_id: str) -> dict[str, Any]:
    entry = coerce_snapshot_map(snapshots).get(template_id)
    return dict(entry) if isinstance(entry, Mapping) else {}


def write_snapshot(snapshots: Any, template_id: str, snapshot: Mapping[str, Any]) -> dict[str, Any]:
    """New map with only ``template_id`` replaced; other entries are the same objects."""
    updated = coerce_snapshot_map(snapshots)
    updated[template_id] = dict(snapshot)
    return updated


def strip_scoped_fields(
    snapshot: Mapping[str, Any], scoped_fields: Iterable[str] = SCOPED_FIELDS
) -> dict[str, Any]:
    """``template_settings`` form of a snapshot: no scoped columns, no ``template``."""
    excluded = set(scoped_fields) | {TEMPLATE_KEY}
    return {k: v for k, v in snapshot.items() if k not in excluded}
