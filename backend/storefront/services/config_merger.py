"""Merge of scalar columns, JSON blobs and an incoming update payload.

Every payload key is classified once against static allowlists:

* ``column``  - an editable scalar column, validated and written as-is
* ``switch``  - the reserved template-switch control key (or a bare ``template``)
* ``global``  - ``global_settings``, merged into the blob shared by all templates
* ``ignored`` - server-owned keys a client may echo back
* ``json``    - anything else, folded into the active template's
  ``template_settings`` so newer front-ends never get rejected

Validation happens before anything is computed; one bad field rejects the
whole payload.
"""

import enum
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from storefront.core.exceptions import SettingsValidationError
from storefront.schemas.store_settings import StoreSettingsColumns, TemplateSwitchRequest
from storefront.services.page_migrations import migrate_page_document
from storefront.services.snapshots import TEMPLATE_KEY

logger = logging.getLogger(__name__)

TEMPLATE_SWITCH_KEY = "__templateSwitch"
GLOBAL_SETTINGS_KEY = "global_settings"
TEMPLATE_SETTINGS_KEY = "template_settings"
SNAPSHOTS_KEY = "template_settings_by_template"
PAGE_DOCUMENT_KEY = "page_document"

MAX_PAYLOAD_KEYS = 200

EDITABLE_COLUMNS: tuple[str, ...] = tuple(StoreSettingsColumns.model_fields)

# Comma-joined multi-value image columns
IMAGE_LIST_COLUMNS: frozenset[str] = frozenset(
    {"banner_url", "hero_main_url", "hero_tile1_url", "hero_tile2_url", "store_images"}
)

SERVER_OWNED_KEYS: frozenset[str] = frozenset(
    {
        "id",
        "tenant_id",
        "store_slug",
        TEMPLATE_SETTINGS_KEY,
        SNAPSHOTS_KEY,
        "created_at",
        "updated_at",
    }
)

# Row attributes never exposed in effective settings
INTERNAL_KEYS: frozenset[str] = frozenset(
    {"id", "tenant_id", TEMPLATE_SETTINGS_KEY, SNAPSHOTS_KEY, GLOBAL_SETTINGS_KEY}
)

JSON_BLOBS: tuple[str, ...] = (TEMPLATE_SETTINGS_KEY, SNAPSHOTS_KEY, GLOBAL_SETTINGS_KEY)


class FieldKind(enum.StrEnum):
    COLUMN = "column"
    JSON = "json"
    GLOBAL = "global"
    SWITCH = "switch"
    IGNORED = "ignored"


@dataclass(frozen=True)
class FieldTarget:
    kind: FieldKind
    name: str


def _build_classification() -> dict[str, FieldTarget]:
    table = {name: FieldTarget(FieldKind.COLUMN, name) for name in EDITABLE_COLUMNS}
    table.update({name: FieldTarget(FieldKind.IGNORED, name) for name in SERVER_OWNED_KEYS})
    table[GLOBAL_SETTINGS_KEY] = FieldTarget(FieldKind.GLOBAL, GLOBAL_SETTINGS_KEY)
    table[TEMPLATE_SWITCH_KEY] = FieldTarget(FieldKind.SWITCH, TEMPLATE_SWITCH_KEY)
    table[TEMPLATE_KEY] = FieldTarget(FieldKind.SWITCH, TEMPLATE_KEY)
    return table


_CLASSIFICATION = _build_classification()


def classify_key(key: str) -> FieldTarget:
    return _CLASSIFICATION.get(key) or FieldTarget(FieldKind.JSON, key)


@dataclass
class PartitionedPayload:
    columns: dict[str, Any] = field(default_factory=dict)
    extras: dict[str, Any] = field(default_factory=dict)
    global_settings: dict[str, Any] = field(default_factory=dict)
    switch: dict[str, Any] | None = None
    ignored: list[str] = field(default_factory=list)


@dataclass
class MergeResult:
    column_updates: dict[str, Any]
    json_updates: dict[str, Any]
    switch: TemplateSwitchRequest | None = None


def partition_payload(payload: Mapping[str, Any]) -> PartitionedPayload:
    if not isinstance(payload, Mapping):
        raise SettingsValidationError("Settings payload must be a JSON object")
    if len(payload) > MAX_PAYLOAD_KEYS:
        raise SettingsValidationError(
            f"Too many fields in one update ({len(payload)} > {MAX_PAYLOAD_KEYS})"
        )

    parts = PartitionedPayload()
    for key, value in payload.items():
        target = classify_key(key)
        if target.kind is FieldKind.COLUMN:
            parts.columns[target.name] = value
        elif target.kind is FieldKind.JSON:
            parts.extras[target.name] = value
        elif target.kind is FieldKind.GLOBAL:
            if value is None:
                continue
            if not isinstance(value, Mapping):
                raise SettingsValidationError("global_settings must be a JSON object")
            parts.global_settings.update(value)
        elif target.kind is FieldKind.SWITCH:
            if target.name == TEMPLATE_SWITCH_KEY:
                parts.switch = value
            elif TEMPLATE_SWITCH_KEY not in payload:
                parts.switch = {"toTemplate": value, "mode": "defaults"}
        else:
            parts.ignored.append(key)

    # a stray template key must never land in either JSON blob
    parts.global_settings.pop(TEMPLATE_KEY, None)
    return parts


def _validation_errors(exc: ValidationError) -> list[dict[str, Any]]:
    return [
        {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
        for err in exc.errors()
    ]


def validate_columns(columns: Mapping[str, Any]) -> dict[str, Any]:
    """Validated column values for exactly the keys given. Raises on any failure."""
    if not columns:
        return {}
    try:
        model = StoreSettingsColumns.model_validate(dict(columns))
    except ValidationError as exc:
        errors = _validation_errors(exc)
        logger.info("Rejected settings update: %s", errors)
        raise SettingsValidationError("Invalid settings fields", errors=errors) from exc
    return model.model_dump(include=set(columns))


def parse_switch_request(value: Any) -> TemplateSwitchRequest:
    if isinstance(value, str):
        value = {"toTemplate": value}
    if not isinstance(value, Mapping):
        raise SettingsValidationError(f"{TEMPLATE_SWITCH_KEY} must be a JSON object")
    try:
        return TemplateSwitchRequest.model_validate(dict(value))
    except ValidationError as exc:
        raise SettingsValidationError(
            "Invalid template switch request", errors=_validation_errors(exc)
        ) from exc


def normalize_image_list(value: Any) -> str | None:
    """Trim, drop empties, dedupe (first wins); empty -> ``None``."""
    if value is None:
        return None
    parts = value.split(",") if isinstance(value, str) else [str(v) for v in value]
    seen: list[str] = []
    for part in parts:
        item = part.strip()
        if item and item not in seen:
            seen.append(item)
    return ",".join(seen) if seen else None


def _blob(row: Any, name: str) -> dict[str, Any]:
    value = row.get(name) if isinstance(row, Mapping) else getattr(row, name, None)
    return dict(value) if isinstance(value, Mapping) else {}


def merge(existing_row: Any, payload: Mapping[str, Any]) -> MergeResult:
    """Validate ``payload`` and compute column and JSON updates against ``existing_row``.

    ``json_updates`` holds full replacement blobs, only for blobs that change.
    The switch request (if any) is parsed and validated but not applied here.
    """
    parts = partition_payload(payload)
    switch = parse_switch_request(parts.switch) if parts.switch is not None else None
    columns = validate_columns(parts.columns)

    for name in IMAGE_LIST_COLUMNS & columns.keys():
        columns[name] = normalize_image_list(columns[name])

    json_updates: dict[str, Any] = {}
    extras = dict(parts.extras)
    if PAGE_DOCUMENT_KEY in extras:
        extras[PAGE_DOCUMENT_KEY] = migrate_page_document(extras[PAGE_DOCUMENT_KEY]).document
    if extras:
        template_settings = _blob(existing_row, TEMPLATE_SETTINGS_KEY)
        template_settings.update(extras)
        template_settings.pop(TEMPLATE_KEY, None)
        json_updates[TEMPLATE_SETTINGS_KEY] = template_settings
    if parts.global_settings:
        global_settings = _blob(existing_row, GLOBAL_SETTINGS_KEY)
        global_settings.update(parts.global_settings)
        json_updates[GLOBAL_SETTINGS_KEY] = global_settings

    return MergeResult(column_updates=columns, json_updates=json_updates, switch=switch)


def resolve_effective_settings(layers: Sequence[Mapping[str, Any] | None]) -> dict[str, Any]:
    """Fold ``layers`` in order; a later layer wins on every key it defines."""
    result: dict[str, Any] = {}
    for layer in layers:
        if isinstance(layer, Mapping):
            result.update(layer)
    return result


def effective_settings(row: Mapping[str, Any]) -> dict[str, Any]:
    """Settings used to render the live storefront.

    Precedence: global JSON < active template JSON < row columns, with the
    ``template`` column winning over any ``template`` key found in JSON.
    """
    columns = {k: v for k, v in row.items() if k not in INTERNAL_KEYS}
    result = resolve_effective_settings(
        [_blob(row, GLOBAL_SETTINGS_KEY), _blob(row, TEMPLATE_SETTINGS_KEY), columns]
    )
    result[TEMPLATE_KEY] = row.get(TEMPLATE_KEY)
    for name in INTERNAL_KEYS:
        result.pop(name, None)
    return result
