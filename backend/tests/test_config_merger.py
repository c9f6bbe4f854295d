"""Payload classification, validation and effective-settings precedence."""

import pytest

from storefront.core.exceptions import SettingsValidationError
from storefront.services.config_merger import (
    MAX_PAYLOAD_KEYS,
    FieldKind,
    classify_key,
    effective_settings,
    merge,
    normalize_image_list,
    resolve_effective_settings,
)


def _row(**overrides) -> dict:
    row = {
        "id": "row-id",
        "tenant_id": "tenant-id",
        "store_slug": "store-abc12345",
        "store_name": "Shop",
        "template": "fashion",
        "template_hero_heading": None,
        "template_settings": {"ribbon": "on"},
        "template_settings_by_template": {},
        "global_settings": {"announcement": "Free shipping"},
    }
    row.update(overrides)
    return row


@pytest.mark.parametrize(
    ("key", "kind"),
    [
        ("store_name", FieldKind.COLUMN),
        ("template_hero_heading", FieldKind.COLUMN),
        ("__templateSwitch", FieldKind.SWITCH),
        ("template", FieldKind.SWITCH),
        ("global_settings", FieldKind.GLOBAL),
        ("tenant_id", FieldKind.IGNORED),
        ("template_settings_by_template", FieldKind.IGNORED),
        ("foo_bar", FieldKind.JSON),
        ("page_document", FieldKind.JSON),
    ],
)
def test_classify_key(key: str, kind: FieldKind):
    target = classify_key(key)
    assert target.kind is kind
    assert target.name == key


def test_unknown_keys_fold_into_template_settings():
    result = merge(_row(), {"foo_bar": 42})
    assert result.column_updates == {}
    assert result.json_updates == {"template_settings": {"ribbon": "on", "foo_bar": 42}}


def test_known_columns_are_validated_and_returned():
    result = merge(_row(), {"store_name": "  New Shop ", "currency_code": "dzd"})
    assert result.column_updates == {"store_name": "New Shop", "currency_code": "DZD"}
    assert result.json_updates == {}


def test_null_clears_a_column():
    assert merge(_row(), {"store_description": None}).column_updates == {
        "store_description": None
    }


@pytest.mark.parametrize(
    "payload",
    [
        {"store_name": 12},
        {"store_name": "x" * 121},
        {"primary_color": "red"},
        {"template_accent_color": "#12345"},
        {"currency_code": "DINAR"},
        {"owner_email": "not-an-email"},
        {"template_button_text": "b" * 81},
        {"store_images": [1, 2]},
    ],
)
def test_invalid_columns_reject_the_whole_payload(payload):
    payload = {**payload, "foo_bar": 1, "store_description": "fine"}
    with pytest.raises(SettingsValidationError) as exc_info:
        merge(_row(), payload)
    assert exc_info.value.code == "validation_error"
    assert exc_info.value.errors


def test_too_many_fields_is_rejected():
    payload = {f"extra_{i}": i for i in range(MAX_PAYLOAD_KEYS + 1)}
    with pytest.raises(SettingsValidationError):
        merge(_row(), payload)


def test_non_object_payload_is_rejected():
    with pytest.raises(SettingsValidationError):
        merge(_row(), ["store_name"])  # type: ignore[arg-type]


def test_server_owned_keys_are_ignored():
    result = merge(_row(), {"tenant_id": "other", "store_slug": "hijack", "id": 5})
    assert result.column_updates == {}
    assert result.json_updates == {}


def test_global_settings_merge_into_shared_blob():
    result = merge(_row(), {"global_settings": {"whatsapp": "+213", "template": "beauty"}})
    assert result.json_updates == {
        "global_settings": {"announcement": "Free shipping", "whatsapp": "+213"}
    }


def test_global_settings_must_be_an_object():
    with pytest.raises(SettingsValidationError):
        merge(_row(), {"global_settings": "nope"})


def test_image_lists_are_trimmed_and_deduplicated():
    result = merge(
        _row(),
        {
            "store_images": " /a.jpg, ,/b.jpg,/a.jpg ",
            "banner_url": "/banner.jpg, /banner.jpg",
            "hero_main_url": " , ",
        },
    )
    assert result.column_updates == {
        "store_images": "/a.jpg,/b.jpg",
        "banner_url": "/banner.jpg",
        "hero_main_url": None,
    }


@pytest.mark.parametrize(
    ("value", "expected"),
    [(None, None), ("", None), (" , ,", None), ("a, b ,a", "a,b"), (["b", "a", "b"], "b,a")],
)
def test_normalize_image_list(value, expected):
    assert normalize_image_list(value) == expected


def test_page_document_is_migrated_before_save():
    doc = {"version": 1, "layout": {"hero": {"imageHeight": 200, "imageHeightMd": 400}}}
    result = merge(_row(), {"page_document": doc})
    saved = result.json_updates["template_settings"]["page_document"]
    assert saved == {
        "version": 2,
        "layout": {"hero": {"imageHeight": {"mobile": 200, "desktop": 400}}},
    }


def test_switch_request_is_parsed():
    result = merge(
        _row(), {"__templateSwitch": {"toTemplate": "beauty", "mode": "import", "importKeys": None}}
    )
    assert result.switch is not None
    assert result.switch.to_template == "beauty"
    assert result.switch.mode == "import"
    assert result.switch.import_keys == []


def test_bare_template_key_is_a_defaults_switch():
    result = merge(_row(), {"template": "beauty"})
    assert result.switch is not None
    assert result.switch.to_template == "beauty"
    assert result.switch.mode == "defaults"
    assert "template" not in result.json_updates.get("template_settings", {})


def test_explicit_switch_wins_over_bare_template_key():
    result = merge(
        _row(), {"template": "kids", "__templateSwitch": {"toTemplate": "beauty"}}
    )
    assert result.switch.to_template == "beauty"


@pytest.mark.parametrize(
    "switch",
    [
        {"mode": "defaults"},
        {"toTemplate": "   "},
        {"toTemplate": "beauty", "mode": "merge"},
        {"toTemplate": "beauty", "importKeys": "accentColor"},
        42,
    ],
)
def test_malformed_switch_requests_are_rejected(switch):
    with pytest.raises(SettingsValidationError):
        merge(_row(), {"__templateSwitch": switch})


def test_precedence_is_explicit_over_ordered_layers():
    layers = [{"a": 1, "b": 1, "c": 1}, {"b": 2, "c": 2}, {"c": 3}]
    assert resolve_effective_settings(layers) == {"a": 1, "b": 2, "c": 3}
    assert resolve_effective_settings([None, {"a": 1}, "junk"]) == {"a": 1}


def test_effective_settings_order_global_template_columns():
    row = _row(
        store_name="Column Name",
        global_settings={"store_name": "Global Name", "tagline": "global", "ribbon": "global"},
        template_settings={"tagline": "template", "ribbon": "template"},
    )
    effective = effective_settings(row)
    assert effective["store_name"] == "Column Name"
    assert effective["tagline"] == "template"


def test_template_column_beats_stray_json_template():
    row = _row(
        template="fashion",
        global_settings={"template": "kids"},
        template_settings={"template": "beauty"},
    )
    assert effective_settings(row)["template"] == "fashion"


def test_effective_settings_hide_internal_blobs():
    effective = effective_settings(_row())
    for key in ("id", "tenant_id", "template_settings", "template_settings_by_template",
                "global_settings"):
        assert key not in effective
    assert effective["announcement"] == "Free shipping"
    assert effective["ribbon"] == "on"
