"""Store settings validation schemas."""

import re
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

_HEX_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{6}$")
_CURRENCY_RE = re.compile(r"^[A-Za-z]{3}$")

MAX_URL_LENGTH = 2048
MAX_IMAGE_LIST_LENGTH = 8192


class StoreSettingsColumns(BaseModel):
    """Editable scalar columns. Every field optional, ``null`` clears it."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    store_name: str | None = Field(None, max_length=120)
    store_description: str | None = Field(None, max_length=2000)
    store_logo: str | None = Field(None, max_length=MAX_URL_LENGTH)
    primary_color: str | None = None
    secondary_color: str | None = None
    banner_url: str | None = Field(None, max_length=MAX_URL_LENGTH)
    currency_code: str | None = None
    hero_main_url: str | None = Field(None, max_length=MAX_URL_LENGTH)
    hero_tile1_url: str | None = Field(None, max_length=MAX_URL_LENGTH)
    hero_tile2_url: str | None = Field(None, max_length=MAX_URL_LENGTH)
    store_images: str | list[str] | None = None
    owner_name: str | None = Field(None, max_length=120)
    owner_email: str | None = Field(None, max_length=255)
    template_hero_heading: str | None = Field(None, max_length=200)
    template_hero_subtitle: str | None = Field(None, max_length=500)
    template_button_text: str | None = Field(None, max_length=80)
    template_accent_color: str | None = None

    @field_validator("primary_color", "secondary_color", "template_accent_color")
    @classmethod
    def validate_hex_color(cls, v: str | None) -> str | None:
        if v is not None and not _HEX_COLOR_RE.match(v):
            raise ValueError("Must be a hex color in #RRGGBB format")
        return v

    @field_validator("currency_code")
    @classmethod
    def validate_currency(cls, v: str | None) -> str | None:
        if v is None:
            return v
        if not _CURRENCY_RE.match(v):
            raise ValueError("Must be a 3-letter currency code")
        return v.upper()

    @field_validator("owner_email")
    @classmethod
    def validate_email(cls, v: str | None) -> str | None:
        if v and "@" not in v:
            raise ValueError("Must be an email address")
        return v

    @field_validator("store_images")
    @classmethod
    def validate_store_images(cls, v: str | list[str] | None) -> str | list[str] | None:
        if v is None:
            return v
        total = len(v) if isinstance(v, str) else sum(len(s) + 1 for s in v)
        if total > MAX_IMAGE_LIST_LENGTH:
            raise ValueError(f"Image list exceeds {MAX_IMAGE_LIST_LENGTH} characters")
        return v


class TemplateSwitchRequest(BaseModel):
    """Body of the reserved ``__templateSwitch`` control key."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    to_template: str = Field(..., alias="toTemplate", min_length=1, max_length=64)
    mode: Literal["defaults", "import", "reset"] = "defaults"
    import_keys: list[str] = Field(default_factory=list, alias="importKeys", max_length=200)

    @field_validator("import_keys", mode="before")
    @classmethod
    def default_import_keys(cls, v: object) -> object:
        return [] if v is None else v
