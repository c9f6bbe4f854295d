"""Template id normalization and the enabled-template allowlist."""

from collections.abc import Iterable

from storefront.core.config import settings
from storefront.core.exceptions import TemplateNotAllowedError

LEGACY_PREFIX = "gold-"
LEGACY_SUFFIX = "-gold"

# Historical template ids -> current id
TEMPLATE_ALIASES: dict[str, str] = {
    "shiro-hana": "pro",
    "babyos": "kids",
    "baby": "kids",
}


def normalize_template_id(template_id: object) -> str:
    """Canonical template id: lower-cased, legacy gold markers stripped, aliases applied.

    Non-string or blank input normalizes to ``""``.
    """
    if not isinstance(template_id, str):
        return ""
    value = template_id.strip().lower()
    if value.startswith(LEGACY_PREFIX):
        value = value[len(LEGACY_PREFIX) :]
    if value.endswith(LEGACY_SUFFIX):
        value = value[: -len(LEGACY_SUFFIX)]
    return TEMPLATE_ALIASES.get(value, value)


def enabled_template_ids(templates: Iterable[str] | None = None) -> frozenset[str]:
    source = settings.enabled_templates if templates is None else templates
    return frozenset(t for t in (normalize_template_id(t) for t in source) if t)


def ensure_template_allowed(
    target: str,
    current: str | None,
    enabled: Iterable[str] | None = None,
) -> str:
    """Return the normalized target or raise ``TemplateNotAllowedError``.

    Re-selecting the tenant's current template is always accepted, even if it
    has since been removed from the allowlist.
    """
    normalized = normalize_template_id(target)
    if not normalized:
        raise TemplateNotAllowedError(str(target))
    if current is not None and normalized == normalize_template_id(current):
        return normalized
    if normalized not in enabled_template_ids(enabled):
        raise TemplateNotAllowedError(normalized)
    return normalized
