"""Schema-version migrations for stored page (layout) documents.

Documents are upgraded lazily when read and persisted upgraded when re-saved.
Steps are pure: each receives a deep copy and only touches the fields it is
about, so anything written by a newer producer passes through untouched.
"""

import copy
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from storefront.services.responsive import is_number

logger = logging.getLogger(__name__)

CURRENT_PAGE_VERSION = 2
INITIAL_PAGE_VERSION = 1

MigrationStep = Callable[[dict[str, Any]], dict[str, Any]]


@dataclass(frozen=True)
class PageMigration:
    document: Any
    migrated: bool
    from_version: int | None
    to_version: int | None


def _hero_image_height_to_responsive(doc: dict[str, Any]) -> dict[str, Any]:
    """v1 -> v2: ``imageHeight`` + ``imageHeightMd`` become one responsive value."""
    layout = doc.get("layout")
    if not isinstance(layout, dict):
        return doc
    hero = layout.get("hero")
    if not isinstance(hero, dict):
        return doc

    mobile = hero.get("imageHeight")
    desktop = hero.get("imageHeightMd")
    if is_number(mobile) and is_number(desktop):
        hero["imageHeight"] = {"mobile": mobile, "desktop": desktop}
        del hero["imageHeightMd"]
    return doc


# from_version -> step producing from_version + 1
MIGRATION_STEPS: dict[int, MigrationStep] = {
    1: _hero_image_height_to_responsive,
}


def document_version(doc: Mapping[str, Any]) -> int:
    version = doc.get("version")
    if isinstance(version, int) and not isinstance(version, bool) and version >= 1:
        return version
    return INITIAL_PAGE_VERSION


def migrate_page_document(doc: Any) -> PageMigration:
    """Upgrade ``doc`` to ``CURRENT_PAGE_VERSION``.

    Non-mapping input is returned unchanged with ``migrated=False``. The input
    is never mutated. Running the result through again is a no-op.
    """
    if not isinstance(doc, Mapping):
        return PageMigration(document=doc, migrated=False, from_version=None, to_version=None)

    from_version = document_version(doc)
    result = copy.deepcopy(dict(doc))

    for version in sorted(MIGRATION_STEPS):
        if version >= from_version:
            result = MIGRATION_STEPS[version](copy.deepcopy(result))

    migrated = result != doc or doc.get("version") != CURRENT_PAGE_VERSION
    result["version"] = CURRENT_PAGE_VERSION

    if migrated:
        logger.debug(
            "Migrated page document from v%d to v%d", from_version, CURRENT_PAGE_VERSION
        )
    return PageMigration(
        document=result,
        migrated=migrated,
        from_version=from_version,
        to_version=CURRENT_PAGE_VERSION,
    )


def migrate_config_document(doc: Any) -> Any:
    """Return the upgraded document (convenience wrapper for callers that only need it)."""
    return migrate_page_document(doc).document
