"""Template switching and the full update plan for one settings write.

Everything here is pure: the controller receives the current row as a plain
mapping and returns the columns and JSON blobs to write. The caller persists
the plan in one transaction.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from storefront.core.config import settings
from storefront.schemas.store_settings import TemplateSwitchRequest
from storefront.services import config_merger
from storefront.services.config_merger import SNAPSHOTS_KEY, TEMPLATE_SETTINGS_KEY
from storefront.services.snapshots import (
    SCOPED_FIELDS,
    TEMPLATE_KEY,
    build_snapshot,
    read_snapshot,
    resolve_snapshot_key,
    strip_scoped_fields,
    write_snapshot,
)
from storefront.services.templates import ensure_template_allowed, normalize_template_id

logger = logging.getLogger(__name__)


@dataclass
class SwitchPlan:
    from_template: str
    to_template: str
    column_updates: dict[str, Any]
    json_updates: dict[str, Any]


@dataclass
class UpdatePlan:
    column_updates: dict[str, Any] = field(default_factory=dict)
    json_updates: dict[str, Any] = field(default_factory=dict)
    switch: SwitchPlan | None = None


class TemplateSwitchController:
    """Plans settings writes, including switches between templates.

    ``enabled_templates`` is the allowlist of selectable templates;
    ``default_template`` is used when a row has no template recorded.
    """

    def __init__(
        self,
        enabled_templates: Iterable[str] | None = None,
        scoped_fields: Iterable[str] = SCOPED_FIELDS,
        default_template: str | None = None,
    ):
        self.enabled_templates = (
            frozenset(enabled_templates)
            if enabled_templates is not None
            else settings.enabled_templates
        )
        self.scoped_fields = tuple(scoped_fields)
        self.default_template = normalize_template_id(
            default_template or settings.DEFAULT_TEMPLATE
        )

    def current_template(self, row: Mapping[str, Any]) -> str:
        return normalize_template_id(row.get(TEMPLATE_KEY)) or self.default_template

    def plan_switch(self, row: Mapping[str, Any], request: TemplateSwitchRequest) -> SwitchPlan:
        """Columns and blobs that move ``row`` onto ``request.to_template``.

        The outgoing template's live values are snapshotted first. The
        incoming template starts from its own stored snapshot (``defaults``),
        from that snapshot plus the listed keys carried over (``import``), or
        from nothing (``reset``). Scoped columns absent from the new snapshot
        are cleared so nothing leaks across templates.
        """
        current = self.current_template(row)
        target = ensure_template_allowed(request.to_template, current, self.enabled_templates)

        old_snapshot = build_snapshot(row, self.scoped_fields)
        snapshots = write_snapshot(row.get(SNAPSHOTS_KEY), current, old_snapshot)

        if request.mode == "reset":
            base = {}
        else:
            base = read_snapshot(snapshots, target)
        if request.mode == "import":
            for key in request.import_keys:
                name = resolve_snapshot_key(key)
                if name in old_snapshot:
                    base[name] = old_snapshot[name]
        base.pop(TEMPLATE_KEY, None)

        columns: dict[str, Any] = {TEMPLATE_KEY: target}
        for name in self.scoped_fields:
            columns[name] = base.get(name)

        snapshots = write_snapshot(snapshots, target, base)
        logger.info(
            "Template switch %s -> %s (mode=%s, import_keys=%d)",
            current,
            target,
            request.mode,
            len(request.import_keys),
        )
        return SwitchPlan(
            from_template=current,
            to_template=target,
            column_updates=columns,
            json_updates={
                TEMPLATE_SETTINGS_KEY: strip_scoped_fields(base, self.scoped_fields),
                SNAPSHOTS_KEY: snapshots,
            },
        )

    def plan_update(self, row: Mapping[str, Any], payload: Mapping[str, Any]) -> UpdatePlan:
        """Full write for ``payload``: optional switch, field updates, snapshot refresh.

        Validation of every field happens before anything is planned, so a
        rejected payload yields no plan at all.
        """
        merged = config_merger.merge(row, payload)
        working = dict(row)
        plan = UpdatePlan()

        if merged.switch is not None:
            plan.switch = self.plan_switch(working, merged.switch)
            working.update(plan.switch.column_updates)
            working.update(plan.switch.json_updates)
            plan.column_updates.update(plan.switch.column_updates)
            plan.json_updates.update(plan.switch.json_updates)
            # field updates apply to the template being switched to
            merged = config_merger.merge(working, payload)

        working.update(merged.column_updates)
        working.update(merged.json_updates)
        plan.column_updates.update(merged.column_updates)
        plan.json_updates.update(merged.json_updates)

        active = self.current_template(working)
        plan.json_updates[SNAPSHOTS_KEY] = write_snapshot(
            working.get(SNAPSHOTS_KEY), active, build_snapshot(working, self.scoped_fields)
        )
        if normalize_template_id(row.get(TEMPLATE_KEY)) != row.get(TEMPLATE_KEY) and (
            plan.switch is None
        ):
            # legacy ids (gold-*, aliases) are rewritten on the next save
            plan.column_updates[TEMPLATE_KEY] = active
        return plan
