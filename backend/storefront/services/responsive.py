"""Breakpoint resolution for responsive layout values.

A responsive value is either a bare number (applies everywhere, the legacy
shape) or a mapping ``{"mobile": .., "tablet": .., "desktop": ..}`` with any
subset of keys. Resolution is total: malformed input yields ``None`` and the
caller falls back to its own default.
"""

from collections.abc import Mapping
from typing import Any, Literal

Breakpoint = Literal["mobile", "tablet", "desktop"]

BREAKPOINTS: tuple[Breakpoint, ...] = ("mobile", "tablet", "desktop")

TABLET_MIN_WIDTH = 768
DESKTOP_MIN_WIDTH = 1024


def is_number(value: Any) -> bool:
    # bool is an int subclass but never a layout measurement
    return isinstance(value, int | float) and not isinstance(value, bool)


def classify_breakpoint(width: Any) -> Breakpoint:
    """Classify a container width (not the viewport) into a breakpoint."""
    if not is_number(width) or width != width:
        return "mobile"
    if width >= DESKTOP_MIN_WIDTH:
        return "desktop"
    if width >= TABLET_MIN_WIDTH:
        return "tablet"
    return "mobile"


def resolve_responsive_number(value: Any, breakpoint: str) -> int | float | None:
    """Resolve ``value`` for ``breakpoint``.

    Bare number -> itself. Mapping -> the breakpoint's entry, else ``desktop``,
    else the first numeric entry in mobile/tablet/desktop order. Anything
    else -> ``None``.
    """
    if is_number(value):
        return value
    if not isinstance(value, Mapping):
        return None

    candidate = value.get(breakpoint)
    if is_number(candidate):
        return candidate
    desktop = value.get("desktop")
    if is_number(desktop):
        return desktop
    for key in BREAKPOINTS:
        candidate = value.get(key)
        if is_number(candidate):
            return candidate
    return None


def is_responsive_mapping(value: Any) -> bool:
    return isinstance(value, Mapping) and any(key in value for key in BREAKPOINTS)


def resolve_responsive_style(style: Any, breakpoint: str) -> Any:
    """Resolve every responsive entry of a style mapping.

    Returns ``style`` itself (same object) when no entry changed, so memoized
    renderers can compare by identity. Unresolvable responsive entries are
    dropped; non-responsive entries are kept as-is.
    """
    if not isinstance(style, Mapping):
        return style

    resolved: dict[str, Any] = {}
    changed = False
    for key, value in style.items():
        if not is_responsive_mapping(value):
            resolved[key] = value
            continue
        changed = True
        number = resolve_responsive_number(value, breakpoint)
        if number is not None:
            resolved[key] = number

    return resolved if changed else style
