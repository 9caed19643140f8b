from __future__ import annotations

import json
import re
from copy import deepcopy
from pathlib import Path
from typing import Any, Mapping, TypedDict

from mdhighlight.configuration import FONT_WEIGHTS, Decoration, MarkdownConfiguration, MarkdownStyle


STYLE_KEYS = (
    "body",
    "heading1",
    "heading2",
    "heading3",
    "heading4",
    "heading5",
    "heading6",
    "code",
    "emphasis",
    "strong",
    "link",
)

_COLOR_PATTERN = re.compile(r"#(?:[0-9a-fA-F]{8}|[0-9a-fA-F]{6})")


class SettingsLoadError(RuntimeError):
    """Raised when a highlight settings file cannot be loaded."""


class MarkdownStyleSettings(TypedDict, total=False):
    family: str
    size: float
    weight: str  # light | normal | medium | semibold | bold
    italic: bool
    monospace: bool
    color: str | None
    underline: bool


class MarkdownHighlightSettings(TypedDict, total=False):
    debounce_ms: int
    styles: dict[str, MarkdownStyleSettings]


def _style_settings(style: MarkdownStyle) -> MarkdownStyleSettings:
    return {
        "family": style.font.family or "",
        "size": float(style.font.size),
        "weight": style.font.weight,
        "italic": style.font.italic,
        "monospace": style.font.monospace,
        "color": style.color,
        "underline": style.decoration is Decoration.UNDERLINE,
    }


def default_markdown_settings() -> MarkdownHighlightSettings:
    defaults = MarkdownConfiguration()
    styles: dict[str, MarkdownStyleSettings] = {}
    for key in STYLE_KEYS:
        style = getattr(defaults, key)
        if style is not None:
            styles[key] = _style_settings(style)
    return {
        "debounce_ms": defaults.debounce_ms,
        "styles": styles,
    }


def deep_merge_defaults(data: Mapping[str, Any], defaults: Mapping[str, Any]) -> dict[str, Any]:
    """Merge defaults into data without overwriting explicitly provided values."""
    merged = deepcopy(dict(data))
    for key, default_value in defaults.items():
        if key not in merged:
            merged[key] = deepcopy(default_value)
            continue
        current = merged[key]
        if isinstance(current, dict) and isinstance(default_value, dict):
            merged[key] = deep_merge_defaults(current, default_value)
    return merged


def _clamp_int(value: Any, low: int, high: int, fallback: int) -> int:
    try:
        return max(low, min(high, int(value)))
    except Exception:
        return fallback


def _clamp_float(value: Any, low: float, high: float, fallback: float) -> float:
    try:
        return max(low, min(high, float(value)))
    except Exception:
        return fallback


def _normalize_color(value: Any, fallback: str | None) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    if _COLOR_PATTERN.fullmatch(text):
        return text.upper()
    return fallback


def _normalize_style(raw: Any, default: MarkdownStyleSettings) -> MarkdownStyleSettings:
    data = deep_merge_defaults(raw if isinstance(raw, dict) else {}, default)

    weight = str(data.get("weight", default["weight"]) or default["weight"]).strip().lower()
    if weight not in FONT_WEIGHTS:
        weight = default["weight"]

    return {
        "family": str(data.get("family") or "").strip(),
        "size": _clamp_float(data.get("size"), 6.0, 96.0, float(default["size"])),
        "weight": weight,
        "italic": bool(data.get("italic", default["italic"])),
        "monospace": bool(data.get("monospace", default["monospace"])),
        "color": _normalize_color(data.get("color"), default["color"]),
        "underline": bool(data.get("underline", default["underline"])),
    }


def normalize_markdown_settings(raw: Any) -> MarkdownHighlightSettings:
    defaults = default_markdown_settings()
    data = dict(defaults)
    if isinstance(raw, dict):
        for key, value in raw.items():
            data[str(key)] = value

    raw_styles = data.get("styles")
    if not isinstance(raw_styles, dict):
        raw_styles = {}

    styles: dict[str, MarkdownStyleSettings] = {}
    for key in STYLE_KEYS:
        default_style = defaults["styles"].get(key)
        if default_style is None:
            # Deeper headings only exist when configured; they start from heading3.
            if key not in raw_styles:
                continue
            default_style = defaults["styles"]["heading3"]
        styles[key] = _normalize_style(raw_styles.get(key), default_style)

    return {
        "debounce_ms": _clamp_int(data.get("debounce_ms"), 0, 2000, int(defaults["debounce_ms"])),
        "styles": styles,
    }


def load_markdown_settings(path: str | Path) -> MarkdownHighlightSettings:
    """Read a JSON settings file and return its normalized content."""
    settings_path = Path(path)
    try:
        raw = json.loads(settings_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise SettingsLoadError(f"Cannot load highlight settings from '{settings_path}': {exc}") from exc
    if not isinstance(raw, dict):
        raise SettingsLoadError(
            f"Settings root in '{settings_path}' must be a JSON object, "
            f"found {type(raw).__name__}."
        )
    return normalize_markdown_settings(raw)
