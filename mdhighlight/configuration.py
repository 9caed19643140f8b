"""Style descriptors and the immutable highlighting configuration."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any


FONT_WEIGHTS = ("light", "normal", "medium", "semibold", "bold")

# Semantic colors for Markdown (system indigo/pink/blue/teal/orange).
HEADING_COLOR = "#5856D6"
CODE_COLOR = "#FF2D55"
LINK_COLOR = "#007AFF"
EMPHASIS_COLOR = "#30B0C7"
STRONG_COLOR = "#FF9500"


class Decoration(Enum):
    UNDERLINE = "underline"


@dataclass(frozen=True, slots=True)
class FontSpec:
    """Platform independent font description, resolved to a QFont by the UI layer."""

    size: float
    weight: str = "normal"
    italic: bool = False
    monospace: bool = False
    family: str | None = None

    @classmethod
    def system(cls, size: float) -> "FontSpec":
        return cls(size=size)

    @classmethod
    def bold(cls, size: float) -> "FontSpec":
        return cls(size=size, weight="bold")

    @classmethod
    def italic_system(cls, size: float) -> "FontSpec":
        return cls(size=size, italic=True)

    @classmethod
    def monospaced(cls, size: float, weight: str = "medium") -> "FontSpec":
        return cls(size=size, weight=weight, monospace=True)


@dataclass(frozen=True, slots=True)
class MarkdownStyle:
    """A combined font + color (+ decoration) for one Markdown syntax element.

    ``color`` is a ``#RRGGBB`` string; ``None`` means the surface's own text color.
    """

    font: FontSpec
    color: str | None = None
    decoration: Decoration | None = None

    def with_decoration(self, decoration: Decoration | None) -> "MarkdownStyle":
        if self.decoration is decoration:
            return self
        return replace(self, decoration=decoration)


@dataclass(frozen=True, slots=True)
class MarkdownFonts:
    body: FontSpec = FontSpec.system(16)
    heading1: FontSpec = FontSpec.bold(28)
    heading2: FontSpec = FontSpec.bold(24)
    heading3: FontSpec = FontSpec.bold(20)
    code: FontSpec = FontSpec.monospaced(14)
    bold: FontSpec = FontSpec.bold(16)
    italic: FontSpec = FontSpec.italic_system(16)


@dataclass(frozen=True, slots=True)
class MarkdownColors:
    text: str | None = None
    heading: str = HEADING_COLOR
    code: str = CODE_COLOR
    link: str = LINK_COLOR
    emphasis: str = EMPHASIS_COLOR
    strong: str = STRONG_COLOR


_DEFAULT_FONTS = MarkdownFonts()
_DEFAULT_COLORS = MarkdownColors()


@dataclass(frozen=True, slots=True)
class MarkdownConfiguration:
    """Configuration for Markdown syntax highlighting.

    Defaults: 16pt body text, headings scaled to 28/24/20pt bold, 14pt medium
    monospace code, and semantic colors (indigo headings, pink code, blue
    links, teal emphasis, orange strong text).

    ``heading4``..``heading6`` are unset by default; deeper headings fall back
    to the smallest configured heading style.
    """

    body: MarkdownStyle = MarkdownStyle(_DEFAULT_FONTS.body, _DEFAULT_COLORS.text)
    heading1: MarkdownStyle = MarkdownStyle(_DEFAULT_FONTS.heading1, HEADING_COLOR)
    heading2: MarkdownStyle = MarkdownStyle(_DEFAULT_FONTS.heading2, HEADING_COLOR)
    heading3: MarkdownStyle = MarkdownStyle(_DEFAULT_FONTS.heading3, HEADING_COLOR)
    code: MarkdownStyle = MarkdownStyle(_DEFAULT_FONTS.code, CODE_COLOR)
    emphasis: MarkdownStyle = MarkdownStyle(_DEFAULT_FONTS.italic, EMPHASIS_COLOR)
    strong: MarkdownStyle = MarkdownStyle(_DEFAULT_FONTS.bold, STRONG_COLOR)
    link: MarkdownStyle = MarkdownStyle(_DEFAULT_FONTS.body, LINK_COLOR)
    heading4: MarkdownStyle | None = None
    heading5: MarkdownStyle | None = None
    heading6: MarkdownStyle | None = None
    debounce_ms: int = 10

    @property
    def headings(self) -> tuple[MarkdownStyle | None, ...]:
        return (self.heading1, self.heading2, self.heading3, self.heading4, self.heading5, self.heading6)

    @property
    def fonts(self) -> MarkdownFonts:
        return MarkdownFonts(
            body=self.body.font,
            heading1=self.heading1.font,
            heading2=self.heading2.font,
            heading3=self.heading3.font,
            code=self.code.font,
            bold=self.strong.font,
            italic=self.emphasis.font,
        )

    @property
    def colors(self) -> MarkdownColors:
        return MarkdownColors(
            text=self.body.color,
            heading=self.heading1.color or HEADING_COLOR,
            code=self.code.color or CODE_COLOR,
            link=self.link.color or LINK_COLOR,
            emphasis=self.emphasis.color or EMPHASIS_COLOR,
            strong=self.strong.color or STRONG_COLOR,
        )

    @classmethod
    def from_parts(
        cls,
        fonts: MarkdownFonts | None = None,
        colors: MarkdownColors | None = None,
        *,
        debounce_ms: int = 10,
    ) -> "MarkdownConfiguration":
        f = fonts or _DEFAULT_FONTS
        c = colors or _DEFAULT_COLORS
        return cls(
            body=MarkdownStyle(f.body, c.text),
            heading1=MarkdownStyle(f.heading1, c.heading),
            heading2=MarkdownStyle(f.heading2, c.heading),
            heading3=MarkdownStyle(f.heading3, c.heading),
            code=MarkdownStyle(f.code, c.code),
            emphasis=MarkdownStyle(f.italic, c.emphasis),
            strong=MarkdownStyle(f.bold, c.strong),
            link=MarkdownStyle(f.body, c.link),
            debounce_ms=debounce_ms,
        )

    @classmethod
    def from_mapping(cls, data: Any) -> "MarkdownConfiguration":
        """Build a configuration from a (possibly partial) settings mapping."""
        from mdhighlight.settings_schema import STYLE_KEYS, normalize_markdown_settings

        n = normalize_markdown_settings(data)
        styles: dict[str, MarkdownStyle] = {}
        for key in STYLE_KEYS:
            entry = n["styles"].get(key)
            if entry is None:
                continue
            styles[key] = MarkdownStyle(
                font=FontSpec(
                    size=float(entry["size"]),
                    weight=str(entry["weight"]),
                    italic=bool(entry["italic"]),
                    monospace=bool(entry["monospace"]),
                    family=entry.get("family") or None,
                ),
                color=entry.get("color") or None,
                decoration=Decoration.UNDERLINE if entry.get("underline") else None,
            )
        return cls(debounce_ms=int(n["debounce_ms"]), **styles)
