"""MarkdownStyle -> QTextCharFormat resolution."""

from __future__ import annotations

from PySide6.QtGui import QBrush, QColor, QFont, QFontDatabase, QTextCharFormat

from mdhighlight.configuration import Decoration, FontSpec, MarkdownStyle


_WEIGHTS = {
    "light": QFont.Weight.Light,
    "normal": QFont.Weight.Normal,
    "medium": QFont.Weight.Medium,
    "semibold": QFont.Weight.DemiBold,
    "bold": QFont.Weight.Bold,
}


def font_for(font_spec: FontSpec, base_font: QFont | None = None) -> QFont:
    if font_spec.monospace:
        font = QFontDatabase.systemFont(QFontDatabase.SystemFont.FixedFont)
    else:
        font = QFont(base_font) if base_font is not None else QFont()
    if font_spec.family:
        font.setFamily(font_spec.family)
    font.setPointSizeF(float(font_spec.size))
    font.setWeight(_WEIGHTS.get(font_spec.weight, QFont.Weight.Normal))
    font.setItalic(bool(font_spec.italic))
    return font


def char_format_for(
    style: MarkdownStyle,
    *,
    text_color: QColor | str | None = None,
    base_font: QFont | None = None,
) -> QTextCharFormat:
    """Build a format that asserts font, color and underline together.

    Later formats fully replace earlier ones on overlapping characters, so
    every property is set explicitly, underline included.
    """
    fmt = QTextCharFormat()
    fmt.setFont(font_for(style.font, base_font))
    color = style.color or text_color
    if color is not None:
        fmt.setForeground(QBrush(QColor(color)))
    fmt.setFontUnderline(style.decoration is Decoration.UNDERLINE)
    return fmt


class CharFormatCache:
    def __init__(self, *, text_color: QColor | str | None = None, base_font: QFont | None = None) -> None:
        self._text_color = text_color
        self._base_font = base_font
        self._formats: dict[MarkdownStyle, QTextCharFormat] = {}

    def format_for(self, style: MarkdownStyle) -> QTextCharFormat:
        fmt = self._formats.get(style)
        if fmt is None:
            fmt = char_format_for(style, text_color=self._text_color, base_font=self._base_font)
            self._formats[style] = fmt
        return fmt

    def clear(self) -> None:
        self._formats.clear()
