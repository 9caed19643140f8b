"""Live Markdown syntax highlighting for Qt text editors."""

from .configuration import Decoration, FontSpec, MarkdownColors, MarkdownConfiguration, MarkdownFonts, MarkdownStyle
from .ui.markdown_plugin import MarkdownHighlighting, attach, detach

__all__ = [
    "Decoration",
    "FontSpec",
    "MarkdownColors",
    "MarkdownConfiguration",
    "MarkdownFonts",
    "MarkdownHighlighting",
    "MarkdownStyle",
    "attach",
    "detach",
]
__version__ = "0.1.0"
