"""Qt side: document adapter, scheduler and attachment."""

from .highlight_scheduler import HighlightScheduler, HighlightState
from .markdown_plugin import MarkdownHighlighting, attach, detach
from .text_surface import QtTextSurface

__all__ = [
    "HighlightScheduler",
    "HighlightState",
    "MarkdownHighlighting",
    "QtTextSurface",
    "attach",
    "detach",
]
