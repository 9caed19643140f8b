from __future__ import annotations

from mdhighlight.configuration import MarkdownConfiguration, MarkdownStyle
from mdhighlight.services.markdown_tree import NodeKind


STYLED_KINDS = frozenset(
    {
        NodeKind.HEADING,
        NodeKind.EMPHASIS,
        NodeKind.STRONG,
        NodeKind.INLINE_CODE,
        NodeKind.CODE_BLOCK,
        NodeKind.LINK,
    }
)


class StyleTable:
    """Fixed lookup from node kind (and heading level) to a style."""

    def __init__(self, configuration: MarkdownConfiguration | None = None) -> None:
        self._cfg = configuration or MarkdownConfiguration()
        self._by_kind: dict[NodeKind, MarkdownStyle] = {
            NodeKind.EMPHASIS: self._cfg.emphasis,
            NodeKind.STRONG: self._cfg.strong,
            NodeKind.INLINE_CODE: self._cfg.code,
            NodeKind.CODE_BLOCK: self._cfg.code,
            NodeKind.LINK: self._cfg.link,
        }

    @property
    def configuration(self) -> MarkdownConfiguration:
        return self._cfg

    @property
    def body(self) -> MarkdownStyle:
        return self._cfg.body

    def heading_style(self, level: int) -> MarkdownStyle:
        headings = self._cfg.headings
        index = max(1, min(int(level), len(headings))) - 1
        # Undefined levels fall back to the nearest smaller heading that is
        # configured, and to body text when no heading is.
        while index >= 0 and headings[index] is None:
            index -= 1
        if index < 0:
            return self._cfg.body
        return headings[index]

    def style_for(self, kind: NodeKind, level: int | None = None) -> MarkdownStyle:
        if kind is NodeKind.HEADING:
            return self.heading_style(level or 1)
        try:
            return self._by_kind[kind]
        except KeyError:
            raise KeyError(f"No style for unstyled node kind: {kind.value}") from None
