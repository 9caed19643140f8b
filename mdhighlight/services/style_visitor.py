"""Structural tree -> ordered style operations.

The walk is pre-order: a node's own operation is emitted before any of its
descendants'. The commit step applies operations in emission order and each
one replaces the whole style (font, color, decoration) on its range, so the
innermost styled node covering a character decides that character's style.
"""

from __future__ import annotations

from dataclasses import dataclass

from mdhighlight.configuration import Decoration, MarkdownStyle
from mdhighlight.services.markdown_tree import NodeKind, StructuralNode
from mdhighlight.services.position_mapper import CharRange, DocumentText, map_node
from mdhighlight.services.style_table import STYLED_KINDS, StyleTable


@dataclass(frozen=True, slots=True)
class StyleOp:
    range: CharRange
    style: MarkdownStyle
    kind: NodeKind


class HighlightVisitor:
    def __init__(self, style_table: StyleTable) -> None:
        self._table = style_table

    def run(self, root: StructuralNode, text: DocumentText) -> list[StyleOp]:
        ops: list[StyleOp] = []
        self._visit(root, text, ops)
        return ops

    def _visit(self, node: StructuralNode, text: DocumentText, ops: list[StyleOp]) -> None:
        style = self._style_for_node(node)
        if style is not None:
            char_range = map_node(node, text)
            if char_range is not None and not char_range.is_empty:
                ops.append(StyleOp(char_range, style, node.kind))

        for child in node.children:
            self._visit(child, text, ops)

    def _style_for_node(self, node: StructuralNode) -> MarkdownStyle | None:
        if node.kind not in STYLED_KINDS:
            return None
        if node.kind is NodeKind.HEADING:
            return self._table.style_for(NodeKind.HEADING, node.level)
        if node.kind is NodeKind.LINK:
            return self._table.style_for(NodeKind.LINK).with_decoration(Decoration.UNDERLINE)
        return self._table.style_for(node.kind)
