"""Widget-independent highlight pipeline: parse, map, style."""

from .highlight_pass import EditNotification, HighlightPassError, HighlightPipeline, PassResult, TextSurface
from .markdown_parser import MarkdownStructureParser, parse_markdown
from .markdown_tree import NodeKind, SourceSpan, StructuralNode
from .position_mapper import CharRange, DocumentText, map_node, map_span
from .style_table import StyleTable
from .style_visitor import HighlightVisitor, StyleOp

__all__ = [
    "CharRange",
    "DocumentText",
    "EditNotification",
    "HighlightPassError",
    "HighlightPipeline",
    "HighlightVisitor",
    "MarkdownStructureParser",
    "NodeKind",
    "PassResult",
    "SourceSpan",
    "StructuralNode",
    "StyleOp",
    "StyleTable",
    "TextSurface",
    "map_node",
    "map_span",
    "parse_markdown",
]
