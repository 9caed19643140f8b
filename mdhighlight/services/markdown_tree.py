"""Structural Markdown tree produced by the parser adapter (pure Python)."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator


class NodeKind(Enum):
    DOCUMENT = "document"
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    BLOCK_QUOTE = "block_quote"
    BULLET_LIST = "bullet_list"
    ORDERED_LIST = "ordered_list"
    LIST_ITEM = "list_item"
    CODE_BLOCK = "code_block"
    HTML_BLOCK = "html_block"
    THEMATIC_BREAK = "thematic_break"
    TABLE = "table"
    TABLE_HEAD = "table_head"
    TABLE_BODY = "table_body"
    TABLE_ROW = "table_row"
    TABLE_CELL = "table_cell"
    TEXT = "text"
    EMPHASIS = "emphasis"
    STRONG = "strong"
    STRIKETHROUGH = "strikethrough"
    INLINE_CODE = "inline_code"
    LINK = "link"
    IMAGE = "image"
    HTML_INLINE = "html_inline"
    SOFT_BREAK = "soft_break"
    LINE_BREAK = "line_break"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class SourceSpan:
    """1-based line/column location; the end column is exclusive."""

    start_line: int
    start_column: int
    end_line: int
    end_column: int


@dataclass(slots=True)
class StructuralNode:
    kind: NodeKind
    children: list["StructuralNode"] = field(default_factory=list)
    span: SourceSpan | None = None
    level: int = 0  # heading level
    info: str = ""  # fence info string or link destination

    def walk(self) -> Iterator["StructuralNode"]:
        """Pre-order iteration over this node and its descendants."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def find_all(self, kind: NodeKind) -> list["StructuralNode"]:
        return [node for node in self.walk() if node.kind is kind]
