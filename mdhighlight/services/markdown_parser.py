"""Markdown -> StructuralNode tree with line/column source spans.

markdown-it-py reports line maps for block tokens only. Inline positions are
recovered by wrapping every inline rule: the wrapper records the offset range
(inside the inline token's content) consumed while each token was pushed.
Those offsets are then located on the document lines the block came from.

Spans include Markdown delimiters, so ``*text*`` covers both asterisks and a
fenced code block covers its fences.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from markdown_it import MarkdownIt

from mdhighlight.services.markdown_tree import NodeKind, SourceSpan, StructuralNode

if TYPE_CHECKING:
    from markdown_it.rules_inline import StateInline
    from markdown_it.token import Token


logger = logging.getLogger(__name__)

_OFFSETS_META = "mdhighlight_offsets"

# Rules that push one text token per delimiter run piece (later rewritten to
# open/close tokens by the post-processing chain).
_DELIMITER_RULES = {"emphasis", "strikethrough"}
_DELIMITER_TYPES = {"em", "strong", "s"}

_BLOCK_KINDS: dict[str, NodeKind] = {
    "paragraph": NodeKind.PARAGRAPH,
    "heading": NodeKind.HEADING,
    "blockquote": NodeKind.BLOCK_QUOTE,
    "bullet_list": NodeKind.BULLET_LIST,
    "ordered_list": NodeKind.ORDERED_LIST,
    "list_item": NodeKind.LIST_ITEM,
    "table": NodeKind.TABLE,
    "thead": NodeKind.TABLE_HEAD,
    "tbody": NodeKind.TABLE_BODY,
    "tr": NodeKind.TABLE_ROW,
    "th": NodeKind.TABLE_CELL,
    "td": NodeKind.TABLE_CELL,
    "fence": NodeKind.CODE_BLOCK,
    "code_block": NodeKind.CODE_BLOCK,
    "html_block": NodeKind.HTML_BLOCK,
    "hr": NodeKind.THEMATIC_BREAK,
}

_INLINE_KINDS: dict[str, NodeKind] = {
    "em": NodeKind.EMPHASIS,
    "strong": NodeKind.STRONG,
    "s": NodeKind.STRIKETHROUGH,
    "link": NodeKind.LINK,
    "code_inline": NodeKind.INLINE_CODE,
    "image": NodeKind.IMAGE,
    "html_inline": NodeKind.HTML_INLINE,
    "softbreak": NodeKind.SOFT_BREAK,
    "hardbreak": NodeKind.LINE_BREAK,
    "text": NodeKind.TEXT,
}


def _track_offsets(name: str, rule: Callable[[StateInline, bool], bool]) -> Callable[[StateInline, bool], bool]:
    delimiter_rule = name in _DELIMITER_RULES

    def tracked(state: StateInline, silent: bool) -> bool:
        start = state.pos
        first_new = len(state.tokens)
        ok = rule(state, silent)
        if not ok or silent:
            return ok

        end = state.pos
        new_tokens = state.tokens[first_new:]
        if delimiter_rule:
            # Delimiter pieces are the trailing tokens and cover exactly [start, end).
            remaining = end - start
            for token in reversed(new_tokens):
                if remaining <= 0:
                    break
                piece_end = start + remaining
                remaining -= len(token.content)
                token.meta[_OFFSETS_META] = (start + remaining, piece_end)
            return ok

        for token in new_tokens:
            if _OFFSETS_META not in token.meta:
                token.meta[_OFFSETS_META] = (start, end)
        return ok

    return tracked


def create_markdown_it() -> MarkdownIt:
    md = MarkdownIt("commonmark").enable("table").enable("strikethrough")
    for rule in list(md.inline.ruler.__rules__):
        md.inline.ruler.at(rule.name, _track_offsets(rule.name, rule.fn))
    return md


class _InlineLocator:
    """Maps offsets inside an inline token's content to document positions."""

    def __init__(self, token: Token, lines: list[str], cursors: dict[int, int], fallback_line: int = 0) -> None:
        self._segments: list[tuple[int, int, int, int]] = []  # line, column, content offset, length
        first_line = token.map[0] if token.map else fallback_line
        offset = 0
        for index, segment in enumerate(token.content.split("\n")):
            line_no = first_line + index
            line = lines[line_no] if line_no < len(lines) else ""
            column = _locate_segment(line, segment, cursors.get(line_no, 0))
            cursors[line_no] = column + len(segment)
            self._segments.append((line_no, column, offset, len(segment)))
            offset += len(segment) + 1

    def position(self, offset: int) -> tuple[int, int]:
        for line_no, column, seg_start, seg_len in reversed(self._segments):
            if offset >= seg_start:
                return line_no + 1, column + min(offset - seg_start, seg_len) + 1
        line_no, column, _, _ = self._segments[0]
        return line_no + 1, column + 1

    def span(self, start: int, end: int) -> SourceSpan:
        start_line, start_column = self.position(start)
        end_line, end_column = self.position(end)
        return SourceSpan(start_line, start_column, end_line, end_column)


def _locate_segment(line: str, segment: str, search_from: int) -> int:
    if not segment:
        return min(search_from, len(line))
    # Content lines run to the end of their source line (container prefixes
    # and indentation are cut from the front only).
    for candidate in (line, line.rstrip()):
        if candidate.endswith(segment):
            column = len(candidate) - len(segment)
            if column >= search_from:
                return column
    found = line.find(segment, search_from)
    if found >= 0:
        return found
    return max(search_from, len(line.rstrip()) - len(segment))


def _indent_width(line: str) -> int:
    return len(line) - len(line.lstrip())


def _block_span(token: Token, lines: list[str]) -> SourceSpan | None:
    if not token.map:
        return None
    first, stop = token.map
    last = max(first, stop - 1)
    first_text = lines[first] if first < len(lines) else ""
    last_text = lines[last] if last < len(lines) else ""

    start_column = _indent_width(first_text)
    # ATX headings and fences start at their marker; setext markup sits on the underline.
    if token.type == "fence" or (token.type == "heading_open" and token.markup.startswith("#")):
        found = first_text.find(token.markup)
        if found >= 0:
            start_column = found

    end_column = len(last_text.rstrip())
    if last == first:
        end_column = max(end_column, start_column)
    return SourceSpan(first + 1, start_column + 1, last + 1, end_column + 1)


class MarkdownStructureParser:
    """Builds a StructuralNode tree from Markdown text.

    Total for any input: markdown-it-py never rejects text, and positions it
    cannot pin down degrade to clamped spans rather than errors.
    """

    def __init__(self) -> None:
        self._md = create_markdown_it()

    def parse(self, text: str) -> StructuralNode:
        tokens = self._md.parse(text)
        # markdown-it normalizes CRLF/CR line endings before tokenizing.
        lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")

        root = StructuralNode(NodeKind.DOCUMENT)
        stack = [root]
        cursors: dict[int, int] = {}
        for token in tokens:
            if token.nesting == -1:
                if len(stack) > 1:
                    stack.pop()
                continue
            if token.type == "inline":
                parent_span = stack[-1].span
                fallback_line = parent_span.start_line - 1 if parent_span else 0
                locator = _InlineLocator(token, lines, cursors, fallback_line)
                stack[-1].children.extend(self._inline_nodes(token.children or [], locator))
                continue

            node = self._block_node(token, lines)
            stack[-1].children.append(node)
            if token.nesting == 1:
                stack.append(node)

        logger.debug("Parsed %d block tokens from %d chars", len(tokens), len(text))
        return root

    def _block_node(self, token: Token, lines: list[str]) -> StructuralNode:
        name = token.type[:-5] if token.type.endswith("_open") else token.type
        kind = _BLOCK_KINDS.get(name, NodeKind.OTHER)
        node = StructuralNode(kind, span=_block_span(token, lines))
        if kind is NodeKind.HEADING:
            node.level = _heading_level(token)
        elif token.type == "fence":
            node.info = token.info.strip()
        return node

    def _inline_nodes(self, tokens: list[Token], locator: _InlineLocator, base: int | None = 0) -> list[StructuralNode]:
        """Build inline nodes; ``base`` shifts token offsets (``None`` drops them)."""
        holder = StructuralNode(NodeKind.OTHER)
        stack: list[tuple[StructuralNode, int]] = [(holder, 0)]
        for token in tokens:
            offsets = token.meta.get(_OFFSETS_META) if base is not None else None
            if offsets is not None:
                offsets = (offsets[0] + base, offsets[1] + base)
            name = token.type[:-5] if token.type.endswith("_open") else token.type

            if token.nesting == 1:
                kind = _INLINE_KINDS.get(name, NodeKind.OTHER)
                node = StructuralNode(kind)
                if kind is NodeKind.LINK:
                    node.info = str(token.attrGet("href") or "")
                start = -1
                if offsets is not None:
                    start = offsets[1] - len(token.markup) if name in _DELIMITER_TYPES else offsets[0]
                stack[-1][0].children.append(node)
                stack.append((node, start))
                continue

            if token.nesting == -1:
                if len(stack) == 1:
                    continue
                node, start = stack.pop()
                name = token.type[:-6] if token.type.endswith("_close") else token.type
                if offsets is not None and start >= 0:
                    end = offsets[0] + len(token.markup) if name in _DELIMITER_TYPES else offsets[1]
                    if end >= start:
                        node.span = locator.span(start, end)
                continue

            kind = _INLINE_KINDS.get(token.type, NodeKind.OTHER)
            if kind is NodeKind.TEXT and not token.content:
                continue
            node = StructuralNode(kind)
            # Text runs are merged/rewritten by post-processing; only leaves
            # pushed by their own rule carry reliable offsets.
            if offsets is not None and kind is not NodeKind.TEXT:
                node.span = locator.span(*offsets)
            if kind is NodeKind.IMAGE:
                node.info = str(token.attrGet("src") or "")
                # Alt text is parsed on its own, with offsets relative to the label after "![".
                label_base = offsets[0] + 2 if offsets is not None else None
                node.children.extend(self._inline_nodes(token.children or [], locator, label_base))
            stack[-1][0].children.append(node)
        return holder.children


def _heading_level(token: Token) -> int:
    if token.tag.startswith("h") and token.tag[1:].isdigit():
        return int(token.tag[1:])
    return 1


_default_parser: MarkdownStructureParser | None = None


def parse_markdown(text: str) -> StructuralNode:
    global _default_parser
    if _default_parser is None:
        _default_parser = MarkdownStructureParser()
    return _default_parser.parse(text)
