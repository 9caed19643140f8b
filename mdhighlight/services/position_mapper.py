"""Line/column source spans to absolute character ranges.

Spans come from the parser as 1-based ``(line, column)`` pairs with an
exclusive end column. The mapper converts them to 0-based ``CharRange``
values over one ``DocumentText`` snapshot. It never fails for a present
span: offsets are clamped into ``[0, len(text)]`` and an end that precedes
the start collapses to an empty range. Lines past the end of the snapshot
contribute no length, so spans computed against newer text degrade to a
clamped range.

Lines end at CRLF, CR or LF, the same breaks the parser recognises.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from mdhighlight.services.markdown_tree import SourceSpan, StructuralNode


_LINE_BREAK = re.compile(r"\r\n|\r|\n")


@dataclass(frozen=True, slots=True)
class CharRange:
    offset: int
    length: int

    @property
    def end(self) -> int:
        return self.offset + self.length

    @property
    def is_empty(self) -> bool:
        return self.length <= 0

    def intersects(self, other: "CharRange") -> bool:
        return self.offset < other.end and other.offset < self.end


@dataclass(frozen=True, slots=True)
class DocumentText:
    """Immutable text snapshot taken at the start of a highlight pass."""

    text: str
    line_starts: tuple[int, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        starts = [0]
        starts.extend(match.end() for match in _LINE_BREAK.finditer(self.text))
        starts.append(len(self.text) + 1)
        object.__setattr__(self, "line_starts", tuple(starts))

    def __len__(self) -> int:
        return len(self.text)

    @property
    def is_empty(self) -> bool:
        return not self.text

    @property
    def line_count(self) -> int:
        return len(self.line_starts) - 1

    @property
    def lines(self) -> list[str]:
        return _LINE_BREAK.split(self.text)

    def char_at(self, index: int) -> str:
        return self.text[index]

    def slice(self, char_range: CharRange) -> str:
        return self.text[char_range.offset:char_range.end]

    def full_range(self) -> CharRange:
        return CharRange(0, len(self.text))


def _absolute_offset(text: DocumentText, line: int, column: int) -> int:
    # Lines beyond the snapshot add nothing; the column is still applied.
    preceding = max(0, min(line - 1, text.line_count))
    return text.line_starts[preceding] + (column - 1)


def map_span(span: SourceSpan, text: DocumentText | str) -> CharRange:
    if isinstance(text, str):
        text = DocumentText(text)
    total = len(text)

    start = _absolute_offset(text, span.start_line, span.start_column)
    end = _absolute_offset(text, span.end_line, span.end_column)

    start = max(0, min(start, total))
    end = max(start, min(end, total))
    return CharRange(start, end - start)


def map_node(node: StructuralNode, text: DocumentText | str) -> CharRange | None:
    """Return the node's range, or ``None`` when the parser gave it no span."""
    if node.span is None:
        return None
    return map_span(node.span, text)
