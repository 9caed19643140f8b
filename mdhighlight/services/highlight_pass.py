"""One highlight pass: snapshot -> parse -> visit -> commit.

These contracts keep the pipeline independent of the concrete text widget;
the Qt adapter lives in ``mdhighlight.ui.text_surface``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Protocol

from mdhighlight.configuration import MarkdownConfiguration, MarkdownStyle
from mdhighlight.services.markdown_parser import parse_markdown
from mdhighlight.services.markdown_tree import StructuralNode
from mdhighlight.services.position_mapper import CharRange, DocumentText
from mdhighlight.services.style_table import StyleTable
from mdhighlight.services.style_visitor import HighlightVisitor, StyleOp


logger = logging.getLogger(__name__)


class HighlightPassError(RuntimeError):
    """Raised when a collaborator (parser or surface) breaks its contract mid-pass."""

    def __init__(self, stage: str, message: str) -> None:
        super().__init__(f"Highlight pass failed during {stage}: {message}")
        self.stage = stage


@dataclass(frozen=True, slots=True)
class EditNotification:
    affected_range: CharRange
    replacement_text: str = ""


class TextSurface(Protocol):
    def current_text(self) -> str:
        ...

    def set_attributes(self, style: MarkdownStyle, char_range: CharRange) -> None:
        ...


@dataclass(slots=True)
class PassResult:
    snapshot_length: int
    ops: list[StyleOp] = field(default_factory=list)
    skipped: bool = False


class HighlightPipeline:
    def __init__(
        self,
        configuration: MarkdownConfiguration | None = None,
        *,
        parser: Callable[[str], StructuralNode] | None = None,
    ) -> None:
        self._table = StyleTable(configuration)
        self._visitor = HighlightVisitor(self._table)
        self._parse = parser or parse_markdown

    @property
    def style_table(self) -> StyleTable:
        return self._table

    def compute(self, snapshot: DocumentText) -> list[StyleOp]:
        """Style operations for a snapshot, in the order they must be applied."""
        if snapshot.is_empty:
            return []
        try:
            root = self._parse(snapshot.text)
        except Exception as exc:
            raise HighlightPassError("parse", str(exc)) from exc
        return self._visitor.run(root, snapshot)

    def run(self, surface: TextSurface) -> PassResult:
        try:
            snapshot = DocumentText(surface.current_text())
        except Exception as exc:
            raise HighlightPassError("snapshot", str(exc)) from exc

        if snapshot.is_empty:
            return PassResult(0, skipped=True)

        ops = self.compute(snapshot)
        try:
            # Reset to body first so nothing from an earlier pass survives.
            surface.set_attributes(self._table.body, snapshot.full_range())
            for op in ops:
                surface.set_attributes(op.style, op.range)
        except Exception as exc:
            raise HighlightPassError("commit", str(exc)) from exc

        logger.debug("Applied %d style ops over %d chars", len(ops), len(snapshot))
        return PassResult(len(snapshot), ops)
