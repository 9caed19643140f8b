"""Shared fixtures: an offscreen QApplication and a recording text surface."""

from __future__ import annotations

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PySide6.QtCore import QObject, Signal
from PySide6.QtWidgets import QApplication

from mdhighlight.configuration import MarkdownStyle
from mdhighlight.services.highlight_pass import EditNotification
from mdhighlight.services.position_mapper import CharRange


@pytest.fixture(scope="session")
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


class RecordingSurface(QObject):
    """In-memory text surface that keeps the effective style of every character."""

    textEdited = Signal(object)

    def __init__(self, text: str = ""):
        super().__init__()
        self.text = text
        self.calls: list[tuple[MarkdownStyle, CharRange]] = []
        self.snapshots: list[str] = []
        self.styles: list[MarkdownStyle | None] = [None] * len(text)
        self.on_snapshot = None

    def current_text(self) -> str:
        self.snapshots.append(self.text)
        if self.on_snapshot is not None:
            self.on_snapshot(self)
        return self.text

    def set_attributes(self, style: MarkdownStyle, char_range: CharRange) -> None:
        self.calls.append((style, char_range))
        end = min(char_range.end, len(self.styles))
        for index in range(max(0, char_range.offset), end):
            self.styles[index] = style

    def edit(self, text: str) -> None:
        old_length = len(self.text)
        self.text = text
        self.styles = [None] * len(text)
        self.textEdited.emit(EditNotification(CharRange(0, old_length), text))

    def style_at(self, offset: int) -> MarkdownStyle | None:
        return self.styles[offset]


@pytest.fixture
def recording_surface(qapp):
    return RecordingSurface
