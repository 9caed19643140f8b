"""QTextDocument adapter implementing the TextSurface contract.

Styles are applied as QTextLayout formats per block, the same mechanism
QSyntaxHighlighter uses: they do not touch the undo stack and do not emit
contentsChange, so highlighting never feeds back into the edit stream.

Pipeline offsets are Python code points; QTextDocument positions are UTF-16
code units. The two only differ when the text holds characters outside the
BMP (emoji and the like).
"""

from __future__ import annotations

from bisect import bisect_right

from PySide6.QtCore import QObject, Signal
from PySide6.QtGui import QColor, QFont, QGuiApplication, QPalette, QTextBlock, QTextCharFormat, QTextDocument, QTextLayout

from mdhighlight.configuration import MarkdownStyle
from mdhighlight.services.highlight_pass import EditNotification
from mdhighlight.services.position_mapper import CharRange
from mdhighlight.ui.char_formats import CharFormatCache


class _OffsetIndex:
    def __init__(self, text: str) -> None:
        self.text = text
        self.utf16_length = len(text.encode("utf-16-le", errors="surrogatepass")) // 2
        self._prefix: list[int] | None = None
        if self.utf16_length != len(text):
            prefix = [0]
            total = 0
            for ch in text:
                total += 2 if ord(ch) > 0xFFFF else 1
                prefix.append(total)
            self._prefix = prefix

    def to_utf16(self, offset: int) -> int:
        offset = max(0, min(offset, len(self.text)))
        if self._prefix is None:
            return offset
        return self._prefix[offset]

    def from_utf16(self, position: int) -> int:
        position = max(0, min(position, self.utf16_length))
        if self._prefix is None:
            return position
        return bisect_right(self._prefix, position) - 1


class QtTextSurface(QObject):
    textEdited = Signal(object)  # EditNotification

    def __init__(
        self,
        document: QTextDocument,
        *,
        text_color: QColor | str | None = None,
        base_font: QFont | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._document: QTextDocument | None = document
        if text_color is None:
            text_color = QGuiApplication.palette().color(QPalette.ColorRole.Text)
        self._formats = CharFormatCache(
            text_color=text_color,
            base_font=QFont(base_font) if base_font is not None else document.defaultFont(),
        )
        self._index: _OffsetIndex | None = None
        self._index_revision = -1
        self._applying = False
        # markContentsDirty only flushes immediately once the document has a layout.
        document.documentLayout()
        document.contentsChange.connect(self._on_contents_change)

    @classmethod
    def for_editor(cls, editor, parent: QObject | None = None) -> "QtTextSurface":
        """Wrap a QPlainTextEdit/QTextEdit, taking text color and font from the widget."""
        return cls(
            editor.document(),
            text_color=editor.palette().color(QPalette.ColorRole.Text),
            base_font=editor.font(),
            parent=parent,
        )

    @property
    def document(self) -> QTextDocument | None:
        return self._document

    def current_text(self) -> str:
        return self._offset_index().text

    def set_attributes(self, style: MarkdownStyle, char_range: CharRange) -> None:
        doc = self._require_document()
        index = self._offset_index()
        start = index.to_utf16(char_range.offset)
        end = index.to_utf16(char_range.end)
        if end <= start:
            return

        fmt = self._formats.format_for(style)
        self._applying = True
        try:
            block = doc.findBlock(start)
            while block.isValid() and block.position() < end:
                self._apply_to_block(doc, block, start, end, fmt)
                block = block.next()
        finally:
            self._applying = False

    def format_at(self, offset: int) -> QTextCharFormat | None:
        """Effective highlight format at a code point offset (last covering range wins)."""
        doc = self._require_document()
        position = self._offset_index().to_utf16(offset)
        block = doc.findBlock(position)
        if not block.isValid():
            return None
        local = position - block.position()
        ranges = block.layout().formats()
        found = None
        for fmt_range in ranges:
            if fmt_range.start <= local < fmt_range.start + fmt_range.length:
                # Copy: the range list owns its formats.
                found = QTextCharFormat(fmt_range.format)
        return found

    def close(self) -> None:
        if self._document is None:
            return
        try:
            self._document.contentsChange.disconnect(self._on_contents_change)
        except (RuntimeError, TypeError):
            # The document may already be gone with its editor.
            pass
        self._document = None
        self._index = None

    # ---------- internals ----------

    def _require_document(self) -> QTextDocument:
        if self._document is None:
            raise RuntimeError("Text surface is closed.")
        return self._document

    def _offset_index(self) -> _OffsetIndex:
        doc = self._require_document()
        revision = doc.revision()
        if self._index is None or revision != self._index_revision:
            self._index = _OffsetIndex(doc.toPlainText())
            self._index_revision = revision
        return self._index

    def _apply_to_block(self, doc: QTextDocument, block: QTextBlock, start: int, end: int, fmt: QTextCharFormat) -> None:
        block_pos = block.position()
        text_len = max(0, block.length() - 1)
        local_start = max(start, block_pos) - block_pos
        local_end = min(end, block_pos + text_len) - block_pos

        layout = block.layout()
        # A range covering the whole block replaces everything set on it before.
        if local_start <= 0 and local_end >= text_len:
            ranges = []
        else:
            ranges = list(layout.formats())
        if local_end > local_start:
            fmt_range = QTextLayout.FormatRange()
            fmt_range.start = local_start
            fmt_range.length = local_end - local_start
            fmt_range.format = fmt
            ranges.append(fmt_range)
        layout.setFormats(ranges)
        doc.markContentsDirty(block_pos, block.length())

    def _on_contents_change(self, position: int, chars_removed: int, chars_added: int) -> None:
        if self._applying or (chars_removed == 0 and chars_added == 0):
            return
        index = self._offset_index()
        start = index.from_utf16(position)
        stop = index.from_utf16(position + chars_added)
        # chars_removed is reported by Qt in UTF-16 units of the old text.
        self.textEdited.emit(EditNotification(CharRange(start, chars_removed), index.text[start:stop]))
