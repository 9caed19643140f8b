from __future__ import annotations

import gc

import pytest
from PySide6.QtGui import QColor, QTextCursor, QTextDocument
from PySide6.QtWidgets import QPlainTextEdit

from mdhighlight.configuration import CODE_COLOR, Decoration, FontSpec, MarkdownStyle
from mdhighlight.services.position_mapper import CharRange
from mdhighlight.ui.char_formats import CharFormatCache, char_format_for, font_for
from mdhighlight.ui.text_surface import QtTextSurface, _OffsetIndex


CODE_STYLE = MarkdownStyle(FontSpec.monospaced(14), CODE_COLOR)
BODY_STYLE = MarkdownStyle(FontSpec.system(16))


class TestCharFormats:
    def test_font_properties(self, qapp):
        font = font_for(FontSpec(20, "bold", italic=True))
        assert font.pointSizeF() == 20.0
        assert font.bold()
        assert font.italic()

    def test_format_sets_color_and_underline(self, qapp):
        fmt = char_format_for(MarkdownStyle(FontSpec.system(16), "#007AFF", Decoration.UNDERLINE))
        assert fmt.foreground().color() == QColor("#007AFF")
        assert fmt.fontUnderline()

    def test_plain_style_uses_text_color(self, qapp):
        fmt = char_format_for(BODY_STYLE, text_color="#101010")
        assert fmt.foreground().color() == QColor("#101010")
        assert not fmt.fontUnderline()

    def test_cache_reuses_formats(self, qapp):
        cache = CharFormatCache()
        assert cache.format_for(CODE_STYLE) is cache.format_for(CODE_STYLE)


class TestOffsetIndex:
    def test_bmp_text_is_identity(self):
        index = _OffsetIndex("abc")
        assert index.to_utf16(2) == 2
        assert index.from_utf16(2) == 2

    def test_astral_characters_take_two_units(self):
        index = _OffsetIndex("a\U0001F600b")
        assert index.utf16_length == 4
        assert index.to_utf16(2) == 3
        assert index.from_utf16(3) == 2
        assert index.to_utf16(99) == 4


class TestQtTextSurface:
    def test_current_text(self, qapp):
        surface = QtTextSurface(QTextDocument("# Title\nbody"))
        assert surface.current_text() == "# Title\nbody"

    def test_set_attributes_applies_layout_formats(self, qapp):
        document = QTextDocument("use `code` here")
        surface = QtTextSurface(document, text_color="#000000")
        surface.set_attributes(BODY_STYLE, CharRange(0, 15))
        surface.set_attributes(CODE_STYLE, CharRange(4, 6))

        assert surface.format_at(5).foreground().color() == QColor(CODE_COLOR)
        assert surface.format_at(1).foreground().color() == QColor("#000000")
        assert surface.format_at(12).foreground().color() == QColor("#000000")

    def test_format_at_returns_an_independent_copy(self, qapp):
        document = QTextDocument("*a*")
        surface = QtTextSurface(document)
        surface.set_attributes(CODE_STYLE, CharRange(0, 3))

        fmt = surface.format_at(1)
        gc.collect()
        surface.set_attributes(BODY_STYLE, CharRange(0, 3))

        assert fmt.foreground().color() == QColor(CODE_COLOR)
        assert surface.format_at(1).foreground().color() != QColor(CODE_COLOR)

    def test_formats_span_blocks(self, qapp):
        document = QTextDocument("```\nx\n```")
        surface = QtTextSurface(document)
        surface.set_attributes(CODE_STYLE, CharRange(0, 9))
        for offset in (0, 4, 6, 8):
            assert surface.format_at(offset).foreground().color() == QColor(CODE_COLOR)

    def test_whole_block_range_replaces_previous_formats(self, qapp):
        document = QTextDocument("abc")
        surface = QtTextSurface(document)
        surface.set_attributes(CODE_STYLE, CharRange(1, 1))
        surface.set_attributes(BODY_STYLE, CharRange(0, 3))
        assert len(document.firstBlock().layout().formats()) == 1

    def test_highlighting_is_not_an_edit(self, qapp):
        editor = QPlainTextEdit()
        editor.setPlainText("*a*")
        surface = QtTextSurface.for_editor(editor)
        edits = []
        surface.textEdited.connect(edits.append)

        surface.set_attributes(CODE_STYLE, CharRange(0, 3))

        assert edits == []
        assert not editor.document().isUndoAvailable()
        assert editor.toPlainText() == "*a*"

    def test_ranges_clip_to_text(self, qapp):
        surface = QtTextSurface(QTextDocument("ab"))
        surface.set_attributes(CODE_STYLE, CharRange(1, 50))
        surface.set_attributes(CODE_STYLE, CharRange(10, 5))
        assert surface.format_at(1).foreground().color() == QColor(CODE_COLOR)

    def test_astral_offsets_map_to_utf16(self, qapp):
        document = QTextDocument("\U0001F600 *a*")
        surface = QtTextSurface(document)
        surface.set_attributes(CODE_STYLE, CharRange(2, 3))
        layout_range = document.firstBlock().layout().formats()[0]
        assert (layout_range.start, layout_range.length) == (3, 3)

    def test_edits_are_reported(self, qapp):
        document = QTextDocument("hello")
        surface = QtTextSurface(document)
        edits = []
        surface.textEdited.connect(edits.append)

        cursor = QTextCursor(document)
        cursor.setPosition(0)
        cursor.insertText("X")

        assert len(edits) == 1
        assert edits[0].affected_range.offset == 0
        assert "X" in edits[0].replacement_text

    def test_close_disconnects(self, qapp):
        document = QTextDocument("hello")
        surface = QtTextSurface(document)
        edits = []
        surface.textEdited.connect(edits.append)
        surface.close()

        QTextCursor(document).insertText("X")

        assert edits == []
        assert surface.document is None
        with pytest.raises(RuntimeError):
            surface.current_text()
