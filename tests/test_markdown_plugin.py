from __future__ import annotations

import pytest
from PySide6.QtGui import QColor, QTextCursor, QTextDocument
from PySide6.QtTest import QTest
from PySide6.QtWidgets import QPlainTextEdit, QTextEdit

from mdhighlight import MarkdownConfiguration, attach, detach
from mdhighlight.configuration import EMPHASIS_COLOR, HEADING_COLOR
from mdhighlight.ui.highlight_scheduler import HighlightState
from mdhighlight.ui.text_surface import QtTextSurface


class TestAttach:
    def test_attach_runs_initial_pass(self, qapp):
        editor = QPlainTextEdit()
        editor.setPlainText("# Title\n\nSome *text*.")
        handle = attach(editor)

        assert handle.is_attached
        assert handle.scheduler.pass_count == 1
        assert handle.parent() is editor
        surface = handle.surface
        assert isinstance(surface, QtTextSurface)
        assert surface.format_at(2).foreground().color() == QColor(HEADING_COLOR)
        assert surface.format_at(15).foreground().color() == QColor(EMPHASIS_COLOR)

    def test_attach_uses_configuration_debounce(self, qapp):
        handle = attach(QTextDocument("x"), MarkdownConfiguration(debounce_ms=40))
        assert handle.scheduler.interval_ms == 40
        assert handle.configuration.debounce_ms == 40

    def test_attach_to_text_edit(self, qapp):
        editor = QTextEdit()
        editor.setPlainText("`code`")
        handle = attach(editor)
        assert handle.scheduler.pass_count == 1

    def test_edits_schedule_one_pass(self, qapp):
        editor = QPlainTextEdit()
        editor.setPlainText("plain")
        handle = attach(editor, MarkdownConfiguration(debounce_ms=10))

        cursor = editor.textCursor()
        cursor.movePosition(QTextCursor.MoveOperation.End)
        for ch in " *em*":
            cursor.insertText(ch)
        assert handle.scheduler.state is HighlightState.PENDING

        QTest.qWait(150)
        assert handle.scheduler.pass_count == 2
        assert handle.surface.format_at(7).foreground().color() == QColor(EMPHASIS_COLOR)

    def test_attach_custom_surface(self, qapp, recording_surface):
        surface = recording_surface("*a*")
        handle = attach(surface)
        assert handle.surface is surface
        assert handle.scheduler.pass_count == 1
        assert surface.style_at(0) == handle.configuration.emphasis

        surface.edit("**b**")
        QTest.qWait(100)
        assert handle.scheduler.pass_count == 2
        assert surface.style_at(0) == handle.configuration.strong

    def test_unsupported_target(self, qapp):
        with pytest.raises(TypeError):
            attach(object())

    def test_failed_pass_reports_status(self, qapp, recording_surface):
        surface = recording_surface("*a*")
        handle = attach(surface)
        messages = []
        handle.statusMessage.connect(messages.append)

        def broken(style, char_range):
            raise RuntimeError("gone")

        surface.set_attributes = broken
        surface.edit("*b*")
        QTest.qWait(100)

        assert len(messages) == 1
        assert "gone" in messages[0]
        assert handle.scheduler.state is HighlightState.IDLE


class TestDetach:
    def test_detach_cancels_pending_pass(self, qapp, recording_surface):
        surface = recording_surface("*a*")
        handle = attach(surface)
        surface.edit("*b*")
        scheduler = handle.scheduler
        detach(handle)

        surface.calls.clear()
        QTest.qWait(100)
        assert surface.calls == []
        assert not handle.is_attached
        assert scheduler.is_shut_down

    def test_detach_ignores_later_edits(self, qapp):
        editor = QPlainTextEdit()
        editor.setPlainText("x")
        handle = attach(editor)
        surface = handle.surface
        scheduler = handle.scheduler
        detach(handle)

        editor.textCursor().insertText("more")
        QTest.qWait(50)
        assert scheduler.pass_count == 1
        assert surface.document is None

    def test_detach_twice_is_harmless(self, qapp):
        handle = attach(QTextDocument("x"))
        handle.close()
        handle.close()
        assert not handle.is_attached
