"""attach()/detach() for live Markdown highlighting on a text widget."""

from __future__ import annotations

import logging
from typing import Any

from PySide6.QtCore import QObject, Signal
from PySide6.QtGui import QTextDocument
from PySide6.QtWidgets import QPlainTextEdit, QTextEdit

from mdhighlight.configuration import MarkdownConfiguration
from mdhighlight.services.highlight_pass import HighlightPipeline, PassResult
from mdhighlight.ui.highlight_scheduler import HighlightScheduler
from mdhighlight.ui.text_surface import QtTextSurface


logger = logging.getLogger(__name__)


class MarkdownHighlighting(QObject):
    """Handle returned by attach(). Owns the pipeline, scheduler and surface.

    It is Qt-parented to the editor (or document) it highlights, so it lives
    exactly as long as that object unless detached first.
    """

    statusMessage = Signal(str)

    def __init__(
        self,
        surface: Any,
        configuration: MarkdownConfiguration | None = None,
        *,
        owns_surface: bool = False,
        parent: QObject | None = None,
    ):
        super().__init__(parent)
        self._configuration = configuration or MarkdownConfiguration()
        self._surface = surface
        self._owns_surface = owns_surface
        if owns_surface:
            surface.setParent(self)
        self._pipeline = HighlightPipeline(self._configuration)
        self._scheduler = HighlightScheduler(
            self._run_pass,
            interval_ms=self._configuration.debounce_ms,
            parent=self,
        )
        self._scheduler.passFailed.connect(self._on_pass_failed)
        surface.textEdited.connect(self._scheduler.notify_edit)

    @property
    def configuration(self) -> MarkdownConfiguration:
        return self._configuration

    @property
    def surface(self) -> Any:
        return self._surface

    @property
    def scheduler(self) -> HighlightScheduler:
        return self._scheduler

    @property
    def pipeline(self) -> HighlightPipeline:
        return self._pipeline

    @property
    def is_attached(self) -> bool:
        return self._surface is not None

    def rehighlight(self):
        self._scheduler.run_now()

    def close(self):
        if self._surface is None:
            return
        self._scheduler.shutdown()
        try:
            self._surface.textEdited.disconnect(self._scheduler.notify_edit)
        except (RuntimeError, TypeError):
            pass
        if self._owns_surface:
            self._surface.close()
        self._surface = None
        logger.debug("Markdown highlighting detached")

    def _run_pass(self) -> PassResult:
        surface = self._surface
        if surface is None:
            return PassResult(0, skipped=True)
        return self._pipeline.run(surface)

    def _on_pass_failed(self, message: str):
        self.statusMessage.emit(f"Markdown highlighting failed: {message}")


def _surface_for(target: Any) -> tuple[Any, bool]:
    """Return the surface for ``target`` and whether it was created here."""
    if isinstance(target, (QPlainTextEdit, QTextEdit)):
        return QtTextSurface.for_editor(target), True
    if isinstance(target, QTextDocument):
        return QtTextSurface(target), True
    if hasattr(target, "textEdited") and hasattr(target, "current_text") and hasattr(target, "set_attributes"):
        return target, False
    raise TypeError(f"Cannot attach Markdown highlighting to {type(target).__name__}")


def attach(target: Any, configuration: MarkdownConfiguration | None = None) -> MarkdownHighlighting:
    """Start highlighting ``target`` and run the first pass immediately.

    ``target`` is a QPlainTextEdit, QTextEdit, QTextDocument, or any text
    surface exposing ``current_text``, ``set_attributes`` and a ``textEdited``
    signal.
    """
    surface, created = _surface_for(target)
    owner = target if isinstance(target, QObject) else None
    handle = MarkdownHighlighting(surface, configuration, owns_surface=created, parent=owner)
    handle.rehighlight()
    return handle


def detach(handle: MarkdownHighlighting) -> None:
    handle.close()
    handle.setParent(None)
