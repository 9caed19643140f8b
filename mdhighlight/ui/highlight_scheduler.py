from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Optional

from PySide6.QtCore import QObject, QTimer, Signal


logger = logging.getLogger(__name__)


class HighlightState(Enum):
    IDLE = "idle"
    PENDING = "pending"
    RUNNING = "running"


class HighlightScheduler(QObject):
    """Debounces edit notifications into highlight passes.

    Bursts of edits inside one interval collapse into a single pass. An edit
    that lands while a pass is running is never dropped: it re-arms the timer
    once the pass completes. Passes never overlap.
    """

    stateChanged = Signal(str)
    passStarted = Signal()
    passFinished = Signal(object)   # whatever run_pass returned
    passFailed = Signal(str)

    def __init__(self, run_pass: Callable[[], object], *, interval_ms: int = 10, parent=None):
        super().__init__(parent)
        self._run_pass: Optional[Callable[[], object]] = run_pass
        self._interval_ms = max(0, int(interval_ms))
        self._state = HighlightState.IDLE
        self._follow_up = False
        self._pass_count = 0
        self._last_edit: object = None

        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.timeout.connect(self._on_timeout)

    # ---------- Public API ----------

    @property
    def state(self) -> HighlightState:
        return self._state

    @property
    def pass_count(self) -> int:
        return self._pass_count

    @property
    def interval_ms(self) -> int:
        return self._interval_ms

    @property
    def follow_up_pending(self) -> bool:
        return self._follow_up

    @property
    def last_edit(self) -> object:
        return self._last_edit

    @property
    def is_shut_down(self) -> bool:
        return self._run_pass is None

    def notify_edit(self, notification: object = None):
        if self._run_pass is None:
            return
        self._last_edit = notification
        if self._state is HighlightState.RUNNING:
            self._follow_up = True
            return
        self._arm()

    def run_now(self):
        """Run a pass immediately, cancelling any armed timer."""
        if self._run_pass is None:
            return
        if self._state is HighlightState.RUNNING:
            self._follow_up = True
            return
        self._timer.stop()
        self._run()

    def shutdown(self):
        self._timer.stop()
        self._run_pass = None
        self._follow_up = False
        if self._state is not HighlightState.RUNNING:
            self._set_state(HighlightState.IDLE)

    # ---------- internals ----------

    def _arm(self):
        # Restarting a single-shot timer replaces its deadline.
        self._timer.start(self._interval_ms)
        self._set_state(HighlightState.PENDING)

    def _on_timeout(self):
        if self._run_pass is None or self._state is HighlightState.RUNNING:
            return
        self._run()

    def _run(self):
        run_pass = self._run_pass
        if run_pass is None:
            return
        self._follow_up = False
        self._set_state(HighlightState.RUNNING)
        self.passStarted.emit()
        try:
            result = run_pass()
        except Exception as exc:
            logger.exception("Markdown highlight pass failed")
            self._pass_count += 1
            self._finish()
            self.passFailed.emit(str(exc))
            return

        self._pass_count += 1
        logger.debug("Highlight pass %d finished", self._pass_count)
        self._finish()
        self.passFinished.emit(result)

    def _finish(self):
        self._set_state(HighlightState.IDLE)
        if self._follow_up and self._run_pass is not None:
            self._follow_up = False
            self._arm()

    def _set_state(self, state: HighlightState):
        if state is self._state:
            return
        logger.debug("Highlight scheduler %s -> %s", self._state.value, state.value)
        self._state = state
        self.stateChanged.emit(state.value)
