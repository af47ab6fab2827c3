"""Render Scheduler Service.

Coalesces render requests so a burst of edits costs one frame:
- request_render(): leading-edge; at most one frame is ever pending and
  extra requests while it is pending are dropped.
- request_reprocess(delay_ms): trailing-edge debounce for value edits;
  every call restarts the wait, and when it expires a single frame is
  requested. Slider drags use a short delay, colour pickers a longer one.

Concrete schedulers only supply the timer primitives.
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional

from PyQt5.QtCore import QTimer

from constants import FRAME_INTERVAL_MS, VALUE_DEBOUNCE_MS, COLOR_DEBOUNCE_MS

logger = logging.getLogger(__name__)


class RenderScheduler(ABC):
    """Base scheduler implementing the coalescing contract

    Subclasses implement _start_frame_timer, _restart_reprocess_timer and
    _stop_timers.
    """

    def __init__(self, render_callback: Callable[[], None],
                 debounce_ms: int = VALUE_DEBOUNCE_MS,
                 color_debounce_ms: int = COLOR_DEBOUNCE_MS,
                 frame_interval_ms: int = FRAME_INTERVAL_MS):
        self._render_callback = render_callback
        self.debounce_ms = debounce_ms
        self.color_debounce_ms = color_debounce_ms
        self.frame_interval_ms = frame_interval_ms

        self._frame_pending = False
        self._reprocess_pending = False
        self.frames_rendered = 0

    @classmethod
    def from_config(cls, render_callback, config):
        return cls(
            render_callback,
            debounce_ms=config.debounce_ms,
            color_debounce_ms=config.color_debounce_ms,
            frame_interval_ms=config.frame_interval_ms,
        )

    @property
    def frame_pending(self) -> bool:
        return self._frame_pending

    @property
    def reprocess_pending(self) -> bool:
        return self._reprocess_pending

    def request_render(self) -> bool:
        """Ask for one frame

        Returns:
            True if a frame was scheduled, False if one was already pending
        """
        if self._frame_pending:
            return False
        self._frame_pending = True
        self._start_frame_timer(self.frame_interval_ms)
        return True

    def request_reprocess(self, delay_ms: Optional[int] = None):
        """(Re)start the quiescence wait; a frame follows when it expires"""
        delay = self.debounce_ms if delay_ms is None else delay_ms
        self._reprocess_pending = True
        self._restart_reprocess_timer(delay)

    def cancel(self):
        """Drop all pending work"""
        self._stop_timers()
        self._frame_pending = False
        self._reprocess_pending = False

    def _on_frame(self):
        # Cleared first so a failing render cannot wedge the scheduler
        self._frame_pending = False
        self._render_callback()
        self.frames_rendered += 1

    def _on_reprocess(self):
        self._reprocess_pending = False
        self.request_render()

    # Timer primitives

    @abstractmethod
    def _start_frame_timer(self, delay_ms: int):
        pass

    @abstractmethod
    def _restart_reprocess_timer(self, delay_ms: int):
        pass

    @abstractmethod
    def _stop_timers(self):
        pass


class QtRenderScheduler(RenderScheduler):
    """Scheduler driven by single-shot QTimers on the Qt event loop"""

    def __init__(self, render_callback, **kwargs):
        super().__init__(render_callback, **kwargs)

        self._frame_timer = QTimer()
        self._frame_timer.setSingleShot(True)
        self._frame_timer.timeout.connect(self._on_frame)

        # Debounce timer for effect value changes (avoid reprocessing on every slider tick)
        self._reprocess_timer = QTimer()
        self._reprocess_timer.setSingleShot(True)
        self._reprocess_timer.timeout.connect(self._on_reprocess)

    def _start_frame_timer(self, delay_ms):
        if not self._frame_timer.isActive():
            self._frame_timer.start(delay_ms)

    def _restart_reprocess_timer(self, delay_ms):
        self._reprocess_timer.stop()
        self._reprocess_timer.start(delay_ms)

    def _stop_timers(self):
        self._frame_timer.stop()
        self._reprocess_timer.stop()


class ManualRenderScheduler(RenderScheduler):
    """Scheduler whose pending work runs only when flush() is called

    Used by the headless command line and by tests, where there is no
    event loop to drive timers.
    """

    def __init__(self, render_callback, **kwargs):
        super().__init__(render_callback, **kwargs)
        self.last_reprocess_delay: Optional[int] = None

    def _start_frame_timer(self, delay_ms):
        pass

    def _restart_reprocess_timer(self, delay_ms):
        self.last_reprocess_delay = delay_ms

    def _stop_timers(self):
        self.last_reprocess_delay = None

    def flush(self) -> int:
        """Run everything pending as if all timers had expired

        Returns:
            Number of frames rendered
        """
        rendered = 0
        if self._reprocess_pending:
            self._on_reprocess()
        if self._frame_pending:
            self._on_frame()
            rendered += 1
        logger.debug(f"Flushed {rendered} frame(s)")
        return rendered
