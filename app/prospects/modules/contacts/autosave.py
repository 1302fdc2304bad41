from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any, Protocol

from app.prospects.constants import AUTOSAVE_DELAY_SECONDS

logger = logging.getLogger(__name__)


class _Timer(Protocol):
    def start(self) -> None: ...

    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], None]], _Timer]


def _thread_timer(delay: float, fn: Callable[[], None]) -> _Timer:
    t = threading.Timer(delay, fn)
    t.daemon = True
    return t


class MarkdownAutosave:
    """
    Debounced autosave for one markdown field (brief/notes) in its viewer.

    Display:  viewing -> editing (begin_edit) -> viewing (blur/close)
    Saving:   idle -> pending (change, timer armed) -> saving -> idle

    flush() cancels the armed timer and saves synchronously, so blur and close
    always persist the last edited value. A timer that fires after flush()
    has already claimed its generation does nothing.
    """

    IDLE = "idle"
    PENDING = "pending"
    SAVING = "saving"

    def __init__(
        self,
        save: Callable[[str], Any],
        value: str | None = None,
        *,
        delay: float = AUTOSAVE_DELAY_SECONDS,
        timer_factory: TimerFactory = _thread_timer,
    ):
        self._save = save
        self._delay = delay
        self._timer_factory = timer_factory
        self._lock = threading.RLock()
        self._timer: _Timer | None = None
        self._generation = 0

        self.saved_value = value or ""
        self.value = self.saved_value
        self.editing = False
        self.state = self.IDLE

    @property
    def dirty(self) -> bool:
        return self.value != self.saved_value

    def begin_edit(self) -> None:
        self.editing = True

    def change(self, value: str) -> None:
        with self._lock:
            self.value = value
            self._cancel_timer()
            self._generation += 1
            generation = self._generation
            self._timer = self._timer_factory(self._delay, lambda: self._on_timer(generation))
            self.state = self.PENDING
            self._timer.start()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_timer(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or self._timer is None:
                return
            self._timer = None
            self._save_now()

    def _save_now(self) -> bool:
        if not self.dirty:
            self.state = self.IDLE
            return True
        value = self.value
        self.state = self.SAVING
        try:
            self._save(value)
        except Exception as e:
            logger.error("Error auto-saving markdown: %s", e)
            self.state = self.IDLE
            return False
        self.saved_value = value
        self.state = self.IDLE
        return True

    def flush(self) -> bool:
        """Cancel any pending timer and save now. Returns False if the save failed."""
        with self._lock:
            self._cancel_timer()
            self._generation += 1
            return self._save_now()

    def blur(self) -> bool:
        ok = self.flush()
        self.editing = False
        return ok

    def close(self) -> bool:
        """Leave the viewer. A failed save keeps the unsaved value (still dirty)."""
        ok = self.flush()
        self.editing = False
        if ok:
            self.value = self.saved_value
        return ok
