import threading
from typing import Callable, Optional

import structlog

from autotex.config import DetectionSettings, get_settings

logger = structlog.get_logger(__name__)


class Debouncer:
    """
    Single-slot timer with cancel-and-reschedule semantics.

    Each `schedule` discards the pending call and starts a fresh quiet
    interval, so `callback` runs once after edits stop. A call already
    running is never interrupted.
    """

    def __init__(self, callback: Callable[[], None], delay: float = 0.3):
        if delay < 0:
            raise ValueError("delay must be non-negative")
        self.callback = callback
        self.delay = delay
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, callback: Callable[[], None], settings: Optional[DetectionSettings] = None) -> "Debouncer":
        settings = settings or get_settings()
        return cls(callback, delay=settings.debounce_seconds)

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    def schedule(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.delay, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def cancel(self) -> bool:
        """Drops the pending call. Returns True if one was pending."""
        with self._lock:
            if self._timer is None:
                return False
            self._timer.cancel()
            self._timer = None
            return True

    def flush(self) -> bool:
        """Runs the pending call now instead of waiting. Returns True if it ran."""
        if not self.cancel():
            return False
        self.callback()
        return True

    def _fire(self) -> None:
        with self._lock:
            if self._timer is None or self._timer is not threading.current_thread():
                return
            self._timer = None
        try:
            self.callback()
        except Exception:
            logger.exception("Debounced callback failed")
