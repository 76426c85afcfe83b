"""
Recurring countdown for a pending lead.
"""
import logging
import threading
from datetime import datetime
from typing import Callable, Optional

from django.utils import timezone

from leads.services.lifecycle import EXPIRED_LABEL, format_countdown

logger = logging.getLogger(__name__)


class Countdown:
    """
    Re-renders the time left on a lead every ``interval`` seconds.

    Each tick recomputes the label from the clock; nothing is decremented.
    The first tick at or past the deadline stops the timer and fires
    ``on_expire`` exactly once. The countdown never talks to the backend.

    Use as a context manager (or call cancel()) so the timer thread is
    stopped when the view goes away.
    """

    def __init__(
        self,
        expires_at: datetime,
        clock: Callable[[], datetime] = timezone.now,
        on_expire: Optional[Callable[[], None]] = None,
        interval: float = 1.0,
    ):
        self.expires_at = expires_at
        self.clock = clock
        self.on_expire = on_expire
        self.interval = interval
        self.label = ''
        self.expired = False
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def tick(self) -> str:
        fire = False
        with self._lock:
            if self.expired:
                return self.label
            self.label = format_countdown(self.expires_at, self.clock())
            if self.label == EXPIRED_LABEL:
                self.expired = True
                self._stop.set()
                fire = True

        if fire:
            logger.debug(f"Countdown reached expiry at {self.expires_at.isoformat()}")
            if self.on_expire is not None:
                self.on_expire()
        return self.label

    def start(self) -> None:
        """Render once, then keep ticking on a background thread until expiry or cancel()."""
        if self._thread is not None:
            return
        self.tick()
        if self.expired:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name='lead-countdown', daemon=True)
        self._thread.start()

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            self.tick()

    def cancel(self) -> None:
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join()
        self._thread = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.cancel()
        return False
