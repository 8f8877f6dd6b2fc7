"""
utils/sweeper.py
----------------

Background eviction of expired cache entries.

Reads already ignore expired entries, so the sweeper only exists to
keep memory bounded: without it an entry that is never read again
would stay in the map forever. The sweeper runs on a daemon thread and
is stopped through a ``threading.Event`` when the cache shuts down, so
the application lifespan can stop it deterministically instead of
waiting for the process to exit.
"""

from __future__ import annotations

import json
import threading
from typing import TYPE_CHECKING, Optional

from app.logging_config import logger

if TYPE_CHECKING:  # pragma: no cover
    from app.utils.cache import TTLCache


class ExpirationSweeper:
    """Periodically calls :meth:`TTLCache.sweep_expired` until stopped."""

    def __init__(self, cache: "TTLCache", interval: float) -> None:
        if interval <= 0:
            raise ValueError("sweep interval must be positive")
        self._cache = cache
        self.interval = interval
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()
        self.ticks = 0

    @property
    def running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    def start(self) -> None:
        """Start the background thread. Calling it twice is a no-op."""
        with self._lock:
            if self.running:
                return
            self._stop.clear()
            self._thread = threading.Thread(
                target=self._run,
                name="cache-expiration-sweeper",
                daemon=True,
            )
            self._thread.start()
        logger.debug(json.dumps({"event": "cache_sweeper_started", "interval_s": self.interval}))

    def stop(self, timeout: Optional[float] = None) -> None:
        """Signal the thread to exit and wait for it."""
        with self._lock:
            thread = self._thread
            self._stop.set()
            self._thread = None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        logger.debug(json.dumps({"event": "cache_sweeper_stopped"}))

    def _run(self) -> None:
        # Event.wait devuelve True cuando se pide parar
        while not self._stop.wait(self.interval):
            try:
                removed = self._cache.sweep_expired()
            except Exception:
                logger.error(json.dumps({"event": "cache_sweep_failed"}), exc_info=True)
                raise
            self.ticks += 1
            if removed:
                logger.info(json.dumps({
                    "event": "cache_sweep",
                    "removed": removed,
                    "remaining": self._cache.size(),
                }))
