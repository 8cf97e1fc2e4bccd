"""
One-time diagnostic events for degraded capabilities and timeouts.

A Diagnostics sink is handed to the pipeline explicitly. Several Sanitizer
instances (or request threads) may share one; the event set is guarded by a lock
so every event is logged at most once per sink.
"""

import logging
import threading

logger = logging.getLogger(__name__)


class Diagnostics:
    """Thread-safe "log this warning once" sink keyed by event name."""

    def __init__(self, log: logging.Logger | None = None):
        self._logger = log or logger
        self._lock = threading.Lock()
        self._seen: set[str] = set()

    def warn_once(self, event: str, message: str) -> bool:
        """
        Log a warning the first time an event is reported.

        Args:
            event: Stable event key, e.g. 'transliterator_timeout'
            message: Human-readable description

        Returns:
            bool: True if this call logged the event, False if it was already seen.
        """
        with self._lock:
            if event in self._seen:
                return False
            self._seen.add(event)

        self._logger.warning(f'[DIAGNOSTICS] {event}: {message}')
        return True

    def seen(self, event: str) -> bool:
        with self._lock:
            return event in self._seen

    def events(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._seen)

    def reset(self) -> None:
        """Forget every recorded event (test helper)."""
        with self._lock:
            self._seen.clear()
