"""Shutdown signalling shared between the session and blocking calls."""

import threading
from typing import Optional

from .exceptions import CancelledError


class CancellationToken:
    """Write-once flag checked at every point where work may block.

    Once cancelled it stays cancelled; the first reason given is kept.
    """

    def __init__(self):
        self._event = threading.Event()
        self._lock = threading.Lock()
        self.reason: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "cancelled") -> bool:
        """Set the flag. Returns False if it was already set."""
        with self._lock:
            if self._event.is_set():
                return False
            self.reason = reason
            self._event.set()
            return True

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise CancelledError(f"Operation cancelled ({self.reason})")
