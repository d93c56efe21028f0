"""
Connection draining state.

CCS sends a CONNECTION_DRAINING control message before closing a
connection. From then on no new downstream messages may be sent on it;
acks still flow. The flag never goes back to false within a session.
"""

import threading


class DrainController:
    def __init__(self) -> None:
        self._draining = threading.Event()
        self._lock = threading.Lock()

    def is_draining(self) -> bool:
        return self._draining.is_set()

    def begin_draining(self) -> bool:
        """Set the draining flag. Returns True only for the call that set it."""
        if self._draining.is_set():
            return False
        with self._lock:
            if self._draining.is_set():
                return False
            self._draining.set()
            return True

    def __repr__(self) -> str:
        return f"DrainController(draining={self.is_draining()})"
