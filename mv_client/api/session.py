"""Session-invalidation notification.

The client never navigates or prompts on its own; it emits a signal and
lets the application decide what losing the session means.
"""

from __future__ import annotations

import threading
from typing import Callable

from loguru import logger

SessionListener = Callable[[Exception], None]


class SessionSignal:
    """A list of listeners called when stored credentials become unusable."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._listeners: list[SessionListener] = []

    def connect(self, listener: SessionListener) -> SessionListener:
        """Register *listener*; returns it so the method works as a decorator."""
        with self._lock:
            self._listeners.append(listener)
        return listener

    def disconnect(self, listener: SessionListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def emit(self, error: Exception) -> None:
        """Call every listener with *error*.

        A failing listener is logged and the remaining listeners still run.
        """
        with self._lock:
            listeners = list(self._listeners)
        logger.warning(f"Session invalidated: {error}")
        for listener in listeners:
            try:
                listener(error)
            except Exception:
                logger.exception("Session invalidation listener failed")
