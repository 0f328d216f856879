"""
Cancellation context shared by the run loop and the handlers it invokes.
"""

import logging
import threading
from typing import Callable, List

logger = logging.getLogger("EverythingMCP.mcp.context")


class Context:
    """
    One-shot cancellation flag with callbacks.

    cancel() may be called from any thread. Callbacks registered with
    on_cancel() run exactly once, on the cancelling thread, or immediately
    when the context is already cancelled.
    """

    def __init__(self):
        self._event = threading.Event()
        self._lock = threading.RLock()
        self._callbacks: List[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            try:
                callback()
            except Exception:
                logger.exception("Cancellation callback failed")

    def on_cancel(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return
        callback()
