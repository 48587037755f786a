"""Cooperative cancellation handle"""

import logging
import threading
from typing import Callable, List

logger = logging.getLogger(__name__)


class Canceller:
    """
    Handle used to cancel an in-flight request

    Transports check ``is_cancelled`` at their own safe points and register
    listeners to abort blocking work (for example closing a response).
    A cancelled handle stays cancelled.

    Example:
        >>> canceller = Canceller()
        >>> # from another thread
        >>> canceller.cancel()
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._listeners: List[Callable[[], None]] = []

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        """Cancel and notify listeners once"""
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            listeners = list(self._listeners)
            self._listeners.clear()

        for listener in listeners:
            self._notify(listener)

    def add_listener(self, listener: Callable[[], None]) -> None:
        """Register a callback; runs immediately if already cancelled"""
        with self._lock:
            if not self._event.is_set():
                self._listeners.append(listener)
                return
        self._notify(listener)

    def remove_listener(self, listener: Callable[[], None]) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    @staticmethod
    def _notify(listener: Callable[[], None]) -> None:
        try:
            listener()
        except Exception as e:
            logger.warning(f"Cancel listener failed: {e}")
