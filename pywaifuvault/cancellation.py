"""Cooperative cancellation for in-flight requests."""

from __future__ import annotations

import logging
import threading
from typing import Callable

from .exceptions import VaultCancelledError

logger = logging.getLogger(__name__)


class CancelSignal:
    """A flag another thread can set to abort a running request.

    While a request is in flight the client registers a callback that
    wakes the calling thread, so ``cancel()`` returns control right away
    instead of waiting for the transport to finish.

    Example:
        >>> signal = CancelSignal()
        >>> threading.Timer(5.0, signal.cancel).start()
        >>> client.download_album(token, signal=signal)
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        """Mark the signal as cancelled and abort any registered request."""
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks = list(self._callbacks)
            self._callbacks.clear()

        for callback in callbacks:
            try:
                callback()
            except Exception as e:
                # the request thread reports the cancellation itself
                logger.debug("Abort callback failed: %s", e)

    def raise_if_cancelled(self) -> None:
        """Raise VaultCancelledError if cancel() has been called."""
        if self._event.is_set():
            raise VaultCancelledError()

    def add_callback(self, callback: Callable[[], None]) -> None:
        """Run callback on cancel, or right away if already cancelled."""
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return
        callback()

    def remove_callback(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)
