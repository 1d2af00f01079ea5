"""Caller-owned cancellation and deadline tokens."""

import threading
import time
from collections.abc import Callable

from loguru import logger

from .errors import RequestCancelledError

log = logger.bind(stage="cancel")


class CancelToken:
    """Signal that in-flight work should stop.

    A token is cancelled either explicitly via cancel() or implicitly when
    its deadline passes. Callbacks registered with on_cancel() run once, in
    the thread that calls cancel(); the transport uses them to close the
    response it is currently reading. A token may be shared by several
    calls and threads.
    """

    def __init__(self, deadline: float | None = None) -> None:
        # deadline is a time.monotonic() value
        self.deadline = deadline
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[], None]] = []

    @classmethod
    def with_timeout(cls, seconds: float) -> "CancelToken":
        return cls(deadline=time.monotonic() + seconds)

    @property
    def cancelled(self) -> bool:
        return self._event.is_set() or self.expired

    @property
    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None if there is none."""
        if self.deadline is None:
            return None
        return max(self.deadline - time.monotonic(), 0.0)

    def cancel(self) -> None:
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []
        log.debug(f"Token cancelled, running {len(callbacks)} callback(s)")
        for callback in callbacks:
            try:
                callback()
            except Exception as exc:
                log.warning(f"Cancel callback failed: {exc}")

    def on_cancel(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register a callback; returns a function that unregisters it.

        If the token is already cancelled the callback runs immediately.
        """
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return lambda: self._discard(callback)
        callback()
        return lambda: None

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise RequestCancelledError("Request cancelled")
        if self.expired:
            raise RequestCancelledError("Request deadline exceeded")

    def _discard(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)
