"""Termination signal."""

import signal as _signal
import threading
from collections.abc import Iterable


class TerminationSignal:
    """Process-wide stop request, set (at most) once by an interrupt.

    The flag is backed by a `threading.Event`, so that it is safe to set from
    a signal handler or another thread and read from the acquisition loop. It
    is never cleared.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def set(self) -> None:
        """Request termination; idempotent."""
        self._event.set()

    def is_set(self) -> bool:
        return self._event.is_set()

    def install(
        self, signals: Iterable[int] = (_signal.SIGINT,)
    ) -> None:
        """Set this signal when any of `signals` is received.

        Must be called from the main thread.
        """
        for signum in signals:
            _signal.signal(signum, self._handler)

    def _handler(self, signum, frame) -> None:
        # Nothing but the flag; the loop picks it up between frames.
        self._event.set()
