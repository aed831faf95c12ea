# utils.py
import signal
import threading
from typing import List


def take_group(pending: List, size: int) -> List:
    """Remove and return up to size items from the front of pending."""
    if not isinstance(size, int) or size < 1:
        raise ValueError("Group size must be a positive integer")
    group = pending[:size]
    del pending[:size]
    return group


def format_seconds(seconds: float) -> str:
    return f"{seconds:.2f}s"


class CancelToken:
    """Set from a SIGINT handler, polled by the delete loop between requests."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def install(self):
        """Route the first SIGINT to this token; a second one interrupts as usual.

        Returns the previous handler so the caller can restore it.
        """
        def handler(signum, frame):
            self.cancel()
            signal.signal(signal.SIGINT, signal.default_int_handler)

        return signal.signal(signal.SIGINT, handler)
