"""
Result dispatchers.

Pipeline runs finish on worker threads, but results must be handed to the
display on the thread that owns it. A dispatcher moves a callback from the
worker onto that context.
"""

import logging
import queue
from abc import ABC, abstractmethod
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class Dispatcher(ABC):
    """Posts callbacks to the context that owns the display."""

    @abstractmethod
    def post(self, callback: Callable, *args):
        """Schedule ``callback(*args)`` on the display context."""
        pass


class ImmediateDispatcher(Dispatcher):
    """Runs callbacks inline on the calling thread (headless use and tests)."""

    def post(self, callback: Callable, *args):
        callback(*args)


class QueueDispatcher(Dispatcher):
    """
    Queues callbacks for a UI loop to drain.

    Worker threads call ``post``; the UI thread calls ``process_pending``
    from its event loop.
    """

    def __init__(self):
        self._queue: "queue.Queue[tuple]" = queue.Queue()

    def post(self, callback: Callable, *args):
        self._queue.put((callback, args))

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def process_pending(self, timeout: Optional[float] = None) -> int:
        """
        Run queued callbacks on the calling thread.

        Args:
            timeout: If given, wait up to this long for the first callback

        Returns:
            Number of callbacks executed
        """
        processed = 0

        if timeout is not None:
            try:
                callback, args = self._queue.get(timeout=timeout)
            except queue.Empty:
                return 0
            self._invoke(callback, args)
            processed += 1

        while True:
            try:
                callback, args = self._queue.get_nowait()
            except queue.Empty:
                break
            self._invoke(callback, args)
            processed += 1

        return processed

    @staticmethod
    def _invoke(callback: Callable, args: tuple):
        try:
            callback(*args)
        except Exception as e:
            logger.error(f"Dispatched callback failed: {e}")
