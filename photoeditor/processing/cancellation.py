"""
Cooperative cancellation for pipeline runs.
"""

import threading


class PipelineCancelled(Exception):
    """Raised at a checkpoint once the run's token has been cancelled."""
    pass


class CancellationToken:
    """Thread-safe cancellation flag shared by a run and its coordinator."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self):
        if self._event.is_set():
            raise PipelineCancelled()

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.is_cancelled})"
