"""
Data models for the interactive preview coordinator.
"""

import threading
import time
from dataclasses import dataclass, field
from typing import Optional
from concurrent.futures import Future

from ..processing.buffer import PixelBuffer
from ..processing.cancellation import CancellationToken
from ..processing.models import AdjustmentParameters, PipelineResult, RunState, Stage


@dataclass
class PipelineRun:
    """One end-to-end pipeline execution for a parameter snapshot."""
    run_id: str
    parameters: AdjustmentParameters
    source: PixelBuffer
    token: CancellationToken = field(default_factory=CancellationToken)
    state: RunState = RunState.PENDING
    current_stage: Optional[Stage] = None
    result: Optional[PipelineResult] = None
    error: Optional[Exception] = None
    delivered: bool = False
    created_at: float = field(default_factory=time.time)
    started_at: Optional[float] = None
    completed_at: Optional[float] = None
    future: Optional[Future] = field(default=None, repr=False)
    _done: threading.Event = field(default_factory=threading.Event, repr=False)

    @property
    def is_finished(self) -> bool:
        """Check if the run reached a terminal state."""
        return self.state.is_terminal

    @property
    def duration(self) -> Optional[float]:
        """Get run duration if finished."""
        if self.started_at and self.completed_at:
            return self.completed_at - self.started_at
        return None

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the run has finished and any delivery was posted."""
        return self._done.wait(timeout)
