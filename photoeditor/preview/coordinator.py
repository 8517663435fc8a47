"""
Filter coordinator for responsive adjustment previews.

Keeps a single run active per editing session. Every new request cancels
the run it supersedes, so bursts of slider changes deliver exactly one
result: the one for the most recent parameters.
"""

import logging
import threading
import time
import uuid
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, Optional

from ..processing.buffer import PixelBuffer
from ..processing.errors import NoSourceImageError
from ..processing.models import (
    AdjustmentParameters, PipelineConfig, PipelineResult, RunState, Stage
)
from ..processing.pipeline import AdjustmentPipeline
from ..utils.logging import RunStats, StructuredLogger
from .dispatch import Dispatcher, ImmediateDispatcher
from .models import PipelineRun

logger = logging.getLogger(__name__)


class FilterCoordinator:
    """
    Schedules pipeline runs on background workers and supersedes stale ones.

    Runs move through PENDING -> RUNNING -> {COMPLETED, CANCELLED, FAILED}.
    Only a COMPLETED run that is still the latest request is delivered,
    and delivery happens through the dispatcher on the display context.
    """

    def __init__(self, pipeline: Optional[AdjustmentPipeline] = None,
                 on_result: Optional[Callable[[PipelineResult], None]] = None,
                 dispatcher: Optional[Dispatcher] = None,
                 config: Optional[PipelineConfig] = None,
                 on_stage: Optional[Callable[[PipelineRun, Stage], None]] = None):
        """
        Initialize the coordinator.

        Args:
            pipeline: Pipeline used for every run (created from config if None)
            on_result: Display callback receiving each delivered result
            dispatcher: Moves deliveries onto the display context
            config: Pipeline configuration; defaults to the pipeline's own
            on_stage: Called on the worker thread as each run enters a stage
        """
        self._owns_pipeline = pipeline is None
        if pipeline is None:
            pipeline = AdjustmentPipeline(config)
        self.pipeline = pipeline
        self.config = config or pipeline.config
        self.dispatcher = dispatcher or ImmediateDispatcher()
        self.on_result = on_result
        self.on_stage = on_stage

        self.executor = ThreadPoolExecutor(
            max_workers=self.config.run_workers,
            thread_name_prefix="PhotoEditor-Run"
        )

        self._source: Optional[PixelBuffer] = None
        self._latest: Optional[PipelineRun] = None
        self.active_runs: Dict[str, PipelineRun] = {}

        self._shutdown = False
        self._lock = threading.RLock()

        self.stats = RunStats()
        self.log = StructuredLogger(__name__)

        logger.info(f"FilterCoordinator initialized with {self.config.run_workers} run workers")

    @property
    def source(self) -> Optional[PixelBuffer]:
        return self._source

    @property
    def latest_run(self) -> Optional[PipelineRun]:
        return self._latest

    @property
    def is_idle(self) -> bool:
        """True when no run is pending or running."""
        with self._lock:
            return not self.active_runs

    def set_source(self, buffer: PixelBuffer):
        """
        Replace the source image.

        Any run against the previous source is cancelled; its buffer no
        longer matches what the display expects.
        """
        with self._lock:
            self._cancel_latest_locked("source image replaced")
            self._source = buffer.read_only()

        self.log.info("Source image set", width=buffer.width, height=buffer.height)

    def submit(self, params: AdjustmentParameters) -> PipelineRun:
        """
        Start a run for a new parameter snapshot, superseding the previous one.

        Args:
            params: Joint snapshot of all four adjustment values

        Returns:
            The newly scheduled run

        Raises:
            RuntimeError: If the coordinator has been shut down
            NoSourceImageError: If no source image has been set
            ValueError: If the parameters are invalid
        """
        params = params.validated(self.config.limits)

        with self._lock:
            if self._shutdown:
                raise RuntimeError("FilterCoordinator is shutting down")
            if self._source is None:
                raise NoSourceImageError("Set a source image before submitting adjustments")

            self._cancel_latest_locked("superseded")

            run = PipelineRun(
                run_id=uuid.uuid4().hex[:12],
                parameters=params,
                source=self._source
            )
            self._latest = run
            self.active_runs[run.run_id] = run
            self.stats.add_submitted()

            try:
                run.future = self.executor.submit(self._execute_run, run)
            except RuntimeError as e:
                run.error = e
                self._finish_locked(run, RunState.FAILED)
                run._done.set()
                raise

        self.log.debug("Run submitted", run_id=run.run_id, **params.to_dict())
        return run

    def cancel_active(self) -> bool:
        """
        Cancel the latest run if it has not been delivered.

        Returns:
            True if a run was signalled
        """
        with self._lock:
            return self._cancel_latest_locked("cancelled by caller")

    def wait(self, run: PipelineRun, timeout: Optional[float] = None) -> bool:
        return run.wait(timeout)

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for every pending and running run to finish.

        Returns:
            True if all runs finished, False if the timeout occurred
        """
        deadline = None if timeout is None else time.time() + timeout

        while True:
            with self._lock:
                runs = list(self.active_runs.values())
            if not runs:
                return True

            for run in runs:
                remaining = None if deadline is None else max(0.0, deadline - time.time())
                if not run.wait(remaining):
                    logger.warning(f"Timeout waiting for run {run.run_id}")
                    return False

    def get_stats(self):
        """Get run counters and timing summary."""
        with self._lock:
            return {
                'active_runs': len(self.active_runs),
                'worker_threads': self.config.run_workers,
                **self.stats.get_summary()
            }

    def shutdown(self, wait: bool = True):
        """
        Cancel outstanding work and stop the worker pool.

        Args:
            wait: Whether to wait for worker threads to exit
        """
        logger.info("Shutting down FilterCoordinator...")

        with self._lock:
            self._shutdown = True
            for run in self.active_runs.values():
                run.token.cancel()

        self.executor.shutdown(wait=wait)
        if self._owns_pipeline:
            self.pipeline.shutdown(wait=wait)

        logger.info("FilterCoordinator shutdown complete")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.shutdown()

    def _cancel_latest_locked(self, reason: str) -> bool:
        run = self._latest
        if run is None or run.token.is_cancelled or run.delivered:
            return False

        run.token.cancel()
        logger.debug(f"Cancelled run {run.run_id} ({reason})")
        return True

    def _execute_run(self, run: PipelineRun):
        """Worker body for a single run."""
        try:
            with self._lock:
                if run.token.is_cancelled:
                    # Superseded before a worker picked it up
                    self._finish_locked(run, RunState.CANCELLED)
                    return
                run.state = RunState.RUNNING
                run.started_at = time.time()

            try:
                result = self.pipeline.recompute(
                    run.source, run.parameters, run.token,
                    on_stage=lambda stage: self._stage_entered(run, stage)
                )
            except Exception as e:
                run.error = e
                logger.error(f"Run {run.run_id} failed: {e}")
                with self._lock:
                    self._finish_locked(run, RunState.FAILED)
                return

            with self._lock:
                run.result = result
                deliver = (result.is_completed and not run.token.is_cancelled
                           and run is self._latest)
                self._finish_locked(run, RunState.COMPLETED if deliver else RunState.CANCELLED)

            if deliver:
                self.dispatcher.post(self._deliver, run)

        finally:
            run._done.set()

    def _stage_entered(self, run: PipelineRun, stage: Stage):
        run.current_stage = stage
        if self.on_stage:
            self.on_stage(run, stage)

    def _finish_locked(self, run: PipelineRun, state: RunState):
        run.state = state
        run.completed_at = time.time()
        self.active_runs.pop(run.run_id, None)

        if state == RunState.COMPLETED:
            self.stats.add_completed(run.duration)
        elif state == RunState.CANCELLED:
            self.stats.add_cancelled()
        else:
            self.stats.add_failed(run.run_id, run.error)

        self.log.debug("Run finished", run_id=run.run_id, state=state.value,
                       duration=run.duration)

    def _deliver(self, run: PipelineRun):
        """Runs on the display context; drops results superseded in transit."""
        with self._lock:
            if run.token.is_cancelled or run is not self._latest:
                self.stats.add_dropped()
                logger.debug(f"Dropped stale result from run {run.run_id}")
                return
            run.delivered = True
            self.stats.add_delivered()

        if self.on_result:
            try:
                self.on_result(run.result)
            except Exception as e:
                logger.error(f"Result callback failed for run {run.run_id}: {e}")
