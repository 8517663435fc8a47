"""
Adjustment pipeline orchestrator.

Runs brightness, contrast, saturation and gamma in that order over a fresh
copy of the source buffer. Each stage is split into row bands; bands of one
stage may run in parallel but stages never overlap, and the average
brightness computed after the first stage is a barrier for the second.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Callable, List, Optional

import numpy as np

from .buffer import PixelBuffer
from .cancellation import CancellationToken, PipelineCancelled
from .filters import (
    apply_brightness, average_brightness, apply_contrast,
    apply_saturation, apply_gamma, gamma_lut
)
from .models import (
    AdjustmentParameters, PipelineConfig, PipelineResult, RunState, Stage
)

logger = logging.getLogger(__name__)

StageCallback = Callable[[Stage], None]


class AdjustmentPipeline:
    """
    Applies a set of adjustment parameters to a pixel buffer.

    The source buffer is never modified. Cancellation is cooperative: the
    token is checked at every stage boundary and before every row band.
    """

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or PipelineConfig()

        # Band workers are only needed when stages run in parallel
        self._executor: Optional[ThreadPoolExecutor] = None
        if self.config.stage_workers > 1:
            self._executor = ThreadPoolExecutor(
                max_workers=self.config.stage_workers,
                thread_name_prefix="PhotoEditor-Band"
            )

        logger.info(f"AdjustmentPipeline initialized "
                    f"(rows_per_batch={self.config.rows_per_batch}, "
                    f"stage_workers={self.config.stage_workers})")

    def recompute(self, source: PixelBuffer, params: AdjustmentParameters,
                  token: Optional[CancellationToken] = None,
                  on_stage: Optional[StageCallback] = None) -> PipelineResult:
        """
        Run all four stages against a copy of ``source``.

        Args:
            source: Unmodified source image
            params: Parameter snapshot for this run
            token: Cancellation token checked between batches
            on_stage: Called with each stage as it begins

        Returns:
            Completed result with the adjusted buffer, or a cancelled result
            without one

        Raises:
            ValueError: If the parameters are not finite or gamma is not positive
        """
        token = token or CancellationToken()
        params = params.validated(self.config.limits)
        start_time = time.time()

        try:
            token.raise_if_cancelled()
            working = source.copy()
            bands = self._split_bands(working)

            self._enter_stage(Stage.BRIGHTNESS, on_stage)
            totals = self._run_stage(bands, token, apply_brightness, params.brightness)

            # All brightness bands are done here; their partial sums form the barrier
            avg = average_brightness(sum(totals), working.pixel_count)

            self._enter_stage(Stage.CONTRAST, on_stage)
            self._run_stage(bands, token, apply_contrast, params.contrast, avg)

            self._enter_stage(Stage.SATURATION, on_stage)
            self._run_stage(bands, token, apply_saturation, params.saturation)

            self._enter_stage(Stage.GAMMA, on_stage)
            lut = gamma_lut(params.gamma)
            self._run_stage(bands, token, apply_gamma, params.gamma, lut)

            token.raise_if_cancelled()

        except PipelineCancelled:
            duration = time.time() - start_time
            logger.debug(f"Pipeline run cancelled after {duration:.3f}s")
            return PipelineResult(
                status=RunState.CANCELLED,
                parameters=params,
                duration=duration
            )

        duration = time.time() - start_time
        logger.debug(f"Pipeline run completed in {duration:.3f}s "
                     f"({working.width}x{working.height}, avg brightness {avg})")

        return PipelineResult(
            status=RunState.COMPLETED,
            parameters=params,
            buffer=working,
            average_brightness=avg,
            duration=duration
        )

    def shutdown(self, wait: bool = True):
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
            self._executor = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.shutdown()

    def _split_bands(self, buffer: PixelBuffer) -> List[np.ndarray]:
        """Split the working buffer into row views of rows_per_batch rows."""
        step = self.config.rows_per_batch
        return [buffer.pixels[row:row + step] for row in range(0, buffer.height, step)]

    @staticmethod
    def _enter_stage(stage: Stage, on_stage: Optional[StageCallback]):
        logger.debug(f"Entering stage {stage.value}")
        if on_stage:
            on_stage(stage)

    def _run_stage(self, bands: List[np.ndarray], token: CancellationToken,
                   stage_fn: Callable, *args) -> list:
        """Apply one stage to every band, checking the token before each."""
        token.raise_if_cancelled()

        if self._executor is None or len(bands) == 1:
            results = []
            for band in bands:
                token.raise_if_cancelled()
                results.append(stage_fn(band, *args))
            return results

        futures = [
            self._executor.submit(self._run_band, token, stage_fn, band, args)
            for band in bands
        ]
        # No band may still be writing when the stage returns
        wait(futures)

        if token.is_cancelled:
            raise PipelineCancelled()
        return [future.result() for future in futures]

    @staticmethod
    def _run_band(token: CancellationToken, stage_fn: Callable,
                  band: np.ndarray, args: tuple):
        token.raise_if_cancelled()
        return stage_fn(band, *args)
