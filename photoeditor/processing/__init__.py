"""
Color adjustment processing for PhotoEditor

Includes the pixel buffer, the four filter stages and the pipeline that
runs them in order with cooperative cancellation.
"""

from .buffer import PixelBuffer
from .cancellation import CancellationToken, PipelineCancelled
from .errors import (
    AdjustmentError, InvalidBufferError, SingularityError, NoSourceImageError
)
from .models import (
    AdjustmentParameters, ParameterLimits, PipelineConfig, PipelineResult,
    RunState, Stage, STAGE_ORDER
)
from .pipeline import AdjustmentPipeline

__all__ = [
    "PixelBuffer",
    "CancellationToken",
    "PipelineCancelled",
    "AdjustmentError",
    "InvalidBufferError",
    "SingularityError",
    "NoSourceImageError",
    "AdjustmentParameters",
    "ParameterLimits",
    "PipelineConfig",
    "PipelineResult",
    "RunState",
    "Stage",
    "STAGE_ORDER",
    "AdjustmentPipeline",
]
