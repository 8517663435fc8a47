"""
PhotoEditor: color adjustment pipeline

Applies brightness, contrast, saturation and gamma to RGB pixel buffers in a
fixed order, cancelling superseded runs so interactive edits stay responsive.
"""

__version__ = "0.1.0"

from .config import load_config
from .processing import AdjustmentParameters, AdjustmentPipeline, PixelBuffer
from .preview import FilterCoordinator

__all__ = [
    "load_config",
    "AdjustmentParameters",
    "AdjustmentPipeline",
    "PixelBuffer",
    "FilterCoordinator",
]
