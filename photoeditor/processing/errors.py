"""
Exceptions raised by the adjustment pipeline.
"""


class AdjustmentError(Exception):
    """Base exception for adjustment pipeline errors."""
    pass


class InvalidBufferError(AdjustmentError):
    """Raised when pixel data does not describe a valid RGB buffer."""
    pass


class SingularityError(AdjustmentError, ValueError):
    """Raised when a contrast or saturation amount reaches the alpha pole."""
    pass


class NoSourceImageError(AdjustmentError):
    """Raised when a run is requested before a source image is set."""
    pass
