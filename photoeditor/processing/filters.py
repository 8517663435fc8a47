"""
Color adjustment stages.

Every stage works on a band of rows (an (h, w, 3) uint8 view into the run's
working buffer) and writes its result back in place. Values are rounded
half away from zero and clamped to [0, 255].
"""

import numpy as np

from .errors import SingularityError

CHANNEL_MAX = 255


def round_clamp(values: np.ndarray) -> np.ndarray:
    """Round non-negative halves up and clamp to the 8-bit range."""
    return np.clip(np.floor(values + 0.5), 0, CHANNEL_MAX).astype(np.uint8)


def _amount_alpha(amount: float, name: str) -> float:
    # alpha = (255 + a) / (255 - a) has a pole at a = 255
    if abs(amount) >= CHANNEL_MAX:
        raise SingularityError(
            f"{name} amount must be strictly between -255 and 255, got {amount}"
        )
    return (CHANNEL_MAX + amount) / (CHANNEL_MAX - amount)


def contrast_alpha(amount: float) -> float:
    return _amount_alpha(amount, "contrast")


def saturation_alpha(amount: float) -> float:
    return _amount_alpha(amount, "saturation")


def apply_brightness(band: np.ndarray, brightness: float) -> int:
    """
    Offset every channel by ``brightness``.

    Args:
        band: Rows of the working buffer, modified in place
        brightness: Offset added to each channel

    Returns:
        Sum of all clamped channel values in the band
    """
    adjusted = round_clamp(band.astype(np.float64) + brightness)
    band[...] = adjusted
    return int(adjusted.sum(dtype=np.int64))


def average_brightness(total: int, pixel_count: int) -> int:
    """Mean channel value of a brightness-adjusted buffer (integer division)."""
    if pixel_count <= 0:
        raise ValueError(f"pixel_count must be positive, got {pixel_count}")
    return int(total) // (pixel_count * 3)


def apply_contrast(band: np.ndarray, contrast: float, avg_brightness: int):
    """Stretch channels away from (or toward) the average brightness."""
    alpha = contrast_alpha(contrast)
    if alpha == 1.0:
        return
    values = band.astype(np.float64)
    band[...] = round_clamp(alpha * (values - avg_brightness) + avg_brightness)


def apply_saturation(band: np.ndarray, saturation: float):
    """Stretch each pixel's channels away from that pixel's own mean."""
    alpha = saturation_alpha(saturation)
    if alpha == 1.0:
        return
    rgb_avg = (band.astype(np.int32).sum(axis=2) // 3)[..., np.newaxis]
    values = band.astype(np.float64)
    band[...] = round_clamp(alpha * (values - rgb_avg) + rgb_avg)


def gamma_lut(gamma: float) -> np.ndarray:
    """256-entry lookup table for 255 * (c / 255) ** gamma."""
    if not gamma > 0:
        raise ValueError(f"gamma must be positive, got {gamma}")
    levels = np.arange(CHANNEL_MAX + 1, dtype=np.float64) / CHANNEL_MAX
    return round_clamp(CHANNEL_MAX * np.power(levels, gamma))


def apply_gamma(band: np.ndarray, gamma: float, lut: np.ndarray = None):
    """Apply a power curve to every channel."""
    if lut is None:
        lut = gamma_lut(gamma)
    band[...] = lut[band]
