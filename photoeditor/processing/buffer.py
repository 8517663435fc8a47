"""
Pixel buffer shared by every filter stage.

A buffer is a row-major ``height x width x 3`` array of 8-bit RGB samples.
The source image is kept as a read-only buffer; every pipeline run works
on its own copy.
"""

from dataclasses import dataclass
from typing import Iterable, Tuple

import numpy as np

from .errors import InvalidBufferError


@dataclass
class PixelBuffer:
    """RGB pixel data with explicit dimensions."""
    width: int
    height: int
    pixels: np.ndarray  # (height, width, 3) uint8

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise InvalidBufferError(
                f"Buffer dimensions must be positive, got {self.width}x{self.height}"
            )
        if not isinstance(self.pixels, np.ndarray):
            raise InvalidBufferError("Pixel data must be a numpy array")
        if self.pixels.shape != (self.height, self.width, 3):
            raise InvalidBufferError(
                f"Pixel data shape {self.pixels.shape} does not match "
                f"{self.width}x{self.height} RGB"
            )
        if self.pixels.dtype != np.uint8:
            raise InvalidBufferError(f"Pixel data must be uint8, got {self.pixels.dtype}")

    @classmethod
    def from_array(cls, array: np.ndarray) -> 'PixelBuffer':
        """
        Wrap an (h, w, 3) array, clipping values into the 8-bit range.

        Args:
            array: Array of RGB samples in any numeric dtype

        Returns:
            New buffer owning a uint8 copy of the data
        """
        array = np.asarray(array)
        if array.ndim != 3 or array.shape[2] != 3:
            raise InvalidBufferError(f"Expected an (h, w, 3) array, got shape {array.shape}")

        if array.dtype == np.uint8:
            pixels = array.copy()
        else:
            pixels = np.clip(np.rint(array), 0, 255).astype(np.uint8)

        height, width = pixels.shape[:2]
        return cls(width=width, height=height, pixels=pixels)

    @classmethod
    def from_packed(cls, values: Iterable[int], width: int, height: int) -> 'PixelBuffer':
        """Build a buffer from packed 0xRRGGBB integers (alpha bits ignored)."""
        packed = np.asarray(list(values), dtype=np.int64)
        if packed.size != width * height:
            raise InvalidBufferError(
                f"Expected {width * height} packed pixels, got {packed.size}"
            )

        packed = packed.reshape(height, width)
        pixels = np.empty((height, width, 3), dtype=np.uint8)
        pixels[..., 0] = (packed >> 16) & 0xFF
        pixels[..., 1] = (packed >> 8) & 0xFF
        pixels[..., 2] = packed & 0xFF
        return cls(width=width, height=height, pixels=pixels)

    @classmethod
    def filled(cls, width: int, height: int, rgb: Tuple[int, int, int]) -> 'PixelBuffer':
        """Create a buffer where every pixel has the same color."""
        pixels = np.empty((height, width, 3), dtype=np.uint8)
        pixels[...] = rgb
        return cls(width=width, height=height, pixels=pixels)

    def to_packed(self) -> np.ndarray:
        """Return pixels as a flat row-major array of 0xRRGGBB integers."""
        channels = self.pixels.astype(np.int64)
        packed = (channels[..., 0] << 16) | (channels[..., 1] << 8) | channels[..., 2]
        return packed.reshape(-1)

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height) of the buffer, in the same order as Pillow."""
        return self.width, self.height

    @property
    def is_writeable(self) -> bool:
        return bool(self.pixels.flags.writeable)

    def same_dimensions(self, other: 'PixelBuffer') -> bool:
        return self.width == other.width and self.height == other.height

    def copy(self) -> 'PixelBuffer':
        """Return an independent, writeable copy."""
        return PixelBuffer(width=self.width, height=self.height, pixels=self.pixels.copy())

    def read_only(self) -> 'PixelBuffer':
        """
        Return a read-only copy suitable for sharing between concurrent runs.
        """
        pixels = self.pixels.copy()
        pixels.setflags(write=False)
        return PixelBuffer(width=self.width, height=self.height, pixels=pixels)

    def __eq__(self, other) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return self.same_dimensions(other) and np.array_equal(self.pixels, other.pixels)
