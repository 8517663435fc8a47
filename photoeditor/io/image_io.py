"""
Image file I/O for PhotoEditor
Loads source images into pixel buffers and writes adjusted results
"""

import logging
from pathlib import Path
from typing import List, Union

import numpy as np
from PIL import Image, UnidentifiedImageError

from photoeditor.processing.buffer import PixelBuffer

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.bmp', '.tif', '.tiff', '.webp'}

DEFAULT_IMAGE_SIZE = (200, 100)


class ImageLoadError(Exception):
    """Raised when an image file cannot be read."""
    pass


def load_image(path: Union[str, Path]) -> PixelBuffer:
    """
    Load an image file as an RGB pixel buffer

    Args:
        path: Path to image file

    Returns:
        PixelBuffer with the decoded pixels (alpha dropped)
    """
    path = Path(path)
    if not path.exists():
        raise ImageLoadError(f"Image not found: {path}")

    try:
        with Image.open(path) as img:
            rgb = img.convert('RGB')
            pixels = np.asarray(rgb, dtype=np.uint8)
    except (UnidentifiedImageError, OSError) as e:
        raise ImageLoadError(f"Could not load image {path}: {e}") from e

    logger.debug(f"Loaded {path.name} ({pixels.shape[1]}x{pixels.shape[0]})")
    return PixelBuffer.from_array(pixels)


def save_image(buffer: PixelBuffer, path: Union[str, Path], quality: int = 100) -> Path:
    """
    Save a pixel buffer to disk

    Format follows the file suffix. JPEG output uses ``quality``.

    Args:
        buffer: Pixels to save
        path: Destination path
        quality: JPEG quality (1-100)

    Returns:
        Path that was written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    img = Image.fromarray(np.ascontiguousarray(buffer.pixels))
    if path.suffix.lower() in ('.jpg', '.jpeg'):
        img.save(path, format='JPEG', quality=quality)
    else:
        img.save(path)

    logger.info(f"Saved {buffer.width}x{buffer.height} image to {path}")
    return path


def create_default_image(width: int = DEFAULT_IMAGE_SIZE[0],
                         height: int = DEFAULT_IMAGE_SIZE[1]) -> PixelBuffer:
    """Gradient test image shown before the user picks a photo"""
    y, x = np.mgrid[0:height, 0:width]

    pixels = np.empty((height, width, 3), dtype=np.uint8)
    pixels[..., 0] = x % 100 + 40
    pixels[..., 1] = y % 100 + 80
    pixels[..., 2] = (x + y) % 100 + 120

    return PixelBuffer(width=width, height=height, pixels=pixels)


def find_images(directory: Union[str, Path], recursive: bool = False) -> List[Path]:
    """
    Find image files in a directory

    Args:
        directory: Directory to search
        recursive: Whether to search subdirectories

    Returns:
        Sorted list of image paths
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise ValueError(f"Not a directory: {directory}")

    pattern = '**/*' if recursive else '*'
    return sorted(
        p for p in directory.glob(pattern)
        if p.is_file() and p.suffix.lower() in IMAGE_EXTENSIONS
    )
