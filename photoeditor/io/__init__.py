"""
Image acquisition and persistence for PhotoEditor.
"""

from .image_io import (
    ImageLoadError, load_image, save_image, create_default_image, find_images
)

__all__ = [
    'ImageLoadError',
    'load_image',
    'save_image',
    'create_default_image',
    'find_images'
]
