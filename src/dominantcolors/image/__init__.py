"""Image buffers, loading and downsampling for dominantcolors."""

from .buffer import ImageBuffer, as_image_buffer
from .downsampler import Downsampler, target_size
from .processor import ImageProcessor

__all__ = [
    "Downsampler",
    "ImageBuffer",
    "ImageProcessor",
    "as_image_buffer",
    "target_size",
]
