"""In-memory pixel buffer consumed by the extraction pipeline."""

from dataclasses import dataclass
from typing import Tuple

import numpy as np
from PIL import Image

from ..core.errors import InvalidImage, UnsupportedFormat

DEFAULT_PIXELS_PER_UNIT = 72.0


@dataclass(frozen=True)
class ImageBuffer:
    """An addressable RGB or RGBA raster.

    Attributes:
        pixels: (height, width, 3 or 4) uint8 array
        pixels_per_unit: Native resolution (e.g. pixels per inch)
    """

    pixels: np.ndarray
    pixels_per_unit: float = DEFAULT_PIXELS_PER_UNIT

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height) in pixels."""
        return (self.width, self.height)

    @property
    def has_alpha(self) -> bool:
        return self.pixels.shape[2] == 4

    def pixel(self, x: int, y: int) -> Tuple[int, ...]:
        """RGB or RGBA value at column ``x`` and row ``y``."""
        return tuple(int(c) for c in self.pixels[y, x])

    @classmethod
    def from_array(
        cls, array, pixels_per_unit: float = DEFAULT_PIXELS_PER_UNIT
    ) -> "ImageBuffer":
        """Build a buffer from an (H, W, 3|4) array.

        Integer arrays must hold values in [0, 255]; floating point arrays
        are read as [0, 1] and scaled.

        Raises:
            InvalidImage: If the array is None or has zero width or height
            UnsupportedFormat: If the array is not RGB or RGBA
        """
        if array is None:
            raise InvalidImage("No image data")
        try:
            array = np.asarray(array)
        except (TypeError, ValueError) as e:
            raise UnsupportedFormat(f"Pixel data is not an array: {e}")

        if array.ndim != 3 or array.shape[2] not in (3, 4):
            if array.ndim >= 2 and 0 in array.shape[:2]:
                raise InvalidImage(f"Image has zero area: shape {array.shape}")
            raise UnsupportedFormat(
                f"Expected (height, width, 3|4) pixel data, got shape {array.shape}"
            )
        if array.shape[0] == 0 or array.shape[1] == 0:
            raise InvalidImage(f"Image has zero area: shape {array.shape}")

        if array.dtype == np.uint8:
            pixels = array
        elif np.issubdtype(array.dtype, np.integer):
            if array.min() < 0 or array.max() > 255:
                raise UnsupportedFormat("Integer pixel values must be in [0, 255]")
            pixels = array.astype(np.uint8)
        elif np.issubdtype(array.dtype, np.floating):
            if not np.all(np.isfinite(array)):
                raise UnsupportedFormat("Pixel data contains non-finite values")
            pixels = np.round(np.clip(array, 0.0, 1.0) * 255.0).astype(np.uint8)
        else:
            raise UnsupportedFormat(f"Unsupported pixel dtype: {array.dtype}")

        return cls(np.ascontiguousarray(pixels), float(pixels_per_unit))

    @classmethod
    def from_pil(cls, image: Image.Image) -> "ImageBuffer":
        """Build a buffer from a PIL image, converting palette and gray modes.

        Raises:
            InvalidImage: If the image is None or empty
            UnsupportedFormat: If the mode cannot be converted to RGB(A)
        """
        if image is None:
            raise InvalidImage("No image data")
        if image.width == 0 or image.height == 0:
            raise InvalidImage(f"Image has zero area: {image.width}x{image.height}")

        if image.mode not in ("RGB", "RGBA"):
            has_alpha = image.mode in ("RGBa", "LA", "La", "PA") or (
                image.mode == "P" and "transparency" in image.info
            )
            try:
                image = image.convert("RGBA" if has_alpha else "RGB")
            except (ValueError, OSError) as e:
                raise UnsupportedFormat(f"Cannot convert mode {image.mode} to RGB: {e}")

        dpi = image.info.get("dpi")
        pixels_per_unit = float(dpi[0]) if dpi and dpi[0] else DEFAULT_PIXELS_PER_UNIT
        return cls.from_array(np.asarray(image), pixels_per_unit=pixels_per_unit)


def as_image_buffer(image) -> ImageBuffer:
    """Coerce an ImageBuffer, PIL image or pixel array to a validated buffer."""
    if isinstance(image, ImageBuffer):
        return ImageBuffer.from_array(image.pixels, image.pixels_per_unit)
    if isinstance(image, Image.Image):
        return ImageBuffer.from_pil(image)
    return ImageBuffer.from_array(image)
