"""Image loading utilities for dominantcolors."""

import io
import logging
from pathlib import Path
from typing import Optional, Tuple, Union

from PIL import Image, ImageOps, UnidentifiedImageError

from ..core.errors import UnsupportedFormat
from ..core.options import Quality
from .buffer import ImageBuffer
from .downsampler import Downsampler

logger = logging.getLogger(__name__)


class ImageProcessor:
    """Load image files into pixel buffers ready for extraction."""

    def __init__(self, device: str = "cpu"):
        """Initialize image processor.

        Args:
            device: Device for tensor operations
        """
        self.downsampler = Downsampler(device)

    def load_image(
        self,
        image_path: Union[str, Path],
        quality: Optional[Quality] = None,
    ) -> ImageBuffer:
        """Load an image file as an RGB(A) buffer.

        Args:
            image_path: Path to image file
            quality: Optional tier to downsample to right away

        Returns:
            Pixel buffer honoring the file's EXIF orientation

        Raises:
            FileNotFoundError: If the file does not exist
            UnsupportedFormat: If the file is not a readable image
        """
        image_path = Path(image_path)
        try:
            with Image.open(image_path) as image:
                buffer = self._to_buffer(image)
        except UnidentifiedImageError as e:
            raise UnsupportedFormat(f"Cannot read image {image_path}: {e}")

        logger.debug(f"Loaded {image_path.name}: {buffer.width}x{buffer.height}")
        if quality is not None:
            buffer = self.downsampler.downsample(buffer, quality)
        return buffer

    def load_image_bytes(self, data: bytes) -> ImageBuffer:
        """Decode an in-memory encoded image (PNG, JPEG, ...)."""
        try:
            with Image.open(io.BytesIO(data)) as image:
                return self._to_buffer(image)
        except UnidentifiedImageError as e:
            raise UnsupportedFormat(f"Cannot decode image data: {e}")

    def image_info(self, image_path: Union[str, Path]) -> Tuple[Tuple[int, int], str]:
        """Return ``((width, height), mode)`` without decoding pixels."""
        try:
            with Image.open(image_path) as image:
                return image.size, image.mode
        except UnidentifiedImageError as e:
            raise UnsupportedFormat(f"Cannot read image {image_path}: {e}")

    def _to_buffer(self, image: Image.Image) -> ImageBuffer:
        image.load()
        dpi = image.info.get("dpi")
        oriented = ImageOps.exif_transpose(image)
        if dpi and "dpi" not in oriented.info:
            oriented.info["dpi"] = dpi
        return ImageBuffer.from_pil(oriented)
