"""Quality-driven downsampling of pixel buffers."""

import logging
import math
from typing import Optional, Tuple

import numpy as np
import torch
import torch.nn.functional as F

from ..core.options import Quality
from .buffer import ImageBuffer

logger = logging.getLogger(__name__)


def target_size(width: int, height: int, quality: Quality) -> Tuple[int, int]:
    """Compute the (width, height) analyzed for a given quality tier.

    The aspect ratio is preserved, dimensions are floored to whole pixels
    and the pixel count never exceeds the tier's budget. Images already
    within budget keep their size.
    """
    budget = quality.pixel_budget
    return fit_to_budget(width, height, budget)


def fit_to_budget(width: int, height: int, budget: Optional[int]) -> Tuple[int, int]:
    """Largest aspect-preserving size with at most ``budget`` pixels."""
    if budget is None or width * height <= budget:
        return (width, height)

    scale = math.sqrt(budget / (width * height))
    new_width = min(width, max(1, int(math.floor(width * scale))))
    new_height = min(height, max(1, int(math.floor(height * scale))))

    # Extreme aspect ratios: one side was clamped to a single pixel
    if new_width * new_height > budget:
        if new_height == 1:
            new_width = budget
        else:
            new_height = budget // new_width

    return (new_width, new_height)


class Downsampler:
    """Reduce an image to the pixel budget of a quality tier."""

    def __init__(self, device: str = "cpu"):
        """Initialize downsampler.

        Args:
            device: Device for tensor operations
        """
        self.device = torch.device(device)

    def downsample(self, image: ImageBuffer, quality: Quality) -> ImageBuffer:
        """Resize ``image`` for ``quality``; returns it unchanged when small enough."""
        new_width, new_height = target_size(image.width, image.height, quality)
        if (new_width, new_height) == image.size:
            return image

        logger.debug(
            f"Downsampling {image.width}x{image.height} -> {new_width}x{new_height} "
            f"({quality.value})"
        )
        pixels = self.resize(image.pixels, (new_width, new_height))
        scale = new_width / image.width
        return ImageBuffer(pixels, image.pixels_per_unit * scale)

    def resize(self, pixels: np.ndarray, size: Tuple[int, int]) -> np.ndarray:
        """Area-average resize of an (H, W, C) uint8 array to ``size`` (width, height).

        RGBA input is premultiplied by alpha before averaging so that fully
        transparent pixels contribute no color.
        """
        new_width, new_height = size
        tensor = torch.from_numpy(np.ascontiguousarray(pixels)).to(
            device=self.device, dtype=torch.float64
        )
        tensor = tensor.permute(2, 0, 1).unsqueeze(0)  # (1, C, H, W)

        if tensor.shape[1] == 4:
            alpha = tensor[:, 3:4] / 255.0
            premultiplied = torch.cat([tensor[:, :3] * alpha, alpha], dim=1)
            resized = F.interpolate(premultiplied, size=(new_height, new_width), mode="area")
            color, alpha = resized[:, :3], resized[:, 3:4]
            color = torch.where(
                alpha > 0, color / torch.clamp(alpha, min=1e-12), torch.zeros_like(color)
            )
            resized = torch.cat([color, alpha * 255.0], dim=1)
        else:
            resized = F.interpolate(tensor, size=(new_height, new_width), mode="area")

        resized = torch.clamp(torch.round(resized), 0, 255).to(torch.uint8)
        return resized.squeeze(0).permute(1, 2, 0).cpu().numpy()
