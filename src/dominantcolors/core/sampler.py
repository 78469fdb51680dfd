"""Counting of distinct pixel colors."""

import logging

import numpy as np

from ..image.buffer import ImageBuffer
from .palette import ColorSamples, color_keys, keys_to_colors

logger = logging.getLogger(__name__)


def sample_colors(image: ImageBuffer) -> ColorSamples:
    """Count the occurrences of every exact RGB color in ``image``.

    Fully transparent pixels (alpha == 0) are skipped. Any other alpha
    value is ignored and the pixel counts with its stored RGB.

    Returns:
        Samples sorted by RGB key, with the number of counted pixels
    """
    pixels = image.pixels.reshape(-1, image.pixels.shape[2])
    if image.has_alpha:
        opaque = pixels[:, 3] > 0
        skipped = int(pixels.shape[0] - np.count_nonzero(opaque))
        if skipped:
            logger.debug(f"Skipping {skipped} fully transparent pixels")
        pixels = pixels[opaque]

    if pixels.shape[0] == 0:
        return ColorSamples.empty()

    keys, counts = np.unique(color_keys(pixels[:, :3]), return_counts=True)
    logger.debug(f"Sampled {pixels.shape[0]} pixels, {len(keys)} distinct colors")

    return ColorSamples(
        colors=keys_to_colors(keys),
        counts=counts.astype(np.int64),
        total_pixels=int(pixels.shape[0]),
    )
