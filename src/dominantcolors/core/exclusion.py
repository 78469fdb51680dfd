"""Removal of pure black, white and gray samples before clustering."""

import logging
from typing import Iterable, Optional

import numpy as np

from ..utils.color import ColorConverter
from .options import Options
from .palette import ColorSamples

logger = logging.getLogger(__name__)

# Thresholds in CIELAB units
BLACK_MAX_LIGHTNESS = 10.0
WHITE_MIN_LIGHTNESS = 92.0
NEUTRAL_MAX_CHROMA = 8.0
GRAY_MAX_CHROMA = 5.0


def exclusion_mask(
    lab: np.ndarray, options: Iterable[Options]
) -> np.ndarray:
    """Boolean mask of the LAB colors matched by any enabled predicate."""
    options = frozenset(options)
    lightness = lab[..., 0]
    chroma = np.sqrt(lab[..., 1] ** 2 + lab[..., 2] ** 2)

    excluded = np.zeros(lightness.shape, dtype=bool)
    if Options.EXCLUDE_BLACK in options:
        excluded |= (lightness < BLACK_MAX_LIGHTNESS) & (chroma < NEUTRAL_MAX_CHROMA)
    if Options.EXCLUDE_WHITE in options:
        excluded |= (lightness > WHITE_MIN_LIGHTNESS) & (chroma < NEUTRAL_MAX_CHROMA)
    if Options.EXCLUDE_GRAY in options:
        excluded |= chroma < GRAY_MAX_CHROMA
    return excluded


def filter_samples(
    samples: ColorSamples,
    options: Iterable[Options],
    converter: Optional[ColorConverter] = None,
) -> ColorSamples:
    """Drop the samples whose color matches an enabled exclusion flag."""
    options = frozenset(options)
    if not options or len(samples) == 0:
        return samples

    converter = converter or ColorConverter()
    lab = converter.rgb_to_lab(samples.colors).cpu().numpy()
    excluded = exclusion_mask(lab, options)

    if excluded.any():
        logger.debug(
            f"Excluded {int(excluded.sum())} colors "
            f"({int(samples.counts[excluded].sum())} pixels) "
            f"for {sorted(option.value for option in options)}"
        )
    return samples.select(~excluded)
