"""dominantcolors: perceptual dominant color extraction for images."""

__version__ = "0.1.0"

from .core import (
    Algorithm,
    ConfigurationError,
    DeltaEFormula,
    DominantColors,
    DominantColorsError,
    ExtractionConfig,
    InvalidImage,
    Options,
    PaletteEntry,
    Quality,
    Sort,
    UnsupportedFormat,
    average_colors,
    dominant_colors,
)
from .image import ImageBuffer, ImageProcessor

__all__ = [
    "Algorithm",
    "ConfigurationError",
    "DeltaEFormula",
    "DominantColors",
    "DominantColorsError",
    "ExtractionConfig",
    "ImageBuffer",
    "ImageProcessor",
    "InvalidImage",
    "Options",
    "PaletteEntry",
    "Quality",
    "Sort",
    "UnsupportedFormat",
    "average_colors",
    "dominant_colors",
]
