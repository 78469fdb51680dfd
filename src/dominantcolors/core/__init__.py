"""Core dominant color extraction pipeline."""

from .errors import (
    ConfigurationError,
    DominantColorsError,
    InvalidImage,
    UnsupportedFormat,
)
from .options import Algorithm, DeltaEFormula, ExtractionConfig, Options, Quality, Sort
from .clusterer import ClusterArena, IterativeClusterer
from .deduplicator import deduplicate
from .delta_e import color_difference, delta_e, pair_distance
from .exclusion import filter_samples
from .extractor import DominantColors, average_colors, dominant_colors
from .kmeans import KMeansClusterer
from .palette import Cluster, ColorSamples, PaletteEntry
from .sampler import sample_colors
from .sorter import sort_palette

__all__ = [
    "Algorithm",
    "Cluster",
    "ClusterArena",
    "ColorSamples",
    "ConfigurationError",
    "DeltaEFormula",
    "DominantColors",
    "DominantColorsError",
    "ExtractionConfig",
    "InvalidImage",
    "IterativeClusterer",
    "KMeansClusterer",
    "Options",
    "PaletteEntry",
    "Quality",
    "Sort",
    "UnsupportedFormat",
    "average_colors",
    "color_difference",
    "deduplicate",
    "delta_e",
    "dominant_colors",
    "filter_samples",
    "pair_distance",
    "sample_colors",
    "sort_palette",
]
