"""Dominant color extraction entry points."""

import logging
from typing import List, Optional, Union

from ..image.buffer import as_image_buffer
from ..image.downsampler import Downsampler
from ..utils.color import ColorConverter
from ..utils.logging import PerformanceLogger
from .average import segment_average_colors
from .clusterer import INITIAL_RADIUS, IterativeClusterer
from .deduplicator import deduplicate
from .errors import ConfigurationError
from .exclusion import filter_samples
from .kmeans import KMeansClusterer
from .options import Algorithm, ExtractionConfig, Quality, Sort, coerce_enum
from .palette import PaletteEntry, entries_from_clusters
from .sampler import sample_colors
from .sorter import sort_palette

logger = logging.getLogger(__name__)


class DominantColors:
    """Extract a palette of dominant colors from images.

    The pipeline runs downsampling, pixel counting, exclusion filtering,
    clustering, near-duplicate merging and sorting. Each call is independent:
    the extractor holds only its configuration, so one instance can serve
    concurrent calls on separate images.
    """

    def __init__(self, config: Optional[ExtractionConfig] = None, device: str = "cpu"):
        """Initialize extractor.

        Args:
            config: Extraction settings, defaults to ``ExtractionConfig()``
            device: Device for tensor operations
        """
        self.config = config or ExtractionConfig()
        self.device = device
        self.converter = ColorConverter(device)
        self.downsampler = Downsampler(device)

    def _clusterer(self):
        if self.config.algorithm == Algorithm.KMEANS:
            return KMeansClusterer(converter=self.converter)
        return IterativeClusterer(
            formula=self.config.formula,
            initial_radius=max(self.config.merge_threshold, INITIAL_RADIUS),
            converter=self.converter,
        )

    def extract(self, image) -> List[PaletteEntry]:
        """Compute the palette of ``image``.

        Args:
            image: ImageBuffer, PIL image or (H, W, 3|4) array

        Returns:
            Between 0 and ``config.max_count`` entries in the configured order.
            An image whose pixels are all transparent or excluded yields an
            empty list.

        Raises:
            InvalidImage: If the image is missing or empty
            UnsupportedFormat: If the pixels are not RGB or RGBA
        """
        config = self.config
        buffer = as_image_buffer(image)
        timer = PerformanceLogger(level=logging.INFO if config.time else logging.DEBUG)

        with timer.timed("downsample"):
            buffer = self.downsampler.downsample(buffer, config.quality)
        with timer.timed("sample"):
            samples = sample_colors(buffer)
        if len(samples) == 0:
            logger.info("Image has no visible pixels")
            return []

        with timer.timed("exclude"):
            samples = filter_samples(samples, config.options, self.converter)
        if len(samples) == 0:
            logger.warning(
                f"All {buffer.width * buffer.height} pixels matched the exclusion flags "
                f"{sorted(option.value for option in config.options)}"
            )
            return []

        with timer.timed("cluster"):
            clusters = self._clusterer().cluster(samples, config.max_count)
        with timer.timed("deduplicate"):
            clusters = deduplicate(
                clusters, config.merge_threshold, config.formula, self.converter
            )
        with timer.timed("sort"):
            palette = sort_palette(entries_from_clusters(clusters), config.sorting)

        logger.debug(
            f"Extracted {len(palette)} colors from {len(samples)} distinct colors "
            f"({config.algorithm.value}, {config.formula.value}, {config.quality.value})"
        )
        return palette


def dominant_colors(
    image, config: Optional[ExtractionConfig] = None, **overrides
) -> List[PaletteEntry]:
    """Extract the dominant colors of ``image``.

    Args:
        image: ImageBuffer, PIL image or (H, W, 3|4) array
        config: Base settings, defaults to ``ExtractionConfig()``
        **overrides: Fields replacing those of ``config``

    Raises:
        ConfigurationError: If the settings are invalid
        InvalidImage: If the image is missing or empty
        UnsupportedFormat: If the pixels are not RGB or RGBA
    """
    config = config or ExtractionConfig()
    if overrides:
        config = config.with_overrides(**overrides)
    return DominantColors(config).extract(image)


def average_colors(
    image,
    count: int = 6,
    quality: Union[Quality, str] = Quality.FAIR,
    sorting: Optional[Union[Sort, str]] = None,
    device: str = "cpu",
) -> List[PaletteEntry]:
    """Average colors of ``count`` vertical strips of ``image``.

    Entries keep left-to-right strip order unless ``sorting`` is given.

    Raises:
        ConfigurationError: If ``count`` is not positive
        InvalidImage: If the image is missing or empty
        UnsupportedFormat: If the pixels are not RGB or RGBA
    """
    if isinstance(count, bool) or not isinstance(count, int) or count <= 0:
        raise ConfigurationError(f"count must be a positive integer, got {count!r}")
    quality = coerce_enum(Quality, quality, "quality")

    buffer = Downsampler(device).downsample(as_image_buffer(image), quality)
    palette = entries_from_clusters(segment_average_colors(buffer, count))
    if sorting is not None:
        palette = sort_palette(palette, coerce_enum(Sort, sorting, "sorting"))
    return palette
