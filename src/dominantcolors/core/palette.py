"""Data containers passed between the extraction stages."""

from dataclasses import asdict, dataclass
from typing import Dict, List, Tuple

import numpy as np

from ..utils.color import rgb_to_hex, rgb_to_lab

RGB = Tuple[int, int, int]


def color_keys(colors: np.ndarray) -> np.ndarray:
    """Pack (n, 3) uint8 RGB colors into sortable int64 keys."""
    colors = np.asarray(colors, dtype=np.int64).reshape(-1, 3)
    return (colors[:, 0] << 16) | (colors[:, 1] << 8) | colors[:, 2]


def keys_to_colors(keys: np.ndarray) -> np.ndarray:
    """Inverse of :func:`color_keys`."""
    keys = np.asarray(keys, dtype=np.int64)
    return np.stack([(keys >> 16) & 0xFF, (keys >> 8) & 0xFF, keys & 0xFF], axis=-1).astype(
        np.uint8
    )


@dataclass(frozen=True)
class ColorSamples:
    """Distinct colors of an image with their occurrence counts.

    Attributes:
        colors: (n, 3) uint8 array, sorted by RGB key
        counts: (n,) int64 occurrence counts, all positive
        total_pixels: Number of pixels that were counted
    """

    colors: np.ndarray
    counts: np.ndarray
    total_pixels: int

    def __len__(self) -> int:
        return len(self.counts)

    @property
    def total_weight(self) -> int:
        return int(self.counts.sum())

    def select(self, mask: np.ndarray) -> "ColorSamples":
        """Keep the samples where ``mask`` is True."""
        return ColorSamples(
            colors=self.colors[mask],
            counts=self.counts[mask],
            total_pixels=self.total_pixels,
        )

    @classmethod
    def empty(cls, total_pixels: int = 0) -> "ColorSamples":
        return cls(
            colors=np.zeros((0, 3), dtype=np.uint8),
            counts=np.zeros(0, dtype=np.int64),
            total_pixels=total_pixels,
        )


@dataclass(frozen=True)
class Cluster:
    """A representative color and the summed weight of its members."""

    color: RGB
    weight: int

    @property
    def key(self) -> int:
        r, g, b = self.color
        return (r << 16) | (g << 8) | b


@dataclass(frozen=True)
class PaletteEntry:
    """One dominant color of an image.

    Attributes:
        color: RGB triple in [0, 255]
        weight: Number of (downsampled) pixels attributed to the color
        fraction: Share of the weight of all non-excluded pixels
    """

    color: RGB
    weight: int
    fraction: float = 0.0

    @property
    def hex(self) -> str:
        return rgb_to_hex(self.color)

    @property
    def lab(self) -> Tuple[float, float, float]:
        L, a, b = rgb_to_lab(np.array(self.color, dtype=np.float64))
        return (float(L), float(a), float(b))

    @property
    def complementary(self) -> RGB:
        """The RGB complement, useful for captions drawn over the swatch."""
        r, g, b = self.color
        return (255 - r, 255 - g, 255 - b)

    def to_dict(self) -> Dict:
        data = asdict(self)
        data["color"] = list(self.color)
        data["hex"] = self.hex
        return data


def entries_from_clusters(clusters: List[Cluster]) -> List[PaletteEntry]:
    """Wrap clusters as palette entries with their weight fractions."""
    total = sum(cluster.weight for cluster in clusters)
    return [
        PaletteEntry(
            color=cluster.color,
            weight=cluster.weight,
            fraction=cluster.weight / total if total else 0.0,
        )
        for cluster in clusters
    ]
