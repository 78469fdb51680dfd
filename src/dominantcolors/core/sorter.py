"""Ordering strategies for the final palette."""

from typing import Callable, Dict, List, Sequence, Tuple

import numpy as np

from ..utils.color import rgb_to_lab
from .options import Sort
from .palette import PaletteEntry


def _lab(entry: PaletteEntry) -> Tuple[float, float, float]:
    L, a, b = rgb_to_lab(np.array(entry.color, dtype=np.float64))
    return float(L), float(a), float(b)


def _tie_break(entry: PaletteEntry) -> Tuple[int, Tuple[int, int, int]]:
    return (-entry.weight, entry.color)


def hue_angle(entry: PaletteEntry) -> float:
    """LAB hue angle of the entry in degrees, in [0, 360)."""
    _, a, b = _lab(entry)
    return float(np.degrees(np.arctan2(b, a)) % 360.0)


def visual_score(entry: PaletteEntry) -> float:
    """Composite score favoring saturated mid-tone colors.

    ``0.6 * saturation + 0.4 * (1 - |L - 50| / 50)`` where saturation is
    ``C / sqrt(C^2 + L^2)``.
    """
    L, a, b = _lab(entry)
    chroma = float(np.hypot(a, b))
    colorfulness = float(np.hypot(chroma, L))
    saturation = chroma / colorfulness if colorfulness > 0 else 0.0
    balance = 1.0 - min(abs(L - 50.0) / 50.0, 1.0)
    return 0.6 * saturation + 0.4 * balance


SORT_KEYS: Dict[Sort, Callable[[PaletteEntry], Tuple]] = {
    Sort.FREQUENCY: lambda entry: _tie_break(entry),
    Sort.DARKNESS: lambda entry: (_lab(entry)[0],) + _tie_break(entry),
    Sort.LIGHTNESS: lambda entry: (-_lab(entry)[0],) + _tie_break(entry),
    Sort.HUE: lambda entry: (hue_angle(entry),) + _tie_break(entry),
    Sort.VISUAL: lambda entry: (-visual_score(entry),) + _tie_break(entry),
}


def sort_palette(entries: Sequence[PaletteEntry], sorting: Sort = Sort.FREQUENCY) -> List[PaletteEntry]:
    """Return ``entries`` ordered by ``sorting``.

    Ties fall back to weight (descending), then RGB (ascending), so the
    order is fully determined by the entries themselves.
    """
    return sorted(entries, key=SORT_KEYS[sorting])
