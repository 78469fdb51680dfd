"""Extraction settings: quality tiers, formulas, flags and the config object."""

import math
import numbers
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import FrozenSet, Iterable, Optional, Type, TypeVar, Union

from .errors import ConfigurationError

E = TypeVar("E", bound=Enum)


class Quality(str, Enum):
    """Downsampling preset; lower tiers analyze fewer pixels.

    Iterative clustering scales with the square of the distinct color count,
    which the pixel budget caps. FAST and FAIR stay interactive even on noise
    (FAIR: at most 10k distinct colors, seconds on a CPU). HIGH allows
    ten times as many colors and can take minutes on noisy photos; BEST on a
    large photo can take hours. Prefer ``Algorithm.KMEANS`` there.
    """

    FAST = "fast"
    FAIR = "fair"
    HIGH = "high"
    BEST = "best"

    @property
    def pixel_budget(self) -> Optional[int]:
        """Maximum number of pixels analyzed, or None for native resolution."""
        return _PIXEL_BUDGETS[self]


_PIXEL_BUDGETS = {
    Quality.FAST: 1_000,
    Quality.FAIR: 10_000,
    Quality.HIGH: 100_000,
    Quality.BEST: None,
}


class DeltaEFormula(str, Enum):
    """Perceptual color difference formula."""

    CIE76 = "cie76"
    CIE94 = "cie94"
    CIEDE2000 = "ciede2000"


class Options(str, Enum):
    """Exclusion flags applied before clustering."""

    EXCLUDE_BLACK = "exclude_black"
    EXCLUDE_WHITE = "exclude_white"
    EXCLUDE_GRAY = "exclude_gray"


class Sort(str, Enum):
    """Ordering of the final palette."""

    FREQUENCY = "frequency"
    DARKNESS = "darkness"
    LIGHTNESS = "lightness"
    HUE = "hue"
    VISUAL = "visual"


class Algorithm(str, Enum):
    """Clustering algorithm used to reduce samples to a palette."""

    ITERATIVE = "iterative"
    KMEANS = "kmeans"


def coerce_enum(enum_cls: Type[E], value: Union[E, str], name: str) -> E:
    """Convert a name or value to a member of ``enum_cls``.

    Raises:
        ConfigurationError: If the value does not name a member
    """
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        key = value.strip().lower().replace("-", "_")
        for member in enum_cls:
            if key in (member.value, member.name.lower()):
                return member
    choices = ", ".join(member.value for member in enum_cls)
    raise ConfigurationError(f"Unknown {name}: {value!r}. Available: {choices}")


@dataclass(frozen=True)
class ExtractionConfig:
    """Configuration for dominant color extraction.

    Attributes:
        quality: Downsampling tier
        formula: Distance formula used by clustering and deduplication
        max_count: Maximum number of palette entries
        options: Exclusion flags
        merge_threshold: Entries closer than this (in formula units) merge
        sorting: Order of the returned palette
        algorithm: Clustering algorithm
        time: Log per-stage durations
    """

    quality: Quality = Quality.FAIR
    formula: DeltaEFormula = DeltaEFormula.CIEDE2000
    max_count: int = 8
    options: FrozenSet[Options] = field(default_factory=frozenset)
    merge_threshold: float = 10.0
    sorting: Sort = Sort.FREQUENCY
    algorithm: Algorithm = Algorithm.ITERATIVE
    time: bool = False

    def __post_init__(self):
        """Normalize enum fields and validate numeric bounds."""
        object.__setattr__(self, "quality", coerce_enum(Quality, self.quality, "quality"))
        object.__setattr__(self, "formula", coerce_enum(DeltaEFormula, self.formula, "formula"))
        object.__setattr__(self, "sorting", coerce_enum(Sort, self.sorting, "sorting"))
        object.__setattr__(
            self, "algorithm", coerce_enum(Algorithm, self.algorithm, "algorithm")
        )
        object.__setattr__(self, "options", _coerce_options(self.options))

        if isinstance(self.max_count, bool) or not isinstance(self.max_count, numbers.Integral):
            raise ConfigurationError(
                f"max_count must be an integer, got {self.max_count!r}"
            )
        object.__setattr__(self, "max_count", int(self.max_count))
        if self.max_count <= 0:
            raise ConfigurationError(f"max_count must be positive, got {self.max_count}")

        try:
            threshold = float(self.merge_threshold)
        except (TypeError, ValueError):
            raise ConfigurationError(
                f"merge_threshold must be a number, got {self.merge_threshold!r}"
            )
        if not math.isfinite(threshold) or threshold < 0:
            raise ConfigurationError(
                f"merge_threshold must be a non-negative number, got {self.merge_threshold}"
            )
        object.__setattr__(self, "merge_threshold", threshold)

    @property
    def exclude_black(self) -> bool:
        return Options.EXCLUDE_BLACK in self.options

    @property
    def exclude_white(self) -> bool:
        return Options.EXCLUDE_WHITE in self.options

    @property
    def exclude_gray(self) -> bool:
        return Options.EXCLUDE_GRAY in self.options

    def with_overrides(self, **overrides) -> "ExtractionConfig":
        """Return a copy with the given fields replaced."""
        unknown = set(overrides) - set(self.__dataclass_fields__)
        if unknown:
            raise ConfigurationError(f"Unknown configuration fields: {sorted(unknown)}")
        return replace(self, **overrides)


def _coerce_options(options: Optional[Iterable]) -> FrozenSet[Options]:
    if options is None:
        return frozenset()
    if isinstance(options, (str, Options)):
        options = [options]
    return frozenset(coerce_enum(Options, option, "option") for option in options)
