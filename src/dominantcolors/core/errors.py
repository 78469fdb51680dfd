"""Error types raised by the dominant color extraction pipeline."""


class DominantColorsError(ValueError):
    """Base class for all extraction errors."""


class InvalidImage(DominantColorsError):
    """The image is missing or has zero width or height."""


class UnsupportedFormat(DominantColorsError):
    """The pixel data cannot be interpreted as RGB or RGBA."""


class ConfigurationError(DominantColorsError):
    """The extraction configuration is invalid."""
