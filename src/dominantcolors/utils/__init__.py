"""Utility modules for dominantcolors."""

from .color import ColorConverter, hex_to_rgb, rgb_to_hex
from .config import ConfigManager, ExtractionSettings
from .logging import PerformanceLogger, setup_logging

__all__ = [
    "ColorConverter",
    "ConfigManager",
    "ExtractionSettings",
    "PerformanceLogger",
    "hex_to_rgb",
    "rgb_to_hex",
    "setup_logging",
]
