#!/usr/bin/env python3
"""Basic usage example for dominantcolors."""

import subprocess
import sys
from pathlib import Path

import numpy as np
from PIL import Image

from dominantcolors import (
    DeltaEFormula,
    DominantColors,
    ExtractionConfig,
    Options,
    Quality,
    Sort,
    average_colors,
)


def make_sample_image(path: Path) -> Path:
    """Write a small striped test image with a white border."""
    pixels = np.full((120, 180, 3), 255, dtype=np.uint8)
    pixels[10:110, 10:70] = (220, 40, 40)
    pixels[10:110, 70:130] = (40, 120, 220)
    pixels[10:110, 130:170] = (250, 200, 30)
    Image.fromarray(pixels).save(path)
    return path


def run_library_example(image_path: Path):
    """Extract a palette through the Python API."""
    config = ExtractionConfig(
        quality=Quality.HIGH,
        formula=DeltaEFormula.CIEDE2000,
        max_count=5,
        options={Options.EXCLUDE_WHITE},
        sorting=Sort.HUE,
    )
    palette = DominantColors(config).extract(Image.open(image_path))

    print("Dominant colors (white excluded, hue order):")
    for entry in palette:
        print(f"  {entry.hex}  {entry.fraction:6.1%}  {entry.weight} px")

    print("Strip averages:")
    for entry in average_colors(Image.open(image_path), count=3):
        print(f"  {entry.hex}")


def run_cli_example(image_path: Path):
    """Run the same extraction through the command line."""
    cmd = [
        "dominantcolors", "extract", str(image_path),
        "--quality", "high",
        "--max-count", "5",
        "--exclude-white",
        "--sort", "hue",
        "--output", str(image_path.with_suffix(".json")),
    ]

    print(f"Command: {' '.join(cmd)}")
    try:
        subprocess.run(cmd, check=True)
    except FileNotFoundError:
        print("dominantcolors is not installed. Run: pip install -e .")
        sys.exit(1)


if __name__ == "__main__":
    image = make_sample_image(Path("sample_stripes.png"))
    run_library_example(image)
    run_cli_example(image)
