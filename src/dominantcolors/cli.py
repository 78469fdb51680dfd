"""Command-line interface for dominantcolors."""

import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import click
import rich.traceback
from rich.console import Console
from rich.table import Table
from rich.text import Text

from . import __version__
from .core.extractor import DominantColors, average_colors
from .core.options import Algorithm, DeltaEFormula, Options, Quality, Sort
from .core.palette import PaletteEntry
from .image.processor import ImageProcessor
from .utils.color import rgb_to_hex
from .utils.config import ConfigManager
from .utils.logging import setup_logging

# Rich console setup
console = Console()
rich.traceback.install(console=console)

logger = logging.getLogger(__name__)


def _choice(enum_cls) -> click.Choice:
    return click.Choice([member.value for member in enum_cls], case_sensitive=False)


def _palette_table(title: str, palette: List[PaletteEntry]) -> Table:
    table = Table(title=title)
    table.add_column("#", justify="right")
    table.add_column("Swatch")
    table.add_column("Hex")
    table.add_column("RGB")
    table.add_column("Pixels", justify="right")
    table.add_column("Share", justify="right")

    for index, entry in enumerate(palette, start=1):
        swatch = Text(
            f" {entry.hex} ",
            style=f"{rgb_to_hex(entry.complementary)} on {entry.hex}",
        )
        table.add_row(
            str(index),
            swatch,
            entry.hex,
            ", ".join(str(c) for c in entry.color),
            str(entry.weight),
            f"{entry.fraction:.1%}",
        )
    return table


def _emit(ctx, title: str, palette: List[PaletteEntry], output: Optional[str], extra: dict) -> None:
    result = dict(extra)
    result["palette"] = [entry.to_dict() for entry in palette]

    if output:
        output_path = Path(output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w") as f:
            json.dump(result, f, indent=2)

    if ctx.obj["quiet"]:
        return
    if ctx.obj["config_manager"].get("output.format") == "json":
        click.echo(json.dumps(result, indent=2))
    elif palette:
        console.print(_palette_table(title, palette))
    else:
        click.echo("No colors found (image is empty or every pixel was excluded)")

    if output:
        click.echo(f"Palette saved to {output}")


@click.group()
@click.version_option(__version__, prog_name="dominantcolors")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option("--quiet", "-q", is_flag=True, help="Suppress output")
@click.option(
    "--config", type=click.Path(exists=True), help="Path to configuration file"
)
@click.pass_context
def cli(ctx, verbose: bool, quiet: bool, config):
    """dominantcolors: extract perceptual dominant color palettes from images."""
    ctx.ensure_object(dict)

    try:
        config_manager = ConfigManager.from_env(config)
        log_level = config_manager.get_log_level()
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    # Setup logging
    if quiet:
        log_level = logging.ERROR
    elif verbose:
        log_level = logging.DEBUG
    setup_logging(
        level=log_level,
        log_file=config_manager.get("logging.file"),
        enable_colors=bool(config_manager.get("logging.colors", True)),
    )

    # Store context
    ctx.obj["config_manager"] = config_manager
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet


@cli.command()
@click.argument("input_image", type=click.Path(exists=True))
@click.option("--max-count", "-n", type=int, help="Maximum number of colors")
@click.option("--quality", type=_choice(Quality), help="Downsampling quality tier")
@click.option("--formula", type=_choice(DeltaEFormula), help="Delta E formula")
@click.option("--algorithm", type=_choice(Algorithm), help="Clustering algorithm")
@click.option("--sort", "sorting", type=_choice(Sort), help="Palette order")
@click.option(
    "--merge-threshold",
    type=float,
    help="Merge colors closer than this Delta E (0 disables merging)",
)
@click.option("--exclude-black/--keep-black", default=None, help="Drop near-black pixels")
@click.option("--exclude-white/--keep-white", default=None, help="Drop near-white pixels")
@click.option("--exclude-gray/--keep-gray", default=None, help="Drop gray pixels")
@click.option("--time", "timed", is_flag=True, help="Log the duration of each stage")
@click.option("--output", "-o", type=click.Path(), help="Write the palette as JSON")
@click.pass_context
def extract(
    ctx,
    input_image,
    max_count,
    quality,
    formula,
    algorithm,
    sorting,
    merge_threshold,
    exclude_black,
    exclude_white,
    exclude_gray,
    timed,
    output,
):
    """Extract the dominant colors of INPUT_IMAGE."""
    try:
        config = ctx.obj["config_manager"].get_extraction_config()

        options = set(config.options)
        for flag, option in (
            (exclude_black, Options.EXCLUDE_BLACK),
            (exclude_white, Options.EXCLUDE_WHITE),
            (exclude_gray, Options.EXCLUDE_GRAY),
        ):
            if flag is True:
                options.add(option)
            elif flag is False:
                options.discard(option)

        overrides = {
            "max_count": max_count,
            "quality": quality,
            "formula": formula,
            "algorithm": algorithm,
            "sorting": sorting,
            "merge_threshold": merge_threshold,
        }
        overrides = {key: value for key, value in overrides.items() if value is not None}
        overrides["options"] = frozenset(options)
        if timed:
            overrides["time"] = True
        config = config.with_overrides(**overrides)

        logger.info(f"Extracting up to {config.max_count} colors from {input_image}")
        image = ImageProcessor().load_image(input_image)
        palette = DominantColors(config).extract(image)

        _emit(
            ctx,
            f"Dominant colors of {Path(input_image).name}",
            palette,
            output,
            {
                "image": str(input_image),
                "size": [image.width, image.height],
                "settings": {
                    "quality": config.quality.value,
                    "formula": config.formula.value,
                    "algorithm": config.algorithm.value,
                    "max_count": config.max_count,
                    "merge_threshold": config.merge_threshold,
                    "sorting": config.sorting.value,
                    "exclude": sorted(option.value for option in config.options),
                },
            },
        )

    except Exception as e:
        logger.error(f"Error during color extraction: {e}", exc_info=ctx.obj["verbose"])
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.argument("input_image", type=click.Path(exists=True))
@click.option("--count", "-n", type=int, default=6, show_default=True, help="Number of strips")
@click.option("--quality", type=_choice(Quality), default=Quality.FAIR.value, show_default=True)
@click.option("--sort", "sorting", type=_choice(Sort), help="Palette order (default: left to right)")
@click.option("--output", "-o", type=click.Path(), help="Write the palette as JSON")
@click.pass_context
def average(ctx, input_image, count, quality, sorting, output):
    """Average colors of COUNT vertical strips of INPUT_IMAGE."""
    try:
        image = ImageProcessor().load_image(input_image)
        palette = average_colors(image, count=count, quality=quality, sorting=sorting)
        _emit(
            ctx,
            f"Average colors of {Path(input_image).name}",
            palette,
            output,
            {"image": str(input_image), "size": [image.width, image.height], "count": count},
        )

    except Exception as e:
        logger.error(f"Error during color averaging: {e}", exc_info=ctx.obj["verbose"])
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command("init-config")
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    default="dominantcolors.yaml",
    show_default=True,
    help="Configuration file to write (.yaml, .yml or .json)",
)
@click.option(
    "--profile",
    type=click.Choice(["preview", "balanced", "accurate"]),
    help="Start from a predefined profile",
)
def init_config(output, profile):
    """Write a configuration file with the default settings."""
    try:
        config_manager = ConfigManager()
        if profile:
            config_manager.apply_profile(profile)
        config_manager.save_config(output)

        logger.info(f"Initialized config file at {output} (profile={profile})")
        click.echo(f"Configuration written to {output}")

    except Exception as e:
        logger.error(f"Error initializing config: {e}", exc_info=True)
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def main():
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
