"""GIF recompression command."""

from pathlib import Path

import click

from ..config import DEFAULT_COMPRESSION_CONFIG
from ..error_handling import GifPressError
from ..validation import available_presets, build_options
from .utils import (
    configure_logging,
    display_path_info,
    format_bytes,
    handle_generic_error,
    handle_keyboard_interrupt,
)

_config = DEFAULT_COMPRESSION_CONFIG


@click.command()
@click.argument(
    "input_path", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.argument("output_path", type=click.Path(dir_okay=False, path_type=Path))
@click.option(
    "--colors",
    "-c",
    type=click.IntRange(*_config.COLOR_COUNT_RANGE),
    default=_config.DEFAULT_COLOR_COUNT,
    show_default=True,
    help="Maximum palette size per frame",
)
@click.option(
    "--resize",
    "-r",
    type=click.IntRange(*_config.RESIZE_PERCENT_RANGE),
    default=_config.DEFAULT_RESIZE_PERCENT,
    show_default=True,
    help="Scale to this percentage of the original size",
)
@click.option(
    "--lossy",
    "-l",
    type=click.IntRange(*_config.LOSSY_LEVEL_RANGE),
    default=_config.DEFAULT_LOSSY_LEVEL,
    show_default=True,
    help=f"Lossy level; above {_config.DITHER_LOSSY_THRESHOLD} disables dithering",
)
@click.option(
    "--frame-skip",
    "-s",
    type=click.IntRange(*_config.FRAME_SKIP_RANGE),
    default=_config.DEFAULT_FRAME_SKIP,
    show_default=True,
    help="Frames dropped between kept frames (timing is preserved)",
)
@click.option(
    "--optimize/--no-optimize",
    default=False,
    help="Crop frames to the region that changes between frames",
)
@click.option(
    "--preset",
    "-p",
    type=click.Choice(available_presets()),
    default=None,
    help="Named preset; overrides the individual options",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def compress(
    input_path: Path,
    output_path: Path,
    colors: int,
    resize: int,
    lossy: int,
    frame_skip: int,
    optimize: bool,
    preset: str | None,
    verbose: bool,
) -> None:
    """Recompress an animated GIF.

    INPUT_PATH: GIF file to compress
    OUTPUT_PATH: Where to write the compressed GIF
    """
    configure_logging(verbose)

    try:
        from ..pipeline import compress_gif

        options = build_options(
            color_count=colors,
            resize_percent=resize,
            lossy_level=lossy,
            optimize_frames=optimize,
            frame_skip=frame_skip,
            preset=preset,
        )

        display_path_info("Input", input_path)
        display_path_info("Output", output_path, "💾")
        click.echo(
            "⚙️  Options: "
            + ", ".join(f"{key}={value}" for key, value in options.as_dict().items())
        )

        result = compress_gif(input_path, output_path, options)

        click.echo("\n📊 Results:")
        click.echo(
            f"   • Size: {format_bytes(result.original_bytes)} → "
            f"{format_bytes(result.compressed_bytes)} ({result.saved_percent:.1f}% saved)"
        )
        click.echo(f"   • Frames: {result.original_frames} → {result.compressed_frames}")
        click.echo(
            f"   • Canvas: {result.original_size[0]}x{result.original_size[1]} → "
            f"{result.compressed_size[0]}x{result.compressed_size[1]}"
        )
        click.echo(f"   • Time: {result.render_ms} ms")

    except KeyboardInterrupt:
        handle_keyboard_interrupt("Compression")
    except GifPressError as e:
        handle_generic_error("Compression", e)
