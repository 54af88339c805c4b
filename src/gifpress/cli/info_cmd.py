"""GIF inspection command."""

from pathlib import Path

import click

from ..error_handling import GifPressError
from .utils import format_bytes, handle_generic_error


def _describe_loop(loop_count: int) -> str:
    if loop_count == 0:
        return "forever"
    if loop_count < 0:
        return "once"
    return f"{loop_count}x"


@click.command()
@click.argument(
    "input_path", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
def info(input_path: Path) -> None:
    """Show canvas, timing and palette details of a GIF.

    INPUT_PATH: GIF file to inspect
    """
    try:
        from ..meta import extract_gif_metadata

        metadata = extract_gif_metadata(input_path)

        click.echo(f"🎞️  {metadata.filename}")
        click.echo(f"   • Size: {format_bytes(int(metadata.kilobytes * 1024))}")
        click.echo(f"   • SHA256: {metadata.gif_sha}")
        click.echo(f"   • Canvas: {metadata.width}x{metadata.height}")
        click.echo(f"   • Frames: {metadata.frames}")
        click.echo(f"   • Duration: {metadata.total_delay_cs * 10} ms ({metadata.fps} fps)")
        click.echo(f"   • Loop: {_describe_loop(metadata.loop_count)}")
        click.echo(f"   • Largest palette: {metadata.max_palette_size} entries")
        click.echo(f"   • Most colors in a frame: {metadata.max_distinct_colors}")

    except GifPressError as e:
        handle_generic_error("Inspection", e)
