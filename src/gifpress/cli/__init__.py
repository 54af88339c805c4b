"""CLI module for gifpress commands.

Commands live in their own modules and are registered on the ``main`` group.
"""

import click

from .. import __version__
from .compress_cmd import compress
from .info_cmd import info


@click.group()
@click.version_option(version=__version__, prog_name="gifpress")
def main() -> None:
    """🎞️ gifpress: animated GIF recompression."""
    pass


main.add_command(compress)
main.add_command(info)

__all__ = [
    "compress",
    "info",
    "main",
]
