"""Shared utilities for CLI commands."""

import os
import sys
from pathlib import Path

import click

from ..io import setup_logging


def handle_generic_error(command_name: str, error: Exception) -> None:
    """Handle command errors with consistent formatting."""
    click.echo(f"❌ {command_name} failed: {error}", err=True)
    sys.exit(1)


def handle_keyboard_interrupt(command_name: str) -> None:
    """Handle keyboard interrupt with consistent formatting."""
    click.echo(f"\n⏹️  {command_name} interrupted by user", err=True)
    sys.exit(1)


def configure_logging(verbose: bool, log_dir: Path | None = None) -> None:
    """Configure logging from ``--verbose`` and ``GIFPRESS_LOG_LEVEL``."""
    level = "DEBUG" if verbose else os.getenv("GIFPRESS_LOG_LEVEL", "WARNING")
    setup_logging(log_dir, level)


def format_bytes(size: int) -> str:
    """Human-readable byte count."""
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.2f} MB"


def display_path_info(label: str, path: Path, emoji: str = "📁") -> None:
    """Display path information with consistent formatting."""
    click.echo(f"{emoji} {label}: {path}")
