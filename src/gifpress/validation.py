"""Caller-boundary validation for gifpress.

Everything in this module runs *before* the pipeline: it turns raw user
input (form values, CLI strings, paths, decoded sizes) into values the core
accepts. The core itself never clamps; it rejects.
"""

import logging
import os
from dataclasses import replace
from pathlib import Path

from .config import (
    DEFAULT_COMPRESSION_CONFIG,
    DEFAULT_RESOURCE_LIMITS,
    CompressionConfig,
    CompressionOptions,
    ResourceLimits,
)
from .error_handling import ValidationError, log_warning_with_context
from .model import AnimatedImage

logger = logging.getLogger(__name__)


def parse_int_with_default(value: str | int | None, default: int, low: int, high: int) -> int:
    """Parse an integer, falling back to ``default`` when missing or out of range.

    Args:
        value: Raw value (string from a form or CLI, an int, or None)
        default: Value used when ``value`` is empty, unparsable or out of range
        low: Inclusive lower bound
        high: Inclusive upper bound

    Returns:
        The parsed integer or ``default``
    """
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return default
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    if parsed < low or parsed > high:
        return default
    return parsed


def build_options(
    color_count: str | int | None = None,
    resize_percent: str | int | None = None,
    lossy_level: str | int | None = None,
    optimize_frames: str | bool | None = None,
    frame_skip: str | int | None = None,
    preset: str | None = None,
    config: CompressionConfig = DEFAULT_COMPRESSION_CONFIG,
) -> CompressionOptions:
    """Build ``CompressionOptions`` from loosely typed caller input.

    Invalid numeric values fall back to their defaults. ``optimize_frames`` is
    enabled only by ``True`` or the string ``"true"``. A named ``preset``
    overrides every individual value.
    """
    options = CompressionOptions(
        color_count=parse_int_with_default(
            color_count, config.DEFAULT_COLOR_COUNT, *config.COLOR_COUNT_RANGE
        ),
        resize_percent=parse_int_with_default(
            resize_percent, config.DEFAULT_RESIZE_PERCENT, *config.RESIZE_PERCENT_RANGE
        ),
        lossy_level=parse_int_with_default(
            lossy_level, config.DEFAULT_LOSSY_LEVEL, *config.LOSSY_LEVEL_RANGE
        ),
        optimize_frames=optimize_frames is True or optimize_frames == "true",
        frame_skip=parse_int_with_default(
            frame_skip, config.DEFAULT_FRAME_SKIP, *config.FRAME_SKIP_RANGE
        ),
    )

    if preset:
        options = apply_preset(preset, options, config)

    return options


def apply_preset(
    preset: str,
    options: CompressionOptions,
    config: CompressionConfig = DEFAULT_COMPRESSION_CONFIG,
) -> CompressionOptions:
    """Return ``options`` with a named preset applied.

    Unknown preset names leave the options unchanged.
    """
    values = (config.PRESETS or {}).get(preset)
    if values is None:
        log_warning_with_context(
            f"Unknown compression preset '{preset}', keeping explicit options",
            context={"available": ", ".join(sorted(config.PRESETS or {}))},
            logger=logger,
        )
        return options
    return replace(options, **values)


def available_presets(config: CompressionConfig = DEFAULT_COMPRESSION_CONFIG) -> list[str]:
    """Names of the configured presets, in declaration order."""
    return list(config.PRESETS or {})


def validate_path_security(path: str | Path) -> Path:
    """Validate path for security concerns.

    Raises:
        ValidationError: If path is empty, contains null bytes or traversal
    """
    if not path:
        raise ValidationError("Path cannot be empty")

    path_str = str(path)
    if "\x00" in path_str:
        raise ValidationError(f"Path contains null bytes: {path_str!r}")

    path_obj = Path(path)
    if ".." in path_obj.parts:
        raise ValidationError(f"Path contains directory traversal: {path_str}")

    if len(path_str) > 4096:
        raise ValidationError(f"Path too long ({len(path_str)} chars): {path_str[:100]}...")

    return path_obj


def validate_file_extension(path: str | Path, expected_extensions: list[str]) -> Path:
    """Validate file has expected extension.

    Raises:
        ValidationError: If file extension is not allowed
    """
    path_obj = Path(path)

    normalized_exts = []
    for ext in expected_extensions:
        if not ext.startswith("."):
            ext = "." + ext
        normalized_exts.append(ext.lower())

    file_ext = path_obj.suffix.lower()
    if file_ext not in normalized_exts:
        raise ValidationError(
            f"Invalid file extension: {file_ext or '(none)'} (expected: {normalized_exts})"
        )

    return path_obj


def validate_input_gif(
    path: str | Path, limits: ResourceLimits = DEFAULT_RESOURCE_LIMITS
) -> Path:
    """Validate an input GIF path before it is read.

    Raises:
        ValidationError: If the file is missing, not a .gif, unreadable or too large
    """
    path_obj = validate_path_security(path)
    validate_file_extension(path_obj, ["gif"])

    if not path_obj.is_file():
        raise ValidationError(f"Input file does not exist: {path_obj}")
    if not os.access(path_obj, os.R_OK):
        raise ValidationError(f"Input file is not readable: {path_obj}")

    size_mb = path_obj.stat().st_size / (1024 * 1024)
    if size_mb > limits.MAX_INPUT_MB:
        raise ValidationError(
            f"Input file too large: {size_mb:.1f} MB (max: {limits.MAX_INPUT_MB} MB)"
        )

    return path_obj


def validate_output_path(path: str | Path, create_parent: bool = True) -> Path:
    """Validate output path for writing.

    Raises:
        ValidationError: If path is invalid or not writable
    """
    path_obj = validate_path_security(path)

    parent = path_obj.parent
    if not parent.exists():
        if create_parent:
            try:
                parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise ValidationError(f"Cannot create parent directory {parent}: {e}", cause=e)
        else:
            raise ValidationError(f"Parent directory does not exist: {parent}")

    if not os.access(parent, os.W_OK):
        raise ValidationError(f"Parent directory is not writable: {parent}")

    if path_obj.exists() and not os.access(path_obj, os.W_OK):
        raise ValidationError(f"Output file is not writable: {path_obj}")

    return path_obj


def check_resource_limits(
    image: AnimatedImage, limits: ResourceLimits = DEFAULT_RESOURCE_LIMITS
) -> None:
    """Reject decoded images whose size would make the pipeline too expensive.

    Raises:
        ValidationError: If the canvas or frame count exceeds ``limits``
    """
    canvas_pixels = image.width * image.height
    if canvas_pixels > limits.MAX_CANVAS_PIXELS:
        raise ValidationError(
            f"Canvas {image.width}x{image.height} exceeds {limits.MAX_CANVAS_PIXELS} pixels",
            context={"width": image.width, "height": image.height},
        )
    if image.frame_count > limits.MAX_FRAMES:
        raise ValidationError(
            f"Animation has {image.frame_count} frames (max: {limits.MAX_FRAMES})",
            context={"frames": image.frame_count},
        )
