"""Per-frame palette reduction.

Each frame gets a new color table built from the colors it actually shows:

1. Count every pixel's RGBA color (all fully transparent colors count as one).
2. Keep the ``color_count`` most frequent colors, most frequent first. Ties
   keep the order in which the colors first appear (row-major scan), which
   makes the result reproducible.
3. If the original palette had a transparent entry, none survived, and there
   is room, append one.
4. Re-render the frame onto the new palette: nearest-color for high lossy
   levels (faster, more banding), Floyd-Steinberg otherwise.

The stage always runs, even when the palette would come out the same, since
it also normalizes and deduplicates palettes before frames are compared by
the delta optimizer.
"""

import logging
from collections import Counter

import numpy as np

from .config import DEFAULT_COMPRESSION_CONFIG, CompressionConfig
from .dither import remap_to_palette
from .error_handling import InvalidOptionsError
from .model import RGBA, TRANSPARENT, AnimatedImage, Frame

logger = logging.getLogger(__name__)


def validate_color_count(
    color_count: int, config: CompressionConfig = DEFAULT_COMPRESSION_CONFIG
) -> None:
    """Validate that the color count is supported.

    Raises:
        InvalidOptionsError: If color count is not an integer in range
    """
    low, high = config.COLOR_COUNT_RANGE
    if not isinstance(color_count, int) or isinstance(color_count, bool):
        raise InvalidOptionsError(f"Color count must be an integer, got {color_count!r}")
    if not low <= color_count <= high:
        raise InvalidOptionsError(
            f"Color count must be between {low} and {high}, got {color_count}"
        )


def _pack(rgba: np.ndarray) -> np.ndarray:
    flat = rgba.reshape(-1, 4).astype(np.uint32)
    return (flat[:, 0] << 24) | (flat[:, 1] << 16) | (flat[:, 2] << 8) | flat[:, 3]


def _unpack(key: int) -> RGBA:
    return ((key >> 24) & 0xFF, (key >> 16) & 0xFF, (key >> 8) & 0xFF, key & 0xFF)


def count_frame_colors(frame: Frame) -> list[tuple[RGBA, int]]:
    """Count the colors a frame displays.

    Returns:
        ``(color, count)`` pairs, most frequent first, ties in first-seen order
    """
    color_counts = Counter(_pack(frame.to_rgba()).tolist())
    # most_common sorts stably, so equal counts keep insertion (first-seen) order
    return [(_unpack(key), count) for key, count in color_counts.most_common()]


def build_palette(frame: Frame, color_count: int) -> tuple[RGBA, ...]:
    """Select a palette of at most ``color_count`` entries for ``frame``."""
    ranked = count_frame_colors(frame)
    palette = [color for color, _ in ranked[:color_count]]

    has_transparent = any(color[3] == 0 for color in palette)
    had_transparent = frame.transparent_index() is not None
    if not has_transparent and had_transparent and len(palette) < color_count:
        palette.append(TRANSPARENT)

    return tuple(palette)


def quantize_frame(
    frame: Frame,
    color_count: int,
    lossy_level: int = 0,
    config: CompressionConfig = DEFAULT_COMPRESSION_CONFIG,
) -> Frame:
    """Rebuild ``frame``'s palette and re-render its pixels into it."""
    palette = build_palette(frame, color_count)
    dither = lossy_level <= config.DITHER_LOSSY_THRESHOLD

    pixels = remap_to_palette(
        frame.to_rgba(), np.array(palette, dtype=np.uint8).reshape(-1, 4), dither=dither
    )
    return frame.with_changes(pixels=pixels, palette=palette)


def reduce_colors(
    image: AnimatedImage,
    color_count: int,
    lossy_level: int = 0,
    config: CompressionConfig = DEFAULT_COMPRESSION_CONFIG,
) -> AnimatedImage:
    """Reduce every frame's palette to at most ``color_count`` colors.

    Raises:
        InvalidOptionsError: If ``color_count`` is outside the supported range
    """
    validate_color_count(color_count, config)

    frames = [quantize_frame(frame, color_count, lossy_level, config) for frame in image.frames]

    logger.debug(
        f"Palette reduction to {color_count} colors "
        f"({'error diffusion' if lossy_level <= config.DITHER_LOSSY_THRESHOLD else 'nearest color'}): "
        f"palette sizes {[len(frame.palette) for frame in frames]}"
    )

    return image.with_frames(frames)

