"""Uniform downscaling of an animation.

The canvas and every frame rectangle are scaled by the same factor. Frame
pixels are expanded to RGBA, resampled with Pillow's bicubic filter and
dithered back onto the frame's own palette, so palette sizes never change.
"""

import logging

import numpy as np
from PIL import Image

from .dither import floyd_steinberg
from .model import AnimatedImage, Frame, FrameBounds

logger = logging.getLogger(__name__)


def scale_length(value: int, scale: float, minimum: int = 1) -> int:
    """Scale a length, rounding half up and clamping to ``minimum``."""
    return max(minimum, int(value * scale + 0.5))


def scale_bounds(
    bounds: FrameBounds, scale: float, canvas_width: int, canvas_height: int
) -> FrameBounds:
    """Scale a frame rectangle and keep it inside the scaled canvas.

    Offsets and sizes are scaled independently; sizes are at least 1. When
    rounding pushes the rectangle past the canvas edge, the offset is pulled
    back first and the size is trimmed only if it is wider than the canvas.
    """
    width = min(scale_length(bounds.width, scale), canvas_width)
    height = min(scale_length(bounds.height, scale), canvas_height)
    x = min(scale_length(bounds.x, scale, minimum=0), canvas_width - width)
    y = min(scale_length(bounds.y, scale, minimum=0), canvas_height - height)
    return FrameBounds(x=x, y=y, width=width, height=height)


def resample_frame(frame: Frame, bounds: FrameBounds) -> Frame:
    """Resample ``frame`` to the size of ``bounds`` and re-quantize it.

    Pillow resizes RGBA in premultiplied form, so transparent pixels do not
    bleed color into their neighbours.
    """
    source = Image.fromarray(frame.to_rgba())
    resized = source.resize((bounds.width, bounds.height), Image.Resampling.BICUBIC)
    rgba = np.asarray(resized, dtype=np.uint8)

    pixels = floyd_steinberg(rgba, frame.palette_array())
    return frame.with_changes(pixels=pixels, bounds=bounds)


def resize_image(image: AnimatedImage, percent: int) -> AnimatedImage:
    """Scale the canvas and all frames to ``percent`` of their size.

    ``percent`` of 100 or more, or 0 or less, returns ``image`` unchanged.
    """
    if percent >= 100 or percent <= 0:
        return image

    scale = percent / 100.0
    width = scale_length(image.width, scale)
    height = scale_length(image.height, scale)

    frames = [
        resample_frame(frame, scale_bounds(frame.bounds, scale, width, height))
        for frame in image.frames
    ]

    logger.debug(
        f"Resized {image.width}x{image.height} -> {width}x{height} "
        f"({percent}%, {len(frames)} frames)"
    )

    return image.with_frames(frames, width=width, height=height)
