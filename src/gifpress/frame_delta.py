"""Temporal delta optimization.

Every frame after the first is cropped to the smallest rectangle that
actually changes what is on screen. A running canvas holds the displayed
image; it is threaded through a fold over the frames as an explicit
accumulator. For each frame:

- if none of its pixels differ from the canvas, a 1x1 transparent
  placeholder is emitted at the frame's offset;
- otherwise the frame is cropped to the bounding box of differing pixels
  (pixels are copied as-is, the palette is unchanged);
- either way the *original* frame is drawn onto the canvas and its disposal
  applied, so the canvas always matches what a viewer shows.

Frames that restore the background on disposal are emitted uncropped:
clearing a cropped rectangle would erase less than the original frame does.
"""

import logging
from functools import reduce
from typing import NamedTuple

import numpy as np

from .compositing import advance, blank_canvas
from .model import MAX_PALETTE_SIZE, TRANSPARENT, AnimatedImage, DisposalMethod, Frame, FrameBounds

logger = logging.getLogger(__name__)


class _DeltaState(NamedTuple):
    canvas: np.ndarray
    frames: tuple[Frame, ...]


def find_changed_region(frame: Frame, canvas: np.ndarray) -> FrameBounds | None:
    """Bounding box (in canvas coordinates) of pixels that differ from ``canvas``.

    Returns:
        The tight rectangle around every differing pixel, or None if the
        frame matches the canvas everywhere
    """
    rows, cols = frame.bounds.slices()
    changed = np.any(frame.to_rgba() != canvas[rows, cols], axis=2)
    if not changed.any():
        return None

    changed_rows = np.flatnonzero(changed.any(axis=1))
    changed_cols = np.flatnonzero(changed.any(axis=0))
    top, bottom = int(changed_rows[0]), int(changed_rows[-1])
    left, right = int(changed_cols[0]), int(changed_cols[-1])

    return FrameBounds(
        x=frame.bounds.x + left,
        y=frame.bounds.y + top,
        width=right - left + 1,
        height=bottom - top + 1,
    )


def crop_frame(frame: Frame, region: FrameBounds) -> Frame:
    """Copy the pixels of ``frame`` inside ``region`` into a new frame."""
    top = region.y - frame.bounds.y
    left = region.x - frame.bounds.x
    pixels = frame.pixels[top : top + region.height, left : left + region.width].copy()
    return frame.with_changes(pixels=pixels, bounds=region)


def make_placeholder(frame: Frame) -> Frame:
    """A 1x1 frame at ``frame``'s offset that leaves the display unchanged.

    The pixel is the palette's transparent entry; if there is none, one is
    appended when the palette has room. A full palette without transparency
    falls back to the frame's own top-left pixel, which equals the canvas
    there because the frame had no changes.
    """
    bounds = FrameBounds(x=frame.bounds.x, y=frame.bounds.y, width=1, height=1)
    palette = frame.palette
    index = frame.transparent_index()

    if index is None and len(palette) < MAX_PALETTE_SIZE:
        palette = palette + (TRANSPARENT,)
        index = len(palette) - 1
    elif index is None:
        index = int(frame.pixels[0, 0])

    return frame.with_changes(
        pixels=np.full((1, 1), index, dtype=np.uint8), palette=palette, bounds=bounds
    )


def _delta_step(state: _DeltaState, frame: Frame) -> _DeltaState:
    if frame.disposal == DisposalMethod.RESTORE_BACKGROUND:
        emitted = frame
    else:
        region = find_changed_region(frame, state.canvas)
        emitted = make_placeholder(frame) if region is None else crop_frame(frame, region)

    _, canvas = advance(state.canvas, frame)
    return _DeltaState(canvas=canvas, frames=state.frames + (emitted,))


def optimize_frames(image: AnimatedImage) -> AnimatedImage:
    """Crop every frame after the first to its visible change.

    Single-frame images are returned unchanged.
    """
    if image.frame_count <= 1:
        return image

    first = image.frames[0]
    _, canvas = advance(blank_canvas(image.width, image.height), first)

    result = reduce(_delta_step, image.frames[1:], _DeltaState(canvas=canvas, frames=(first,)))

    before = sum(frame.width * frame.height for frame in image.frames)
    after = sum(frame.width * frame.height for frame in result.frames)
    logger.debug(
        f"Delta optimization: {before} -> {after} frame pixels across {image.frame_count} frames"
    )

    return image.with_frames(result.frames)
