"""Frame reduction for animated GIFs.

Frames are dropped at a fixed stride: with a skip factor ``k`` every
``(k + 1)``-th frame is kept, starting with the first. The last frame is
always kept so an animation never loses its resting frame.

Timing is preserved exactly: a kept frame absorbs the delays of the frames
dropped immediately before it, so the total duration does not change.

Example:
    10 frames of 50cs with ``k = 1`` keep indices 0, 2, 4, 6, 8, 9 with
    delays 50, 100, 100, 100, 100, 50 (500cs in total).
"""

import logging

from .model import AnimatedImage

logger = logging.getLogger(__name__)


def calculate_kept_indices(total_frames: int, frame_skip: int) -> list[int]:
    """Calculate which frame indices survive a skip factor.

    Args:
        total_frames: Total number of frames in the animation
        frame_skip: Number of frames dropped between kept frames

    Returns:
        Sorted list of kept frame indices (0-based)

    Raises:
        ValueError: If total_frames is not positive or frame_skip is negative
    """
    if total_frames <= 0:
        raise ValueError(f"total_frames must be positive, got {total_frames}")
    if frame_skip < 0:
        raise ValueError(f"frame_skip must be non-negative, got {frame_skip}")

    stride = frame_skip + 1
    last = total_frames - 1
    return [i for i in range(total_frames) if i % stride == 0 or i == last]


def accumulate_skipped_delays(delays: list[int], kept_indices: list[int]) -> list[int]:
    """Fold the delays of dropped frames into the next kept frame.

    Each kept frame's delay is its own delay plus the delays of every frame
    dropped since the previous kept frame.

    Args:
        delays: Original per-frame delays
        kept_indices: Sorted indices that will be kept; must include the last index

    Returns:
        Delays for the kept frames, in order

    Example:
        delays [50, 50, 50, 50], kept [0, 2, 3] -> [50, 100, 50]
    """
    kept = set(kept_indices)
    adjusted = []
    accumulated = 0

    for index, delay in enumerate(delays):
        accumulated += delay
        if index in kept:
            adjusted.append(accumulated)
            accumulated = 0

    return adjusted


def skip_frames(image: AnimatedImage, frame_skip: int) -> AnimatedImage:
    """Drop frames at a fixed stride, preserving total duration.

    Disposal methods come from the kept frames; those of dropped frames are
    discarded. A skip factor of 0 or a single-frame image is returned as is.
    """
    if frame_skip <= 0 or image.frame_count <= 1:
        return image

    kept_indices = calculate_kept_indices(image.frame_count, frame_skip)
    delays = accumulate_skipped_delays(image.delays, kept_indices)

    frames = [
        image.frames[index].with_changes(delay_cs=delay)
        for index, delay in zip(kept_indices, delays)
    ]

    logger.debug(
        f"Frame skip {frame_skip}: kept {len(frames)}/{image.frame_count} frames "
        f"({image.total_delay_cs}cs total)"
    )

    return image.with_frames(frames)
