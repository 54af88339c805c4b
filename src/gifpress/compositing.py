"""Canvas compositing for animated frames.

A canvas is an ``(height, width, 4)`` ``uint8`` RGBA array holding what a
viewer would currently display. Functions here never modify their inputs;
each returns a fresh array so a canvas can be threaded through a fold.
"""

import numpy as np

from .model import AnimatedImage, DisposalMethod, Frame


def blank_canvas(width: int, height: int) -> np.ndarray:
    """A fully transparent canvas."""
    return np.zeros((height, width, 4), dtype=np.uint8)


def source_over(dst: np.ndarray, src: np.ndarray) -> np.ndarray:
    """Composite ``src`` over ``dst`` (both straight-alpha RGBA, same shape).

    Opaque source pixels replace the destination and transparent ones leave
    it untouched, exactly; partial alpha is blended and rounded.
    """
    src_alpha = src[..., 3]
    out = dst.copy()

    opaque = src_alpha == 255
    out[opaque] = src[opaque]

    partial = (src_alpha > 0) & ~opaque
    if partial.any():
        s = src[partial].astype(np.float64)
        d = dst[partial].astype(np.float64)
        sa = s[:, 3:4] / 255.0
        da = d[:, 3:4] / 255.0
        out_a = sa + da * (1.0 - sa)
        out_rgb = (s[:, :3] * sa + d[:, :3] * da * (1.0 - sa)) / out_a
        blended = np.concatenate([out_rgb, out_a * 255.0], axis=1)
        out[partial] = np.clip(np.rint(blended), 0, 255).astype(np.uint8)

    return out


def paint_over(canvas: np.ndarray, frame: Frame) -> np.ndarray:
    """Return ``canvas`` with ``frame`` composited at its bounds."""
    rows, cols = frame.bounds.slices()
    out = canvas.copy()
    out[rows, cols] = source_over(canvas[rows, cols], frame.to_rgba())
    return out


def dispose(before: np.ndarray, displayed: np.ndarray, frame: Frame) -> np.ndarray:
    """Apply ``frame``'s disposal to the displayed canvas.

    Args:
        before: Canvas as it was before ``frame`` was drawn
        displayed: Canvas with ``frame`` drawn
        frame: The frame whose disposal method applies

    Returns:
        The canvas the next frame is drawn onto
    """
    if frame.disposal == DisposalMethod.RESTORE_BACKGROUND:
        rows, cols = frame.bounds.slices()
        out = displayed.copy()
        out[rows, cols] = 0
        return out
    if frame.disposal == DisposalMethod.RESTORE_PREVIOUS:
        return before
    return displayed


def advance(canvas: np.ndarray, frame: Frame) -> tuple[np.ndarray, np.ndarray]:
    """Draw ``frame`` and dispose it.

    Returns:
        ``(displayed, next_canvas)``
    """
    displayed = paint_over(canvas, frame)
    return displayed, dispose(canvas, displayed, frame)


def render_frames(image: AnimatedImage) -> list[np.ndarray]:
    """Full-canvas RGBA rendering of every frame as a viewer would show it."""
    canvas = blank_canvas(image.width, image.height)
    rendered = []
    for frame in image.frames:
        displayed, canvas = advance(canvas, frame)
        rendered.append(displayed)
    return rendered
