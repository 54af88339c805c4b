"""In-memory representation of a decoded animated GIF.

Frames are stored the way the container stores them: a rectangle of palette
indices positioned on the logical canvas, with its own color table, delay and
disposal method. All pipeline stages take an ``AnimatedImage`` and return a
new one; nothing here is mutated after construction.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntEnum

import numpy as np

MAX_PALETTE_SIZE = 256

RGBA = tuple[int, int, int, int]
TRANSPARENT: RGBA = (0, 0, 0, 0)


class DisposalMethod(IntEnum):
    """Frame disposal methods, valued as the GIF graphic control codes."""

    NONE = 0
    DO_NOT_DISPOSE = 1
    RESTORE_BACKGROUND = 2
    RESTORE_PREVIOUS = 3

    @classmethod
    def from_code(cls, code: int | None) -> DisposalMethod:
        """Map a raw disposal code to a member; unknown codes become NONE."""
        try:
            return cls(code)
        except ValueError:
            return cls.NONE


@dataclass(frozen=True)
class FrameBounds:
    """Position and size of a frame rectangle on the canvas."""

    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def fits_within(self, width: int, height: int) -> bool:
        """Return True if the rectangle lies inside a ``width`` x ``height`` canvas."""
        return (
            self.x >= 0
            and self.y >= 0
            and self.width >= 1
            and self.height >= 1
            and self.right <= width
            and self.bottom <= height
        )

    def slices(self) -> tuple[slice, slice]:
        """Row and column slices selecting this rectangle from a canvas array."""
        return slice(self.y, self.bottom), slice(self.x, self.right)


@dataclass(frozen=True, eq=False)
class Frame:
    """A single palette-indexed frame.

    Attributes:
        pixels: ``uint8`` array of palette indices, shape ``(height, width)``
        palette: RGBA color table, 1-256 entries (duplicates allowed)
        bounds: Placement of the frame on the canvas
        delay_cs: Display time in centiseconds
        disposal: What happens to the frame rectangle before the next frame
    """

    pixels: np.ndarray
    palette: tuple[RGBA, ...]
    bounds: FrameBounds
    delay_cs: int = 0
    disposal: DisposalMethod = DisposalMethod.NONE

    def __post_init__(self) -> None:
        raw = np.asarray(self.pixels)
        object.__setattr__(
            self, "palette", tuple(tuple(int(c) for c in color) for color in self.palette)
        )
        object.__setattr__(self, "disposal", DisposalMethod.from_code(self.disposal))

        if raw.shape != (self.bounds.height, self.bounds.width):
            raise ValueError(
                f"Pixel array shape {raw.shape} does not match bounds "
                f"{self.bounds.width}x{self.bounds.height}"
            )
        if not 1 <= len(self.palette) <= MAX_PALETTE_SIZE:
            raise ValueError(
                f"Palette must have 1-{MAX_PALETTE_SIZE} entries, got {len(self.palette)}"
            )
        if any(len(color) != 4 for color in self.palette):
            raise ValueError("Palette entries must be RGBA 4-tuples")
        if raw.size:
            if raw.dtype.kind not in "iub":
                raise ValueError(f"Pixel indices must be integers, got dtype {raw.dtype}")
            # range is checked before the uint8 cast so that -1 or 256 cannot wrap
            low, high = int(raw.min()), int(raw.max())
            if low < 0 or high >= len(self.palette):
                bad = low if low < 0 else high
                raise ValueError(
                    f"Pixel index {bad} out of range for palette of {len(self.palette)}"
                )
        object.__setattr__(self, "pixels", raw.astype(np.uint8, copy=False))
        if self.delay_cs < 0:
            raise ValueError(f"delay_cs must be non-negative, got {self.delay_cs}")

    @property
    def width(self) -> int:
        return self.bounds.width

    @property
    def height(self) -> int:
        return self.bounds.height

    def palette_array(self) -> np.ndarray:
        """Palette as an ``(N, 4)`` ``uint8`` array."""
        return np.array(self.palette, dtype=np.uint8).reshape(-1, 4)

    def transparent_index(self) -> int | None:
        """Index of the first fully transparent palette entry, if any."""
        for index, color in enumerate(self.palette):
            if color[3] == 0:
                return index
        return None

    def to_rgba(self) -> np.ndarray:
        """Expand the frame to an ``(height, width, 4)`` RGBA array.

        Fully transparent pixels are normalised to ``(0, 0, 0, 0)`` so that
        colors which only differ under zero alpha compare equal.
        """
        rgba = self.palette_array()[self.pixels]
        rgba[rgba[..., 3] == 0] = 0
        return rgba

    def with_changes(self, **changes) -> Frame:
        return replace(self, **changes)


@dataclass(frozen=True, eq=False)
class AnimatedImage:
    """An ordered sequence of frames on a logical canvas.

    ``loop_count`` follows the NETSCAPE extension: 0 loops forever, ``n``
    repeats ``n`` times, -1 means no loop extension (play once).
    """

    frames: tuple[Frame, ...]
    width: int
    height: int
    loop_count: int = 0
    background_index: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "frames", tuple(self.frames))

        if self.width < 1 or self.height < 1:
            raise ValueError(f"Canvas must be at least 1x1, got {self.width}x{self.height}")
        if not self.frames:
            raise ValueError("An animated image needs at least one frame")
        for index, frame in enumerate(self.frames):
            if not frame.bounds.fits_within(self.width, self.height):
                raise ValueError(
                    f"Frame {index} bounds {frame.bounds} exceed canvas "
                    f"{self.width}x{self.height}"
                )

    @property
    def frame_count(self) -> int:
        return len(self.frames)

    @property
    def delays(self) -> list[int]:
        return [frame.delay_cs for frame in self.frames]

    @property
    def total_delay_cs(self) -> int:
        return sum(self.delays)

    @property
    def disposals(self) -> list[DisposalMethod]:
        return [frame.disposal for frame in self.frames]

    def with_frames(self, frames, width: int | None = None, height: int | None = None) -> AnimatedImage:
        """Return a copy carrying ``frames`` (and optionally a new canvas size)."""
        return replace(
            self,
            frames=tuple(frames),
            width=self.width if width is None else width,
            height=self.height if height is None else height,
        )
