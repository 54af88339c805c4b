"""GIF decoding/encoding through Pillow, atomic writes and logging setup.

Pillow owns the byte-level container format. Decoding yields each frame as
the rectangle Pillow reports it occupies, filled with what that frame shows
there; encoding writes every frame back as its own rectangle with its own
color table, so cropped frames and placeholders reach the file unchanged.
"""

import io
import logging
import tempfile
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from shutil import move

import numpy as np
from PIL import GifImagePlugin, Image

from .error_handling import DecodeError, EncodeError, error_context
from .model import (
    MAX_PALETTE_SIZE,
    TRANSPARENT,
    AnimatedImage,
    DisposalMethod,
    Frame,
    FrameBounds,
)

logger = logging.getLogger(__name__)


def setup_logging(log_dir: Path | None = None, log_level: str = "INFO") -> logging.Logger:
    """Set up logging configuration for gifpress.

    Args:
        log_dir: Directory to store log files (stream only when None)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)

    Returns:
        Configured logger instance
    """
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        handlers.append(logging.FileHandler(log_dir / f"gifpress_{timestamp}.log"))

    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
        force=True,
    )

    return logging.getLogger("gifpress")


@contextmanager
def atomic_write(target_path: Path, mode: str = "wb"):
    """Context manager for atomic file writes using temporary files.

    Example:
        with atomic_write(Path("out.gif")) as f:
            f.write(data)
    """
    target_path.parent.mkdir(parents=True, exist_ok=True)

    with tempfile.NamedTemporaryFile(
        mode=mode, dir=target_path.parent, delete=False, suffix=f".tmp_{target_path.name}"
    ) as temp_file:
        try:
            yield temp_file
            temp_file.flush()
        except Exception:
            Path(temp_file.name).unlink(missing_ok=True)
            raise

    move(temp_file.name, target_path)


def palettize(rgba: np.ndarray) -> tuple[np.ndarray, tuple]:
    """Convert an RGBA array into palette indices plus an RGBA palette.

    Exact when the array holds at most 256 distinct colors; otherwise Pillow's
    fast octree quantizer (the one that preserves alpha) picks the palette.
    """
    rgba = rgba.copy()
    rgba[rgba[..., 3] == 0] = 0
    height, width = rgba.shape[:2]

    colors, inverse = np.unique(rgba.reshape(-1, 4), axis=0, return_inverse=True)
    if len(colors) <= MAX_PALETTE_SIZE:
        pixels = inverse.reshape(height, width).astype(np.uint8)
        return pixels, tuple(tuple(int(c) for c in color) for color in colors)

    quantized = Image.fromarray(rgba).quantize(
        colors=MAX_PALETTE_SIZE,
        method=Image.Quantize.FASTOCTREE,
        dither=Image.Dither.NONE,
    )
    pixels = np.asarray(quantized, dtype=np.uint8)
    raw = quantized.getpalette(rawmode="RGBA") or []
    used = int(pixels.max()) + 1
    palette = tuple(tuple(raw[i * 4 : i * 4 + 4]) for i in range(used))
    return pixels, palette


def _clamp_extent(extent, width: int, height: int) -> FrameBounds:
    x0, y0, x1, y1 = (int(v) for v in extent)
    x0, y0 = max(0, min(x0, width - 1)), max(0, min(y0, height - 1))
    x1, y1 = max(x0 + 1, min(x1, width)), max(y0 + 1, min(y1, height))
    return FrameBounds(x=x0, y=y0, width=x1 - x0, height=y1 - y0)


def decode_gif(data: bytes) -> AnimatedImage:
    """Decode GIF bytes into an ``AnimatedImage``.

    Raises:
        DecodeError: If the bytes are not a readable GIF
    """
    with error_context("decode GIF", DecodeError, context={"bytes": len(data)}, logger=logger):
        with Image.open(io.BytesIO(data)) as img:
            if img.format != "GIF":
                raise DecodeError(f"Input is not a GIF (detected {img.format})")

            width, height = img.size
            loop_count = img.info.get("loop", -1)
            background_index = img.info.get("background", 0)

            frames = []
            for index in range(getattr(img, "n_frames", 1)):
                img.seek(index)
                extent = getattr(img, "dispose_extent", None) or (0, 0, width, height)
                bounds = _clamp_extent(extent, width, height)

                rgba = np.asarray(img.convert("RGBA"), dtype=np.uint8)
                rows, cols = bounds.slices()
                pixels, palette = palettize(rgba[rows, cols])

                frames.append(
                    Frame(
                        pixels=pixels,
                        palette=palette,
                        bounds=bounds,
                        delay_cs=int(round(img.info.get("duration", 0) / 10)),
                        disposal=DisposalMethod.from_code(getattr(img, "disposal_method", 0)),
                    )
                )

    logger.debug(f"Decoded GIF {width}x{height} with {len(frames)} frames")
    return AnimatedImage(
        frames=tuple(frames),
        width=width,
        height=height,
        loop_count=int(loop_count),
        background_index=int(background_index),
    )


def _frame_image(frame: Frame) -> tuple[Image.Image, dict]:
    """Build the "P" image and graphic control parameters for one frame.

    Frames that restore the background get a transparent entry when their
    palette has room, so the cleared rectangle decodes as transparent.
    """
    palette = frame.palette
    transparency = frame.transparent_index()
    if (
        transparency is None
        and frame.disposal == DisposalMethod.RESTORE_BACKGROUND
        and len(palette) < MAX_PALETTE_SIZE
    ):
        palette = palette + (TRANSPARENT,)
        transparency = len(palette) - 1

    img = Image.frombytes("P", (frame.width, frame.height), frame.pixels.tobytes())
    img.putpalette([channel for color in palette for channel in color[:3]])

    params = {
        "duration": frame.delay_cs * 10,
        "disposal": int(frame.disposal),
        "include_color_table": True,
    }
    if transparency is not None:
        params["transparency"] = transparency
    return img, params


def encode_gif(image: AnimatedImage) -> bytes:
    """Encode an ``AnimatedImage`` as GIF bytes.

    Every frame is written as stored: its own rectangle, local color table,
    delay, disposal and transparent index. Pillow's whole-animation writer
    re-diffs and merges frames, so frames go through its per-frame
    ``getheader``/``getdata`` helpers instead.

    Raises:
        EncodeError: If Pillow cannot write the animation
    """
    with error_context(
        "encode GIF", EncodeError, context={"frames": image.frame_count}, logger=logger
    ):
        screen = Image.new("P", (image.width, image.height), 0)
        screen.putpalette([0, 0, 0])
        # graphic control blocks need 89a even without a loop block
        screen.info["version"] = b"89a"

        info: dict = {"background": 0}
        if image.loop_count >= 0:
            info["loop"] = image.loop_count
        header, _ = GifImagePlugin.getheader(screen, info=info)

        buffer = io.BytesIO()
        buffer.write(b"".join(header))
        for frame in image.frames:
            img, params = _frame_image(frame)
            for chunk in GifImagePlugin.getdata(
                img, offset=(frame.bounds.x, frame.bounds.y), **params
            ):
                buffer.write(chunk)
        buffer.write(b";")

    logger.debug(f"Encoded {image.frame_count} frames into {buffer.tell()} bytes")
    return buffer.getvalue()


def read_gif(path: Path) -> AnimatedImage:
    """Read and decode a GIF file."""
    with error_context("read GIF file", DecodeError, context={"path": path}, logger=logger):
        data = Path(path).read_bytes()
    return decode_gif(data)


def write_gif(path: Path, image: AnimatedImage) -> int:
    """Encode ``image`` and write it atomically to ``path``.

    Returns:
        Number of bytes written
    """
    data = encode_gif(image)
    with error_context("write GIF file", EncodeError, context={"path": path}, logger=logger):
        with atomic_write(Path(path)) as f:
            f.write(data)
    return len(data)
