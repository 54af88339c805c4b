"""Metadata extraction and hashing for GIF files."""

import hashlib
from dataclasses import dataclass
from pathlib import Path

from .color_keep import count_frame_colors
from .io import read_gif
from .model import AnimatedImage


@dataclass
class GifMetadata:
    """Metadata extracted from a GIF file."""

    gif_sha: str
    filename: str
    kilobytes: float
    width: int
    height: int
    frames: int
    total_delay_cs: int
    fps: float
    loop_count: int
    max_palette_size: int
    max_distinct_colors: int


def compute_file_sha256(file_path: Path) -> str:
    """Compute SHA256 hash of a file."""
    sha256_hash = hashlib.sha256()
    with open(file_path, "rb") as f:
        for chunk in iter(lambda: f.read(4096), b""):
            sha256_hash.update(chunk)
    return sha256_hash.hexdigest()


def describe_image(image: AnimatedImage) -> dict:
    """Timing and palette statistics of a decoded animation."""
    total_delay = image.total_delay_cs
    fps = image.frame_count * 100.0 / total_delay if total_delay > 0 else 0.0
    return {
        "width": image.width,
        "height": image.height,
        "frames": image.frame_count,
        "total_delay_cs": total_delay,
        "fps": round(fps, 2),
        "loop_count": image.loop_count,
        "max_palette_size": max(len(frame.palette) for frame in image.frames),
        "max_distinct_colors": max(len(count_frame_colors(frame)) for frame in image.frames),
    }


def extract_gif_metadata(file_path: Path) -> GifMetadata:
    """Extract metadata from a GIF file.

    Raises:
        OSError: If the file does not exist
        DecodeError: If the file is not a readable GIF
    """
    if not file_path.exists():
        raise OSError(f"File not found: {file_path}")

    image = read_gif(file_path)

    return GifMetadata(
        gif_sha=compute_file_sha256(file_path),
        filename=file_path.name,
        kilobytes=file_path.stat().st_size / 1024.0,
        **describe_image(image),
    )
