from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from gifpress.model import AnimatedImage, DisposalMethod, Frame, FrameBounds

RED = (255, 0, 0, 255)
GREEN = (0, 255, 0, 255)
BLUE = (0, 0, 255, 255)
WHITE = (255, 255, 255, 255)
BLACK = (0, 0, 0, 255)


def _solid_frame(
    color,
    width: int,
    height: int,
    x: int = 0,
    y: int = 0,
    delay_cs: int = 10,
    disposal: DisposalMethod = DisposalMethod.NONE,
) -> Frame:
    return Frame(
        pixels=np.zeros((height, width), dtype=np.uint8),
        palette=(color,),
        bounds=FrameBounds(x=x, y=y, width=width, height=height),
        delay_cs=delay_cs,
        disposal=disposal,
    )


def _indexed_frame(
    pixels,
    palette,
    x: int = 0,
    y: int = 0,
    delay_cs: int = 10,
    disposal: DisposalMethod = DisposalMethod.NONE,
) -> Frame:
    pixels = np.asarray(pixels)
    height, width = pixels.shape
    return Frame(
        pixels=pixels,
        palette=tuple(palette),
        bounds=FrameBounds(x=x, y=y, width=width, height=height),
        delay_cs=delay_cs,
        disposal=disposal,
    )


def _animation(frames, width: int, height: int, loop_count: int = 0) -> AnimatedImage:
    return AnimatedImage(frames=tuple(frames), width=width, height=height, loop_count=loop_count)


@pytest.fixture
def solid_frame():
    """Factory for single-color frames."""
    return _solid_frame


@pytest.fixture
def indexed_frame():
    """Factory for frames from an index array and palette."""
    return _indexed_frame


@pytest.fixture
def animation():
    """Factory for animations from a list of frames."""
    return _animation


@pytest.fixture
def color_cycle_image():
    """Ten full-canvas 100x100 frames at 50cs, alternating red, green and blue."""
    colors = [RED, GREEN, BLUE]
    frames = [_solid_frame(colors[i % 3], 100, 100, delay_cs=50) for i in range(10)]
    return _animation(frames, 100, 100)


@pytest.fixture
def gradient_frame():
    """A 16x16 frame whose 256 pixels all have different colors."""
    palette = [(i, 255 - i, (i * 7) % 256, 255) for i in range(256)]
    pixels = np.arange(256, dtype=np.uint8).reshape(16, 16)
    return _indexed_frame(pixels, palette)


def write_test_gif(
    path: Path,
    colors=((255, 0, 0), (0, 255, 0), (0, 0, 255)),
    size: tuple[int, int] = (8, 8),
    duration: int = 100,
    loop: int = 0,
) -> Path:
    """Save a GIF with one solid frame per color."""
    path.parent.mkdir(parents=True, exist_ok=True)
    images = [Image.new("RGB", size, color) for color in colors]
    images[0].save(
        path, save_all=True, append_images=images[1:], duration=duration, loop=loop
    )
    return path


@pytest.fixture
def sample_gif(tmp_path):
    """A 3-frame 8x8 GIF on disk (red, green, blue at 100ms)."""
    return write_test_gif(tmp_path / "sample.gif")


@pytest.fixture
def gif_writer():
    """Factory that saves solid-color GIFs with Pillow."""
    return write_test_gif
