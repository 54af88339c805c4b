"""Mapping truecolor pixels onto a fixed palette.

Two strategies are provided:

- ``nearest_indices``: every pixel independently takes the closest palette
  entry (squared distance over R, G, B and A), ties going to the lowest
  index. Fast, but bands on gradients.
- ``floyd_steinberg``: classic error diffusion. GIF palettes only carry
  fully opaque or fully transparent entries, so the color channels are
  dithered by Pillow onto the opaque entries and pixels below half alpha
  take the transparent entry. Palettes with partially transparent entries
  fall back to a numpy kernel that diffuses the error over all four
  channels (7/16 right, 3/16 down-left, 5/16 down, 1/16 down-right).
"""

import numpy as np
from PIL import Image

from .model import MAX_PALETTE_SIZE

# Pixels compared against the palette per vectorised block
_CHUNK_PIXELS = 4096

# Pixels with less alpha than this are treated as transparent
_ALPHA_CUTOFF = 128


def nearest_indices(rgba: np.ndarray, palette: np.ndarray) -> np.ndarray:
    """Map each RGBA pixel to the index of its nearest palette entry.

    Args:
        rgba: ``(height, width, 4)`` array of pixel colors
        palette: ``(N, 4)`` array of palette colors

    Returns:
        ``(height, width)`` ``uint8`` array of palette indices
    """
    height, width = rgba.shape[:2]
    flat = rgba.reshape(-1, 4).astype(np.int32)
    pal = palette.reshape(-1, 4).astype(np.int32)

    if len(pal) == 1:
        return np.zeros((height, width), dtype=np.uint8)

    result = np.empty(len(flat), dtype=np.uint8)
    for start in range(0, len(flat), _CHUNK_PIXELS):
        block = flat[start : start + _CHUNK_PIXELS]
        diff = block[:, None, :] - pal[None, :, :]
        distances = np.einsum("ijk,ijk->ij", diff, diff)
        result[start : start + len(block)] = np.argmin(distances, axis=1)

    return result.reshape(height, width)


def _palette_image(colors: np.ndarray) -> Image.Image:
    """A "P" image carrying ``colors`` (RGB rows), padded with the first color."""
    entries = np.repeat(colors[:1], MAX_PALETTE_SIZE, axis=0)
    entries[: len(colors)] = colors
    palette_img = Image.new("P", (1, 1))
    palette_img.putpalette(entries.astype(np.uint8).flatten().tolist())
    return palette_img


def _pillow_floyd_steinberg(rgba: np.ndarray, palette: np.ndarray) -> np.ndarray:
    opaque = np.flatnonzero(palette[:, 3] == 255)

    # padding entries duplicate the first opaque color
    lookup = np.full(MAX_PALETTE_SIZE, opaque[0], dtype=np.uint8)
    lookup[: len(opaque)] = opaque

    rgb = Image.fromarray(np.ascontiguousarray(rgba[..., :3], dtype=np.uint8))
    quantized = rgb.quantize(
        palette=_palette_image(palette[opaque, :3]), dither=Image.Dither.FLOYDSTEINBERG
    )
    indices = lookup[np.asarray(quantized, dtype=np.uint8)]

    transparent = rgba[..., 3] < _ALPHA_CUTOFF
    if transparent.any():
        clear = np.flatnonzero(palette[:, 3] == 0)
        if len(clear):
            indices[transparent] = clear[0]
        else:
            indices[transparent] = nearest_indices(
                rgba[transparent].reshape(1, -1, 4), palette
            ).ravel()

    return indices


def _diffuse_errors(rgba: np.ndarray, palette: np.ndarray) -> np.ndarray:
    height, width = rgba.shape[:2]
    pal = palette.astype(np.float64)
    work = rgba.astype(np.float64)
    indices = np.empty((height, width), dtype=np.uint8)

    for y in range(height):
        row = work[y]
        below = work[y + 1] if y + 1 < height else None
        for x in range(width):
            value = np.clip(row[x], 0.0, 255.0)
            diff = pal - value
            index = int(np.argmin(np.einsum("ij,ij->i", diff, diff)))
            indices[y, x] = index

            error = value - pal[index]
            if not error.any():
                continue
            if x + 1 < width:
                row[x + 1] += error * (7 / 16)
            if below is not None:
                if x > 0:
                    below[x - 1] += error * (3 / 16)
                below[x] += error * (5 / 16)
                if x + 1 < width:
                    below[x + 1] += error * (1 / 16)

    return indices


def floyd_steinberg(rgba: np.ndarray, palette: np.ndarray) -> np.ndarray:
    """Map RGBA pixels onto ``palette`` with Floyd-Steinberg error diffusion.

    Args:
        rgba: ``(height, width, 4)`` array of pixel colors
        palette: ``(N, 4)`` array of palette colors

    Returns:
        ``(height, width)`` ``uint8`` array of palette indices
    """
    height, width = rgba.shape[:2]
    pal = palette.reshape(-1, 4)

    if len(pal) == 1:
        return np.zeros((height, width), dtype=np.uint8)

    nearest = nearest_indices(rgba, pal)
    if np.array_equal(pal[nearest], rgba):
        # every pixel has an exact entry, so there is no error to diffuse
        return nearest

    alpha = pal[:, 3]
    binary_alpha = bool(np.all((alpha == 0) | (alpha == 255)))
    if binary_alpha and (alpha == 255).any():
        return _pillow_floyd_steinberg(rgba, pal)
    return _diffuse_errors(rgba, pal)


def remap_to_palette(rgba: np.ndarray, palette: np.ndarray, dither: bool) -> np.ndarray:
    """Map pixels onto ``palette``, with or without error diffusion."""
    if dither:
        return floyd_steinberg(rgba, palette)
    return nearest_indices(rgba, palette)
