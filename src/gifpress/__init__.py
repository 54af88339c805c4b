"""gifpress - animated GIF recompression."""

__version__: str = "0.1.0"

from .color_keep import reduce_colors
from .config import CompressionConfig, CompressionOptions, ResourceLimits
from .error_handling import (
    CompressionError,
    DecodeError,
    EncodeError,
    GifPressError,
    InvalidOptionsError,
    ValidationError,
)
from .frame_delta import optimize_frames
from .frame_keep import skip_frames
from .io import decode_gif, encode_gif, read_gif, write_gif
from .model import AnimatedImage, DisposalMethod, Frame, FrameBounds
from .pipeline import CompressionResult, compress, compress_bytes, compress_gif
from .resize import resize_image
from .validation import apply_preset, build_options

__all__ = [
    "__version__",
    "AnimatedImage",
    "CompressionConfig",
    "CompressionError",
    "CompressionOptions",
    "CompressionResult",
    "DecodeError",
    "DisposalMethod",
    "EncodeError",
    "Frame",
    "FrameBounds",
    "GifPressError",
    "InvalidOptionsError",
    "ResourceLimits",
    "ValidationError",
    "apply_preset",
    "build_options",
    "compress",
    "compress_bytes",
    "compress_gif",
    "decode_gif",
    "encode_gif",
    "optimize_frames",
    "read_gif",
    "reduce_colors",
    "resize_image",
    "skip_frames",
    "write_gif",
]
