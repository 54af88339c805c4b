"""The recompression pipeline.

Stages run strictly in this order, each returning a new ``AnimatedImage``:

1. frame skip       (only if ``frame_skip > 0`` and more than one frame)
2. resize           (only if ``resize_percent < 100``)
3. palette reduce   (always)
4. delta optimize   (only if ``optimize_frames`` and more than one frame)

Encoding to bytes happens outside ``compress``; ``compress_bytes`` and
``compress_gif`` wrap the codec around it for byte and file callers.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path

from .color_keep import reduce_colors
from .config import (
    DEFAULT_COMPRESSION_CONFIG,
    DEFAULT_RESOURCE_LIMITS,
    CompressionConfig,
    CompressionOptions,
    ResourceLimits,
)
from .error_handling import CompressionError, InvalidOptionsError, error_context
from .frame_delta import optimize_frames
from .frame_keep import skip_frames
from .io import decode_gif, encode_gif, read_gif, write_gif
from .model import AnimatedImage
from .resize import resize_image
from .validation import check_resource_limits, validate_input_gif, validate_output_path

logger = logging.getLogger(__name__)


@dataclass
class CompressionResult:
    """Outcome of compressing one GIF file."""

    input_path: Path
    output_path: Path
    original_bytes: int
    compressed_bytes: int
    original_frames: int
    compressed_frames: int
    original_size: tuple[int, int]
    compressed_size: tuple[int, int]
    render_ms: int

    @property
    def compression_ratio(self) -> float:
        if self.compressed_bytes <= 0:
            return 0.0
        return self.original_bytes / self.compressed_bytes

    @property
    def saved_percent(self) -> float:
        if self.original_bytes <= 0:
            return 0.0
        return (1.0 - self.compressed_bytes / self.original_bytes) * 100.0


def compress(
    image: AnimatedImage,
    options: CompressionOptions,
    config: CompressionConfig = DEFAULT_COMPRESSION_CONFIG,
) -> AnimatedImage:
    """Run the four pipeline stages over ``image``.

    Raises:
        InvalidOptionsError: If ``options`` are out of range
        CompressionError: If a stage fails unexpectedly
    """
    if not isinstance(options, CompressionOptions):
        raise InvalidOptionsError(
            f"Expected CompressionOptions, got {type(options).__name__}"
        )
    options.validate(config)

    with error_context(
        "compress animation", CompressionError, context=options.as_dict(), logger=logger
    ):
        result = image

        if options.frame_skip > 0 and result.frame_count > 1:
            result = skip_frames(result, options.frame_skip)

        if options.resize_percent < 100:
            result = resize_image(result, options.resize_percent)

        # Always re-quantize: this also normalizes palettes for the delta stage.
        result = reduce_colors(result, options.color_count, options.lossy_level, config)

        if options.optimize_frames and result.frame_count > 1:
            result = optimize_frames(result)

    logger.debug(
        f"Compressed {image.width}x{image.height}/{image.frame_count} frames -> "
        f"{result.width}x{result.height}/{result.frame_count} frames"
    )
    return result


def compress_bytes(
    data: bytes,
    options: CompressionOptions,
    config: CompressionConfig = DEFAULT_COMPRESSION_CONFIG,
    limits: ResourceLimits = DEFAULT_RESOURCE_LIMITS,
) -> bytes:
    """Decode, compress and re-encode GIF bytes.

    Raises:
        DecodeError: If ``data`` is not a readable GIF
        ValidationError: If the decoded image exceeds ``limits``
        CompressionError: If compression fails
        EncodeError: If the result cannot be encoded
    """
    image = decode_gif(data)
    check_resource_limits(image, limits)
    return encode_gif(compress(image, options, config))


def compress_gif(
    input_path: Path,
    output_path: Path,
    options: CompressionOptions,
    config: CompressionConfig = DEFAULT_COMPRESSION_CONFIG,
    limits: ResourceLimits = DEFAULT_RESOURCE_LIMITS,
) -> CompressionResult:
    """Compress a GIF file and write the result atomically.

    Returns:
        CompressionResult with sizes, frame counts and timing
    """
    input_path = validate_input_gif(input_path, limits)
    output_path = validate_output_path(output_path)

    start = time.perf_counter()
    image = read_gif(input_path)
    check_resource_limits(image, limits)
    compressed = compress(image, options, config)
    written = write_gif(output_path, compressed)
    render_ms = int((time.perf_counter() - start) * 1000)

    result = CompressionResult(
        input_path=input_path,
        output_path=output_path,
        original_bytes=input_path.stat().st_size,
        compressed_bytes=written,
        original_frames=image.frame_count,
        compressed_frames=compressed.frame_count,
        original_size=(image.width, image.height),
        compressed_size=(compressed.width, compressed.height),
        render_ms=render_ms,
    )

    logger.info(
        f"Compressed {input_path.name}: {result.original_bytes} -> {result.compressed_bytes} bytes "
        f"({result.saved_percent:.1f}% saved, {render_ms}ms)"
    )
    return result
