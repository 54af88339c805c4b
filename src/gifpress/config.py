"""Configuration settings for gifpress."""

from dataclasses import dataclass

from .error_handling import InvalidOptionsError


@dataclass
class CompressionConfig:
    """Ranges, defaults and presets for GIF compression options."""

    # Inclusive ranges accepted by the pipeline
    COLOR_COUNT_RANGE: tuple[int, int] = (2, 256)
    RESIZE_PERCENT_RANGE: tuple[int, int] = (10, 100)
    LOSSY_LEVEL_RANGE: tuple[int, int] = (0, 100)
    FRAME_SKIP_RANGE: tuple[int, int] = (0, 10)

    # Defaults used at the caller boundary when a value is missing or invalid
    DEFAULT_COLOR_COUNT: int = 256
    DEFAULT_RESIZE_PERCENT: int = 100
    DEFAULT_LOSSY_LEVEL: int = 0
    DEFAULT_FRAME_SKIP: int = 0

    # Lossy levels above this skip error diffusion during palette reduction
    DITHER_LOSSY_THRESHOLD: int = 50

    # Named presets: option name -> value
    PRESETS: dict[str, dict[str, int | bool]] | None = None

    def __post_init__(self) -> None:
        if self.PRESETS is None:
            self.PRESETS = {
                "light": {
                    "color_count": 128,
                    "resize_percent": 90,
                    "optimize_frames": True,
                    "frame_skip": 0,
                    "lossy_level": 0,
                },
                "medium": {
                    "color_count": 64,
                    "resize_percent": 75,
                    "optimize_frames": True,
                    "frame_skip": 0,
                    "lossy_level": 0,
                },
                "high": {
                    "color_count": 32,
                    "resize_percent": 50,
                    "optimize_frames": True,
                    "frame_skip": 1,
                    "lossy_level": 0,
                },
                "maximum": {
                    "color_count": 16,
                    "resize_percent": 40,
                    "optimize_frames": True,
                    "frame_skip": 2,
                    "lossy_level": 50,
                },
            }

        for name, (low, high) in (
            ("COLOR_COUNT_RANGE", self.COLOR_COUNT_RANGE),
            ("RESIZE_PERCENT_RANGE", self.RESIZE_PERCENT_RANGE),
            ("LOSSY_LEVEL_RANGE", self.LOSSY_LEVEL_RANGE),
            ("FRAME_SKIP_RANGE", self.FRAME_SKIP_RANGE),
        ):
            if low > high:
                raise ValueError(f"{name} lower bound exceeds upper bound: {low} > {high}")

        if self.COLOR_COUNT_RANGE[0] < 2 or self.COLOR_COUNT_RANGE[1] > 256:
            raise ValueError(
                f"COLOR_COUNT_RANGE must lie within 2-256, got {self.COLOR_COUNT_RANGE}"
            )

        if not 0 <= self.DITHER_LOSSY_THRESHOLD <= 100:
            raise ValueError(
                f"DITHER_LOSSY_THRESHOLD must be between 0 and 100, got {self.DITHER_LOSSY_THRESHOLD}"
            )


@dataclass
class ResourceLimits:
    """Upper bounds on decoded input, checked before the pipeline runs."""

    MAX_CANVAS_PIXELS: int = 4096 * 4096
    MAX_FRAMES: int = 10000
    MAX_INPUT_MB: float = 100.0

    def __post_init__(self) -> None:
        if self.MAX_CANVAS_PIXELS <= 0:
            raise ValueError(f"MAX_CANVAS_PIXELS must be positive, got {self.MAX_CANVAS_PIXELS}")
        if self.MAX_FRAMES <= 0:
            raise ValueError(f"MAX_FRAMES must be positive, got {self.MAX_FRAMES}")
        if self.MAX_INPUT_MB <= 0:
            raise ValueError(f"MAX_INPUT_MB must be positive, got {self.MAX_INPUT_MB}")


# Default configuration instances
DEFAULT_COMPRESSION_CONFIG = CompressionConfig()
DEFAULT_RESOURCE_LIMITS = ResourceLimits()


def _check_int_option(name: str, value: object, bounds: tuple[int, int]) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidOptionsError(
            f"{name} must be an integer, got {type(value).__name__}",
            context={"option": name, "value": value},
        )
    low, high = bounds
    if not low <= value <= high:
        raise InvalidOptionsError(
            f"{name} must be between {low} and {high}, got {value}",
            context={"option": name, "value": value},
        )


@dataclass(frozen=True)
class CompressionOptions:
    """Parameters for one compression run.

    Values are validated on construction and never clamped; a value outside
    its range raises ``InvalidOptionsError``.
    """

    color_count: int = DEFAULT_COMPRESSION_CONFIG.DEFAULT_COLOR_COUNT
    resize_percent: int = DEFAULT_COMPRESSION_CONFIG.DEFAULT_RESIZE_PERCENT
    lossy_level: int = DEFAULT_COMPRESSION_CONFIG.DEFAULT_LOSSY_LEVEL
    optimize_frames: bool = False
    frame_skip: int = DEFAULT_COMPRESSION_CONFIG.DEFAULT_FRAME_SKIP

    def __post_init__(self) -> None:
        self.validate()

    def validate(self, config: CompressionConfig = DEFAULT_COMPRESSION_CONFIG) -> None:
        """Raise ``InvalidOptionsError`` if any option is out of range."""
        _check_int_option("color_count", self.color_count, config.COLOR_COUNT_RANGE)
        _check_int_option("resize_percent", self.resize_percent, config.RESIZE_PERCENT_RANGE)
        _check_int_option("lossy_level", self.lossy_level, config.LOSSY_LEVEL_RANGE)
        _check_int_option("frame_skip", self.frame_skip, config.FRAME_SKIP_RANGE)
        if not isinstance(self.optimize_frames, bool):
            raise InvalidOptionsError(
                f"optimize_frames must be a boolean, got {type(self.optimize_frames).__name__}",
                context={"option": "optimize_frames", "value": self.optimize_frames},
            )

    def as_dict(self) -> dict[str, int | bool]:
        return {
            "color_count": self.color_count,
            "resize_percent": self.resize_percent,
            "lossy_level": self.lossy_level,
            "optimize_frames": self.optimize_frames,
            "frame_skip": self.frame_skip,
        }
