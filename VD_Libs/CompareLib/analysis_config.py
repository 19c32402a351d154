"""
Tunable parameters for the comparison analyses.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict

from VD_Libs.constants import (
    DEFAULT_BLOCK_SIZE,
    DEFAULT_DIFF_THRESHOLD,
    DEFAULT_INTENSITY_SAMPLE_SCALE,
    DEFAULT_RESAMPLE,
    DEFAULT_SEVERITY_BAND_WIDTH,
    DEFAULT_SEVERITY_LEVELS,
    MAX_BLOCK_SIZE,
    SUPPORTED_RESAMPLE,
    WIPE_DEFAULT_POSITION,
    WIPE_MAX_POSITION,
    WIPE_MIN_POSITION,
)


@dataclass
class AnalysisConfig:
    """Configuration for an analysis session.

    Attributes:
        block_size: Tile edge length in sampled pixels for intensity analysis (1-512)
        threshold: Tiles with max delta <= threshold are treated as unchanged (0-255)
        severity_band_width: Delta range covered by each severity level (> 0)
        severity_levels: Number of severity levels (1-5, limited by the palette)
        intensity_sample_scale: Grid sampling factor for intensity blocks; below 1 the
                                blocks cover block_size / s original pixels (0 < s <= 1)
        wipe_default_position: Wipe divider position after a pair loads (0-100)
        resample: Filter used when resizing ('nearest', 'bilinear', 'bicubic', 'lanczos')
    """
    block_size: int = DEFAULT_BLOCK_SIZE
    threshold: float = DEFAULT_DIFF_THRESHOLD
    severity_band_width: float = DEFAULT_SEVERITY_BAND_WIDTH
    severity_levels: int = DEFAULT_SEVERITY_LEVELS
    intensity_sample_scale: float = DEFAULT_INTENSITY_SAMPLE_SCALE
    wipe_default_position: float = WIPE_DEFAULT_POSITION
    resample: str = DEFAULT_RESAMPLE

    def __post_init__(self):
        """Validate configuration values."""
        if not (1 <= int(self.block_size) <= MAX_BLOCK_SIZE):
            raise ValueError(f"block_size must be 1-{MAX_BLOCK_SIZE}, got {self.block_size}")
        if not (0 <= self.threshold <= 255):
            raise ValueError(f"threshold must be 0-255, got {self.threshold}")
        if self.severity_band_width <= 0:
            raise ValueError(f"severity_band_width must be > 0, got {self.severity_band_width}")
        if not (1 <= int(self.severity_levels) <= DEFAULT_SEVERITY_LEVELS):
            raise ValueError(
                f"severity_levels must be 1-{DEFAULT_SEVERITY_LEVELS}, got {self.severity_levels}"
            )
        if not (0 < self.intensity_sample_scale <= 1):
            raise ValueError(
                f"intensity_sample_scale must be 0 < s <= 1, got {self.intensity_sample_scale}"
            )
        if not (WIPE_MIN_POSITION <= self.wipe_default_position <= WIPE_MAX_POSITION):
            raise ValueError(
                f"wipe_default_position must be 0-100, got {self.wipe_default_position}"
            )
        self.resample = str(self.resample).lower()
        if self.resample not in SUPPORTED_RESAMPLE:
            valid = ", ".join(sorted(SUPPORTED_RESAMPLE))
            raise ValueError(f"Unknown resample filter: {self.resample}. Valid filters: {valid}")
        self.block_size = int(self.block_size)
        self.severity_levels = int(self.severity_levels)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnalysisConfig":
        """Create from dictionary, ignoring unknown keys."""
        filtered = {k: v for k, v in data.items()
                    if k in cls.__dataclass_fields__}
        return cls(**filtered)
