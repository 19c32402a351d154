"""
Comparison data models for Visionary Diff.

This module defines the core data structures shared by the alignment,
extraction and analysis stages.

Classes:
    ImageDescriptor: Logical pixel dimensions of a decoded image
    AlignmentTransform: Maps edited-image pixels into the original's frame
    Rect: Axis-aligned rectangle in original-image pixel coordinates
    DiffBlock: One changed tile reported by the intensity analysis
    CropDetection: Missing-area flag plus overlay geometry
    AnalysisMode: The three mutually exclusive comparison views

Type Aliases:
    RgbaColor: A tuple of 4 integers representing RGBA color values (0-255)
    PixelBounds: Integer (left, top, right, bottom) pixel edges
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

RgbaColor = Tuple[int, int, int, int]
PixelBounds = Tuple[int, int, int, int]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class ImageDescriptor:
    width: int
    height: int

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height


@dataclass(frozen=True)
class AlignmentTransform:
    """Uniform scale plus offset placing the edited image in the original frame.

    A point in the edited image's native pixel space maps to
    ``(offset_x + x * scale, offset_y + y * scale)`` in the original's space.
    """
    offset_x: float
    offset_y: float
    scale: float

    def __post_init__(self):
        if not self.scale > 0:
            raise ValueError(f"scale must be > 0, got {self.scale}")

    @property
    def is_identity(self) -> bool:
        return self.scale == 1.0 and self.offset_x == 0.0 and self.offset_y == 0.0

    def map_point(self, x: float, y: float) -> Tuple[float, float]:
        return self.offset_x + x * self.scale, self.offset_y + y * self.scale


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def area(self) -> float:
        return max(0.0, self.width) * max(0.0, self.height)

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def intersect(self, other: "Rect") -> "Rect":
        """Return the overlapping part of two rects (zero-sized when disjoint)."""
        left = max(self.x, other.x)
        top = max(self.y, other.y)
        right = min(self.right, other.right)
        bottom = min(self.bottom, other.bottom)
        return Rect(left, top, max(0.0, right - left), max(0.0, bottom - top))

    def scaled(self, factor: float) -> "Rect":
        return Rect(self.x * factor, self.y * factor, self.width * factor, self.height * factor)

    def pixel_bounds(self) -> PixelBounds:
        """Edges rounded to the nearest whole pixel boundary."""
        left = _round_half_up(self.x)
        top = _round_half_up(self.y)
        right = max(left, _round_half_up(self.right))
        bottom = max(top, _round_half_up(self.bottom))
        return left, top, right, bottom

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return self.x, self.y, self.width, self.height


@dataclass(frozen=True)
class DiffBlock:
    x: float
    y: float
    width: float
    height: float
    severity_level: int
    max_delta: float = 0.0

    @property
    def rect(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)


@dataclass(frozen=True)
class CropDetection:
    """Result of crop/removal detection.

    Attributes:
        has_missing_area: True when the aligned edited image leaves part of
                          the original frame uncovered
        band_rects: Uncovered bands (top, bottom, left, right), empty ones omitted
        outline_rect: The overlap region, for a framing stroke (None when
                      nothing is missing)
    """
    has_missing_area: bool
    band_rects: Tuple[Rect, ...] = field(default_factory=tuple)
    outline_rect: Optional[Rect] = None

    @property
    def overlay_rects(self) -> List[Rect]:
        rects = list(self.band_rects)
        if self.outline_rect is not None:
            rects.append(self.outline_rect)
        return rects


class AnalysisMode(Enum):
    WIPE = "wipe"
    INTENSITY = "intensity"
    DIFFERENTIAL = "differential"

    @classmethod
    def from_value(cls, value: "str | AnalysisMode") -> "AnalysisMode":
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        for mode in cls:
            if mode.value == normalized:
                return mode
        valid = ", ".join(mode.value for mode in cls)
        raise ValueError(f"Unknown analysis mode: {value}. Valid modes: {valid}")
