"""
Result payloads for the three comparison views.

Exactly one payload is active at a time; an AnalysisResult carries a single
payload whose type fixes the mode, so "one mode at a time" holds by
construction rather than by a set of independent flags.

Classes:
    WipeView: Geometry for the interactive wipe
    IntensityView: Changed blocks plus crop overlay geometry
    DifferentialView: Per-pixel delta buffer plus crop overlay geometry
    AnalysisResult: A payload tagged with the generation that produced it
"""

from dataclasses import dataclass, field
from typing import ClassVar, Tuple, Union

import numpy as np

from VD_Libs.CompareLib.comparison_models import (
    AlignmentTransform,
    AnalysisMode,
    CropDetection,
    DiffBlock,
)


@dataclass(frozen=True)
class WipeView:
    mode: ClassVar[AnalysisMode] = AnalysisMode.WIPE
    transform: AlignmentTransform
    position: float


@dataclass(frozen=True)
class IntensityView:
    mode: ClassVar[AnalysisMode] = AnalysisMode.INTENSITY
    transform: AlignmentTransform
    crop: CropDetection
    blocks: Tuple[DiffBlock, ...]
    sample_scale: float = 1.0


@dataclass(frozen=True)
class DifferentialView:
    mode: ClassVar[AnalysisMode] = AnalysisMode.DIFFERENTIAL
    transform: AlignmentTransform
    crop: CropDetection
    buffer: np.ndarray = field(compare=False, repr=False)


AnalysisPayload = Union[WipeView, IntensityView, DifferentialView]

PAYLOAD_TYPES = {
    AnalysisMode.WIPE: WipeView,
    AnalysisMode.INTENSITY: IntensityView,
    AnalysisMode.DIFFERENTIAL: DifferentialView,
}


@dataclass(frozen=True)
class AnalysisResult:
    generation: int
    payload: AnalysisPayload

    def __post_init__(self):
        if not isinstance(self.payload, tuple(PAYLOAD_TYPES.values())):
            raise TypeError(f"Unsupported analysis payload: {type(self.payload)}")

    @property
    def mode(self) -> AnalysisMode:
        return self.payload.mode
