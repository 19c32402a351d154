"""
Analysis Mode Executors Registry.

This module provides a centralized registry mapping each AnalysisMode to the
executor that builds its result payload. The session looks the executor up
for the active mode, so each mode's analysis is registered in one place.

Classes:
    AnalysisContext: Everything an executor needs for one pass
    AnalysisExecutorRegistry: Registry for mode executors

Functions:
    execute_wipe_mode: Builds the wipe geometry payload
    execute_intensity_mode: Runs crop detection and the block intensity analysis
    execute_differential_mode: Runs crop detection and the full-resolution differential
    get_default_registry: Get the global default registry (singleton)
    register_default_executors: Register the three built-in mode executors
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from VD_Libs.CompareLib.analysis_config import AnalysisConfig
from VD_Libs.CompareLib.analysis_results import (
    AnalysisPayload,
    DifferentialView,
    IntensityView,
    WipeView,
)
from VD_Libs.CompareLib.comparison_models import (
    AlignmentTransform,
    AnalysisMode,
    ImageDescriptor,
)
from VD_Libs.CompareLib.crop_detector import detect_crop_regions
from VD_Libs.CompareLib.differential_mapper import compute_differential
from VD_Libs.CompareLib.intensity_analyzer import analyze_intensity
from VD_Libs.CompareLib.pixel_buffers import extract_buffer_pair

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisContext:
    """Inputs of one analysis pass.

    Attributes:
        original: Decoded original image (RGBA PIL Image)
        edited: Decoded edited image (RGBA PIL Image)
        original_descriptor: Dimensions of the original
        edited_descriptor: Dimensions of the edited image
        transform: Alignment of the edited image into the original frame
        config: Analysis parameters
        wipe_position: Current wipe divider position
    """
    original: Any
    edited: Any
    original_descriptor: ImageDescriptor
    edited_descriptor: ImageDescriptor
    transform: AlignmentTransform
    config: AnalysisConfig
    wipe_position: float


ModeExecutor = Callable[[AnalysisContext], AnalysisPayload]


def execute_wipe_mode(context: AnalysisContext) -> WipeView:
    return WipeView(transform=context.transform, position=context.wipe_position)


def execute_intensity_mode(context: AnalysisContext) -> IntensityView:
    """Crop detection and block analysis, both on full-resolution buffers."""
    config = context.config
    crop = detect_crop_regions(context.original_descriptor, context.edited_descriptor, context.transform)
    pair = extract_buffer_pair(
        context.original,
        context.edited,
        context.transform,
        sample_scale=1.0,
        resample=config.resample,
    )
    blocks = analyze_intensity(
        pair.original,
        pair.edited,
        pair.overlap,
        block_size=config.block_size,
        threshold=config.threshold,
        band_width=config.severity_band_width,
        levels=config.severity_levels,
        sample_scale=config.intensity_sample_scale,
    )
    return IntensityView(
        transform=context.transform,
        crop=crop,
        blocks=tuple(blocks),
        sample_scale=config.intensity_sample_scale,
    )


def execute_differential_mode(context: AnalysisContext) -> DifferentialView:
    crop = detect_crop_regions(context.original_descriptor, context.edited_descriptor, context.transform)
    pair = extract_buffer_pair(
        context.original,
        context.edited,
        context.transform,
        sample_scale=1.0,
        resample=context.config.resample,
    )
    buffer = compute_differential(pair.original, pair.edited, pair.overlap)
    return DifferentialView(transform=context.transform, crop=crop, buffer=buffer)


class AnalysisExecutorRegistry:
    """
    Registry for analysis mode executors.

    Example:
        >>> registry = AnalysisExecutorRegistry()
        >>> registry.register(AnalysisMode.INTENSITY, execute_intensity_mode)
        >>> payload = registry.execute(AnalysisMode.INTENSITY, context)
    """

    def __init__(self):
        """Initialize an empty registry."""
        self._executors: Dict[AnalysisMode, ModeExecutor] = {}
        self._descriptions: Dict[AnalysisMode, str] = {}

    def register(
        self,
        mode: AnalysisMode,
        executor: ModeExecutor,
        description: str = "",
    ) -> None:
        """
        Register an executor for a mode.

        Args:
            mode: The analysis mode (an AnalysisMode or its string value)
            executor: Callable accepting an AnalysisContext and returning the payload
            description: Human-readable description, shown as the mode's tooltip

        Raises:
            ValueError: If mode is unknown or executor is not callable
            RuntimeError: If the mode already has an executor
        """
        mode = AnalysisMode.from_value(mode)

        if not callable(executor):
            raise ValueError(f"executor must be callable, got {type(executor)}")

        if mode in self._executors:
            raise RuntimeError(
                f"Mode '{mode.value}' is already registered. "
                f"Use unregister() first to replace it."
            )

        self._executors[mode] = executor
        self._descriptions[mode] = str(description)
        logger.debug(f"Registered executor for mode: {mode.value}")

    def unregister(self, mode: AnalysisMode) -> bool:
        """
        Remove a mode's executor.

        Returns:
            True if removed, False if the mode was not registered
        """
        mode = AnalysisMode.from_value(mode)
        if mode in self._executors:
            del self._executors[mode]
            del self._descriptions[mode]
            logger.debug(f"Unregistered executor for mode: {mode.value}")
            return True
        return False

    def get_executor(self, mode: AnalysisMode) -> ModeExecutor:
        """
        Raises:
            KeyError: If the mode has no executor
        """
        mode = AnalysisMode.from_value(mode)
        if mode not in self._executors:
            available = ", ".join(m.value for m in self.list_modes())
            raise KeyError(
                f"No executor registered for mode '{mode.value}'. "
                f"Available modes: {available}"
            )
        return self._executors[mode]

    def has_executor(self, mode: AnalysisMode) -> bool:
        return AnalysisMode.from_value(mode) in self._executors

    def get_description(self, mode: AnalysisMode) -> str:
        """Description of a registered mode ('' when the mode has none)."""
        return self._descriptions.get(AnalysisMode.from_value(mode), "")

    def execute(self, mode: AnalysisMode, context: AnalysisContext) -> AnalysisPayload:
        """
        Run the executor registered for a mode.

        Raises:
            KeyError: If the mode has no executor
            TypeError: If the executor returns a payload for another mode
        """
        mode = AnalysisMode.from_value(mode)
        payload = self.get_executor(mode)(context)
        payload_mode = getattr(payload, "mode", None)
        if payload_mode is not mode:
            raise TypeError(
                f"Executor for mode '{mode.value}' returned {type(payload).__name__}"
            )
        return payload

    def list_modes(self) -> List[AnalysisMode]:
        """Registered modes, in declaration order."""
        return [mode for mode in AnalysisMode if mode in self._executors]


# Global singleton registry
_default_registry: Optional[AnalysisExecutorRegistry] = None


def get_default_registry() -> AnalysisExecutorRegistry:
    """
    Get the global default registry (singleton).

    Creates the registry on first call and registers the default executors.
    """
    global _default_registry

    if _default_registry is None:
        _default_registry = AnalysisExecutorRegistry()
        register_default_executors(_default_registry)

    return _default_registry


def register_default_executors(registry: AnalysisExecutorRegistry) -> None:
    """Register the wipe, intensity and differential executors."""
    registry.register(
        AnalysisMode.WIPE,
        execute_wipe_mode,
        description="Drag across the image to wipe between edited and original",
    )
    registry.register(
        AnalysisMode.INTENSITY,
        execute_intensity_mode,
        description="Heatmap of changed blocks, darker where the change is stronger",
    )
    registry.register(
        AnalysisMode.DIFFERENTIAL,
        execute_differential_mode,
        description="Per-pixel absolute color difference at full resolution",
    )
    logger.info("Registered default analysis executors")
