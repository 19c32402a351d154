"""
SessionLib - Background comparison passes

This module schedules decoding and analysis on worker threads, maps each
analysis mode to its executor and guards against stale results.
"""

from VD_Libs.SessionLib.analysis_executors import (
    AnalysisContext,
    AnalysisExecutorRegistry,
    execute_differential_mode,
    execute_intensity_mode,
    execute_wipe_mode,
    get_default_registry,
    register_default_executors,
)
from VD_Libs.SessionLib.analysis_session import (
    ComparisonSession,
    GenerationCounter,
    ImagePair,
)

__all__ = [
    "AnalysisContext",
    "AnalysisExecutorRegistry",
    "execute_differential_mode",
    "execute_intensity_mode",
    "execute_wipe_mode",
    "get_default_registry",
    "register_default_executors",
    "ComparisonSession",
    "GenerationCounter",
    "ImagePair",
]
