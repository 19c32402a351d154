"""
CompareLib - Image comparison and difference visualization

This module provides alignment, pixel buffer extraction, the wipe
comparator and the crop, intensity and differential analyses.
"""

from VD_Libs.CompareLib.comparison_models import (
    AlignmentTransform,
    AnalysisMode,
    CropDetection,
    DiffBlock,
    ImageDescriptor,
    Rect,
    RgbaColor,
)
from VD_Libs.CompareLib.analysis_config import AnalysisConfig
from VD_Libs.CompareLib.analysis_results import (
    AnalysisResult,
    DifferentialView,
    IntensityView,
    WipeView,
)
from VD_Libs.CompareLib.alignment import (
    compute_overlap_region,
    resolve_alignment,
    validate_descriptor,
)
from VD_Libs.CompareLib.pixel_buffers import (
    BufferPair,
    decode_image,
    descriptor_of,
    extract_buffer_pair,
    extract_edited_buffer,
    extract_original_buffer,
)
from VD_Libs.CompareLib.wipe_comparator import WipeComparator, WipeFrame
from VD_Libs.CompareLib.crop_detector import detect_crop_regions, has_missing_area
from VD_Libs.CompareLib.intensity_analyzer import analyze_intensity, block_edge, severity_level
from VD_Libs.CompareLib.differential_mapper import compute_differential, differential_to_image
from VD_Libs.CompareLib.image_metadata import (
    ImageMetadata,
    edited_metadata,
    format_file_size,
    metadata_from_bytes,
    read_image_metadata,
)

__all__ = [
    "AlignmentTransform",
    "AnalysisMode",
    "CropDetection",
    "DiffBlock",
    "ImageDescriptor",
    "Rect",
    "RgbaColor",
    "AnalysisConfig",
    "AnalysisResult",
    "DifferentialView",
    "IntensityView",
    "WipeView",
    "compute_overlap_region",
    "resolve_alignment",
    "validate_descriptor",
    "BufferPair",
    "decode_image",
    "descriptor_of",
    "extract_buffer_pair",
    "extract_edited_buffer",
    "extract_original_buffer",
    "WipeComparator",
    "WipeFrame",
    "detect_crop_regions",
    "has_missing_area",
    "analyze_intensity",
    "block_edge",
    "severity_level",
    "compute_differential",
    "differential_to_image",
    "ImageMetadata",
    "edited_metadata",
    "format_file_size",
    "metadata_from_bytes",
    "read_image_metadata",
]
