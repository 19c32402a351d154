"""
Full-resolution per-pixel differential map.

Inside the overlap region each output pixel is the absolute RGB delta
between the two images with full opacity. Outside it the output is fully
transparent so whatever is drawn beneath (the crop highlight) stays visible.
"""

import logging
from typing import Any

import numpy as np
from PIL import Image

from VD_Libs.CompareLib.comparison_models import Rect
from VD_Libs.CompareLib.intensity_analyzer import validate_buffer_pair

logger = logging.getLogger(__name__)


def compute_differential(
    original_buf: np.ndarray,
    edited_buf: np.ndarray,
    overlap: Rect,
) -> np.ndarray:
    """
    Compute the per-pixel absolute delta buffer.

    Args:
        original_buf: (H, W, 4) uint8 buffer of the original at full resolution
        edited_buf: (H, W, 4) uint8 buffer of the edited image resampled into
                    the original frame
        overlap: Overlap region in buffer coordinates

    Returns:
        (H, W, 4) uint8 buffer: (|dR|, |dG|, |dB|, 255) inside the overlap,
        (0, 0, 0, 0) outside

    Raises:
        ValueError: If the buffers are incompatible
    """
    validate_buffer_pair(original_buf, edited_buf)
    height, width = original_buf.shape[:2]
    output = np.zeros((height, width, 4), dtype=np.uint8)

    left, top, right, bottom = overlap.pixel_bounds()
    left, right = max(0, left), min(width, right)
    top, bottom = max(0, top), min(height, bottom)
    if right <= left or bottom <= top:
        return output

    region_a = original_buf[top:bottom, left:right, :3].astype(np.int16)
    region_b = edited_buf[top:bottom, left:right, :3].astype(np.int16)
    output[top:bottom, left:right, :3] = np.abs(region_a - region_b).astype(np.uint8)
    output[top:bottom, left:right, 3] = 255

    logger.debug(f"Differential map computed over {right - left}x{bottom - top} pixels")
    return output


def differential_to_image(buffer: np.ndarray) -> Any:
    """Wrap a differential buffer as an RGBA PIL Image."""
    if buffer.ndim != 3 or buffer.shape[2] != 4:
        raise ValueError(f"Expected (H, W, 4) buffer, got shape {buffer.shape}")
    return Image.fromarray(np.ascontiguousarray(buffer, dtype=np.uint8))
