"""
Crop / removal detection.

Flags the parts of the original frame that the aligned edited image does
not cover. Because the edited image is contain-fit and centered, the
uncovered area is at most four bands around the overlap region. The
intensity analysis never looks at these bands, so the two overlays are
complementary.
"""

import logging
from typing import List

from VD_Libs.CompareLib.alignment import compute_overlap_region
from VD_Libs.CompareLib.comparison_models import (
    AlignmentTransform,
    CropDetection,
    ImageDescriptor,
    Rect,
)
from VD_Libs.constants import ALIGNMENT_EPSILON

logger = logging.getLogger(__name__)


def has_missing_area(transform: AlignmentTransform, epsilon: float = ALIGNMENT_EPSILON) -> bool:
    """True when the aligned edited image leaves a border of the original uncovered."""
    return transform.offset_x > epsilon or transform.offset_y > epsilon


def _band_rects(frame: Rect, overlap: Rect) -> List[Rect]:
    bands = [
        # top
        Rect(frame.x, frame.y, frame.width, overlap.y - frame.y),
        # bottom
        Rect(frame.x, overlap.bottom, frame.width, frame.bottom - overlap.bottom),
        # left
        Rect(frame.x, overlap.y, overlap.x - frame.x, overlap.height),
        # right
        Rect(overlap.right, overlap.y, frame.right - overlap.right, overlap.height),
    ]
    return [band for band in bands if band.width > ALIGNMENT_EPSILON and band.height > ALIGNMENT_EPSILON]


def detect_crop_regions(
    original: ImageDescriptor,
    edited: ImageDescriptor,
    transform: AlignmentTransform,
) -> CropDetection:
    """
    Detect original-frame regions missing from the edited image.

    Args:
        original: Dimensions of the original image
        edited: Dimensions of the edited image
        transform: Alignment from resolve_alignment()

    Returns:
        CropDetection with up to four band rects and an outline rect equal to
        the overlap region, all in original-image pixel coordinates. When no
        area is missing both are empty.

    Example:
        >>> t = resolve_alignment(ImageDescriptor(1000, 1000), ImageDescriptor(1000, 500))
        >>> detect_crop_regions(ImageDescriptor(1000, 1000), ImageDescriptor(1000, 500), t).band_rects
        (Rect(x=0.0, y=0.0, width=1000.0, height=250.0), Rect(x=0.0, y=750.0, width=1000.0, height=250.0))
    """
    if not has_missing_area(transform):
        return CropDetection(has_missing_area=False)

    frame = Rect(0.0, 0.0, float(original.width), float(original.height))
    overlap = compute_overlap_region(original, edited, transform)
    bands = tuple(_band_rects(frame, overlap))

    logger.debug(f"Missing area detected: {len(bands)} band(s) around {overlap}")
    return CropDetection(has_missing_area=True, band_rects=bands, outline_rect=overlap)
