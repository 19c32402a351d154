"""
Overlay rendering for analysis results.

Turns the geometry and buffers produced by the analyses into RGBA PIL
images in the original's frame:

- Crop overlay: translucent red bands, an outline of the overlap region and
  a "CROP AREA DETECTED" label
- Intensity overlay: dimmed original, crop overlay, then heatmap blocks
  colored from a fixed darkening palette with a thin outline
- Differential overlay: crop highlight beneath, differential map on top
  (transparent outside the overlap, so the highlight shows through)
"""

from typing import Any, Iterable, Optional, Sequence, Tuple

from PIL import Image, ImageDraw, ImageFont

from VD_Libs.CompareLib.analysis_results import (
    AnalysisResult,
    DifferentialView,
    IntensityView,
    WipeView,
)
from VD_Libs.CompareLib.comparison_models import CropDetection, DiffBlock, Rect, RgbaColor
from VD_Libs.CompareLib.differential_mapper import differential_to_image
from VD_Libs.CompareLib.wipe_comparator import WipeComparator
from VD_Libs.constants import (
    BACKDROP_COLOR,
    BLOCK_OUTLINE_COLOR,
    BLOCK_OUTLINE_WIDTH,
    CROP_FILL_COLOR,
    CROP_LABEL_OFFSET,
    CROP_LABEL_TEXT,
    CROP_STROKE_COLOR,
    CROP_STROKE_WIDTH,
    ORIGINAL_BACKDROP_OPACITY,
    SEVERITY_PALETTE,
)


def _box(rect: Rect) -> Tuple[int, int, int, int]:
    left, top, right, bottom = rect.pixel_bounds()
    # PIL boxes are inclusive of the bottom-right corner
    return left, top, max(left, right - 1), max(top, bottom - 1)


def severity_color(level: int, palette: Sequence[RgbaColor] = SEVERITY_PALETTE) -> RgbaColor:
    """Palette color for a severity level, clamped to the palette range."""
    return palette[max(0, min(len(palette) - 1, int(level)))]


def render_crop_overlay(size: Tuple[int, int], detection: CropDetection, draw_label: bool = True) -> Any:
    """
    Render the missing-area overlay on a transparent canvas.

    Args:
        size: (width, height) of the original frame
        detection: Result of detect_crop_regions()
        draw_label: Draw the explanatory label inside the outline

    Returns:
        RGBA PIL Image; fully transparent when nothing is missing
    """
    overlay = Image.new("RGBA", size, (0, 0, 0, 0))
    if not detection.has_missing_area:
        return overlay

    draw = ImageDraw.Draw(overlay)
    for band in detection.band_rects:
        draw.rectangle(_box(band), fill=CROP_FILL_COLOR)

    outline = detection.outline_rect
    if outline is not None and not outline.is_empty:
        draw.rectangle(_box(outline), outline=CROP_STROKE_COLOR, width=CROP_STROKE_WIDTH)
        if draw_label:
            left, top, _, _ = outline.pixel_bounds()
            draw.text(
                (left + CROP_LABEL_OFFSET[0], top + CROP_LABEL_OFFSET[1]),
                CROP_LABEL_TEXT,
                fill=CROP_STROKE_COLOR,
                font=ImageFont.load_default(),
            )
    return overlay


def render_block_overlay(size: Tuple[int, int], blocks: Iterable[DiffBlock]) -> Any:
    """Heatmap blocks on a transparent canvas."""
    overlay = Image.new("RGBA", size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)
    for block in blocks:
        draw.rectangle(
            _box(block.rect),
            fill=severity_color(block.severity_level),
            outline=BLOCK_OUTLINE_COLOR,
            width=BLOCK_OUTLINE_WIDTH,
        )
    return overlay


def dimmed_backdrop(original: Any, opacity: float = ORIGINAL_BACKDROP_OPACITY) -> Any:
    """The original blended over a dark backdrop at the given opacity."""
    rgba = original.convert("RGBA")
    backdrop = Image.new("RGBA", rgba.size, BACKDROP_COLOR)
    return Image.blend(backdrop, rgba, opacity)


def render_intensity_overlay(original: Any, blocks: Iterable[DiffBlock], detection: CropDetection) -> Any:
    canvas = dimmed_backdrop(original)
    canvas.alpha_composite(render_crop_overlay(canvas.size, detection))
    canvas.alpha_composite(render_block_overlay(canvas.size, blocks))
    return canvas


def render_differential_overlay(detection: CropDetection, differential: Any) -> Any:
    """
    Composite the differential map over the crop highlight.

    Args:
        detection: Result of detect_crop_regions()
        differential: (H, W, 4) buffer from compute_differential()

    Returns:
        RGBA PIL Image the size of the original frame
    """
    diff_image = differential_to_image(differential)
    canvas = Image.new("RGBA", diff_image.size, BACKDROP_COLOR)
    canvas.alpha_composite(render_crop_overlay(canvas.size, detection, draw_label=False))
    canvas.alpha_composite(diff_image)
    return canvas


def render_result(
    original: Any,
    edited: Any,
    result: AnalysisResult,
    wipe: Optional[WipeComparator] = None,
) -> Any:
    """
    Render whichever view the result carries.

    Args:
        original: PIL Image of the original
        edited: PIL Image of the edited variant
        result: Published analysis result
        wipe: Comparator holding the live divider position (wipe mode only)

    Returns:
        RGBA PIL Image in the original's frame
    """
    payload = result.payload
    if isinstance(payload, WipeView):
        comparator = wipe if wipe is not None else WipeComparator(default_position=payload.position)
        return comparator.render(original, edited, payload.transform).image
    if isinstance(payload, IntensityView):
        return render_intensity_overlay(original, payload.blocks, payload.crop)
    if isinstance(payload, DifferentialView):
        return render_differential_overlay(payload.crop, payload.buffer)
    raise TypeError(f"Unsupported analysis payload: {type(payload)}")
