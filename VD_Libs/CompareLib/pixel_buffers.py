"""
Pixel Buffer Extraction.

Decodes source images and produces addressable RGBA numpy buffers in the
original image's frame. The edited image is resampled through the alignment
transform into a transparent canvas the size of the (optionally reduced)
original frame, so both buffers share one coordinate system.

The analyses all compare full-resolution buffers (sample_scale=1.0).
Reduced buffers are resampled, which averages neighbouring pixels, so they
suit previews but not delta computation. Rounding can make a reduced grid
scale the two axes slightly differently; BufferPair keeps both factors.

Example:
    >>> original = decode_image(Path("photo.png"))
    >>> edited = decode_image(edited_bytes)
    >>> transform = resolve_alignment(descriptor_of(original), descriptor_of(edited))
    >>> pair = extract_buffer_pair(original, edited, transform, sample_scale=0.25)
    >>> pair.original.shape
    (250, 250, 4)
"""

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, BinaryIO, Tuple, Union

import numpy as np
from PIL import Image, UnidentifiedImageError

from VD_Libs.CompareLib.alignment import compute_overlap_region
from VD_Libs.CompareLib.comparison_models import AlignmentTransform, ImageDescriptor, Rect
from VD_Libs.constants import DEFAULT_RESAMPLE
from VD_Libs.errors import DecodeFailure

logger = logging.getLogger(__name__)

ImageSource = Union[bytes, bytearray, str, Path, BinaryIO]

_RESAMPLE_FILTERS = {
    "nearest": Image.Resampling.NEAREST,
    "bilinear": Image.Resampling.BILINEAR,
    "bicubic": Image.Resampling.BICUBIC,
    "lanczos": Image.Resampling.LANCZOS,
}


@dataclass(frozen=True)
class BufferPair:
    """Original and edited RGBA buffers sampled into one frame.

    Attributes:
        original: (H, W, 4) uint8 buffer of the original image
        edited: (H, W, 4) uint8 buffer of the edited image, transparent
                outside its aligned footprint
        overlap: Region covered by the edited image, in buffer coordinates
        scale_x: Buffer columns per original-image column
        scale_y: Buffer rows per original-image row
    """
    original: np.ndarray
    edited: np.ndarray
    overlap: Rect
    scale_x: float
    scale_y: float

    @property
    def size(self) -> Tuple[int, int]:
        height, width = self.original.shape[:2]
        return width, height

    def to_frame(self, rect: Rect) -> Rect:
        """Map a rect in buffer coordinates back to original-image pixels."""
        return _scale_rect(rect, 1 / self.scale_x, 1 / self.scale_y)


def _source_name(source: Any) -> str:
    if isinstance(source, (str, Path)):
        return Path(source).name
    if isinstance(source, (bytes, bytearray)):
        return f"<{len(source)} bytes>"
    return str(getattr(source, "name", "<stream>"))


def decode_image(source: ImageSource) -> Any:
    """
    Decode an image source into an RGBA PIL Image.

    Args:
        source: Encoded bytes, a filesystem path, or a binary file object

    Returns:
        Fully loaded PIL Image in RGBA mode

    Raises:
        DecodeFailure: If the source cannot be read or decoded
    """
    name = _source_name(source)
    if isinstance(source, (bytes, bytearray)):
        source = io.BytesIO(bytes(source))

    try:
        with Image.open(source) as img:
            img.load()
            decoded = img.convert("RGBA")
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        logger.warning(f"Failed to decode image {name}: {e}")
        raise DecodeFailure(f"Could not decode image {name}: {e}", source_name=name) from e

    logger.debug(f"Decoded {name}: {decoded.width}x{decoded.height}")
    return decoded


def descriptor_of(image: Any) -> ImageDescriptor:
    return ImageDescriptor(width=int(image.width), height=int(image.height))


def get_resample_filter(name: str = DEFAULT_RESAMPLE) -> Image.Resampling:
    key = str(name).lower()
    if key not in _RESAMPLE_FILTERS:
        valid = ", ".join(sorted(_RESAMPLE_FILTERS))
        raise ValueError(f"Unknown resample filter: {name}. Valid filters: {valid}")
    return _RESAMPLE_FILTERS[key]


def sampled_size(width: int, height: int, sample_scale: float) -> Tuple[int, int]:
    """Buffer size for a frame sampled at sample_scale (never below 1x1)."""
    if not (0 < sample_scale <= 1):
        raise ValueError(f"sample_scale must be 0 < s <= 1, got {sample_scale}")
    return max(1, int(round(width * sample_scale))), max(1, int(round(height * sample_scale)))


def _scale_rect(rect: Rect, scale_x: float, scale_y: float) -> Rect:
    return Rect(rect.x * scale_x, rect.y * scale_y, rect.width * scale_x, rect.height * scale_y)


def extract_original_buffer(
    image: Any,
    sample_scale: float = 1.0,
    resample: str = DEFAULT_RESAMPLE,
) -> np.ndarray:
    """
    Sample the original image into an RGBA buffer.

    Args:
        image: PIL Image of the original
        sample_scale: Buffer pixels per image pixel (0 < s <= 1)
        resample: Resize filter name

    Returns:
        (H, W, 4) uint8 array
    """
    rgba = image.convert("RGBA") if image.mode != "RGBA" else image
    target = sampled_size(rgba.width, rgba.height, sample_scale)
    if target != rgba.size:
        rgba = rgba.resize(target, get_resample_filter(resample))
    return np.array(rgba, dtype=np.uint8)


def extract_edited_buffer(
    image: Any,
    transform: AlignmentTransform,
    frame: ImageDescriptor,
    sample_scale: float = 1.0,
    resample: str = DEFAULT_RESAMPLE,
) -> np.ndarray:
    """
    Resample the edited image into the original frame.

    The edited image is scaled and offset per the transform and pasted onto
    a fully transparent canvas of the sampled frame size. With an identity
    transform at full scale the pixels are copied without resampling.

    Args:
        image: PIL Image of the edited variant
        transform: Alignment of the edited image into the original frame
        frame: Dimensions of the original image
        sample_scale: Buffer pixels per original-image pixel (0 < s <= 1)
        resample: Resize filter name

    Returns:
        (H, W, 4) uint8 array matching extract_original_buffer() for the frame
    """
    rgba = image.convert("RGBA") if image.mode != "RGBA" else image
    canvas_size = sampled_size(frame.width, frame.height, sample_scale)
    scale_x = canvas_size[0] / frame.width
    scale_y = canvas_size[1] / frame.height

    footprint = _scale_rect(
        Rect(
            transform.offset_x,
            transform.offset_y,
            rgba.width * transform.scale,
            rgba.height * transform.scale,
        ),
        scale_x,
        scale_y,
    )
    left, top, right, bottom = footprint.pixel_bounds()
    canvas = Image.new("RGBA", canvas_size, (0, 0, 0, 0))

    target = (right - left, bottom - top)
    if target[0] > 0 and target[1] > 0:
        if target != rgba.size:
            rgba = rgba.resize(target, get_resample_filter(resample))
        canvas.paste(rgba, (left, top))

    return np.array(canvas, dtype=np.uint8)


def extract_buffer_pair(
    original: Any,
    edited: Any,
    transform: AlignmentTransform,
    sample_scale: float = 1.0,
    resample: str = DEFAULT_RESAMPLE,
) -> BufferPair:
    """
    Extract both buffers and the overlap region at one sampling resolution.

    Args:
        original: PIL Image of the original
        edited: PIL Image of the edited variant
        transform: Alignment from resolve_alignment()
        sample_scale: Buffer pixels per original-image pixel (0 < s <= 1)
        resample: Resize filter name

    Returns:
        BufferPair with the overlap expressed in buffer coordinates
    """
    frame = descriptor_of(original)
    original_buf = extract_original_buffer(original, sample_scale, resample)
    edited_buf = extract_edited_buffer(edited, transform, frame, sample_scale, resample)

    height, width = original_buf.shape[:2]
    scale_x = width / frame.width
    scale_y = height / frame.height
    overlap = compute_overlap_region(frame, descriptor_of(edited), transform)
    buffer_overlap = _scale_rect(overlap, scale_x, scale_y)

    logger.debug(
        f"Extracted buffers at scale {sample_scale}: {width}x{height}, overlap {buffer_overlap}"
    )
    return BufferPair(
        original=original_buf,
        edited=edited_buf,
        overlap=buffer_overlap,
        scale_x=scale_x,
        scale_y=scale_y,
    )
