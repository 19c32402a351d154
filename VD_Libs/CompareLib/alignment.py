"""
Alignment of an edited image into the original image's frame.

The edited image is contain-fit into the original frame: scaled uniformly
to the largest size that fits on both axes, then centered. This is the only
registration method; rotation and non-uniform scaling are not supported.

Functions:
    validate_descriptor: Reject descriptors with a zero or negative dimension
    resolve_alignment: Compute the contain-fit transform for an image pair
    compute_overlap_region: Rect of the original frame covered by the edited image
    original_frame: Rect covering the whole original frame
"""

import logging

from VD_Libs.CompareLib.comparison_models import AlignmentTransform, ImageDescriptor, Rect
from VD_Libs.errors import InvalidMetadata

logger = logging.getLogger(__name__)


def validate_descriptor(descriptor: ImageDescriptor, role: str = "image") -> ImageDescriptor:
    """
    Check the non-zero size precondition of an image descriptor.

    Args:
        descriptor: Descriptor to validate
        role: Name used in the error message ("original", "edited", ...)

    Returns:
        The descriptor, unchanged

    Raises:
        InvalidMetadata: If width or height is not a positive integer
    """
    width = descriptor.width
    height = descriptor.height
    if not isinstance(width, int) or not isinstance(height, int):
        raise InvalidMetadata(
            f"{role} dimensions must be integers, got {width!r} x {height!r}"
        )
    if width <= 0 or height <= 0:
        raise InvalidMetadata(f"{role} has invalid dimensions {width} x {height}")
    return descriptor


def resolve_alignment(original: ImageDescriptor, edited: ImageDescriptor) -> AlignmentTransform:
    """
    Compute the contain-fit + center transform for an image pair.

    Both descriptors must already satisfy validate_descriptor().

    Args:
        original: Dimensions of the original image (the reference frame)
        edited: Dimensions of the edited image

    Returns:
        Transform mapping edited pixel coordinates into the original frame

    Example:
        >>> resolve_alignment(ImageDescriptor(1000, 1000), ImageDescriptor(1000, 500))
        AlignmentTransform(offset_x=0.0, offset_y=250.0, scale=1.0)
    """
    if original.width == edited.width and original.height == edited.height:
        return AlignmentTransform(offset_x=0.0, offset_y=0.0, scale=1.0)

    scale = min(original.width / edited.width, original.height / edited.height)
    display_width = edited.width * scale
    display_height = edited.height * scale
    transform = AlignmentTransform(
        offset_x=(original.width - display_width) / 2,
        offset_y=(original.height - display_height) / 2,
        scale=scale,
    )
    logger.debug(
        f"Resolved alignment {edited.width}x{edited.height} -> "
        f"{original.width}x{original.height}: {transform}"
    )
    return transform


def original_frame(original: ImageDescriptor) -> Rect:
    return Rect(0.0, 0.0, float(original.width), float(original.height))


def compute_overlap_region(
    original: ImageDescriptor,
    edited: ImageDescriptor,
    transform: AlignmentTransform,
) -> Rect:
    """
    Rect of the original frame covered by the transformed edited image.

    The footprint is clipped to the original frame, so an edited image larger
    than the original (negative offsets) still yields a rect inside the frame.
    """
    footprint = Rect(
        transform.offset_x,
        transform.offset_y,
        edited.width * transform.scale,
        edited.height * transform.scale,
    )
    return footprint.intersect(original_frame(original))
