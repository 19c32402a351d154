"""
Wipe comparison between the original and edited images.

A vertical divider splits the view: the edited image (placed through the
alignment transform) is visible left of the divider, the original to the
right. The divider position is a percentage of the viewport width driven by
pointer input. No pixel comparison happens here.

Example:
    >>> wipe = WipeComparator()
    >>> wipe.update_from_pointer(pointer_x=350, container_left=100, container_width=500)
    50.0
    >>> frame = wipe.render(original, edited, transform)
    >>> frame.image.save("wipe.png")
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from PIL import Image, ImageDraw

from VD_Libs.CompareLib.comparison_models import AlignmentTransform, Rect
from VD_Libs.CompareLib.pixel_buffers import descriptor_of, extract_edited_buffer
from VD_Libs.constants import (
    DEFAULT_RESAMPLE,
    WIPE_DEFAULT_POSITION,
    WIPE_DIVIDER_COLOR,
    WIPE_DIVIDER_WIDTH,
    WIPE_MAX_POSITION,
    WIPE_MIN_POSITION,
)

logger = logging.getLogger(__name__)


def clamp_position(value: float) -> float:
    return max(WIPE_MIN_POSITION, min(WIPE_MAX_POSITION, float(value)))


@dataclass(frozen=True)
class WipeFrame:
    """A rendered wipe view.

    Attributes:
        image: Composited RGBA PIL Image in the original's frame
        position: Divider position (0-100) used for the render
        clip_rect: Region where the edited layer is visible
        divider_x: Divider x coordinate in image pixels
    """
    image: Any
    position: float
    clip_rect: Rect
    divider_x: int


class WipeComparator:
    """Holds the wipe divider position and renders the split view."""

    def __init__(self, default_position: float = WIPE_DEFAULT_POSITION, resample: str = DEFAULT_RESAMPLE):
        self.default_position = clamp_position(default_position)
        self.resample = resample
        self._position = self.default_position
        # (edited image, transform, frame size, aligned RGBA layer)
        self._layer_cache: Optional[Tuple[Any, AlignmentTransform, Tuple[int, int], Any]] = None

    @property
    def position(self) -> float:
        return self._position

    def set_position(self, value: float) -> float:
        self._position = clamp_position(value)
        return self._position

    def reset(self) -> float:
        """Return the divider to its default; called whenever a new pair loads."""
        self._position = self.default_position
        self._layer_cache = None
        return self._position

    def update_from_pointer(self, pointer_x: float, container_left: float, container_width: float) -> float:
        """
        Move the divider to follow a pointer.

        Args:
            pointer_x: Pointer x in the same space as container_left
            container_left: Left edge of the viewport
            container_width: Width of the viewport

        Returns:
            The new position, clamped to 0-100. A viewport with no width
            leaves the position unchanged.
        """
        if container_width <= 0:
            logger.debug(f"Ignoring pointer move over zero-width container ({container_width})")
            return self._position
        return self.set_position(((pointer_x - container_left) / container_width) * 100)

    def clip_rect(self, viewport_width: float, viewport_height: float) -> Rect:
        """Region of the viewport where the edited layer shows."""
        return Rect(0.0, 0.0, viewport_width * self._position / 100, float(viewport_height))

    def aligned_layer(self, original: Any, edited: Any, transform: AlignmentTransform) -> Any:
        """
        The edited image placed in the original's frame as an RGBA layer.

        The layer is cached for the current pair, so pointer moves only
        recomposite instead of resampling the edited image again.
        """
        cached = self._layer_cache
        if (
            cached is not None
            and cached[0] is edited
            and cached[1] == transform
            and cached[2] == original.size
        ):
            return cached[3]

        layer = Image.fromarray(
            extract_edited_buffer(edited, transform, descriptor_of(original), 1.0, self.resample)
        )
        self._layer_cache = (edited, transform, original.size, layer)
        return layer

    def render(
        self,
        original: Any,
        edited: Any,
        transform: AlignmentTransform,
        position: Optional[float] = None,
        draw_divider: bool = True,
    ) -> WipeFrame:
        """
        Composite the split view in the original's frame.

        Args:
            original: PIL Image of the original (fills the frame)
            edited: PIL Image of the edited variant
            transform: Alignment of the edited image into the original frame
            position: Override the divider position for this render
            draw_divider: Draw the divider line

        Returns:
            WipeFrame with the composited image
        """
        if position is not None:
            self.set_position(position)

        base = original.convert("RGBA")
        width, height = base.size

        clip = self.clip_rect(width, height)
        divider_x = int(round(clip.width))
        if divider_x > 0:
            edited_layer = self.aligned_layer(original, edited, transform)
            base.alpha_composite(edited_layer.crop((0, 0, divider_x, height)), (0, 0))

        if draw_divider:
            line_x = min(divider_x, width - 1)
            ImageDraw.Draw(base).line(
                [(line_x, 0), (line_x, height)],
                fill=WIPE_DIVIDER_COLOR,
                width=WIPE_DIVIDER_WIDTH,
            )

        return WipeFrame(image=base, position=self._position, clip_rect=clip, divider_x=divider_x)
