"""
Block-quantized intensity analysis.

Partitions the overlap region into fixed-size tiles, takes the largest
per-pixel channel delta in each tile and quantizes it into ordered severity
levels for a heatmap. The max (not the mean) is used so a single hard edge
still registers in an otherwise unchanged tile.

Per-pixel delta:
    delta = (|R1 - R2| + |G1 - G2| + |B1 - B2|) / 3

Severity:
    level = min(levels - 1, floor(max_delta / band_width))

With the defaults (5 levels, band width 20) the band edges sit at
0, 20, 40, 60, 80 and 100+.
"""

import logging
import math
from typing import List

import numpy as np

from VD_Libs.CompareLib.comparison_models import DiffBlock, Rect
from VD_Libs.constants import (
    DEFAULT_BLOCK_SIZE,
    DEFAULT_DIFF_THRESHOLD,
    DEFAULT_SEVERITY_BAND_WIDTH,
    DEFAULT_SEVERITY_LEVELS,
)

logger = logging.getLogger(__name__)


def validate_buffer_pair(original_buf: np.ndarray, edited_buf: np.ndarray) -> None:
    """
    Check that two buffers can be compared pixel for pixel.

    Raises:
        ValueError: If shapes differ or the buffers are not (H, W, C>=3)
    """
    if original_buf.shape != edited_buf.shape:
        raise ValueError(
            f"Buffer shapes differ: {original_buf.shape} vs {edited_buf.shape}"
        )
    if original_buf.ndim != 3 or original_buf.shape[2] < 3:
        raise ValueError(f"Expected (H, W, 4) RGBA buffers, got shape {original_buf.shape}")


def compute_channel_delta(original_buf: np.ndarray, edited_buf: np.ndarray) -> np.ndarray:
    """Mean absolute RGB delta per pixel as a float32 (H, W) array."""
    validate_buffer_pair(original_buf, edited_buf)
    diff = np.abs(original_buf[..., :3].astype(np.int16) - edited_buf[..., :3].astype(np.int16))
    return diff.sum(axis=2).astype(np.float32) / 3.0


def severity_level(
    max_delta: float,
    band_width: float = DEFAULT_SEVERITY_BAND_WIDTH,
    levels: int = DEFAULT_SEVERITY_LEVELS,
) -> int:
    """
    Quantize a tile's max delta into a severity level.

    Example:
        >>> severity_level(90)
        4
        >>> severity_level(35)
        1
    """
    if band_width <= 0:
        raise ValueError(f"band_width must be > 0, got {band_width}")
    return max(0, min(levels - 1, int(math.floor(max_delta / band_width))))


def block_edge(block_size: int, sample_scale: float = 1.0) -> int:
    """
    Tile edge in original-frame pixels.

    A block of block_size pixels on a grid sampled at sample_scale spans
    block_size / sample_scale original pixels.

    Example:
        >>> block_edge(16, 0.25)
        64
    """
    if block_size < 1:
        raise ValueError(f"block_size must be >= 1, got {block_size}")
    if not (0 < sample_scale <= 1):
        raise ValueError(f"sample_scale must be 0 < s <= 1, got {sample_scale}")
    return max(1, int(round(block_size / sample_scale)))


def _tile_maxima(delta: np.ndarray, edge: int) -> np.ndarray:
    height, width = delta.shape
    rows = -(-height // edge)
    cols = -(-width // edge)
    padded = np.zeros((rows * edge, cols * edge), dtype=delta.dtype)
    padded[:height, :width] = delta
    return padded.reshape(rows, edge, cols, edge).max(axis=(1, 3))


def analyze_intensity(
    original_buf: np.ndarray,
    edited_buf: np.ndarray,
    overlap: Rect,
    block_size: int = DEFAULT_BLOCK_SIZE,
    threshold: float = DEFAULT_DIFF_THRESHOLD,
    band_width: float = DEFAULT_SEVERITY_BAND_WIDTH,
    levels: int = DEFAULT_SEVERITY_LEVELS,
    sample_scale: float = 1.0,
) -> List[DiffBlock]:
    """
    Compute the changed tiles between two frame-aligned buffers.

    The delta is always taken at full resolution. A sample_scale below 1
    coarsens the tile grid instead of the pixels: each tile is the max over
    block_edge(block_size, sample_scale) original pixels, which equals max
    pooling the delta onto the sampled grid, so a one-pixel edge keeps its
    full delta at any scale.

    Only pixels inside the overlap region contribute, and each emitted block
    is clipped to the overlap so it never shares area with the crop bands.

    Args:
        original_buf: (H, W, 4) uint8 buffer of the original at full resolution
        edited_buf: (H, W, 4) uint8 buffer of the edited image, already
                    resampled into the original's frame
        overlap: Overlap region in original-frame pixels
        block_size: Tile edge length in sampled pixels
        threshold: Tiles with max delta <= threshold emit nothing
        band_width: Delta range covered by each severity level
        levels: Number of severity levels
        sample_scale: Grid sampling factor (0 < s <= 1)

    Returns:
        DiffBlocks in row-major tile order, in original-frame pixels

    Raises:
        ValueError: If the buffers are incompatible, block_size < 1 or the
                    sample_scale is out of range
    """
    edge = block_edge(block_size, sample_scale)

    delta = compute_channel_delta(original_buf, edited_buf)
    height, width = delta.shape

    left, top, right, bottom = overlap.pixel_bounds()
    left, right = max(0, left), min(width, right)
    top, bottom = max(0, top), min(height, bottom)
    if right <= left or bottom <= top:
        return []

    masked = np.zeros_like(delta)
    masked[top:bottom, left:right] = delta[top:bottom, left:right]
    maxima = _tile_maxima(masked, edge)

    blocks: List[DiffBlock] = []
    for row in range(top // edge, -(-bottom // edge)):
        for col in range(left // edge, -(-right // edge)):
            max_delta = float(maxima[row, col])
            if max_delta <= threshold:
                continue

            x0 = max(col * edge, left)
            y0 = max(row * edge, top)
            x1 = min((col + 1) * edge, right)
            y1 = min((row + 1) * edge, bottom)
            blocks.append(DiffBlock(
                x=float(x0),
                y=float(y0),
                width=float(x1 - x0),
                height=float(y1 - y0),
                severity_level=severity_level(max_delta, band_width, levels),
                max_delta=max_delta,
            ))

    logger.debug(f"Intensity analysis: {len(blocks)} changed block(s) of edge {edge}px")
    return blocks
