"""
Unit tests for the differential map.
"""

import numpy as np
import pytest

from VD_Libs.CompareLib.comparison_models import Rect
from VD_Libs.CompareLib.differential_mapper import compute_differential, differential_to_image


def filled(width, height, rgba):
    return np.tile(np.array(rgba, dtype=np.uint8), (height, width, 1))


class TestComputeDifferential:
    """Tests for compute_differential function."""

    def test_inside_overlap_is_absolute_delta_and_opaque(self):
        original = filled(4, 4, (10, 200, 30, 255))
        edited = filled(4, 4, (50, 100, 30, 0))

        output = compute_differential(original, edited, Rect(0.0, 0.0, 4.0, 4.0))

        assert np.all(output == (40, 100, 0, 255))

    def test_outside_overlap_is_transparent(self):
        original = filled(4, 4, (10, 200, 30, 255))
        edited = filled(4, 4, (50, 100, 30, 255))

        output = compute_differential(original, edited, Rect(0.0, 1.0, 4.0, 2.0))

        assert np.all(output[0] == 0)
        assert np.all(output[3] == 0)
        assert np.all(output[1:3, :, 3] == 255)
        assert np.all(output[1:3, :, :3] == (40, 100, 0))

    def test_identical_buffers_are_black_inside_overlap(self):
        original = filled(3, 3, (90, 90, 90, 255))

        output = compute_differential(original, original.copy(), Rect(0.0, 0.0, 3.0, 3.0))

        assert np.all(output[..., :3] == 0)
        assert np.all(output[..., 3] == 255)

    def test_output_dimensions_match_input(self):
        original = filled(7, 5, (0, 0, 0, 255))

        output = compute_differential(original, original, Rect(0.0, 0.0, 7.0, 5.0))

        assert output.shape == (5, 7, 4)
        assert output.dtype == np.uint8

    def test_shape_mismatch_raises(self):
        with pytest.raises(ValueError):
            compute_differential(filled(4, 4, (0, 0, 0, 0)), filled(4, 3, (0, 0, 0, 0)), Rect(0, 0, 4, 4))

    def test_empty_overlap_is_fully_transparent(self):
        original = filled(4, 4, (0, 0, 0, 255))
        edited = filled(4, 4, (255, 255, 255, 255))

        output = compute_differential(original, edited, Rect(0.0, 0.0, 0.0, 0.0))

        assert not output.any()


class TestDifferentialToImage:
    """Tests for differential_to_image function."""

    def test_wraps_as_rgba_image(self):
        buffer = filled(6, 2, (1, 2, 3, 255))

        image = differential_to_image(buffer)

        assert image.mode == "RGBA"
        assert image.size == (6, 2)
        assert image.getpixel((5, 1)) == (1, 2, 3, 255)

    def test_rejects_rgb_buffer(self):
        with pytest.raises(ValueError):
            differential_to_image(np.zeros((2, 2, 3), dtype=np.uint8))
