"""
Unit tests for the wipe comparator.
"""

import pytest

from VD_Libs.CompareLib.alignment import resolve_alignment
from VD_Libs.CompareLib.comparison_models import Rect
from VD_Libs.CompareLib.pixel_buffers import descriptor_of
from VD_Libs.CompareLib import wipe_comparator
from VD_Libs.CompareLib.wipe_comparator import WipeComparator, clamp_position

RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)


class TestPointerTracking:
    """Tests for divider position updates."""

    def test_default_position_is_centered(self):
        assert WipeComparator().position == 50.0

    def test_pointer_in_middle_of_container(self):
        wipe = WipeComparator()
        assert wipe.update_from_pointer(350, 100, 500) == 50.0

    def test_pointer_at_quarter(self):
        wipe = WipeComparator()
        assert wipe.update_from_pointer(225, 100, 500) == 25.0

    def test_pointer_left_of_container_clamps_to_zero(self):
        wipe = WipeComparator()
        assert wipe.update_from_pointer(-400, 100, 500) == 0.0

    def test_pointer_right_of_container_clamps_to_hundred(self):
        wipe = WipeComparator()
        assert wipe.update_from_pointer(5000, 100, 500) == 100.0

    def test_zero_width_container_leaves_position_unchanged(self):
        wipe = WipeComparator()
        wipe.set_position(30)

        assert wipe.update_from_pointer(350, 100, 0) == 30.0
        assert wipe.position == 30.0

    def test_reset_returns_to_default(self):
        wipe = WipeComparator(default_position=40)
        wipe.set_position(90)

        assert wipe.reset() == 40.0

    @pytest.mark.parametrize("value,expected", [(-1, 0.0), (0, 0.0), (55.5, 55.5), (101, 100.0)])
    def test_clamp_position(self, value, expected):
        assert clamp_position(value) == expected

    def test_clip_rect_follows_position(self):
        wipe = WipeComparator()
        wipe.set_position(25)

        assert wipe.clip_rect(400, 300) == Rect(0.0, 0.0, 100.0, 300.0)


class TestRender:
    """Tests for WipeComparator.render."""

    def _render(self, solid_image, position, edited_size=(100, 100), draw_divider=False):
        original = solid_image(100, 100, RED)
        edited = solid_image(*edited_size, BLUE)
        transform = resolve_alignment(descriptor_of(original), descriptor_of(edited))
        return WipeComparator().render(original, edited, transform, position=position, draw_divider=draw_divider)

    def test_edited_left_original_right(self, solid_image):
        frame = self._render(solid_image, 50)

        assert frame.divider_x == 50
        assert frame.image.getpixel((10, 50)) == BLUE
        assert frame.image.getpixel((90, 50)) == RED

    def test_zero_position_shows_only_original(self, solid_image):
        frame = self._render(solid_image, 0)

        assert frame.divider_x == 0
        assert frame.image.getpixel((0, 50)) == RED

    def test_full_position_shows_only_edited(self, solid_image):
        frame = self._render(solid_image, 100)

        assert frame.image.getpixel((99, 50)) == BLUE

    def test_letterboxed_edited_leaves_original_visible(self, solid_image):
        """Outside the aligned footprint the original shows even left of the divider."""
        frame = self._render(solid_image, 100, edited_size=(100, 50))

        assert frame.image.getpixel((50, 10)) == RED
        assert frame.image.getpixel((50, 50)) == BLUE
        assert frame.image.getpixel((50, 90)) == RED

    def test_render_does_not_modify_inputs(self, solid_image):
        original = solid_image(20, 20, RED)
        edited = solid_image(20, 20, BLUE)
        transform = resolve_alignment(descriptor_of(original), descriptor_of(edited))

        WipeComparator().render(original, edited, transform)

        assert original.getpixel((5, 5)) == RED

    def test_divider_is_drawn(self, solid_image):
        frame = self._render(solid_image, 50, draw_divider=True)

        assert frame.image.getpixel((50, 50)) == (255, 255, 255, 255)
        assert frame.position == 50.0


class TestAlignedLayerCache:
    """Pointer moves reuse the aligned edited layer."""

    @pytest.fixture
    def counted_extract(self, monkeypatch):
        calls = []
        original_extract = wipe_comparator.extract_edited_buffer

        def counting(*args, **kwargs):
            calls.append(args)
            return original_extract(*args, **kwargs)

        monkeypatch.setattr(wipe_comparator, "extract_edited_buffer", counting)
        return calls

    def test_repeated_renders_resample_once(self, solid_image, counted_extract):
        original = solid_image(60, 60, RED)
        edited = solid_image(60, 30, BLUE)
        transform = resolve_alignment(descriptor_of(original), descriptor_of(edited))
        wipe = WipeComparator()

        wipe.render(original, edited, transform, position=20)
        frame = wipe.render(original, edited, transform, position=80)

        assert len(counted_extract) == 1
        assert frame.image.getpixel((40, 30)) == BLUE

    def test_reset_and_new_pair_invalidate_layer(self, solid_image, counted_extract):
        original = solid_image(60, 60, RED)
        edited = solid_image(60, 60, BLUE)
        transform = resolve_alignment(descriptor_of(original), descriptor_of(edited))
        wipe = WipeComparator()

        wipe.render(original, edited, transform)
        wipe.reset()
        wipe.render(original, edited, transform)
        assert len(counted_extract) == 2

        other = solid_image(60, 60, RED)
        frame = wipe.render(original, other, transform, position=100)
        assert len(counted_extract) == 3
        assert frame.image.getpixel((10, 10)) == RED
