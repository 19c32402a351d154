"""
Pytest configuration and shared fixtures for Visionary Diff tests.

This module provides shared test fixtures and configuration
used across multiple test modules.
"""

import io

import pytest
from PIL import Image


def encode_image(image, fmt="PNG") -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def solid_image():
    """
    Factory for solid-color RGBA images.

    Returns:
        Callable (width, height, color) -> PIL Image
    """
    def _make(width, height, color=(128, 128, 128, 255)):
        return Image.new("RGBA", (width, height), color)
    return _make


@pytest.fixture
def png_bytes():
    """
    Factory for PNG-encoded solid-color images.

    Returns:
        Callable (width, height, color) -> bytes
    """
    def _make(width, height, color=(128, 128, 128, 255)):
        return encode_image(Image.new("RGBA", (width, height), color))
    return _make

