"""
Exception types raised by the comparison engine.

Classes:
    VisionaryDiffError: Base class for all engine errors
    DecodeFailure: A source image could not be decoded
    InvalidMetadata: An image descriptor has a zero or negative dimension
"""


class VisionaryDiffError(Exception):
    """Base class for errors raised by Visionary Diff."""


class DecodeFailure(VisionaryDiffError, ValueError):
    """Raised when either source image fails to decode."""

    def __init__(self, message: str, source_name: str = "") -> None:
        super().__init__(message)
        self.source_name = source_name


class InvalidMetadata(VisionaryDiffError, ValueError):
    """Raised when an image descriptor violates the non-zero size precondition."""
