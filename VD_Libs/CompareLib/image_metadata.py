"""
Image metadata helpers.

Collects the display information shown next to each image (name, byte
size, dimensions) and converts it into the ImageDescriptor consumed by the
alignment stage.
"""

import io
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from PIL import Image, UnidentifiedImageError

from VD_Libs.CompareLib.alignment import validate_descriptor
from VD_Libs.CompareLib.comparison_models import ImageDescriptor
from VD_Libs.constants import EDITED_NAME_SUFFIX, FILE_SIZE_UNITS
from VD_Libs.errors import DecodeFailure


def format_file_size(byte_count: int) -> str:
    """
    Format a byte count for display.

    Example:
        >>> format_file_size(0)
        '0 Bytes'
        >>> format_file_size(1536)
        '1.5 KB'
    """
    if byte_count < 0:
        raise ValueError(f"byte_count must be >= 0, got {byte_count}")
    if byte_count == 0:
        return "0 Bytes"
    exponent = 0
    value = float(byte_count)
    while value >= 1024 and exponent < len(FILE_SIZE_UNITS) - 1:
        value /= 1024
        exponent += 1
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {FILE_SIZE_UNITS[exponent]}"


@dataclass(frozen=True)
class ImageMetadata:
    name: str
    byte_size: int
    width: int
    height: int

    @property
    def dimensions(self) -> str:
        return f"{self.width} x {self.height}"

    @property
    def size_label(self) -> str:
        return format_file_size(self.byte_size)

    def descriptor(self) -> ImageDescriptor:
        return ImageDescriptor(width=self.width, height=self.height)

    def summary(self) -> str:
        return f"{self.name} | {self.dimensions} | {self.size_label}"


def metadata_from_bytes(data: bytes, name: str) -> ImageMetadata:
    """
    Read dimensions from encoded image bytes without a full decode.

    Raises:
        DecodeFailure: If the header cannot be read
        InvalidMetadata: If the reported dimensions are zero
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            width, height = img.size
    except (UnidentifiedImageError, OSError) as e:
        raise DecodeFailure(f"Could not read image header of {name}: {e}", source_name=name) from e

    validate_descriptor(ImageDescriptor(width, height), role=name)
    return ImageMetadata(name=name, byte_size=len(data), width=width, height=height)


def read_image_metadata(path: Union[str, Path]) -> ImageMetadata:
    """Read metadata for an image file on disk."""
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Image file not found: {path}")
    return metadata_from_bytes(path.read_bytes(), path.name)


def edited_metadata(original: ImageMetadata, data: bytes) -> ImageMetadata:
    """Metadata for an edited variant, named after its original."""
    return metadata_from_bytes(data, f"{original.name}{EDITED_NAME_SUFFIX}")
