"""
Constants and configuration values for Visionary Diff.

This module centralizes all constant values, magic numbers, and
configuration settings used throughout the application.
"""

# Alignment
ALIGNMENT_EPSILON = 1e-6

# Intensity analysis defaults
DEFAULT_BLOCK_SIZE = 16
DEFAULT_DIFF_THRESHOLD = 10.0
DEFAULT_SEVERITY_LEVELS = 5
DEFAULT_SEVERITY_BAND_WIDTH = 20.0
DEFAULT_INTENSITY_SAMPLE_SCALE = 1.0
MAX_BLOCK_SIZE = 512

# Wipe comparator
WIPE_MIN_POSITION = 0.0
WIPE_MAX_POSITION = 100.0
WIPE_DEFAULT_POSITION = 50.0
WIPE_DIVIDER_COLOR = (255, 255, 255, 255)
WIPE_DIVIDER_WIDTH = 2

# Resampling filter names (Pillow Image.Resampling members)
DEFAULT_RESAMPLE = "bilinear"
SUPPORTED_RESAMPLE = {"nearest", "bilinear", "bicubic", "lanczos"}

# Crop overlay colors (RGBA)
CROP_FILL_COLOR = (239, 68, 68, 77)
CROP_STROKE_COLOR = (239, 68, 68, 255)
CROP_STROKE_WIDTH = 4
CROP_LABEL_TEXT = "CROP AREA DETECTED"
CROP_LABEL_OFFSET = (10, 10)

# Intensity heatmap palette, lightest to darkest (RGBA)
SEVERITY_PALETTE = (
    (254, 240, 138, 140),
    (253, 186, 116, 150),
    (249, 115, 22, 160),
    (220, 38, 38, 170),
    (127, 29, 29, 185),
)
BLOCK_OUTLINE_COLOR = (255, 255, 255, 60)
BLOCK_OUTLINE_WIDTH = 1

# Background dimming for the intensity view
ORIGINAL_BACKDROP_OPACITY = 0.4
BACKDROP_COLOR = (23, 23, 23, 255)

# Metadata
EDITED_NAME_SUFFIX = " (edited)"
FILE_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")

# Session
DECODE_WORKERS = 2
DEFAULT_ANALYSIS_WORKERS = 1
LOAD_WORKERS = 2

# Supported file formats
SUPPORTED_STANDARD_IMAGES = {".png", ".jpg", ".jpeg", ".bmp", ".gif", ".tiff", ".webp"}

# UI constants
DEFAULT_WINDOW_WIDTH = 1400
DEFAULT_WINDOW_HEIGHT = 850
BUSY_LABEL_TEXT = "Analyzing Pixels..."
