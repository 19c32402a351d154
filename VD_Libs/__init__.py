"""
VD_Libs - Visionary Diff Library Modules

This package contains core functionality for the Visionary Diff project,
organized into specialized sub-packages:

- CompareLib: Alignment, pixel buffer extraction and the comparison analyses
- SessionLib: Background analysis passes, mode executors and stale-result guarding
- ViewerLib: PyQt5 comparison window
"""

__version__ = "0.1.0"
