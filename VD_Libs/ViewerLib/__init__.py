"""
ViewerLib - PyQt5 comparison window

Displays the wipe, intensity and differential views of a session.
"""

from VD_Libs.ViewerLib.comparison_window import ComparisonWindow, WipeCanvas

__all__ = ["ComparisonWindow", "WipeCanvas"]
