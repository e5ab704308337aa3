"""
Overlay rendering for detection results.
"""

from .overlay import OverlayStyle, composite, format_label, label_origin, render_overlay

__all__ = ["OverlayStyle", "composite", "format_label", "label_origin", "render_overlay"]
