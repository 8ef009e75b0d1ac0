# visuals/__init__.py
"""
Visual helpers for FilterPhoto.
Provides comparison figures used by the batch script.
"""
from .plots import compare_and_save, plot_filter_gallery

__all__ = [
    "compare_and_save",
    "plot_filter_gallery",
]
