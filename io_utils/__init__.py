# io_utils/__init__.py
"""
I/O helpers package for FilterPhoto.
"""
from .image_handler import read_image, save_image, to_rgb, load_rgb
from .file_utils import make_result_filename, save_parameters_txt
from .photo_library import PhotoLibraryWriter

__all__ = [
    "read_image",
    "save_image",
    "to_rgb",
    "load_rgb",
    "make_result_filename",
    "save_parameters_txt",
    "PhotoLibraryWriter",
]
