"""
Media picker adapter: wraps the native "open image" dialog.

present(on_selected) opens the dialog once. A picked file is decoded to an
HxWx3 uint8 array and handed to on_selected exactly once; cancelling (or a
file that cannot be decoded) hands over nothing.
"""

from typing import Callable, Optional
import numpy as np

from core.log import get_logger
from io_utils.image_handler import load_rgb

logger = get_logger(__name__)

FILETYPES = [
    ("Image Files", "*.png *.jpg *.jpeg *.tif *.tiff *.bmp *.gif *.webp *.avif"),
    ("All Files", "*.*"),
]


class ImagePicker:
    def __init__(
        self,
        parent=None,
        ask_path: Optional[Callable[[], str]] = None,
        reader: Callable[[str], np.ndarray] = load_rgb,
    ):
        self.parent = parent
        self._ask_path = ask_path or self._ask_open_filename
        self.reader = reader
        self.is_open = False
        self.last_path: Optional[str] = None

    def _ask_open_filename(self) -> str:
        from tkinter import filedialog
        return filedialog.askopenfilename(parent=self.parent, title="Select Picture", filetypes=FILETYPES)

    def present(self, on_selected: Callable[[np.ndarray], None]) -> bool:
        """Return True if an image was delivered to `on_selected`."""
        self.is_open = True
        try:
            path = self._ask_path()
        finally:
            self.is_open = False

        if not path:
            logger.debug("Picker cancelled.")
            return False

        try:
            image = self.reader(path)
        except (OSError, ValueError) as e:
            logger.warning("Could not open %s: %s", path, e)
            return False

        self.last_path = path
        logger.info("Picked %s", path)
        on_selected(image)
        return True
