# io_utils/photo_library.py
"""
Photo library writer.

The library is a directory. write_photo_to_album() encodes the image on a
background thread and reports back through one of two handler slots:
  - success_handler(path)   the file was written
  - error_handler(reason)   it was not; `reason` is a readable message
Exactly one handler is called, once, per write. A `dispatch` callable can be
given to run handlers on the UI thread (e.g. by posting them to a queue the
UI drains).

`image` may also be a zero-argument callable returning the image; it is
called on the writer thread, so a full-size render does not block the UI.
Writer threads are not daemons: wait_pending() lets the app finish them
before it exits.
"""

import threading
from typing import Callable, List, Optional, Union
import numpy as np

from core.log import get_logger
from .file_utils import make_result_filename
from .image_handler import save_image

logger = get_logger(__name__)

SuccessHandler = Callable[[str], None]
ErrorHandler = Callable[[str], None]
ImageSource = Union[np.ndarray, Callable[[], np.ndarray]]


def _call_now(fn, *args):
    fn(*args)


class PhotoLibraryWriter:
    def __init__(
        self,
        library_dir: str,
        image_format: str = "png",
        dispatch: Optional[Callable] = None,
        success_handler: Optional[SuccessHandler] = None,
        error_handler: Optional[ErrorHandler] = None,
    ):
        self.library_dir = library_dir
        self.image_format = image_format.lstrip(".").lower()
        self.dispatch = dispatch or _call_now
        self.success_handler = success_handler
        self.error_handler = error_handler
        self._workers: List[threading.Thread] = []
        self._lock = threading.Lock()

    def write_photo_to_album(
        self,
        image: ImageSource,
        success_handler: Optional[SuccessHandler] = None,
        error_handler: Optional[ErrorHandler] = None,
        label: str = "photo",
        intensity: Optional[float] = None,
    ) -> threading.Thread:
        """
        Start writing `image` into the library and return the worker thread.
        Per-call handlers take precedence over the instance slots.
        """
        on_success = success_handler or self.success_handler
        on_error = error_handler or self.error_handler
        if callable(image):
            pixels = image
        else:
            # snapshot so later renders cannot change what gets written
            pixels = np.array(image, copy=True)

        worker = threading.Thread(
            target=self._write,
            args=(pixels, label, intensity, on_success, on_error),
            name="photo-library-writer",
        )
        with self._lock:
            self._workers = [w for w in self._workers if w.is_alive()]
            self._workers.append(worker)
        worker.start()
        return worker

    def pending(self) -> int:
        with self._lock:
            return sum(1 for w in self._workers if w.is_alive())

    def wait_pending(self, timeout: Optional[float] = None) -> bool:
        """Join every running write. Returns True when none is left running."""
        with self._lock:
            workers = list(self._workers)
        for w in workers:
            w.join(timeout)
        return self.pending() == 0

    def _write(self, pixels, label, intensity, on_success, on_error):
        try:
            if callable(pixels):
                pixels = pixels()
            path = make_result_filename(label, intensity, ext=self.image_format, outdir=self.library_dir)
            save_image(path, pixels)
        except (OSError, ValueError) as e:
            reason = str(e) or e.__class__.__name__
            logger.error("Saving to library failed: %s", reason)
            if on_error is not None:
                self.dispatch(on_error, reason)
            return
        logger.info("Saved to library: %s", path)
        if on_success is not None:
            self.dispatch(on_success, path)
