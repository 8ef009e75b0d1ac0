import logging
import queue
import threading
import ttkbootstrap as ttk
import tkinter as tk
from ttkbootstrap.constants import *
from tkinter import StringVar, DoubleVar
from tkinter.scrolledtext import ScrolledText

from core.config import AppConfig, load_config
from core.controller import FilterController
from core.filter_kinds import FilterKind
from core.log import LOG_FORMAT, get_logger
from core.rendering import RenderContext
from io_utils.photo_library import PhotoLibraryWriter
from .callbacks import (
    change_filter_callback,
    intensity_changed_callback,
    open_image_callback,
    save_output_callback,
)
from .picker import ImagePicker
from .utils import np_to_tkimage

PLACEHOLDER_TEXT = "Tap to select a picture"
UI_POLL_MS = 50


class _LogBoxHandler(logging.Handler):
    """Mirror log records into the app's log panel (main thread only; the stream handler still prints)."""

    def __init__(self, app):
        super().__init__(level=logging.INFO)
        self.app = app
        self.setFormatter(logging.Formatter(LOG_FORMAT))

    def emit(self, record):
        if threading.current_thread() is not threading.main_thread():
            return
        self.app.log(self.format(record))


class FilterPhotoApp(ttk.Window):
    def __init__(self, config: AppConfig = None, title="FilterPhoto"):
        self.app_config = config or load_config()
        super().__init__(themename=self.app_config.theme)
        self.title(title)
        self.geometry("900x760")

        # handler calls posted from writer threads, run on the Tk thread
        self._ui_calls = queue.Queue()

        # Model
        self.context = RenderContext()
        self.controller = FilterController(
            self.context,
            kind=self.app_config.filter_kind,
            intensity=self.app_config.default_intensity,
            on_render=self.preview_rendered,
        )
        self.writer = PhotoLibraryWriter(
            self.app_config.library_dir,
            self.app_config.image_format,
            dispatch=lambda fn, *args: self._ui_calls.put((fn, args)),
        )
        self.picker = ImagePicker(parent=self)

        # Variables
        self.intensity_val = DoubleVar(value=self.controller.intensity)
        self.intensity_text = StringVar(value=f"{self.controller.intensity:.2f}")
        self.filter_label = StringVar(value=self.controller.kind.label)
        self.status_text = StringVar(value="")

        self._preview_np = None
        self._preview_tkimage = None
        self.pending_intensity = self.controller.intensity
        self.intensity_job = None

        # Build UI
        self._build_layout()
        self._log_handler = _LogBoxHandler(self)
        get_logger().addHandler(self._log_handler)
        self.protocol("WM_DELETE_WINDOW", self._on_close)
        self.after(UI_POLL_MS, self._drain_ui_calls)

    def log(self, msg: str):
        """
        GUI logger: append message to the ScrolledText log_box if available,
        otherwise print to stdout.
        """
        box = getattr(self, "log_box", None)
        if box is None:
            print(str(msg))
            return
        box.insert("end", str(msg).rstrip() + "\n")
        box.see("end")

    # --- Layout ---
    def _build_layout(self):
        root = ttk.Frame(self)
        root.pack(fill=BOTH, expand=True, padx=12, pady=(8, 12))

        # Preview: clicking it opens the picker
        self.preview_canvas = tk.Canvas(root, background="#6c757d", highlightthickness=0, cursor="hand2")
        self.preview_canvas.pack(fill=BOTH, expand=True)
        self.preview_canvas.bind("<Button-1>", lambda e: open_image_callback(self))
        self.preview_canvas.bind("<Configure>", self._on_canvas_resized)

        # Intensity slider, re-renders on every move
        row = ttk.Frame(root)
        row.pack(fill=X, pady=10)
        ttk.Label(row, text="Intensity").pack(side=LEFT, padx=(0, 8))
        ttk.Label(row, textvariable=self.intensity_text, width=5).pack(side=RIGHT)
        ttk.Scale(
            row,
            from_=0.0,
            to=1.0,
            variable=self.intensity_val,
            command=lambda value: intensity_changed_callback(self, value),
        ).pack(side=LEFT, fill=X, expand=True)

        # Filter menu + Save
        buttons = ttk.Frame(root)
        buttons.pack(fill=X)
        menubutton = ttk.Menubutton(buttons, text="Change Filter", bootstyle=PRIMARY)
        menu = tk.Menu(menubutton, tearoff=0)
        for kind in FilterKind:
            menu.add_command(label=kind.label, command=lambda k=kind: change_filter_callback(self, k))
        menu.add_separator()
        menu.add_command(label="Cancel", command=lambda: None)
        menubutton["menu"] = menu
        menubutton.pack(side=LEFT)
        ttk.Label(buttons, textvariable=self.filter_label).pack(side=LEFT, padx=10)
        ttk.Button(buttons, text="Save", bootstyle=SUCCESS, command=lambda: save_output_callback(self)).pack(side=RIGHT)
        ttk.Label(buttons, textvariable=self.status_text).pack(side=RIGHT, padx=10)

        ttk.Separator(root).pack(fill=X, pady=8)
        ttk.Label(root, text="Logs:").pack(anchor=W)
        self.log_box = ScrolledText(root, height=6, wrap="word")
        self.log_box.configure(font=("Helvetica", 10))
        self.log_box.pack(fill=X, pady=(4, 0))

    # --- Preview ---
    def _on_canvas_resized(self, event):
        if event.width > 1 and event.height > 1:
            # live renders only need the canvas size; Save renders full size
            self.controller.set_preview_box((event.width, event.height))
        self._redraw_preview()

    def preview_rendered(self, arr):
        self._preview_np = arr
        self._redraw_preview()

    def _redraw_preview(self):
        canvas = self.preview_canvas
        cw = max(canvas.winfo_width(), 1)
        ch = max(canvas.winfo_height(), 1)
        canvas.delete("all")
        if self._preview_np is None:
            canvas.create_text(cw // 2, ch // 2, text=PLACEHOLDER_TEXT, fill="white", font=("Helvetica", 14, "bold"))
            return
        self._preview_tkimage = np_to_tkimage(self._preview_np, box=(cw, ch))
        canvas.create_image(cw // 2, ch // 2, anchor="center", image=self._preview_tkimage)

    def _drain_ui_calls(self):
        while True:
            try:
                fn, args = self._ui_calls.get_nowait()
            except queue.Empty:
                break
            fn(*args)
        self.after(UI_POLL_MS, self._drain_ui_calls)

    def _on_close(self):
        if self.writer.pending():
            self.status_text.set("Finishing save…")
            self.update_idletasks()
        # writer threads only post to _ui_calls, never into Tk
        self.writer.wait_pending()
        get_logger().removeHandler(self._log_handler)
        self.destroy()


def launch_app():
    app = FilterPhotoApp()
    app.mainloop()


if __name__ == "__main__":
    launch_app()
