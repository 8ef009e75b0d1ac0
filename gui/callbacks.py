from tkinter import messagebox

from core.filter_kinds import FilterKind


# ----------------------
# Logging helper
# ----------------------
def _safe_log(app, *args, **kwargs):
    """Try to write to app.log if present, otherwise print to stdout."""
    msg = " ".join(str(a) for a in args) if args else kwargs.get("msg", "")
    if hasattr(app, "log") and callable(getattr(app, "log")):
        app.log(msg)
    else:
        print(msg)


# ----------------------
# Callbacks
# ----------------------
def open_image_callback(app):
    """Present the picker; a picked photo goes straight to the controller."""
    if app.picker.is_open:
        return
    app.picker.present(app.controller.on_image_picked)


def intensity_changed_callback(app, value):
    """
    Slider command: fires on every incremental move, value arrives as a string.
    Moves queued during one render collapse into a single render of the
    latest value, run when Tk is next idle.
    """
    app.pending_intensity = float(value)
    if app.intensity_job is None:
        app.intensity_job = app.after_idle(lambda: flush_intensity(app))


def flush_intensity(app):
    app.intensity_job = None
    app.controller.set_intensity(app.pending_intensity)
    app.intensity_text.set(f"{app.controller.intensity:.2f}")


def change_filter_callback(app, kind: FilterKind):
    app.controller.select_filter(kind)
    app.filter_label.set(kind.label)


def save_output_callback(app):
    """Save the rendered photo into the library; silently nothing when no render exists yet."""

    def on_success(path):
        _safe_log(app, f"Success! Saved → {path}")
        app.status_text.set("Saved")

    def on_error(reason):
        _safe_log(app, f"Oops: {reason}")
        app.status_text.set("Save failed")
        messagebox.showerror("Save Error", f"Saving failed:\n{reason}")

    if app.controller.save(app.writer, success_handler=on_success, error_handler=on_error):
        app.status_text.set("Saving…")
