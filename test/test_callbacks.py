import numpy as np
import pytest
from PIL import Image

pytest.importorskip("tkinter")

from core.controller import FilterController
from core.filter_kinds import FilterKind
from core.rendering import RenderContext
from gui.callbacks import (
    change_filter_callback,
    intensity_changed_callback,
    open_image_callback,
)
from gui.picker import ImagePicker


class Var:
    def __init__(self):
        self.value = None

    def set(self, value):
        self.value = value


class FakeApp:
    """Just the attributes the callbacks touch; idle jobs run when asked."""

    def __init__(self, controller, picker=None):
        self.controller = controller
        self.picker = picker
        self.intensity_text = Var()
        self.filter_label = Var()
        self.pending_intensity = controller.intensity
        self.intensity_job = None
        self.idle = []
        self.logged = []

    def after_idle(self, fn):
        self.idle.append(fn)
        return f"after#{len(self.idle)}"

    def run_idle(self):
        jobs, self.idle = self.idle, []
        for fn in jobs:
            fn()

    def log(self, msg):
        self.logged.append(msg)


def test_slider_moves_collapse_to_latest_value(rgb_image):
    controller = FilterController(RenderContext())
    controller.on_image_picked(rgb_image)
    app = FakeApp(controller)
    before = controller.context.render_count
    for value in ("0.10", "0.35", "0.62", "0.80"):
        intensity_changed_callback(app, value)
    assert len(app.idle) == 1
    assert controller.context.render_count == before
    app.run_idle()
    assert controller.context.render_count == before + 1
    assert controller.intensity == 0.8
    assert app.intensity_text.value == "0.80"
    assert app.intensity_job is None

def test_slider_renders_again_after_idle_flush(rgb_image):
    controller = FilterController(RenderContext())
    controller.on_image_picked(rgb_image)
    app = FakeApp(controller)
    intensity_changed_callback(app, "0.2")
    app.run_idle()
    intensity_changed_callback(app, "0.4")
    assert len(app.idle) == 1
    app.run_idle()
    assert controller.intensity == 0.4

def test_filter_change_not_logged_twice_to_panel(rgb_image):
    controller = FilterController(RenderContext())
    app = FakeApp(controller)
    change_filter_callback(app, FilterKind.PIXELLATE)
    assert controller.kind is FilterKind.PIXELLATE
    assert app.filter_label.value == "Pixellate"
    assert app.logged == []

def test_pick_not_logged_twice_to_panel(tmp_path, rgb_image):
    p = tmp_path / "photo.png"
    Image.fromarray(rgb_image).save(p)
    controller = FilterController(RenderContext())
    app = FakeApp(controller, picker=ImagePicker(ask_path=lambda: str(p)))
    open_image_callback(app)
    assert np.array_equal(controller.source_image, rgb_image)
    assert app.logged == []
