import threading
import numpy as np
import pytest
from core.controller import FilterController
from core.filter_kinds import FilterKind, map_intensity
from core.filters import FilterError, apply_filter
from core.rendering import RenderContext, RenderStatus
from io_utils.image_handler import read_image
from io_utils.photo_library import PhotoLibraryWriter


class RecordingWriter:
    def __init__(self):
        self.calls = []

    def write_photo_to_album(self, image, success_handler=None, error_handler=None, label="photo", intensity=None):
        self.calls.append((image, label))
        success_handler("memory://" + label)


@pytest.fixture
def controller():
    return FilterController(RenderContext())


def test_defaults(controller):
    assert controller.kind is FilterKind.SEPIA_TONE
    assert controller.intensity == 0.5
    assert controller.source_image is None
    assert controller.rendered_output is None

def test_intensity_change_without_source_never_renders(controller):
    for v in np.linspace(0.0, 1.0, 11):
        assert controller.set_intensity(v) is RenderStatus.NO_SOURCE
    assert controller.rendered_output is None
    assert controller.context.render_count == 0

def test_select_filter_without_source_skips_render(controller):
    assert controller.select_filter(FilterKind.VIGNETTE) is RenderStatus.NO_SOURCE
    assert controller.kind is FilterKind.VIGNETTE
    assert controller.context.render_count == 0

def test_pick_renders_with_current_filter(controller, rgb_image):
    assert controller.on_image_picked(rgb_image) is RenderStatus.RENDERED
    assert controller.rendered_output.shape == rgb_image.shape

def test_sepia_scenario(controller, rgb_image):
    controller.on_image_picked(rgb_image)
    controller.select_filter("sepia_tone")
    controller.set_intensity(0.5)
    assert controller.parameters == {"intensity": 0.5}

def test_gaussian_blur_scenario(controller, rgb_image):
    controller.on_image_picked(rgb_image)
    controller.select_filter(FilterKind.GAUSSIAN_BLUR)
    controller.set_intensity(0.5)
    assert controller.parameters == {"radius": 100.0}

def test_pixellate_scenario(controller, rgb_image):
    controller.on_image_picked(rgb_image)
    controller.select_filter("Pixellate")
    controller.set_intensity(0.5)
    assert controller.parameters == {"scale": 5.0}

def test_every_slider_move_re_renders(controller, rgb_image):
    controller.on_image_picked(rgb_image)
    before = controller.context.render_count
    for v in (0.1, 0.2, 0.3):
        controller.set_intensity(v)
    assert controller.context.render_count == before + 3

def test_render_is_pure_function_of_inputs(rgb_image):
    a = FilterController(RenderContext(), kind=FilterKind.CRYSTALLIZE, intensity=0.05)
    b = FilterController(RenderContext(), kind=FilterKind.CRYSTALLIZE)
    a.on_image_picked(rgb_image)
    b.on_image_picked(rgb_image.copy())
    b.select_filter(FilterKind.EDGES)
    b.select_filter(FilterKind.CRYSTALLIZE)
    b.set_intensity(0.05)
    assert np.array_equal(a.rendered_output, b.rendered_output)

def test_cancelled_pick_keeps_previous_output(controller, rgb_image):
    controller.on_image_picked(rgb_image)
    output = controller.rendered_output
    assert controller.on_image_picked(None) is None
    assert controller.rendered_output is output
    assert controller.source_image is not None
    assert np.array_equal(controller.source_image, rgb_image)

def test_filter_failure_keeps_previous_output(controller, rgb_image):
    controller.on_image_picked(rgb_image)
    output = controller.rendered_output
    status = controller.on_image_picked(np.zeros((4, 4), dtype=np.uint8))
    assert status is RenderStatus.FILTER_FAILED
    assert controller.last_status is RenderStatus.FILTER_FAILED
    assert controller.rendered_output is output

def test_intensity_is_clamped(controller):
    controller.set_intensity(4.0)
    assert controller.intensity == 1.0
    controller.set_intensity(-1.0)
    assert controller.intensity == 0.0

def test_on_render_notified(rgb_image):
    seen = []
    c = FilterController(RenderContext(), on_render=seen.append)
    c.set_intensity(0.2)
    assert seen == []
    c.on_image_picked(rgb_image)
    assert len(seen) == 1
    assert seen[0] is c.rendered_output

def test_save_without_render_is_noop(controller):
    writer = RecordingWriter()
    called = []
    saved = controller.save(writer, success_handler=called.append, error_handler=called.append)
    assert saved is False
    assert writer.calls == []
    assert called == []

def test_save_hands_rendered_output_to_writer(controller, rgb_image):
    controller.on_image_picked(rgb_image)
    writer = RecordingWriter()
    ok, failed = [], []
    assert controller.save(writer, success_handler=ok.append, error_handler=failed.append)
    assert len(writer.calls) == 1
    image, label = writer.calls[0]
    assert image is controller.rendered_output
    assert label == "sepia_tone"
    assert ok == ["memory://sepia_tone"]
    assert failed == []

def test_save_to_library_fires_exactly_one_callback(controller, rgb_image, tmp_path):
    controller.on_image_picked(rgb_image)
    writer = PhotoLibraryWriter(str(tmp_path / "library"))
    done = threading.Event()
    events = []

    def on_success(path):
        events.append(("ok", path))
        done.set()

    def on_error(reason):
        events.append(("error", reason))
        done.set()

    assert controller.save(writer, success_handler=on_success, error_handler=on_error)
    assert done.wait(10)
    assert len(events) == 1
    assert events[0][0] == "ok"


class ShapeRecordingContext(RenderContext):
    def __init__(self, failing=()):
        super().__init__()
        self.shapes = []
        self.failing = set(failing)

    def render(self, kind, params, source):
        if kind in self.failing:
            raise FilterError(f"{kind.value} unavailable")
        self.shapes.append(source.shape)
        return super().render(kind, params, source)


def _wait_for_save(controller, writer):
    done = threading.Event()
    events = []

    def on_success(path):
        events.append(("ok", path))
        done.set()

    def on_error(reason):
        events.append(("error", reason))
        done.set()

    assert controller.save(writer, success_handler=on_success, error_handler=on_error)
    assert done.wait(10)
    return events

def test_live_renders_use_display_sized_copy(rgb_image):
    context = ShapeRecordingContext()
    c = FilterController(context, preview_box=(8, 6))
    c.on_image_picked(rgb_image)
    for v in (0.1, 0.4, 0.9):
        c.set_intensity(v)
    c.select_filter(FilterKind.CRYSTALLIZE)
    assert context.shapes == [(6, 8, 3)] * 5
    assert c.rendered_output.shape == (6, 8, 3)
    assert c.source_image.shape == rgb_image.shape

def test_preview_box_change_re_renders(rgb_image):
    c = FilterController(RenderContext())
    c.on_image_picked(rgb_image)
    assert c.rendered_output.shape == rgb_image.shape
    assert c.set_preview_box((16, 12)) is RenderStatus.RENDERED
    assert c.rendered_output.shape == (12, 16, 3)
    assert c.set_preview_box((16, 12)) is None
    assert c.set_preview_box(None) is RenderStatus.RENDERED
    assert c.rendered_output.shape == rgb_image.shape

def test_save_from_preview_writes_full_size(rgb_image, tmp_path):
    c = FilterController(RenderContext(), preview_box=(8, 6))
    c.on_image_picked(rgb_image)
    c.set_intensity(0.8)
    events = _wait_for_save(c, PhotoLibraryWriter(str(tmp_path / "library")))
    assert events[0][0] == "ok"
    saved, _ = read_image(events[0][1])
    expected = apply_filter(FilterKind.SEPIA_TONE, rgb_image, map_intensity(FilterKind.SEPIA_TONE, 0.8))
    assert np.array_equal(saved, expected)
    assert "_sepia_tone_i-0.80_" in events[0][1]

def test_save_names_the_kind_that_rendered(rgb_image):
    c = FilterController(ShapeRecordingContext(failing={FilterKind.EDGES}))
    c.on_image_picked(rgb_image)
    sepia_output = c.rendered_output
    assert c.select_filter(FilterKind.EDGES) is RenderStatus.FILTER_FAILED
    writer = RecordingWriter()
    assert c.save(writer, success_handler=lambda p: None)
    image, label = writer.calls[0]
    assert image is sepia_output
    assert label == "sepia_tone"

def test_non_numeric_intensity_is_ignored(controller, rgb_image):
    controller.on_image_picked(rgb_image)
    controller.set_intensity(0.3)
    count = controller.context.render_count
    assert controller.set_intensity(float("nan")) is RenderStatus.RENDERED
    assert controller.set_intensity("loud") is RenderStatus.RENDERED
    assert controller.intensity == 0.3
    assert controller.context.render_count == count
