"""
core/controller.py

FilterController: state behind the single app screen.

Holds the active filter kind, the intensity, the picked source image and the
most recent rendered output, and re-renders on every user action:

- select_filter(kind)      -> switch kind, re-render
- set_intensity(value)     -> store, re-render (called on every slider move)
- on_image_picked(image)   -> store as source, re-render (None = cancelled)
- set_preview_box(box)     -> render live output at display size from now on
- save(writer, ...)        -> hand the full-size output to the library writer

With a preview box set, `rendered_output` is display-sized and save()
renders the full-size photo on the writer's thread. Both renders are
functions of (source, kind, intensity) only.

Rendering never raises. A missing source or a failing filter leaves the
previous output in place; `last_status` says which of the two happened.
"""

from functools import partial
from typing import Callable, Dict, Optional, Tuple, Union
import numpy as np

from .filter_kinds import (
    DEFAULT_INTENSITY,
    DEFAULT_KIND,
    FilterKind,
    clamp_intensity,
    map_intensity,
    scale_pixel_params,
)
from .filters import FilterError
from .log import get_logger
from .rendering import RenderContext, RenderStatus, reduce_to_box

logger = get_logger(__name__)


class FilterController:
    def __init__(
        self,
        context: RenderContext,
        kind: Union[FilterKind, str] = DEFAULT_KIND,
        intensity: float = DEFAULT_INTENSITY,
        on_render: Optional[Callable[[np.ndarray], None]] = None,
        preview_box: Optional[Tuple[int, int]] = None,
    ):
        self.context = context
        self.kind = FilterKind.parse(kind)
        self.intensity = clamp_intensity(intensity)
        self.parameters: Dict[str, float] = map_intensity(self.kind, self.intensity)
        self.on_render = on_render
        self.preview_box = preview_box

        self.source_image: Optional[np.ndarray] = None
        self.rendered_output: Optional[np.ndarray] = None
        self.last_status: Optional[RenderStatus] = None

        # display-sized copy of source_image and the factor it was reduced by
        self._preview_source: Optional[np.ndarray] = None
        self._preview_factor = 1.0
        # (kind, intensity, parameters, source, preview factor) behind rendered_output
        self._rendered_with = None

    # --- UI callbacks ---
    def select_filter(self, kind: Union[FilterKind, str]) -> RenderStatus:
        self.kind = FilterKind.parse(kind)
        logger.info("Filter: %s", self.kind.label)
        return self.apply_processing()

    def set_intensity(self, value: float) -> Optional[RenderStatus]:
        """
        Store the slider value (clamped to [0, 1]) and re-render. A value that
        is not a number is logged and ignored; nothing changes and the last
        status is returned.
        """
        try:
            self.intensity = clamp_intensity(value)
        except (TypeError, ValueError) as e:
            logger.warning("Ignoring intensity %r: %s", value, e)
            return self.last_status
        return self.apply_processing()

    def on_image_picked(self, image: Optional[np.ndarray]) -> Optional[RenderStatus]:
        if image is None:
            logger.debug("Picker dismissed without a selection.")
            return None
        self.source_image = np.asarray(image)
        self._update_preview_source()
        logger.info("Source image %s", self.source_image.shape)
        return self.apply_processing()

    def set_preview_box(self, box: Optional[Tuple[int, int]]) -> Optional[RenderStatus]:
        """Render live output to fit `box` = (width, height); None renders full size."""
        if box == self.preview_box:
            return None
        self.preview_box = box
        self._update_preview_source()
        if self.source_image is None:
            return None
        return self.apply_processing()

    def save(self, writer, success_handler=None, error_handler=None) -> bool:
        """
        Hand the full-size rendered photo to `writer` (a PhotoLibraryWriter),
        labelled with the kind that produced it. Returns False without
        touching either handler when nothing has been rendered yet.
        """
        if self.rendered_output is None:
            logger.debug("Save ignored: nothing rendered yet.")
            return False
        kind, intensity, params, source, factor = self._rendered_with
        if factor < 1.0:
            image = partial(self.context.render, kind, dict(params), source)
        else:
            image = self.rendered_output
        writer.write_photo_to_album(
            image,
            success_handler=success_handler,
            error_handler=error_handler,
            label=kind.value,
            intensity=intensity,
        )
        return True

    # --- Rendering ---
    def apply_processing(self) -> RenderStatus:
        """
        Map the intensity onto the parameters the active kind accepts, then
        render the source (or its preview copy) through the context.
        """
        self.parameters = map_intensity(self.kind, self.intensity)

        if self.source_image is None:
            self.last_status = RenderStatus.NO_SOURCE
            return self.last_status

        source = self._preview_source
        params = scale_pixel_params(self.kind, self.parameters, self._preview_factor)
        try:
            output = self.context.render(self.kind, params, source)
        except FilterError as e:
            logger.warning("%s failed: %s", self.kind.label, e)
            self.last_status = RenderStatus.FILTER_FAILED
            return self.last_status

        self.rendered_output = output
        self._rendered_with = (
            self.kind, self.intensity, dict(self.parameters), self.source_image, self._preview_factor
        )
        self.last_status = RenderStatus.RENDERED
        if self.on_render is not None:
            self.on_render(output)
        return self.last_status

    def _update_preview_source(self):
        self._preview_source, self._preview_factor = self.source_image, 1.0
        if self.source_image is None or self.preview_box is None:
            return
        src = self.source_image
        if src.ndim != 3 or src.shape[0] == 0 or src.shape[1] == 0:
            return
        try:
            self._preview_source, self._preview_factor = reduce_to_box(src, self.preview_box)
        except (TypeError, ValueError) as e:
            logger.debug("Preview reduction skipped: %s", e)
