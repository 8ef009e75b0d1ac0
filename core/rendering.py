"""
core/rendering.py

RenderContext: the one object that evaluates filters for the app. It is
created by the application and handed to the controller explicitly.

reduce_to_box() makes the display-sized copy of a source that live previews
are rendered from.
"""

from enum import Enum
from typing import Mapping, Optional, Tuple
import numpy as np
from PIL import Image

from .filter_kinds import FilterKind
from .filters import apply_filter
from .log import get_logger

logger = get_logger(__name__)


class RenderStatus(Enum):
    RENDERED = "rendered"
    NO_SOURCE = "no_source"
    FILTER_FAILED = "filter_failed"


def reduce_to_box(image: np.ndarray, box: Tuple[int, int]) -> Tuple[np.ndarray, float]:
    """
    Downscale `image` so it fits inside box = (width, height), keeping its
    aspect ratio. Images that already fit are returned as they are.

    Returns
    -------
    (np.ndarray, float)
        The reduced image and the factor applied to its sides (<= 1).
    """
    H, W = image.shape[:2]
    bw, bh = int(box[0]), int(box[1])
    if bw < 1 or bh < 1:
        raise ValueError(f"Preview box must be at least 1x1, got {box}.")
    factor = min(bw / W, bh / H)
    if factor >= 1.0:
        return image, 1.0
    size = (max(1, int(round(W * factor))), max(1, int(round(H * factor))))
    pil = Image.fromarray(np.ascontiguousarray(image))
    reduced = np.asarray(pil.resize(size, Image.BILINEAR, reducing_gap=2.0), dtype=np.uint8)
    return reduced, factor


class RenderContext:
    def __init__(self):
        self.render_count = 0

    def render(
        self,
        kind: FilterKind,
        params: Mapping[str, float],
        source: Optional[np.ndarray],
    ) -> np.ndarray:
        """
        Evaluate `kind` with `params` over the full extent of `source`.
        Raises FilterError when no output can be produced.
        """
        out = apply_filter(kind, source, params)
        self.render_count += 1
        logger.debug("Rendered %s %s -> %s", kind.value, dict(params), out.shape)
        return out
