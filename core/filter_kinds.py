"""
core/filter_kinds.py

The closed set of filter kinds the app offers, and the intensity -> parameter
mapping.

Each kind declares which named parameters it accepts. The single intensity
slider value v in [0, 1] is spread over those parameters:
  - "intensity" <- v
  - "radius"    <- v * 200
  - "scale"     <- v * 10
A parameter the kind does not accept is never assigned.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Mapping, Union

# --- Parameter names ---
PARAM_INTENSITY = "intensity"
PARAM_RADIUS = "radius"
PARAM_SCALE = "scale"

RADIUS_FACTOR = 200.0
SCALE_FACTOR = 10.0

_PARAM_SCALING: Mapping[str, float] = {
    PARAM_INTENSITY: 1.0,
    PARAM_RADIUS: RADIUS_FACTOR,
    PARAM_SCALE: SCALE_FACTOR,
}


@dataclass(frozen=True)
class FilterTraits:
    label: str
    accepted: FrozenSet[str]
    defaults: Mapping[str, float] = field(default_factory=dict)
    # parameters measured in source pixels
    pixel_params: FrozenSet[str] = frozenset()

    def accepts(self, name: str) -> bool:
        return name in self.accepted


class FilterKind(Enum):
    CRYSTALLIZE = "crystallize"
    EDGES = "edges"
    GAUSSIAN_BLUR = "gaussian_blur"
    PIXELLATE = "pixellate"
    SEPIA_TONE = "sepia_tone"
    UNSHARP_MASK = "unsharp_mask"
    VIGNETTE = "vignette"

    @property
    def traits(self) -> FilterTraits:
        return FILTER_TRAITS[self]

    @property
    def label(self) -> str:
        return self.traits.label

    @classmethod
    def parse(cls, value: Union["FilterKind", str]) -> "FilterKind":
        """
        Accept a FilterKind, its value ("gaussian_blur") or its label
        ("Gaussian Blur"). Raises ValueError for anything else.
        """
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        for kind in cls:
            if text == kind.value or text.lower() == kind.label.lower():
                return kind
        raise ValueError(f"Unknown filter kind '{value}'. Choose one of: {', '.join(k.value for k in cls)}.")


# Accepted sets and defaults follow the platform filters of the same names.
FILTER_TRAITS: Dict[FilterKind, FilterTraits] = {
    FilterKind.CRYSTALLIZE: FilterTraits(
        "Crystallize", frozenset({PARAM_RADIUS}), {PARAM_RADIUS: 20.0}, frozenset({PARAM_RADIUS})
    ),
    FilterKind.EDGES: FilterTraits(
        "Edges", frozenset({PARAM_INTENSITY}), {PARAM_INTENSITY: 1.0}
    ),
    FilterKind.GAUSSIAN_BLUR: FilterTraits(
        "Gaussian Blur", frozenset({PARAM_RADIUS}), {PARAM_RADIUS: 10.0}, frozenset({PARAM_RADIUS})
    ),
    FilterKind.PIXELLATE: FilterTraits(
        "Pixellate", frozenset({PARAM_SCALE}), {PARAM_SCALE: 8.0}, frozenset({PARAM_SCALE})
    ),
    FilterKind.SEPIA_TONE: FilterTraits(
        "Sepia Tone", frozenset({PARAM_INTENSITY}), {PARAM_INTENSITY: 1.0}
    ),
    FilterKind.UNSHARP_MASK: FilterTraits(
        "Unsharp Mask",
        frozenset({PARAM_RADIUS, PARAM_INTENSITY}),
        {PARAM_RADIUS: 2.5, PARAM_INTENSITY: 0.5},
        frozenset({PARAM_RADIUS}),
    ),
    FilterKind.VIGNETTE: FilterTraits(
        "Vignette",
        frozenset({PARAM_RADIUS, PARAM_INTENSITY}),
        {PARAM_RADIUS: 100.0, PARAM_INTENSITY: 0.0},
    ),
}

DEFAULT_KIND = FilterKind.SEPIA_TONE
DEFAULT_INTENSITY = 0.5


def clamp_intensity(value: float) -> float:
    """Clamp to [0, 1]. NaN is rejected."""
    v = float(value)
    if v != v:
        raise ValueError("Intensity must be a number, got NaN.")
    return min(max(v, 0.0), 1.0)


def map_intensity(kind: FilterKind, value: float) -> Dict[str, float]:
    """
    Spread the slider value over the parameters `kind` accepts.

    Parameters
    ----------
    kind : FilterKind
        Active filter kind.
    value : float
        Slider value, clamped to [0, 1].

    Returns
    -------
    dict
        Only the names in kind.traits.accepted, each scaled by its factor.
    """
    v = clamp_intensity(value)
    traits = kind.traits
    params = {}
    for name, factor in _PARAM_SCALING.items():
        if traits.accepts(name):
            params[name] = v * factor
    return params


def scale_pixel_params(kind: FilterKind, params: Mapping[str, float], factor: float) -> Dict[str, float]:
    """
    Rescale the pixel-sized parameters of `kind` for an image resized by
    `factor`, so a reduced preview looks like the full-size render.
    Vignette radius is relative to the image and is left alone.
    """
    pixel = kind.traits.pixel_params
    return {name: (v * factor if name in pixel else v) for name, v in params.items()}
