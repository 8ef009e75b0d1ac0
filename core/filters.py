"""
core/filters.py

Spatial filter implementations for every FilterKind.

All filters take and return HxWx3 uint8 RGB arrays and cover the full extent
of the input, so the output always has the input's shape. Filters are pure:
the same (image, params) always gives the same output. Crystallize places its
cells with a fixed RNG seed for that reason.

Entry point:
- apply_filter(kind, image, params) -> np.ndarray

Invalid input (missing image, wrong shape/dtype, unknown or invalid
parameters) raises FilterError.
"""

from typing import Callable, Dict, Mapping, Optional, Tuple
import numpy as np
from PIL import Image, ImageFilter

from .filter_kinds import FilterKind, PARAM_INTENSITY, PARAM_RADIUS, PARAM_SCALE

CRYSTALLIZE_SEED = 0x5EED

SEPIA_MATRIX = np.array(
    [
        [0.393, 0.769, 0.189],
        [0.349, 0.686, 0.168],
        [0.272, 0.534, 0.131],
    ],
    dtype=np.float64,
)


class FilterError(ValueError):
    """Raised when a filter cannot produce an output image."""


# --- Helpers ---
def _distance_grid(
        shape: Tuple[int, int],
        center: Optional[Tuple[float, float]] = None,
        dtype=np.float64
    ) -> np.ndarray:
    """
    Build Euclidean distance grid D[y,x] from a float center.
    Default center = ((H-1)/2.0, (W-1)/2.0).
    """
    H, W = shape
    if center is None:
        y0 = (H - 1) / 2.0
        x0 = (W - 1) / 2.0
    else:
        y0, x0 = float(center[0]), float(center[1])
    y = np.arange(H, dtype=dtype).reshape(H, 1)
    x = np.arange(W, dtype=dtype).reshape(1, W)
    return np.hypot(y - y0, x - x0)


def _to_uint8(arr: np.ndarray) -> np.ndarray:
    out = np.nan_to_num(arr, nan=0.0, posinf=255.0, neginf=0.0)
    return np.clip(np.rint(out), 0, 255).astype(np.uint8)


def _validate_image(image) -> np.ndarray:
    if image is None:
        raise FilterError("No input image to filter.")
    arr = np.asarray(image)
    if arr.ndim != 3 or arr.shape[2] != 3:
        raise FilterError(f"Filters expect an HxWx3 RGB array, got shape {arr.shape}.")
    if arr.shape[0] == 0 or arr.shape[1] == 0:
        raise FilterError("Input image is empty.")
    if arr.dtype != np.uint8:
        raise FilterError(f"Filters expect uint8 pixels, got {arr.dtype}.")
    return arr


def _resolve_params(kind: FilterKind, params: Mapping[str, float]) -> Dict[str, float]:
    """
    Merge `params` over the kind's defaults after checking every name is
    accepted by the kind and every value is a finite, non-negative number.
    """
    traits = kind.traits
    unknown = sorted(set(params) - set(traits.accepted))
    if unknown:
        raise FilterError(f"{traits.label} does not accept parameter(s): {', '.join(unknown)}.")
    resolved = dict(traits.defaults)
    for name, value in params.items():
        try:
            v = float(value)
        except (TypeError, ValueError) as e:
            raise FilterError(f"Parameter '{name}' must be numeric, got {value!r}.") from e
        if not np.isfinite(v) or v < 0.0:
            raise FilterError(f"Parameter '{name}' must be finite and non-negative, got {v}.")
        resolved[name] = v
    return resolved


# --- Filters ---
def crystallize(image: np.ndarray, radius: float, seed: int = CRYSTALLIZE_SEED) -> np.ndarray:
    """
    Voronoi crystallize: one seed per `radius`-sized grid cell, jittered
    inside its cell; each pixel takes the colour found under its nearest seed
    among the 3x3 neighbouring cells.
    """
    cell = float(radius)
    if cell < 1.0:
        return image.copy()
    H, W = image.shape[:2]
    rows = int(np.ceil(H / cell))
    cols = int(np.ceil(W / cell))

    rng = np.random.default_rng(seed)
    jitter = rng.random((rows, cols, 2))
    seed_y = (np.arange(rows).reshape(rows, 1) + jitter[..., 0]) * cell
    seed_x = (np.arange(cols).reshape(1, cols) + jitter[..., 1]) * cell
    flat_y = seed_y.astype(np.float32).ravel()
    flat_x = seed_x.astype(np.float32).ravel()

    py = np.arange(H, dtype=np.float32).reshape(H, 1) + 0.5
    px = np.arange(W, dtype=np.float32).reshape(1, W) + 0.5
    cy = np.minimum((py // cell).astype(np.int32), rows - 1)
    cx = np.minimum((px // cell).astype(np.int32), cols - 1)

    # working set: a handful of HxW float32/int32 planes, updated in place
    best_d = np.full((H, W), np.inf, dtype=np.float32)
    best_idx = np.zeros((H, W), dtype=np.int32)
    idx = np.empty((H, W), dtype=np.int32)
    d = np.empty((H, W), dtype=np.float32)
    t = np.empty((H, W), dtype=np.float32)
    closer = np.empty((H, W), dtype=bool)
    for dy in (-1, 0, 1):
        ny = cy + dy
        row_off = np.where((ny >= 0) & (ny < rows), 0.0, np.inf).astype(np.float32)
        nyc = np.clip(ny, 0, rows - 1)
        for dx in (-1, 0, 1):
            nx = cx + dx
            col_off = np.where((nx >= 0) & (nx < cols), 0.0, np.inf).astype(np.float32)
            nxc = np.clip(nx, 0, cols - 1)
            np.add(nyc * cols, nxc, out=idx)
            np.take(flat_y, idx, out=d)
            np.subtract(py, d, out=d)
            np.multiply(d, d, out=d)
            np.take(flat_x, idx, out=t)
            np.subtract(px, t, out=t)
            np.multiply(t, t, out=t)
            d += t
            d += row_off
            d += col_off
            np.less(d, best_d, out=closer)
            np.copyto(best_d, d, where=closer)
            np.copyto(best_idx, idx, where=closer)

    sample_y = np.clip(seed_y.astype(int), 0, H - 1)
    sample_x = np.clip(seed_x.astype(int), 0, W - 1)
    colours = image[sample_y, sample_x].reshape(rows * cols, 3)
    return colours[best_idx]


def edges(image: np.ndarray, intensity: float) -> np.ndarray:
    """Per-channel Sobel gradient magnitude scaled by `intensity`."""
    f = image.astype(np.float64)
    p = np.pad(f, ((1, 1), (1, 1), (0, 0)), mode="edge")
    gx = (p[:-2, 2:] + 2.0 * p[1:-1, 2:] + p[2:, 2:]) - (p[:-2, :-2] + 2.0 * p[1:-1, :-2] + p[2:, :-2])
    gy = (p[2:, :-2] + 2.0 * p[2:, 1:-1] + p[2:, 2:]) - (p[:-2, :-2] + 2.0 * p[:-2, 1:-1] + p[:-2, 2:])
    return _to_uint8(np.hypot(gx, gy) * float(intensity))


def gaussian_blur(image: np.ndarray, radius: float) -> np.ndarray:
    if float(radius) == 0.0:
        return image.copy()
    pil = Image.fromarray(np.ascontiguousarray(image))
    return np.asarray(pil.filter(ImageFilter.GaussianBlur(radius=float(radius))), dtype=np.uint8)


def pixellate(image: np.ndarray, scale: float) -> np.ndarray:
    """Square blocks of `scale` pixels (rounded, at least 1) filled with their mean colour."""
    block = max(1, int(round(float(scale))))
    if block == 1:
        return image.copy()
    H, W = image.shape[:2]
    rows = -(-H // block)
    cols = -(-W // block)
    padded = np.pad(
        image.astype(np.float64),
        ((0, rows * block - H), (0, cols * block - W), (0, 0)),
        mode="edge",
    )
    means = padded.reshape(rows, block, cols, block, 3).mean(axis=(1, 3))
    out = np.repeat(np.repeat(means, block, axis=0), block, axis=1)
    return _to_uint8(out[:H, :W])


def sepia_tone(image: np.ndarray, intensity: float) -> np.ndarray:
    """Blend between the original (0) and full sepia (1)."""
    k = float(np.clip(intensity, 0.0, 1.0))
    f = image.astype(np.float64)
    sepia = f @ SEPIA_MATRIX.T
    return _to_uint8(f + (sepia - f) * k)


def unsharp_mask(image: np.ndarray, radius: float, intensity: float) -> np.ndarray:
    percent = int(round(float(intensity) * 100.0))
    if float(radius) == 0.0 or percent == 0:
        return image.copy()
    pil = Image.fromarray(np.ascontiguousarray(image))
    sharpened = pil.filter(ImageFilter.UnsharpMask(radius=float(radius), percent=percent, threshold=0))
    return np.asarray(sharpened, dtype=np.uint8)


def vignette(image: np.ndarray, radius: float, intensity: float) -> np.ndarray:
    """
    Darken towards the corners. `radius` is the distance, in percent of the
    half-diagonal, at which darkening reaches `intensity`; a smoothstep ramps
    it from the centre.
    """
    k = float(np.clip(intensity, 0.0, 1.0))
    if k == 0.0:
        return image.copy()
    H, W = image.shape[:2]
    half_diag = float(np.hypot((H - 1) / 2.0, (W - 1) / 2.0)) or 1.0
    reach = float(radius) / 100.0
    D = _distance_grid((H, W)) / half_diag
    if reach <= 0.0:
        t = np.ones_like(D)
    else:
        t = np.clip(D / reach, 0.0, 1.0)
    falloff = t * t * (3.0 - 2.0 * t)
    factor = 1.0 - k * falloff
    return _to_uint8(image.astype(np.float64) * factor[..., np.newaxis])


_EVALUATORS: Dict[FilterKind, Callable[[np.ndarray, Dict[str, float]], np.ndarray]] = {
    FilterKind.CRYSTALLIZE: lambda img, p: crystallize(img, p[PARAM_RADIUS]),
    FilterKind.EDGES: lambda img, p: edges(img, p[PARAM_INTENSITY]),
    FilterKind.GAUSSIAN_BLUR: lambda img, p: gaussian_blur(img, p[PARAM_RADIUS]),
    FilterKind.PIXELLATE: lambda img, p: pixellate(img, p[PARAM_SCALE]),
    FilterKind.SEPIA_TONE: lambda img, p: sepia_tone(img, p[PARAM_INTENSITY]),
    FilterKind.UNSHARP_MASK: lambda img, p: unsharp_mask(img, p[PARAM_RADIUS], p[PARAM_INTENSITY]),
    FilterKind.VIGNETTE: lambda img, p: vignette(img, p[PARAM_RADIUS], p[PARAM_INTENSITY]),
}


def apply_filter(
    kind,
    image: Optional[np.ndarray],
    params: Optional[Mapping[str, float]] = None,
) -> np.ndarray:
    """
    Evaluate `kind` over the full extent of `image`.

    Parameters
    ----------
    kind : FilterKind or str
        Filter kind (value or label strings are accepted).
    image : np.ndarray
        HxWx3 uint8 RGB source.
    params : mapping, optional
        Named parameters; names the kind does not accept are rejected.
        Missing names fall back to the kind's defaults.

    Returns
    -------
    np.ndarray
        HxWx3 uint8 output, same shape as `image`.
    """
    try:
        kind = FilterKind.parse(kind)
    except ValueError as e:
        raise FilterError(str(e)) from e
    arr = _validate_image(image)
    resolved = _resolve_params(kind, params or {})
    out = _EVALUATORS[kind](arr, resolved)
    if out.shape != arr.shape:
        raise FilterError(f"{kind.label} produced shape {out.shape}, expected {arr.shape}.")
    return out
