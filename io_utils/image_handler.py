# io_utils/image_handler.py
"""
Image read/write helpers using Pillow.

Functions:
- read_image(path) -> (numpy array (H x W) or (H x W x 3), meta)
- to_rgb(array) -> HxWx3 uint8 array, the form filters work on
- load_rgb(path) -> read_image + to_rgb
- save_image(path, array) -> writes image
"""

from PIL import Image
import pillow_avif  # noqa: F401  registers the AVIF codec with Pillow
import numpy as np
from typing import Tuple


def read_image(path: str) -> Tuple[np.ndarray, dict]:
    """
    Read an image from `path` and return (array, meta).
    - Returns RGB arrays of shape (H,W,3) or grayscale (H,W).
    - Meta contains mode and size. If image has alpha, meta includes 'has_alpha' and meta['alpha'] as a separate array.
    """
    with Image.open(path) as img:
        mode = img.mode
        # Convert to a consistent representation: preserve alpha separately if present
        if mode in ("RGBA", "LA", "PA") or ("transparency" in img.info):
            rgba = img.convert("RGBA")
            arr = np.asarray(rgba)
            meta = {"mode": "RGBA", "size": rgba.size, "has_alpha": True, "alpha": arr[..., 3]}
            return arr[..., :3], meta
        if mode.startswith("RGB") or mode in ("P", "CMYK", "YCbCr") or path.lower().endswith(".avif"):
            rgb = img.convert("RGB")
            return np.asarray(rgb), {"mode": "RGB", "size": rgb.size, "has_alpha": False}
        if mode in ("I;16", "I;16B", "I;16L", "I", "F"):
            # high bit depth: keep the values, to_rgb stretches them for display
            arr = np.asarray(img)
            return arr, {"mode": mode, "size": img.size, "has_alpha": False}
        gray = img.convert("L")
        return np.asarray(gray), {"mode": "L", "size": gray.size, "has_alpha": False}


def normalize_to_uint8(arr: np.ndarray, clip_percentiles=(1, 99)) -> np.ndarray:
    """
    Normalize a numeric array to uint8 for display.
    Uses percentile stretch by default to reduce effect of outliers.
    """
    arrf = arr.astype(np.float32)
    arrf = np.nan_to_num(arrf, nan=0.0, posinf=np.nanmax(arrf), neginf=np.nanmin(arrf))
    p_low, p_high = clip_percentiles

    if p_low is not None and p_high is not None and 0 <= p_low < p_high <= 100:
        vmin = float(np.percentile(arrf, p_low))
        vmax = float(np.percentile(arrf, p_high))
    else:
        vmin = float(np.min(arrf))
        vmax = float(np.max(arrf))

    if vmax <= vmin:
        # constant image
        out = np.clip(arrf - vmin, 0, 255)
        return out.astype(np.uint8)

    scaled = (arrf - vmin) / (vmax - vmin)
    scaled = (scaled * 255.0).clip(0, 255)
    return scaled.astype(np.uint8)


def to_rgb(array: np.ndarray) -> np.ndarray:
    """
    Bring any HxW, HxWx3 or HxWx4 array to HxWx3 uint8.
    Alpha is dropped; non-uint8 data is percentile-stretched.
    """
    arr = np.asarray(array)
    if arr.ndim == 3 and arr.shape[2] == 4:
        arr = arr[..., :3]
    if arr.ndim == 2:
        arr = np.stack([arr, arr, arr], axis=-1)
    if arr.ndim != 3 or arr.shape[2] != 3:
        raise ValueError(f"to_rgb expects HxW, HxWx3 or HxWx4 array, got shape {arr.shape}.")
    if arr.dtype != np.uint8:
        arr = normalize_to_uint8(arr)
    return np.ascontiguousarray(arr)


def load_rgb(path: str) -> np.ndarray:
    arr, _meta = read_image(path)
    return to_rgb(arr)


def save_image(path: str, array: np.ndarray):
    """
    Save an image array to `path`. Accepts HxW (grayscale) or HxWx3 (RGB).
    Casts floats to uint8 by clipping to 0..255. Format follows the extension.
    """
    if not (array.ndim == 2 or (array.ndim == 3 and array.shape[2] == 3)):
        raise ValueError("save_image expects HxW or HxWx3 array.")

    # Cast to uint8 if necessary
    if np.issubdtype(array.dtype, np.floating):
        arr = np.clip(array, 0.0, 255.0).astype(np.uint8)
    else:
        arr = array.astype(np.uint8)

    img = Image.fromarray(np.ascontiguousarray(arr))
    img.save(path)
