"""
visuals/plots.py

Comparison figures for filtered photos.

APIs:
- compare_and_save(original, filtered, out_path=None, titles=None)
- plot_filter_gallery(source, renders, out_path=None, columns=4)

Notes:
- This module uses matplotlib. It does not modify core behavior.
- If out_path is None, functions return the matplotlib Figure object (caller can save or display).
"""

from typing import Mapping, Optional, Sequence
import math
import os
import numpy as np
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt


# Helper to ensure outdir exists
def _ensure_outdir(out_path: Optional[str]):
    if out_path is None:
        return None
    d = os.path.dirname(out_path)
    if d:
        os.makedirs(d, exist_ok=True)
    return out_path


def _save_or_return(fig: plt.Figure, out_path: Optional[str], dpi: int = 150):
    if out_path is not None:
        _ensure_outdir(out_path)
        fig.savefig(out_path, dpi=dpi, bbox_inches="tight", pad_inches=0.05)
        plt.close(fig)
        return out_path
    return fig


def _show(ax, arr: np.ndarray, title: str):
    if arr.ndim == 2:
        ax.imshow(arr, cmap="gray", interpolation="nearest")
    else:
        ax.imshow(arr.astype(np.uint8))
    ax.set_title(title)
    ax.axis("off")


def compare_and_save(
    original: np.ndarray,
    filtered: np.ndarray,
    out_path: Optional[str] = None,
    titles: Optional[Sequence[str]] = None,
):
    """
    Original (left) | Filtered (right).
    """
    left, right = titles if titles is not None else ("Original", "Filtered")
    fig, axs = plt.subplots(1, 2, figsize=(12, 6))
    _show(axs[0], original, left)
    _show(axs[1], filtered, right)
    return _save_or_return(fig, out_path, dpi=200)


def plot_filter_gallery(
    source: np.ndarray,
    renders: Mapping[str, np.ndarray],
    out_path: Optional[str] = None,
    columns: int = 4,
):
    """
    Contact sheet: the source first, then one tile per entry in `renders`
    (title -> image), laid out `columns` wide.
    """
    if columns < 1:
        raise ValueError("columns must be >= 1.")
    tiles = [("Original", source)] + list(renders.items())
    rows = math.ceil(len(tiles) / columns)
    fig, axs = plt.subplots(rows, columns, figsize=(3.5 * columns, 3.5 * rows), squeeze=False)
    for idx, ax in enumerate(axs.flat):
        if idx < len(tiles):
            title, arr = tiles[idx]
            _show(ax, arr, title)
        else:
            ax.axis("off")
    return _save_or_return(fig, out_path)
