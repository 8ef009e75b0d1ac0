# io_utils/file_utils.py
"""
File naming and parameter recording helpers.
"""

import os
import datetime
from typing import Dict, Optional


def make_result_filename(
    filter_name: str,
    intensity: Optional[float] = None,
    ext: str = "png",
    outdir: str = ".",
    base: str = "FilterPhoto",
) -> str:
    """
    Build a unique output path like
    FilterPhoto_sepia_tone_i-0.50_20261017T101500_123456.png under `outdir`.
    The directory is created if needed.
    """
    timestamp = datetime.datetime.now().strftime("%Y%m%dT%H%M%S_%f")
    safe_base = str(base).replace(" ", "_")
    safe_filter = str(filter_name).replace(" ", "_").lower()
    parts = [safe_base, safe_filter]
    if intensity is not None:
        parts.append(f"i-{float(intensity):.2f}")
    parts.append(timestamp)
    fname = "_".join(parts) + "." + ext.lstrip(".")
    os.makedirs(outdir, exist_ok=True)
    path = os.path.join(outdir, fname)
    # two saves inside the same microsecond: suffix a counter
    n = 1
    stem = path[: -(len(ext.lstrip(".")) + 1)]
    while os.path.exists(path):
        path = f"{stem}-{n}.{ext.lstrip('.')}"
        n += 1
    return path


def save_parameters_txt(outdir: str, params: Dict):
    os.makedirs(outdir, exist_ok=True)
    path = os.path.join(outdir, "parameters.txt")
    with open(path, "w", encoding="utf-8") as f:
        for k, v in params.items():
            f.write(f"{k}: {v}\n")
    return path
