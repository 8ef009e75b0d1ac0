"""
Batch-run every filter kind across multiple images.

For each input image, renders all filter kinds at the chosen intensity through
the same controller the app uses, and saves:
- one PNG per filter kind
- a side-by-side comparison per filter kind
- a gallery sheet with all kinds
- a CSV log (one row per image x filter) and parameters.txt for the run

Usage (from project root):
python -m scripts.batch_demo data/photo1.jpg data/photo2.png --intensity 0.5
"""

import argparse
import csv
import os
from datetime import datetime

from core.controller import FilterController
from core.filter_kinds import FilterKind
from core.rendering import RenderContext, RenderStatus
from io_utils.file_utils import save_parameters_txt
from io_utils.image_handler import load_rgb, save_image
from visuals.plots import compare_and_save, plot_filter_gallery

# CONFIG: default inputs when none are passed on the command line (edit as needed)
IMAGES = [
    "data/sample_1.jpg",
    "data/sample_2.png",
]
DEFAULT_INTENSITY = 0.5

csv_fields = ["input_path", "filter", "intensity", "parameters", "status", "out_path", "compare_path"]


def process_one_image(img_path, outdir, intensity=DEFAULT_INTENSITY):
    source = load_rgb(img_path)
    base = os.path.splitext(os.path.basename(img_path))[0]
    run_dir = os.path.join(outdir, base)
    os.makedirs(run_dir, exist_ok=True)

    controller = FilterController(RenderContext(), intensity=intensity)
    controller.on_image_picked(source)

    records = []
    renders = {}
    for kind in FilterKind:
        status = controller.select_filter(kind)
        out_path = ""
        compare_path = ""
        if status is RenderStatus.RENDERED:
            out = controller.rendered_output
            renders[kind.label] = out
            out_path = os.path.join(run_dir, f"{base}_{kind.value}.png")
            save_image(out_path, out)
            compare_path = os.path.join(run_dir, f"{base}_{kind.value}_compare.png")
            compare_and_save(source, out, out_path=compare_path, titles=("Original", kind.label))
        else:
            print("Warning:", kind.label, "did not render:", status.value)
        records.append({
            "input_path": img_path,
            "filter": kind.value,
            "intensity": controller.intensity,
            "parameters": dict(controller.parameters),
            "status": status.value,
            "out_path": out_path,
            "compare_path": compare_path,
        })

    if renders:
        plot_filter_gallery(source, renders, out_path=os.path.join(run_dir, f"{base}_gallery.png"))
    return records


def main(argv=None):
    parser = argparse.ArgumentParser(description="Apply every filter kind to a set of images.")
    parser.add_argument("images", nargs="*", default=IMAGES, help="input image paths")
    parser.add_argument("--intensity", type=float, default=DEFAULT_INTENSITY, help="slider value in [0, 1]")
    parser.add_argument("--outdir", default=None, help="output directory (default results/batch_demo_<timestamp>)")
    args = parser.parse_args(argv)

    if not 0.0 <= args.intensity <= 1.0:
        parser.error("--intensity must be within [0, 1]")

    timestamp = datetime.now().strftime("%Y%m%dT%H%M%S")
    outdir = args.outdir or os.path.join("results", f"batch_demo_{timestamp}")
    os.makedirs(outdir, exist_ok=True)
    save_parameters_txt(outdir, {"intensity": args.intensity, "images": ", ".join(args.images), "timestamp": timestamp})

    csv_path = os.path.join(outdir, "results.csv")
    with open(csv_path, "w", newline="", encoding="utf-8") as csvf:
        writer = csv.DictWriter(csvf, fieldnames=csv_fields)
        writer.writeheader()

        for img in args.images:
            if not os.path.exists(img):
                print("Skipping missing:", img)
                continue
            print("Processing:", img)
            for rec in process_one_image(img, outdir, intensity=args.intensity):
                writer.writerow(rec)
            csvf.flush()

    print("Batch done. Results in:", outdir, "CSV:", csv_path)
    return outdir


if __name__ == "__main__":
    main()
