import os
import json
from datetime import datetime
import imageio
import numpy as np
from PIL import Image, ImageDraw, ImageFont

from denoisers.preprocess import buffer_to_image, to_luminance


def _ensure_dir(path):
    os.makedirs(path, exist_ok=True)
    return path


def _to_gray_uint8(img):
    """Reduce a panel to the 2-D uint8 luminance the pipeline processed."""
    return buffer_to_image(to_luminance(img))


def save_report(result, report_name=None, out_root="results/reports"):
    """Save the panels of a ProcessingResult to a named report folder.

    Writes original/mask/denoised (and enhanced when present) PNGs, a
    labelled Original | Mask | Denoised comparison strip and
    report_meta.json with the run statistics.
    Returns the output directory path.
    """
    if report_name is None:
        t = datetime.now().strftime("%Y%m%d_%H%M%S")
        folder_name = f"report_{t}"
    else:
        folder_name = "".join(c if c.isalnum() or c in (
            ' ', '_', '-') else '_' for c in report_name)
        folder_name = folder_name.strip()
        if not folder_name:
            folder_name = f"report_{datetime.now().strftime('%Y%m%d_%H%M%S')}"

    out_dir = _ensure_dir(os.path.join(out_root, folder_name))

    panels = {"original": result.original, "mask": result.mask_image,
              "denoised": result.denoised}
    if result.enhanced is not None:
        panels["enhanced"] = result.enhanced

    paths = {}
    for label, img in panels.items():
        path = os.path.join(out_dir, f"{label}.png")
        imageio.imwrite(path, np.ascontiguousarray(img))
        paths[label] = path

    # enhanced is 2x size, so the strip only holds same-sized panels
    strip = np.hstack([_to_gray_uint8(panels[k]) for k in ("original", "mask", "denoised")])
    strip_pil = Image.fromarray(strip)
    draw = ImageDraw.Draw(strip_pil)
    font = ImageFont.load_default()
    w = result.denoised.shape[1]
    for i, label in enumerate(("Original", "Mask", "Denoised")):
        draw.text((i * w + 10, 10), label, fill=255, font=font)
    comparison_path = os.path.join(out_dir, "comparison.png")
    strip_pil.save(comparison_path)

    stats = result.stats
    meta = {
        "images": paths,
        "comparison_path": comparison_path,
        "stats": {
            "noise_pixel_count": stats.noise_pixel_count,
            "reduction_ratio": stats.reduction_ratio,
            "elapsed_ms": stats.elapsed_ms,
        },
        "generated": datetime.now().isoformat(),
    }
    meta_path = os.path.join(out_dir, "report_meta.json")
    with open(meta_path, 'w', encoding='utf8') as fh:
        json.dump(meta, fh, indent=2)
    return out_dir
