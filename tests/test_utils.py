import json
import os

import numpy as np
import pytest
from PIL import Image

from denoisers.pipeline import run_pipeline
from main import load_config
from scripts.reporting import save_report
from scripts.utils import buffer_to_image, detection_metrics, mask_to_image


def test_buffer_to_image_rounds_and_clips():
    buf = np.array([[-0.5, 50 / 255], [0.5, 2.0]])
    assert buffer_to_image(buf).tolist() == [[0, 50], [128, 255]]


def test_mask_to_image_white_on_black():
    mask = np.array([[True, False]])
    img = mask_to_image(mask)
    assert img.dtype == np.uint8
    assert img.tolist() == [[255, 0]]


def test_detection_metrics_counts():
    truth = np.array([True, True, False, False])
    mask = np.array([True, False, True, False])
    m = detection_metrics(truth, mask)
    assert (m["true_positives"], m["false_positives"], m["false_negatives"]) == (1, 1, 1)
    assert m["precision"] == pytest.approx(0.5)
    assert m["recall"] == pytest.approx(0.5)
    assert m["f1"] == pytest.approx(0.5)


def test_detection_metrics_empty_masks():
    empty = np.zeros(5, dtype=bool)
    m = detection_metrics(empty, empty)
    assert m["precision"] == 0.0 and m["recall"] == 0.0 and m["f1"] == 0.0


def test_load_config_missing_file_is_empty(tmp_path):
    assert load_config(str(tmp_path / "nope.yaml")) == {}


def test_load_config_reads_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("threshold: 0.2\nsimulation:\n  density: 0.01\n", encoding="utf-8")
    cfg = load_config(str(path))
    assert cfg["threshold"] == 0.2
    assert cfg["simulation"]["density"] == 0.01


def test_save_report_writes_panels_and_meta(tmp_path):
    img = np.full((16, 16, 4), 30, dtype=np.uint8)
    img[8, 8, :3] = 250
    result = run_pipeline(img)

    out_dir = save_report(result, report_name="hit/one", out_root=str(tmp_path))
    assert os.path.basename(out_dir) == "hit_one"
    for name in ("original.png", "mask.png", "denoised.png", "enhanced.png", "comparison.png"):
        assert os.path.exists(os.path.join(out_dir, name))

    with open(os.path.join(out_dir, "report_meta.json"), encoding="utf8") as fh:
        meta = json.load(fh)
    assert meta["stats"]["noise_pixel_count"] == 1


def test_report_strip_uses_processed_luminance(tmp_path):
    img = np.zeros((8, 8, 3), dtype=np.uint8)
    img[..., 1] = 255  # pure green: luma 0.587, channel mean 1/3
    result = run_pipeline(img, use_enhancement=False)
    out_dir = save_report(result, report_name="green", out_root=str(tmp_path))

    strip = np.asarray(Image.open(os.path.join(out_dir, "comparison.png")))
    # sample below the label text
    assert strip[7, 7] == 150
    assert strip[7, 8 * 2 + 7] == 150


def test_report_strip_handles_uint16_original(tmp_path):
    img = np.full((8, 8), 65535, dtype=np.uint16)
    result = run_pipeline(img, use_enhancement=False)
    out_dir = save_report(result, report_name="deep", out_root=str(tmp_path))
    strip = np.asarray(Image.open(os.path.join(out_dir, "comparison.png")))
    assert strip[7, 7] == 255
