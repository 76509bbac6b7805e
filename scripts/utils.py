"""Utility functions: image codec helpers and metrics."""
import numpy as np
from skimage.metrics import peak_signal_noise_ratio, structural_similarity
from skimage.io import imread, imsave

# re-exported for callers that only need the codec helpers
from denoisers.preprocess import buffer_to_image, mask_to_image  # noqa: F401


def _normalize_to_float(img):
    """Normalize image to [0,1] float for metric computation."""
    if img.dtype == np.uint8:
        return img.astype(np.float64) / 255.0
    img = img.astype(np.float64)
    if img.max() > 1.0:
        return img / 255.0
    return img


def load_image(path) -> np.ndarray:
    return imread(str(path))


def save_image(img: np.ndarray, path):
    """Save image to file. Handles both uint8 and float inputs."""
    if img.dtype == np.uint8:
        imsave(str(path), img, check_contrast=False)
    else:
        arr = _normalize_to_float(img)
        imsave(str(path), (arr * 255).astype('uint8'), check_contrast=False)


def mse(a: np.ndarray, b: np.ndarray) -> float:
    a = _normalize_to_float(a)
    b = _normalize_to_float(b)
    return float(np.mean((a - b) ** 2))


def psnr(a: np.ndarray, b: np.ndarray) -> float:
    a = _normalize_to_float(a)
    b = _normalize_to_float(b)
    return float(peak_signal_noise_ratio(a, b, data_range=1.0))


def ssim(a: np.ndarray, b: np.ndarray) -> float:
    a = _normalize_to_float(a)
    b = _normalize_to_float(b)
    return float(structural_similarity(a, b, data_range=1.0))


def compute_metrics(clean: np.ndarray, denoised: np.ndarray) -> dict:
    return {"mse": mse(clean, denoised), "psnr": psnr(clean, denoised), "ssim": ssim(clean, denoised)}


def detection_metrics(truth: np.ndarray, mask: np.ndarray) -> dict:
    """Precision, recall and F1 of a detected mask against the injected one.

    Empty denominators give 0.0 rather than NaN so rows stay CSV friendly.
    """
    truth = np.asarray(truth, dtype=bool)
    mask = np.asarray(mask, dtype=bool)
    tp = int(np.count_nonzero(truth & mask))
    fp = int(np.count_nonzero(~truth & mask))
    fn = int(np.count_nonzero(truth & ~mask))

    precision = tp / (tp + fp) if tp + fp else 0.0
    recall = tp / (tp + fn) if tp + fn else 0.0
    f1 = 2 * precision * recall / (precision + recall) if precision + recall else 0.0
    return {"true_positives": tp, "false_positives": fp, "false_negatives": fn,
            "precision": precision, "recall": recall, "f1": f1}
