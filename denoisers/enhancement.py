"""2x bilinear upscaling followed by Laplacian sharpening.

Border policy for sharpening: the kernel is applied only where its full
3x3 footprint lies inside the image. The outermost rows and columns keep
their upscaled values. Results are clipped to [0, 1] after each stage.
"""
import numpy as np
from scipy.ndimage import convolve

from denoisers.errors import check_dimensions

SHARPEN_KERNEL = np.array([[0, -1, 0],
                           [-1, 5, -1],
                           [0, -1, 0]], dtype=np.float64)


def _sample_grid(n: int):
    """Source indices and weights for doubling an axis of length n."""
    src = np.arange(2 * n) / 2.0
    lo = np.floor(src).astype(int)
    hi = np.minimum(lo + 1, n - 1)
    frac = src - lo
    return lo, hi, frac


def upscale_bilinear(buffer: np.ndarray) -> np.ndarray:
    """Upscale a luminance buffer 2x with bilinear interpolation.

    Output pixel (ox, oy) samples source position (ox/2, oy/2). Samples
    beyond the last row/column are clamped to the edge.
    """
    buffer = np.asarray(buffer, dtype=np.float64)
    check_dimensions(buffer)
    h, w = buffer.shape

    y0, y1, fy = _sample_grid(h)
    x0, x1, fx = _sample_grid(w)
    fy = fy[:, None]
    fx = fx[None, :]

    top = buffer[y0][:, x0] * (1.0 - fx) + buffer[y0][:, x1] * fx
    bottom = buffer[y1][:, x0] * (1.0 - fx) + buffer[y1][:, x1] * fx
    out = top * (1.0 - fy) + bottom * fy
    return np.clip(out, 0.0, 1.0)


def sharpen_laplacian(buffer: np.ndarray) -> np.ndarray:
    """Sharpen interior pixels with the 5-point Laplacian kernel."""
    buffer = np.asarray(buffer, dtype=np.float64)
    check_dimensions(buffer)
    out = buffer.copy()
    if buffer.shape[0] < 3 or buffer.shape[1] < 3:
        return np.clip(out, 0.0, 1.0)

    # mode only matters on the border, which is not written back
    sharpened = convolve(buffer, SHARPEN_KERNEL, mode="nearest")
    out[1:-1, 1:-1] = sharpened[1:-1, 1:-1]
    return np.clip(out, 0.0, 1.0)


def enhance(buffer: np.ndarray, sharpen: bool = True) -> np.ndarray:
    """Upscale 2x and, by default, sharpen.

    Parameters
    ----------
    buffer: np.ndarray
        Denoised luminance buffer (H, W)
    sharpen: bool
        Apply the Laplacian kernel after upscaling

    Returns
    -------
    np.ndarray
        float64 buffer of shape (2H, 2W) in [0, 1]
    """
    out = upscale_bilinear(buffer)
    if sharpen:
        out = sharpen_laplacian(out)
    return out
