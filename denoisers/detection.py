"""Cosmic-ray spike detection.

A pixel is flagged when it is brighter than the median of its 3x3
neighborhood (itself included) by more than `threshold`. The 1-pixel
border has no full window and is never flagged.
"""
import logging

import numpy as np
from scipy.ndimage import median_filter

from denoisers.errors import check_dimensions, clamp_parameter

logger = logging.getLogger(__name__)


def detect_cosmic_rays(buffer: np.ndarray, threshold: float = 0.15) -> np.ndarray:
    """Flag pixels that stand out from their local median.

    Parameters
    ----------
    buffer: np.ndarray
        Luminance buffer (H, W), float values in [0, 1]
    threshold: float
        Required excess over the local median, recommended [0.05, 0.5].
        Higher is more conservative.

    Returns
    -------
    np.ndarray
        Boolean mask (H, W); border pixels are always False
    """
    buffer = np.asarray(buffer, dtype=np.float64)
    check_dimensions(buffer)
    threshold = clamp_parameter("threshold", threshold)

    mask = np.zeros(buffer.shape, dtype=bool)
    height, width = buffer.shape
    if height < 3 or width < 3:
        return mask

    # median of 9 values is the sorted element at index 4; the filter's
    # edge mode only affects the border, which is discarded below
    local_median = median_filter(buffer, size=3, mode="nearest")
    inner = (slice(1, -1), slice(1, -1))
    mask[inner] = buffer[inner] > local_median[inner] + threshold

    logger.debug("flagged %d of %d pixels (threshold=%g)",
                 int(mask.sum()), buffer.size, threshold)
    return mask


def count_noise_pixels(mask: np.ndarray) -> int:
    return int(np.count_nonzero(mask))
