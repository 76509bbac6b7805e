"""Neighbor-median inpainting of flagged pixels.

Each flagged pixel takes the median of its unflagged 3x3 neighbors, read
from the original buffer. Flagged neighbors are ignored so a streak does
not bleed into its own replacement. A pixel with no unflagged neighbor
keeps its value.
"""
import logging

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from denoisers.errors import check_dimensions

logger = logging.getLogger(__name__)


def denoise(buffer: np.ndarray, mask: np.ndarray) -> np.ndarray:
    """Replace flagged pixels by the median of their unflagged neighbors.

    Parameters
    ----------
    buffer: np.ndarray
        Luminance buffer (H, W), float in [0, 1]
    mask: np.ndarray
        Boolean noise mask of the same shape; border pixels must be False

    Returns
    -------
    np.ndarray
        New float64 buffer; unflagged pixels are copied unchanged
    """
    buffer = np.asarray(buffer, dtype=np.float64)
    mask = np.asarray(mask, dtype=bool)
    check_dimensions(buffer, mask)
    out = buffer.copy()

    # only interior pixels can be flagged, so every window is in bounds
    mask = mask.copy()
    mask[[0, -1], :] = False
    mask[:, [0, -1]] = False
    ys, xs = np.nonzero(mask)
    if ys.size == 0:
        return out

    windows = sliding_window_view(buffer, (3, 3))[ys - 1, xs - 1].reshape(-1, 9)
    flagged = sliding_window_view(mask, (3, 3))[ys - 1, xs - 1].reshape(-1, 9)

    usable = (~flagged).sum(axis=1) > 0
    empty = int((~usable).sum())
    if empty:
        logger.debug("%d flagged pixels have no clean neighbors, left unchanged", empty)

    if usable.any():
        candidates = np.where(flagged[usable], np.nan, windows[usable])
        out[ys[usable], xs[usable]] = np.nanmedian(candidates, axis=1)
    return out
