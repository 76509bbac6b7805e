"""Luminance preprocessing.

Converts a decoded bitmap (gray, gray+alpha, RGB or RGBA) into a
normalized single-channel float buffer in [0, 1], and turns processed
buffers and masks back into 8-bit pictures.
"""
import logging

import numpy as np

from denoisers.errors import InvalidDimensions

logger = logging.getLogger(__name__)

# ITU-R BT.601 luma weights
LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114])


def _scale(image: np.ndarray) -> float:
    """Value that maps to 1.0 for the image's native range."""
    if image.dtype in (np.uint8, np.uint16):
        return float(np.iinfo(image.dtype).max)
    if np.issubdtype(image.dtype, np.integer):
        # 8-bit samples held in a wider or signed integer type
        if image.min() >= 0 and image.max() <= 255:
            logger.warning("%s image treated as 8-bit (0-255)", image.dtype)
            return 255.0
        raise ValueError(
            f"{image.dtype} image with values outside 0-255 has no known range; "
            "convert to uint8 or uint16")
    # float (and bool) input is already expected in [0, 1]
    return 1.0


def to_luminance(image: np.ndarray) -> np.ndarray:
    """Convert a raw pixel image to a normalized luminance buffer.

    Parameters
    ----------
    image: np.ndarray
        Shape (H, W) or (H, W, C); uint8/uint16, other integer types holding
        0-255 values, or float [0,1]

    Returns
    -------
    np.ndarray
        float64 buffer of shape (H, W), values in [0, 1]
    """
    image = np.asarray(image)
    if image.ndim not in (2, 3) or image.size == 0:
        raise InvalidDimensions(
            f"expected a non-empty (H, W) or (H, W, C) image, got shape {image.shape}")

    scale = _scale(image)

    if image.ndim == 2:
        lum = image.astype(np.float64)
    elif image.shape[2] >= 3:
        # extra channels (alpha) are ignored
        lum = image[..., :3].astype(np.float64) @ LUMA_WEIGHTS
    else:
        # gray or gray+alpha
        lum = image[..., 0].astype(np.float64)

    return np.clip(lum / scale, 0.0, 1.0)


def buffer_to_image(buffer: np.ndarray) -> np.ndarray:
    """Luminance buffer [0,1] -> uint8 grayscale picture."""
    return np.round(np.clip(buffer, 0.0, 1.0) * 255).astype(np.uint8)


def mask_to_image(mask: np.ndarray) -> np.ndarray:
    """Noise mask -> uint8 picture, flagged pixels white on black."""
    return np.where(mask, 255, 0).astype(np.uint8)
