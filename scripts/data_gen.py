"""Synthetic cosmic-ray injection and demo dataset generation.

The demo generator returns a list of dicts with keys:
- name: str
- clean: numpy array (uint8, reference image)
- noisy: numpy array (uint8, clean image with injected strikes)
- truth: numpy array (bool, pixels written by the injector)

The generator does not save files by default; `main.py` will handle saving.
"""
import logging

import numpy as np
from skimage import data

from denoisers.errors import InvalidDimensions, clamp_parameter

logger = logging.getLogger(__name__)

SINGLE_PIXEL_PROBABILITY = 0.3
STREAK_LENGTHS = (2, 4)
BRIGHTNESS_FLOOR = 200
BRIGHTNESS_CEILING = 255


def plan_strikes(num_pixels: int, density: float, rng):
    """Draw the (start, length) of every synthetic strike.

    Streaks run along flattened buffer order, so a streak starting near the
    right edge continues on the next row. Pixels past the end of the buffer
    are dropped.
    """
    noise_count = int(np.floor(num_pixels * density))
    strikes = []
    for _ in range(noise_count):
        start = int(rng.randint(0, num_pixels))
        if rng.random_sample() < SINGLE_PIXEL_PROBABILITY:
            length = 1
        else:
            length = int(rng.randint(STREAK_LENGTHS[0], STREAK_LENGTHS[1] + 1))
        strikes.append((start, min(length, num_pixels - start)))
    return strikes


def inject_cosmic_rays(image, intensity=0.8, density=0.005, seed=None, return_mask=False):
    """Inject synthetic impulse and streak artifacts into a copy of `image`.

    Parameters
    ----------
    image: np.ndarray
        Clean image (H, W) or (H, W, C), uint8. Not modified.
    intensity: float
        In [0, 1]; artifact values are drawn from [floor(200*intensity), 255)
    density: float
        Fraction of pixels seeding a strike, recommended (0.001, 0.05)
    seed: int or None
        Seed for reproducible output
    return_mask: bool
        Also return the boolean mask of written pixels

    Returns
    -------
    np.ndarray, or (np.ndarray, np.ndarray) when return_mask is set
    """
    image = np.asarray(image)
    if image.ndim not in (2, 3) or image.size == 0:
        raise InvalidDimensions(
            f"expected a non-empty (H, W) or (H, W, C) image, got shape {image.shape}")
    intensity = clamp_parameter("intensity", intensity)
    density = clamp_parameter("density", density)

    rng = np.random.RandomState(seed)
    out = image.copy()
    height, width = image.shape[:2]
    num_pixels = height * width

    flat = out.reshape(num_pixels, -1)
    # colour channels only; alpha stays untouched
    channels = slice(0, 3) if flat.shape[1] >= 3 else slice(0, 1)
    truth = np.zeros(num_pixels, dtype=bool)

    lower = int(np.floor(BRIGHTNESS_FLOOR * intensity))
    strikes = plan_strikes(num_pixels, density, rng)
    for start, length in strikes:
        values = rng.randint(lower, BRIGHTNESS_CEILING, size=length)
        flat[start:start + length, channels] = values[:, None]
        truth[start:start + length] = True

    logger.debug("injected %d strikes covering %d pixels",
                 len(strikes), int(truth.sum()))
    if return_mask:
        return out, truth.reshape(height, width)
    return out


def make_starfield(size=128, num_stars=40, background=0.05, sigma=2.0, seed=0):
    """Render a clean synthetic sky: Gaussian stars on a dim background.

    Stars are wide enough that their cores stay below the default detection
    threshold, so any flagged pixel on the clean image is a false positive.
    """
    rng = np.random.RandomState(seed)
    Y, X = np.mgrid[:size, :size]
    sky = np.full((size, size), background, dtype=float)
    for _ in range(num_stars):
        cy, cx = rng.uniform(0, size, 2)
        amp = rng.uniform(0.2, 0.8)
        sky += amp * np.exp(-((Y - cy) ** 2 + (X - cx) ** 2) / (2 * sigma ** 2))
    sky = np.clip(sky, 0.0, 1.0)
    return (sky * 255).astype(np.uint8)


def generate_demo_dataset(intensity=0.8, density=0.005, seed=0):
    """Return a small dataset list of dicts with clean, noisy and truth images.

    Parameters
    ----------
    intensity, density: float
        Passed to `inject_cosmic_rays`
    seed: int
        Base seed; each image uses seed + offset

    Returns
    -------
    list of dict
    """
    hubble = data.hubble_deep_field()[:256, :256]

    # RGBA copy to exercise alpha passthrough
    alpha = np.full(hubble.shape[:2] + (1,), 255, dtype=np.uint8)
    hubble_rgba = np.concatenate([hubble, alpha], axis=2)

    clean_images = [
        ("hubble", hubble_rgba),
        ("starfield", make_starfield(256, num_stars=80, seed=seed)),
        ("starfield_dense", make_starfield(256, num_stars=250, seed=seed + 1)),
    ]

    dataset = []
    for offset, (name, clean) in enumerate(clean_images):
        noisy, truth = inject_cosmic_rays(
            clean, intensity=intensity, density=density, seed=seed + offset, return_mask=True)
        dataset.append({"name": name, "clean": clean, "noisy": noisy, "truth": truth})
    return dataset
