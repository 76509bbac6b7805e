"""Cosmic-ray removal pipeline.

Runs preprocessing -> detection -> denoising -> (optional) enhancement on a
decoded bitmap and returns the processed pictures, the noise mask and run
statistics. Encoding the pictures to a file format is left to the caller.
"""
from dataclasses import dataclass
from enum import Enum
import logging
import time
from typing import Callable, Optional

import numpy as np

from denoisers.detection import count_noise_pixels, detect_cosmic_rays
from denoisers.enhancement import enhance
from denoisers.errors import PipelineCancelled
from denoisers.inpainting import denoise
from denoisers.preprocess import buffer_to_image, mask_to_image, to_luminance

logger = logging.getLogger(__name__)


class PipelineStage(Enum):
    IDLE = "idle"
    PREPROCESSING = "preprocessing"
    DETECTION = "detection"
    DENOISING = "denoising"
    ENHANCEMENT = "enhancement"
    COMPLETE = "complete"


@dataclass(frozen=True)
class PipelineStats:
    noise_pixel_count: int
    reduction_ratio: float
    elapsed_ms: float


@dataclass(frozen=True)
class ProcessingResult:
    """Outputs of one pipeline run. Arrays are read-only."""
    original: np.ndarray
    mask: np.ndarray
    mask_image: np.ndarray
    denoised: np.ndarray
    enhanced: Optional[np.ndarray]
    stats: PipelineStats


def _frozen(arr):
    if arr is not None:
        arr.setflags(write=False)
    return arr


def run_pipeline(image: np.ndarray,
                 threshold: float = 0.15,
                 use_enhancement: bool = True,
                 on_progress: Optional[Callable[[PipelineStage], None]] = None,
                 cancel_event=None) -> ProcessingResult:
    """Detect and remove cosmic-ray hits from `image`.

    Parameters
    ----------
    image: np.ndarray
        Decoded bitmap (H, W) or (H, W, C); not modified or retained
    threshold: float
        Detection sensitivity, recommended [0.05, 0.5]
    use_enhancement: bool
        Run the 2x upscale + sharpen stage
    on_progress: callable or None
        Called with each upcoming PipelineStage, then with COMPLETE
    cancel_event: threading.Event or None
        Checked between stages; when set the run raises PipelineCancelled

    Returns
    -------
    ProcessingResult
    """
    start = time.perf_counter()

    def step(stage):
        if cancel_event is not None and cancel_event.is_set():
            logger.info("pipeline cancelled before %s", stage.value)
            raise PipelineCancelled(f"cancelled before {stage.value}")
        logger.debug("stage: %s", stage.value)
        if on_progress is not None:
            on_progress(stage)

    step(PipelineStage.PREPROCESSING)
    original = np.array(image, copy=True)
    buffer = to_luminance(original)

    step(PipelineStage.DETECTION)
    mask = detect_cosmic_rays(buffer, threshold)
    noise_count = count_noise_pixels(mask)

    step(PipelineStage.DENOISING)
    clean = denoise(buffer, mask)

    enhanced = None
    if use_enhancement:
        step(PipelineStage.ENHANCEMENT)
        enhanced = buffer_to_image(enhance(clean))

    height, width = buffer.shape
    stats = PipelineStats(
        noise_pixel_count=noise_count,
        reduction_ratio=noise_count / (width * height),
        elapsed_ms=(time.perf_counter() - start) * 1000.0,
    )
    result = ProcessingResult(
        original=_frozen(original),
        mask=_frozen(mask),
        mask_image=_frozen(mask_to_image(mask)),
        denoised=_frozen(buffer_to_image(clean)),
        enhanced=_frozen(enhanced),
        stats=stats,
    )
    logger.info("removed %d noise pixels (%.3f%%) in %.1f ms",
                noise_count, 100 * stats.reduction_ratio, stats.elapsed_ms)

    if on_progress is not None:
        on_progress(PipelineStage.COMPLETE)
    return result
