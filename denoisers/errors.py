"""Exceptions and parameter validation shared by the pipeline stages.

Out-of-range parameters are clamped rather than rejected; the clamp is
logged so callers can see it happened. Only non-finite values raise.
"""
import logging
import math

logger = logging.getLogger(__name__)

# name -> (valid domain, recommended range)
PARAMETER_DOMAINS = {
    "threshold": ((0.0, 1.0), (0.05, 0.5)),
    "intensity": ((0.0, 1.0), (0.0, 1.0)),
    "density": ((0.0, 1.0), (0.001, 0.05)),
}


class PipelineError(Exception):
    """Base class for cosmic-ray pipeline failures."""


class InvalidDimensions(PipelineError, ValueError):
    """Zero-sized image, or a buffer and mask whose shapes disagree."""


class ParameterOutOfRange(PipelineError, ValueError):
    """Parameter that cannot be clamped into its domain (NaN or infinite)."""


class PipelineCancelled(PipelineError):
    """Raised between stages when the caller's cancel event is set."""


def clamp_parameter(name: str, value: float) -> float:
    """Clamp `value` into the domain registered for `name`.

    Parameters
    ----------
    name: str
        One of 'threshold', 'intensity', 'density'
    value: float
        Requested value

    Returns
    -------
    float
        The value, clamped into the valid domain
    """
    (lo, hi), (rec_lo, rec_hi) = PARAMETER_DOMAINS[name]
    value = float(value)
    if not math.isfinite(value):
        raise ParameterOutOfRange(f"{name} must be finite, got {value!r}")

    if value < lo or value > hi:
        clamped = min(max(value, lo), hi)
        logger.warning("%s=%g outside [%g, %g], clamped to %g",
                       name, value, lo, hi, clamped)
        return clamped

    if value < rec_lo or value > rec_hi:
        logger.info("%s=%g outside recommended range [%g, %g]",
                    name, value, rec_lo, rec_hi)
    return value


def check_dimensions(buffer, mask=None):
    """Raise InvalidDimensions for an empty buffer or a mismatched mask."""
    if buffer.ndim != 2 or buffer.size == 0:
        raise InvalidDimensions(
            f"expected a non-empty 2-D buffer, got shape {buffer.shape}")
    if mask is not None and mask.shape != buffer.shape:
        raise InvalidDimensions(
            f"mask shape {mask.shape} does not match buffer shape {buffer.shape}")
