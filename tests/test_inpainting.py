import numpy as np
import pytest

from denoisers.detection import detect_cosmic_rays
from denoisers.errors import InvalidDimensions
from denoisers.inpainting import denoise


def test_spike_replaced_by_neighbor_median(spike_buffer):
    mask = detect_cosmic_rays(spike_buffer, threshold=0.15)
    out = denoise(spike_buffer, mask)
    assert out[1, 1] == pytest.approx(0.1)
    assert np.array_equal(np.delete(out.ravel(), 4), np.delete(spike_buffer.ravel(), 4))


def test_all_false_mask_is_identity(random_buffer):
    out = denoise(random_buffer, np.zeros(random_buffer.shape, dtype=bool))
    assert np.array_equal(out, random_buffer)
    assert out is not random_buffer


def test_input_not_modified(spike_buffer):
    before = spike_buffer.copy()
    denoise(spike_buffer, detect_cosmic_rays(spike_buffer))
    assert np.array_equal(spike_buffer, before)


def test_flagged_neighbors_excluded_and_even_count_averaged():
    buf = np.zeros((5, 5))
    buf[1, 1] = buf[1, 2] = buf[2, 2] = 1.0
    buf[1, 3] = 0.1
    buf[2, 1] = 0.2
    buf[2, 3] = 0.3
    buf[3, 1] = 0.4
    buf[3, 2] = 0.5
    buf[3, 3] = 0.6
    mask = np.zeros((5, 5), dtype=bool)
    mask[1, 1] = mask[1, 2] = mask[2, 2] = True

    out = denoise(buf, mask)
    # six clean neighbors 0.1..0.6 -> mean of the middle two
    assert out[2, 2] == pytest.approx(0.35)


def test_empty_neighborhood_keeps_original_value():
    buf = np.full((5, 5), 0.2)
    buf[1:4, 1:4] = 0.9
    mask = np.zeros((5, 5), dtype=bool)
    mask[1:4, 1:4] = True

    out = denoise(buf, mask)
    # center is surrounded only by flagged pixels
    assert out[2, 2] == pytest.approx(0.9)
    # ring pixels touch the clean border; replacements never read each other
    assert out[1, 1] == pytest.approx(0.2)
    assert out[1, 2] == pytest.approx(0.2)
    assert out[3, 3] == pytest.approx(0.2)


def test_output_within_unit_range(random_buffer):
    mask = detect_cosmic_rays(random_buffer, threshold=0.05)
    out = denoise(random_buffer, mask)
    assert out.min() >= 0.0 and out.max() <= 1.0


def test_mask_shape_mismatch_rejected(random_buffer):
    with pytest.raises(InvalidDimensions):
        denoise(random_buffer, np.zeros((3, 3), dtype=bool))
