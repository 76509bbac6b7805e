import numpy as np
import pytest


@pytest.fixture
def spike_buffer():
    """3x3 buffer with a single bright center pixel."""
    return np.array([[0.1, 0.1, 0.1],
                     [0.1, 0.9, 0.1],
                     [0.1, 0.1, 0.1]])


@pytest.fixture
def random_buffer():
    rng = np.random.RandomState(7)
    return rng.uniform(0.0, 1.0, (24, 31))
