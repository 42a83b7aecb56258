import numpy as np
import pytest
import torch


@pytest.fixture
def device():
    return torch.device('cpu')


@pytest.fixture
def ramp():
    """Return a function building a ``(1, H, W, 1)`` batch filled with 0, 1, 2, ... row-major."""
    def make(height, width, start=0.0):
        values = np.arange(start, start + height * width, dtype=np.float32)
        return values.reshape(1, height, width, 1)
    return make
