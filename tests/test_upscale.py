import numpy as np
import pytest

from chianti.engine import InputVariable
from chianti.exceptions import IllegalArgumentError
from chianti.layers import Upscale2DLayer
from chianti.layers.upscale import upscale_kernel


def test_single_cell_is_repeated():
    x = InputVariable((1, 1, 1))
    network = Upscale2DLayer(x, 'cpu').scale_factor((8, 8)).build()
    assert network.shape == (8, 8, 1)
    np.testing.assert_array_equal(network.evaluate(np.full((1, 1, 1, 1), 2.0)),
                                  np.full((1, 8, 8, 1), 2.0))


def test_each_cell_is_copied_into_its_block():
    x = InputVariable((3, 2, 3))
    data = np.random.RandomState(1).uniform(-1.0, 1.0, size=(1, 3, 2, 3)).astype(np.float32)
    out = Upscale2DLayer(x).scale_factor((2, 3)).build().evaluate(data)
    assert out.shape == (1, 6, 6, 3)
    for i in range(6):
        for j in range(6):
            np.testing.assert_allclose(out[0, i, j], data[0, i // 2, j // 3], rtol=1e-6)


def test_default_scale_factor_doubles():
    x = InputVariable((4, 5, 2))
    layer = Upscale2DLayer(x)
    assert layer.scale_factor() == (2, 2)
    assert layer.build().shape == (8, 10, 2)


def test_upscaling_has_no_trainable_parameters():
    x = InputVariable((2, 2, 2))
    assert list(Upscale2DLayer(x).build().parameters()) == []


def test_kernel_keeps_channels_apart():
    kernel = upscale_kernel((2, 2), 3)
    assert kernel.shape == (2, 2, 3, 3)
    np.testing.assert_array_equal(kernel[0, 0], np.eye(3))


def test_scale_factor_must_be_positive():
    with pytest.raises(IllegalArgumentError):
        Upscale2DLayer(InputVariable((2, 2, 1))).scale_factor((0, 2))
