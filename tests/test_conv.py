import re

import numpy as np
import pytest

from chianti import constants
from chianti.engine import ConstantInitializer, InputVariable, Parameter
from chianti.exceptions import IllegalArgumentError
from chianti.layers import Conv2DLayer, MaxPool2DLayer
from chianti.layers.conv import WeightValue
from chianti.nonlinearities import linear, rectify


@pytest.fixture
def image():
    return InputVariable((5, 5, 1))


# ---------------------------------------------------------------------------
# Output shapes
# ---------------------------------------------------------------------------

@pytest.mark.parametrize('filter_size, pad, expected', [
    ((3, 3), 'same', 5),
    ((3, 3), 'full', 9),
    ((3, 3), 'valid', 3),
    ((3, 3), (0, 0), 3),
    ((5, 5), (1, 1), 3),
    ((5, 5), (2, 2), 5),
    ((3, 3), (2, 2), 7),
])
def test_output_size(image, filter_size, pad, expected):
    network = Conv2DLayer(image, 'cpu').filter_size(filter_size).pad(pad).build()
    assert network.shape == (expected, expected, 1)


def test_stride_reduces_output(image):
    network = Conv2DLayer(image, 'cpu').stride((2, 2)).pad('same').build()
    assert network.shape == (3, 3, 1)


def test_number_of_filters_sets_channels():
    x = InputVariable((6, 6, 3))
    network = Conv2DLayer(x).num_filters(8).build()
    assert network.shape == (6, 6, 8)
    assert network.evaluate(np.ones((2, 6, 6, 3))).shape == (2, 6, 6, 8)


def test_illegal_pad_mode_fails(image):
    layer = Conv2DLayer(image, 'cpu').pad('foo')
    with pytest.raises(IllegalArgumentError, match=re.escape(constants.MSG_ILLEGAL_CONV_PAD)):
        layer.build()


def test_pool_pad_mode_is_illegal_for_convolution(image):
    with pytest.raises(IllegalArgumentError):
        Conv2DLayer(image, 'cpu').pad('auto').build()


# ---------------------------------------------------------------------------
# Values
# ---------------------------------------------------------------------------

@pytest.mark.parametrize('c', [0.5, 1.0, 3.0])
def test_constant_filter_on_ones(image, c):
    network = Conv2DLayer(image, 'cpu').pad('valid').W(np.full((3, 3, 1, 1), c)).build()
    out = network.evaluate(np.ones((1, 5, 5, 1)))
    np.testing.assert_allclose(out, np.full((1, 3, 3, 1), 9.0 * c), rtol=1e-6)


def test_reciprocal_filter(ramp):
    x = InputVariable((3, 3, 1))
    weights = (1.0 / np.arange(1.0, 10.0)).reshape(3, 3, 1, 1)
    network = Conv2DLayer(x).pad('valid').W(weights).build()
    assert network.evaluate(ramp(3, 3, start=1.0)).item() == pytest.approx(9.0, rel=1e-5)


@pytest.mark.parametrize('c, expected', [(1.0, 45.0), (2.0, 90.0)])
def test_constant_filter_on_ramp(ramp, c, expected):
    x = InputVariable((3, 3, 1))
    network = Conv2DLayer(x).pad('valid').W(ConstantInitializer(c)).build()
    assert network.evaluate(ramp(3, 3, start=1.0)).item() == pytest.approx(expected)


def test_filters_fill_their_own_channels(ramp):
    x = InputVariable((3, 3, 1))
    reciprocal = 1.0 / np.arange(1.0, 10.0).reshape(3, 3)
    weights = np.stack([np.ones((3, 3)), 2.0 * np.ones((3, 3)), reciprocal, 2.0 * reciprocal], axis=-1)
    network = Conv2DLayer(x).num_filters(4).pad('valid').W(weights.reshape(3, 3, 1, 4)).build()
    out = network.evaluate(ramp(3, 3, start=1.0))
    np.testing.assert_allclose(out[0, 0, 0], [45.0, 90.0, 9.0, 18.0], rtol=1e-5)


def test_same_padding_keeps_center(ramp):
    x = InputVariable((3, 3, 1))
    network = Conv2DLayer(x).W(np.ones((3, 3, 1, 1))).build()
    out = network.evaluate(ramp(3, 3, start=1.0))[0, :, :, 0]
    assert out[1, 1] == pytest.approx(45.0)
    assert out[0, 0] == pytest.approx(1.0 + 2.0 + 4.0 + 5.0)


def test_bias_is_added_before_nonlinearity(ramp):
    x = InputVariable((3, 3, 1))
    bias = np.full((1, 1, 1), -50.0)
    layer = Conv2DLayer(x).pad('valid').W(np.ones((3, 3, 1, 1))).b(bias)
    assert layer.build().evaluate(ramp(3, 3, start=1.0)).item() == 0.0
    assert layer.nonlinearity(linear).build().evaluate(ramp(3, 3, start=1.0)).item() == pytest.approx(-5.0)


def test_bias_is_per_filter():
    x = InputVariable((2, 2, 1))
    network = (Conv2DLayer(x).num_filters(2).pad('valid').filter_size((2, 2))
               .W(np.zeros((2, 2, 1, 2))).b(np.array([[[1.0, 2.0]]])).build())
    np.testing.assert_array_equal(network.evaluate(np.zeros((1, 2, 2, 1)))[0, 0, 0], [1.0, 2.0])


@pytest.mark.parametrize('shape', [(1, 1, 2), (2, 1, 1), (1, 2, 1)])
def test_bias_with_wrong_shape_fails(image, shape):
    layer = Conv2DLayer(image).b(np.zeros(shape))
    with pytest.raises(IllegalArgumentError, match=re.escape(constants.MSG_ILLEGAL_BIAS_SHAPE)):
        layer.build()


def test_bias_can_be_disabled(image):
    network = Conv2DLayer(image).b(False).build()
    assert len(list(network.parameters())) == 1


def test_bias_true_adds_zero_bias(image):
    network = Conv2DLayer(image).b(True).build()
    parameters = list(network.parameters())
    assert len(parameters) == 2
    assert any(tuple(p.shape) == (1, 1, 1) and float(p.abs().sum()) == 0.0 for p in parameters)


def test_weight_without_alternative_terminates(image):
    layer = Conv2DLayer(image).W(WeightValue())
    with pytest.raises(SystemExit) as exc_info:
        layer.build()
    assert exc_info.value.code == constants.EXIT_ILLEGAL_COMPOSITE_VALUE_2


def test_weight_with_wrong_element_count_fails(image):
    with pytest.raises(IllegalArgumentError):
        Conv2DLayer(image).W(np.ones((5, 5, 1, 1))).build()


# ---------------------------------------------------------------------------
# Parameters and building
# ---------------------------------------------------------------------------

def test_every_build_allocates_fresh_parameters(image):
    layer = Conv2DLayer(image)
    first = set(id(p) for p in layer.build().parameters())
    second = set(id(p) for p in layer.build().parameters())
    assert len(first) == 2
    assert first.isdisjoint(second)


def test_shared_weight_is_reused(image):
    shared = Parameter(shape=(3, 3, 1, 1), initializer=ConstantInitializer(1.0))
    first = Conv2DLayer(image).W(shared).b(False).build()
    second = Conv2DLayer(image).W(shared).b(False).build()
    assert list(first.parameters())[0] is list(second.parameters())[0]


def test_weight_shape_follows_input_channels():
    x = InputVariable((4, 4, 3))
    network = Conv2DLayer(x).num_filters(2).filter_size((5, 3)).b(False).build()
    assert [tuple(p.shape) for p in network.parameters()] == [(5, 3, 3, 2)]


def test_options_have_defaults(image):
    layer = Conv2DLayer(image)
    assert layer.num_filters() == 1
    assert layer.filter_size() == (3, 3)
    assert layer.pad().get(1) == 'same'
    assert layer.stride() == (1, 1)
    assert layer.W().is_active(1)
    assert layer.b().is_active(1)
    assert layer.nonlinearity() is rectify


def test_setters_chain_and_validate(image):
    layer = Conv2DLayer(image)
    assert layer.num_filters(4).stride(2) is layer
    assert layer.stride() == (2, 2)
    with pytest.raises(IllegalArgumentError):
        layer.num_filters(0)
    with pytest.raises(IllegalArgumentError):
        layer.filter_size((0, 3))
    with pytest.raises(IllegalArgumentError):
        layer.nonlinearity('relu')
    with pytest.raises(IllegalArgumentError):
        layer.pad(1.5)
    assert layer.num_filters() == 4


def test_layers_compose():
    x = InputVariable((8, 8, 1))
    conv = Conv2DLayer(x).num_filters(4)
    network = MaxPool2DLayer(conv).build()
    assert network.shape == (4, 4, 4)


def test_call_builds(image):
    assert Conv2DLayer(image).pad('valid')().shape == (3, 3, 1)


def test_input_must_be_an_image():
    with pytest.raises(IllegalArgumentError):
        Conv2DLayer(InputVariable((5, 5))).build()


def test_build_leaves_options_unchanged(image):
    shared = Parameter(shape=(3, 3, 1, 2), initializer=ConstantInitializer(1.0))
    layer = Conv2DLayer(image).num_filters(2).pad('full').W(shared).b(False)
    layer.build()
    layer.build()
    assert layer.num_filters() == 2
    assert layer.pad().is_active(1)
    assert layer.pad().get(1) == 'full'
    assert layer.W().get(0) is shared
    assert layer.b().is_active(2)
    assert layer.b().get(2) is False
    assert layer.filter_size() == (3, 3)
