import numpy as np
import pytest
import torch

from chianti import constants
from chianti.engine import ConstantInitializer, HeNormal, Parameter, ParameterInitializer
from chianti.exceptions import IllegalArgumentError, IllegalStateError, terminate
from chianti.parameters import resolve_parameter
from chianti.values import CompositeValue, RankedTensor

WeightValue = CompositeValue[RankedTensor[float, 4], ParameterInitializer]
BiasValue = CompositeValue[RankedTensor[float, 3], ParameterInitializer, bool]


def test_explicit_tensor_is_copied(device):
    data = np.arange(8, dtype=np.float32).reshape(2, 2, 2, 1)
    parameter = resolve_parameter(WeightValue(data), (2, 2, 2, 1), device)
    assert isinstance(parameter, Parameter)
    np.testing.assert_array_equal(parameter.evaluate(), data)
    data[0, 0, 0, 0] = 100.0
    assert parameter.value[0, 0, 0, 0].item() == 0.0


def test_explicit_tensor_is_reshaped_row_major(device):
    data = np.arange(4, dtype=np.float32).reshape(1, 1, 4, 1)
    parameter = resolve_parameter(WeightValue(data), (2, 2, 1, 1), device)
    assert parameter.shape == (2, 2, 1, 1)
    assert parameter.value[1, 0, 0, 0].item() == 2.0


def test_explicit_tensor_with_wrong_element_count_fails(device):
    with pytest.raises(IllegalArgumentError):
        resolve_parameter(WeightValue(np.ones((3, 3, 1, 1))), (3, 3, 2, 1), device)


def test_initializer_allocates_fresh_parameter(device):
    value = WeightValue(ConstantInitializer(0.5))
    first = resolve_parameter(value, (3, 3, 1, 2), device)
    second = resolve_parameter(value, (3, 3, 1, 2), device)
    assert first is not second
    assert first.shape == (3, 3, 1, 2)
    assert torch.all(first.value == 0.5)


def test_random_initializer_respects_shape(device):
    parameter = resolve_parameter(WeightValue(HeNormal()), (5, 5, 3, 4), device)
    assert tuple(parameter.value.shape) == (5, 5, 3, 4)
    assert parameter.value.requires_grad


def test_active_flag_yields_no_parameter(device):
    assert resolve_parameter(BiasValue(False), (1, 1, 2), device) is None
    assert resolve_parameter(BiasValue(True), (1, 1, 2), device) is None


def test_existing_parameter_is_shared(device):
    shared = Parameter(shape=(3, 3, 1, 1), initializer=ConstantInitializer(1.0))
    assert resolve_parameter(WeightValue(shared), (3, 3, 1, 1), device) is shared


def test_existing_parameter_with_wrong_shape_fails(device):
    shared = Parameter(shape=(3, 3, 1, 1), initializer=ConstantInitializer(1.0))
    with pytest.raises(IllegalArgumentError):
        resolve_parameter(WeightValue(shared), (3, 3, 1, 2), device)


def test_nothing_active_terminates_with_two_alternatives(device, capsys):
    with pytest.raises(SystemExit) as exc_info:
        resolve_parameter(WeightValue(), (3, 3, 1, 1), device)
    assert exc_info.value.code == constants.EXIT_ILLEGAL_COMPOSITE_VALUE_2
    assert capsys.readouterr().err.startswith(constants.ILLEGAL_STATE_PREFIX)


def test_nothing_active_terminates_with_three_alternatives(device, capsys):
    with pytest.raises(SystemExit) as exc_info:
        resolve_parameter(BiasValue(), (1, 1, 1), device)
    assert exc_info.value.code == constants.EXIT_ILLEGAL_COMPOSITE_VALUE_3
    assert 'Illegal system state reached' in capsys.readouterr().err


def test_terminate_prints_diagnostic(capsys):
    with pytest.raises(SystemExit) as exc_info:
        terminate('broken', 7)
    assert exc_info.value.code == 7
    assert capsys.readouterr().err.strip() == 'Illegal system state reached: broken'


def test_illegal_state_error_message():
    error = IllegalStateError('broken', 3)
    assert str(error) == 'Illegal system state reached: broken'
    assert error.exit_code == 3
