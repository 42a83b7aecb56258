import numpy as np
import pytest
import torch

from chianti.engine import ConstantInitializer, HeNormal, Parameter, ParameterInitializer
from chianti.exceptions import IllegalArgumentError
from chianti.values import (
    ArrayValue,
    BoolValue,
    CompositeValue,
    Float32Value,
    Float64Value,
    Int32Value,
    Int64Value,
    RankedTensor,
    UInt32Value,
    UInt64Value,
    get,
    is_active,
)

Size2D = ArrayValue[UInt64Value, 2]
PadValue = CompositeValue[Size2D, str]


# ---------------------------------------------------------------------------
# Atomic values
# ---------------------------------------------------------------------------

@pytest.mark.parametrize('cls', [Int64Value, UInt64Value, Int32Value, UInt32Value,
                                 Float32Value, Float64Value, BoolValue])
def test_atomic_value_defaults_to_zero(cls):
    value = cls()
    assert value == 0
    assert not bool(value)


def test_atomic_value_converts_back():
    assert int(UInt64Value(7)) == 7
    assert float(Float64Value(2.5)) == 2.5
    assert bool(BoolValue(True)) is True
    assert Float32Value(0.1).value == pytest.approx(0.1)


def test_atomic_value_range_is_checked():
    with pytest.raises(IllegalArgumentError):
        UInt64Value(-1)
    with pytest.raises(IllegalArgumentError):
        Int32Value(2 ** 31)
    with pytest.raises(IllegalArgumentError):
        Int64Value(1.5)
    with pytest.raises(IllegalArgumentError):
        BoolValue(1)


# ---------------------------------------------------------------------------
# Array values
# ---------------------------------------------------------------------------

def test_array_value_from_sequence():
    v = Size2D([1, 2])
    assert v[0] == 1
    assert v[1] == 2
    assert v == (1, 2)
    assert list(v) == [1, 2]


def test_array_value_broadcasts_scalar():
    assert ArrayValue[int, 3](7) == (7, 7, 7)


def test_array_value_from_numpy_and_array_value():
    v = Size2D(np.array([4, 5]))
    assert Size2D(v) == v
    assert isinstance(v[0], int)


def test_array_value_default_is_zero():
    assert Size2D() == (0, 0)
    assert ArrayValue[float, 2]() == (0.0, 0.0)


def test_array_value_wrong_length_fails():
    with pytest.raises(IllegalArgumentError):
        Size2D([1, 2, 3])
    with pytest.raises(IllegalArgumentError):
        Size2D([1])


def test_array_value_index_out_of_range_fails():
    v = Size2D((1, 2))
    with pytest.raises(IllegalArgumentError):
        v[2]
    with pytest.raises(IllegalArgumentError):
        v[-1]


def test_array_value_rejects_bad_elements():
    with pytest.raises(IllegalArgumentError):
        Size2D((-1, 2))
    with pytest.raises(IllegalArgumentError):
        Size2D(True)
    with pytest.raises(IllegalArgumentError):
        Size2D('ab')


def test_array_value_is_immutable_and_printable():
    v = Size2D((1, 2))
    with pytest.raises(TypeError):
        v[0] = 3
    assert repr(v) == '[1, 2]'


def test_array_value_requires_specialization():
    with pytest.raises(TypeError):
        ArrayValue([1, 2])
    assert ArrayValue[int, 2] is ArrayValue[int, 2]


# ---------------------------------------------------------------------------
# Composite values
# ---------------------------------------------------------------------------

def test_composite_value_initialize_list():
    v = PadValue([1, 2])
    assert is_active(0, v)
    assert not is_active(1, v)
    assert get(0, v)[0] == 1
    assert get(0, v)[1] == 2


def test_composite_value_initialize_tuple():
    v = PadValue((1, 2))
    assert v.is_active(0)
    assert v.get(0) == (1, 2)


def test_composite_value_initialize_string():
    v = PadValue('foo')
    assert not is_active(0, v)
    assert is_active(1, v)
    assert get(1, v) == 'foo'


def test_composite_value_initialize_wrapped_array():
    v = PadValue(Size2D(3))
    assert v.is_active(0)
    assert v.get(0) == (3, 3)


def test_composite_value_default_has_nothing_active():
    v = CompositeValue[Size2D, str, bool]()
    assert v.active_index is None
    for k in range(3):
        assert not v.is_active(k)


def test_inactive_alternative_returns_default():
    v = PadValue('same')
    assert v.get(0) == (0, 0)
    assert PadValue((1, 1)).get(1) == ''


def test_composite_value_remembers_bool_versus_string():
    Mode = CompositeValue[str, bool]
    assert Mode(False).is_active(1)
    assert Mode(False).get(1) is False
    assert Mode('false').is_active(0)


def test_bool_never_matches_integer_alternative():
    v = CompositeValue[Size2D, str, bool](True)
    assert v.active_index == 2


def test_composite_value_first_matching_alternative_wins():
    assert CompositeValue[float, int](3).is_active(0)
    assert CompositeValue[int, float](3).is_active(0)
    assert CompositeValue[int, float](3.5).is_active(1)


def test_composite_value_copy():
    original = PadValue('valid')
    copy = PadValue(original)
    assert copy == original
    assert copy.is_active(1)


def test_composite_value_without_match_fails():
    with pytest.raises(IllegalArgumentError):
        PadValue(3.5)
    with pytest.raises(IllegalArgumentError):
        PadValue((1, 2, 3))


def test_composite_value_invalid_index_fails():
    with pytest.raises(IllegalArgumentError):
        PadValue('same').is_active(2)


def test_composite_value_rejects_duplicate_alternatives():
    with pytest.raises(TypeError):
        CompositeValue[str, str]


def test_composite_value_with_initializer_alternative():
    Weight = CompositeValue[RankedTensor[float, 4], ParameterInitializer]
    w = Weight(HeNormal())
    assert w.is_active(1)
    assert isinstance(w.get(1), HeNormal)
    assert w.get(0).shape == (0, 0, 0, 0)


# ---------------------------------------------------------------------------
# Ranked tensors
# ---------------------------------------------------------------------------

def test_ranked_tensor_accepts_matching_rank():
    Tensor3 = RankedTensor[float, 3]
    value = Tensor3.coerce([[[1, 2]]])
    assert value.dtype == np.float32
    assert value.shape == (1, 1, 2)
    assert Tensor3.accepts(torch.zeros(1, 1, 4))
    assert Tensor3.accepts(Parameter(shape=(1, 1, 2), initializer=ConstantInitializer(0.0)))


def test_ranked_tensor_rejects_other_input():
    Tensor3 = RankedTensor[float, 3]
    assert not Tensor3.accepts(np.zeros((2, 2)))
    assert not Tensor3.accepts('same')
    assert not Tensor3.accepts(True)
    assert not Tensor3.accepts(ConstantInitializer(0.0))


def test_bias_value_alternatives():
    Bias = CompositeValue[RankedTensor[float, 3], ParameterInitializer, bool]
    assert Bias(np.zeros((1, 1, 2))).active_index == 0
    assert Bias(ConstantInitializer(1.0)).active_index == 1
    assert Bias(False).active_index == 2
