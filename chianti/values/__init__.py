"""
values package — Option value model for chianti layers

This package contains the value types layer options are stored in: atomic
values initialized to zero, fixed sized arrays, ranked tensor markers and the
composite value, a tagged union that remembers which of its declared
alternatives was assigned.

Modules
-------
atomic
    Range-checked integer, floating point and boolean values.
arrays
    ``ArrayValue[T, S]``, an immutable sequence of exactly ``S`` elements.
tensors
    ``RankedTensor[float, R]``, the explicit-tensor alternative.
composite
    ``CompositeValue[T0, ..., Tn]`` and the ``is_active``/``get`` accessors.

Usage
-----
    from chianti.values import ArrayValue, CompositeValue, UInt64Value

    Pad = CompositeValue[ArrayValue[UInt64Value, 2], str]
    pad = Pad((1, 1))
    assert pad.is_active(0) and pad.get(0)[1] == 1
"""

from .atomic import (
    AbstractAtomicValue,
    Int64Value,
    UInt64Value,
    Int32Value,
    UInt32Value,
    Float32Value,
    Float64Value,
    BoolValue,
)
from .arrays import ArrayValue
from .tensors import RankedTensor
from .composite import CompositeValue, is_active, get

__all__ = [
    'AbstractAtomicValue',
    'Int64Value',
    'UInt64Value',
    'Int32Value',
    'UInt32Value',
    'Float32Value',
    'Float64Value',
    'BoolValue',
    'ArrayValue',
    'RankedTensor',
    'CompositeValue',
    'is_active',
    'get',
]
