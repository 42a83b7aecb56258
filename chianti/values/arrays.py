"""
arrays.py — Fixed sized array values

``ArrayValue[T, S]`` is an immutable sequence of exactly ``S`` elements of
type ``T``. A specialization is created by subscription and can be built from
a single element (copied to every position), from a sequence of length ``S``,
or from another array value.

Examples
--------
>>> from chianti.values import ArrayValue, UInt64Value
>>> size = ArrayValue[UInt64Value, 2]((3, 5))
>>> size[0], size[1]
(3, 5)
>>> ArrayValue[int, 3](7)
[7, 7, 7]
"""

import collections.abc
from typing import Any, Dict, Iterator, Tuple

import numpy as np

from ..exceptions import IllegalArgumentError
from ..validators import ArgumentValidator
from .atomic import AbstractAtomicValue


def _is_sequence(v: Any) -> bool:
    if isinstance(v, (str, bytes)):
        return False
    if isinstance(v, np.ndarray):
        return v.ndim == 1
    return isinstance(v, collections.abc.Sequence)


class ArrayValue(object):
    """
    Fixed sized array value.

    Use ``ArrayValue[T, S]`` to obtain the specialization for element type
    ``T`` and length ``S``. ``T`` may be ``int``, ``float``, ``bool`` or an
    atomic value class such as :class:`UInt64Value`, in which case every
    element is range checked and stored as the plain Python value.

    Raises
    ------
    IllegalArgumentError
        If a sequence of the wrong length is given, an element cannot be
        converted to ``T``, or an index is out of range.
    """

    element_type: Any = None
    size: int = None
    _specializations: Dict[Tuple[Any, int], type] = {}

    def __class_getitem__(cls, params):
        if cls.size is not None:
            raise TypeError(f"{cls.__name__} is already specialized")
        element_type, size = params
        size = ArgumentValidator.validate_positive_int(size, "ArrayValue size")
        key = (element_type, size)
        if key not in ArrayValue._specializations:
            name = f"ArrayValue[{getattr(element_type, '__name__', element_type)}, {size}]"
            ArrayValue._specializations[key] = type(
                name, (ArrayValue,), {'element_type': element_type, 'size': size}
            )
        return ArrayValue._specializations[key]

    def __init__(self, v: Any = None) -> None:
        if self.size is None:
            raise TypeError("ArrayValue must be specialized, e.g. ArrayValue[int, 2]")

        if v is None:
            values = [self._default_element()] * self.size
        elif isinstance(v, ArrayValue) or _is_sequence(v):
            values = list(v)
        else:
            values = [v] * self.size

        if len(values) != self.size:
            raise IllegalArgumentError(
                f"{type(self).__name__} requires exactly {self.size} elements, got {len(values)}"
            )
        self._value = tuple(self._convert_element(x) for x in values)

    @classmethod
    def _default_element(cls) -> Any:
        t = cls.element_type
        if isinstance(t, type) and issubclass(t, AbstractAtomicValue):
            return t().value
        return t()

    @classmethod
    def _convert_element(cls, x: Any) -> Any:
        t = cls.element_type
        if isinstance(x, np.generic):
            x = x.item()
        if isinstance(t, type) and issubclass(t, AbstractAtomicValue):
            return t(x).value
        if t is int:
            return ArgumentValidator.validate_integer(x, "Array element")
        if t is float:
            return ArgumentValidator.validate_real(x, "Array element")
        if t is bool:
            return ArgumentValidator.validate_bool(x, "Array element")
        if isinstance(x, t):
            return x
        raise IllegalArgumentError(
            f"Array element must be of type {getattr(t, '__name__', t)}, got {type(x).__name__}"
        )

    @classmethod
    def coerce(cls, v: Any) -> 'ArrayValue':
        return v if type(v) is cls else cls(v)

    @classmethod
    def default(cls) -> 'ArrayValue':
        return cls()

    @classmethod
    def accepts(cls, v: Any) -> bool:
        """Return whether ``v`` can be converted to this specialization."""
        try:
            cls(v)
        except IllegalArgumentError:
            return False
        return True

    def __getitem__(self, i: int) -> Any:
        if isinstance(i, bool) or not isinstance(i, (int, np.integer)) or not 0 <= i < self.size:
            raise IllegalArgumentError(
                f"Index {i!r} is out of range for {type(self).__name__}"
            )
        return self._value[int(i)]

    def __iter__(self) -> Iterator[Any]:
        return iter(self._value)

    def __len__(self) -> int:
        return self.size

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, ArrayValue):
            return self._value == other._value
        if isinstance(other, (tuple, list)):
            return self._value == tuple(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value)

    def __repr__(self) -> str:
        return '[' + ', '.join(str(x) for x in self._value) + ']'

    def to_tuple(self) -> Tuple[Any, ...]:
        """Return the elements as a plain tuple."""
        return self._value
