"""
atomic.py — Initialized atomic values

Atomic values wrap a single number or boolean that starts at zero (or
``False``) when no initial value is given and converts back to the plain
Python type.

Classes
-------
AbstractAtomicValue
    Base class holding the wrapped value and the conversions.
Int64Value, UInt64Value, Int32Value, UInt32Value
    Range-checked integer values.
Float32Value, Float64Value
    Floating point values.
BoolValue
    Boolean value initialized to ``False``.
"""

import numbers
from typing import Any, Optional

import numpy as np

from ..exceptions import IllegalArgumentError


class AbstractAtomicValue(object):
    """
    Abstract class for initialized atomic values.

    Subclasses set ``value_type`` to the Python type the value converts to
    and may restrict the accepted range through ``min_value``/``max_value``.

    Parameters
    ----------
    x : optional
        The initial value. Defaults to ``value_type()``, i.e. zero or False.

    Raises
    ------
    IllegalArgumentError
        If the value cannot be represented by this atomic type.
    """

    value_type: type = int
    min_value: Optional[int] = None
    max_value: Optional[int] = None

    def __init__(self, x: Any = None) -> None:
        if x is None:
            x = self.value_type()
        if isinstance(x, AbstractAtomicValue):
            x = x.value
        self._value = self._convert(x)

    @classmethod
    def _convert(cls, x: Any) -> Any:
        if cls.value_type is bool:
            if not isinstance(x, (bool, np.bool_)):
                raise IllegalArgumentError(f"{cls.__name__} requires a boolean, got {x!r}")
            return bool(x)
        if isinstance(x, (bool, np.bool_)) or not isinstance(x, numbers.Real):
            raise IllegalArgumentError(f"{cls.__name__} requires a number, got {x!r}")
        if cls.value_type is int:
            if not isinstance(x, numbers.Integral):
                raise IllegalArgumentError(f"{cls.__name__} requires an integer, got {x!r}")
            x = int(x)
            if cls.min_value is not None and x < cls.min_value:
                raise IllegalArgumentError(f"{x} is below the range of {cls.__name__}")
            if cls.max_value is not None and x > cls.max_value:
                raise IllegalArgumentError(f"{x} is above the range of {cls.__name__}")
            return x
        return float(x)

    @property
    def value(self) -> Any:
        """The wrapped value."""
        return self._value

    def __int__(self) -> int:
        return int(self._value)

    def __index__(self) -> int:
        if self.value_type is float:
            raise TypeError(f"{type(self).__name__} cannot be used as an index")
        return int(self._value)

    def __float__(self) -> float:
        return float(self._value)

    def __bool__(self) -> bool:
        return bool(self._value)

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, AbstractAtomicValue):
            other = other.value
        return self._value == other

    def __hash__(self) -> int:
        return hash(self._value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"


class Int64Value(AbstractAtomicValue):
    """Represents an initialized 64 bit integer value."""
    min_value = -2 ** 63
    max_value = 2 ** 63 - 1


class UInt64Value(AbstractAtomicValue):
    """Represents an initialized unsigned 64 bit integer value."""
    min_value = 0
    max_value = 2 ** 64 - 1


class Int32Value(AbstractAtomicValue):
    """Represents an initialized 32 bit integer value."""
    min_value = -2 ** 31
    max_value = 2 ** 31 - 1


class UInt32Value(AbstractAtomicValue):
    """Represents an initialized unsigned 32 bit integer value."""
    min_value = 0
    max_value = 2 ** 32 - 1


class Float32Value(AbstractAtomicValue):
    """Represents an initialized 32 bit floating point value."""
    value_type = float

    @classmethod
    def _convert(cls, x: Any) -> float:
        return float(np.float32(super(Float32Value, cls)._convert(x)))


class Float64Value(AbstractAtomicValue):
    """Represents an initialized 64 bit floating point value."""
    value_type = float


class BoolValue(AbstractAtomicValue):
    """Represents a boolean value that is initialized to false."""
    value_type = bool
