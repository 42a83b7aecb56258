"""
composite.py — Composite values (tagged unions over a declared type list)

A composite value holds one of several declared alternatives and remembers
*which* alternative was assigned, not merely which type the value has. Layer
options such as ``pad`` use it to accept heterogeneous forms (``'same'``,
``(1, 1)``, ``False``) and to branch on the form that was given.

Examples
--------
>>> from chianti.values import ArrayValue, CompositeValue, UInt64Value, get, is_active
>>> Pad = CompositeValue[ArrayValue[UInt64Value, 2], str, bool]
>>> pad = Pad('same')
>>> is_active(1, pad), get(1, pad)
(True, 'same')
>>> is_active(2, Pad(False))
True
>>> Pad().active_index is None
True
"""

import numbers
from typing import Any, Dict, Optional, Tuple

import numpy as np

from ..exceptions import IllegalArgumentError
from .atomic import AbstractAtomicValue


def _type_name(t: Any) -> str:
    return getattr(t, '__name__', repr(t))


def _accepts(t: Any, v: Any) -> bool:
    if t is str:
        return isinstance(v, str)
    if t is bool:
        return isinstance(v, (bool, np.bool_))
    if t is int:
        return isinstance(v, numbers.Integral) and not isinstance(v, (bool, np.bool_))
    if t is float:
        return isinstance(v, numbers.Real) and not isinstance(v, (bool, np.bool_))
    if hasattr(t, 'accepts'):
        return t.accepts(v)
    return isinstance(v, t)


def _coerce(t: Any, v: Any) -> Any:
    if t in (str, bool, int, float):
        return t(v)
    if hasattr(t, 'coerce'):
        return t.coerce(v)
    return v


def _default(t: Any) -> Any:
    if hasattr(t, 'default'):
        return t.default()
    if isinstance(t, type) and issubclass(t, AbstractAtomicValue):
        return t()
    try:
        return t()
    except TypeError:
        return None


class CompositeValue(object):
    """
    Tagged union over the alternatives listed at specialization.

    ``CompositeValue[T0, T1, ...]`` creates the specialization; constructing it
    from a value activates the first alternative that accepts the value.
    Constructing it without a value (or from ``None``) leaves every
    alternative inactive.

    Parameters
    ----------
    v : optional
        The value to store, or a composite value of the same declaration to
        copy.

    Raises
    ------
    IllegalArgumentError
        If ``v`` fits none of the alternatives.
    """

    alternatives: Tuple[Any, ...] = ()
    _specializations: Dict[Tuple[Any, ...], type] = {}

    def __class_getitem__(cls, params):
        if cls.alternatives:
            raise TypeError(f"{cls.__name__} is already specialized")
        if not isinstance(params, tuple):
            params = (params,)
        if len(set(params)) != len(params):
            raise TypeError("CompositeValue alternatives must be distinct")
        if params not in CompositeValue._specializations:
            name = 'CompositeValue[' + ', '.join(_type_name(t) for t in params) + ']'
            CompositeValue._specializations[params] = type(
                name, (CompositeValue,), {'alternatives': params}
            )
        return CompositeValue._specializations[params]

    def __init__(self, v: Any = None) -> None:
        if not self.alternatives:
            raise TypeError("CompositeValue must be specialized, e.g. CompositeValue[int, str]")
        self._active: Optional[int] = None
        self._value: Any = None

        if v is None:
            return
        if isinstance(v, CompositeValue):
            if type(v) is type(self):
                self._active = v._active
                self._value = v._value
                return
            if v.active_index is None:
                return
            v = v.get(v.active_index)

        for k, t in enumerate(self.alternatives):
            if _accepts(t, v):
                self._active = k
                self._value = _coerce(t, v)
                return

        raise IllegalArgumentError(
            f"Value {v!r} is not compatible with any alternative of {type(self).__name__}"
        )

    @classmethod
    def coerce(cls, v: Any) -> 'CompositeValue':
        return v if type(v) is cls else cls(v)

    def _check_index(self, k: int) -> None:
        if isinstance(k, bool) or not isinstance(k, int) or not 0 <= k < len(self.alternatives):
            raise IllegalArgumentError(
                f"{type(self).__name__} has no alternative {k!r}"
            )

    @property
    def active_index(self) -> Optional[int]:
        """Index of the active alternative, or None if none is active."""
        return self._active

    def is_active(self, k: int) -> bool:
        """Return whether alternative ``k`` is the one that was assigned."""
        self._check_index(k)
        return self._active == k

    def get(self, k: int) -> Any:
        """Return the value of alternative ``k``.

        The stored value is returned when ``k`` is active; otherwise the
        default value of the alternative. Check :meth:`is_active` before
        relying on the result.
        """
        self._check_index(k)
        if self._active == k:
            return self._value
        return _default(self.alternatives[k])

    def __eq__(self, other: Any) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        if self._active != other._active:
            return False
        if isinstance(self._value, np.ndarray) or isinstance(other._value, np.ndarray):
            return bool(np.array_equal(self._value, other._value))
        result = self._value == other._value
        if isinstance(result, (bool, np.bool_)):
            return bool(result)
        return self._value is other._value

    __hash__ = None

    def __repr__(self) -> str:
        if self._active is None:
            return f"{type(self).__name__}()"
        return f"{type(self).__name__}({self._value!r})"


def is_active(k: int, v: CompositeValue) -> bool:
    """Return whether the ``k``-th alternative of ``v`` is active."""
    return v.is_active(k)


def get(k: int, v: CompositeValue) -> Any:
    """Return the ``k``-th alternative of ``v``."""
    return v.get(k)
