"""
base.py — Base classes and the option descriptor for chianti layers

Every layer is a small mutable value: its options start at their defaults,
fluent accessors replace them one at a time, and ``build()`` compiles the
current options into a graph node without changing them.

Classes
-------
LayerOption
    Descriptor turning a class attribute into a combined getter/setter.
AbstractLayer
    Holds the device and defines ``build()``.
AbstractSingleInputLayer
    Adds the input node.
AbstractNonDeterministicLayer
    Adds the ``deterministic`` option.
"""

import logging
from typing import Any, Callable, List

import torch

from .. import constants
from ..engine import Variable, as_variable, resolve_device
from ..engine.device import DeviceLike
from ..validators import ArgumentValidator

logger = logging.getLogger(__name__)

_UNSET = object()


class LayerOption(object):
    """
    Fluent accessor for a layer option.

    Declared as a class attribute, the option appears on instances as a
    method: called without arguments it returns the current value, called
    with a value it converts and stores the value and returns the layer, so
    that setters can be chained.

    Parameters
    ----------
    convert : callable
        ``convert(value, name)`` validates a new value and returns what is
        stored. It raises ``IllegalArgumentError`` for bad values.
    default : Any
        The initial value, passed through ``convert`` for every new layer.
    doc : str, optional
        Description of the option.

    Examples
    --------
    >>> layer.stride((2, 2)).pad('valid')   # doctest: +SKIP
    >>> layer.stride()                      # doctest: +SKIP
    [2, 2]
    """

    def __init__(self, convert: Callable[[Any, str], Any], default: Any, doc: str = '') -> None:
        self.convert = convert
        self.default = default
        self.__doc__ = doc
        self.name = None
        self.attribute = None

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name
        self.attribute = '_' + name

    def reset(self, layer: 'AbstractLayer') -> None:
        setattr(layer, self.attribute, self.convert(self.default, self.name))

    def __get__(self, layer: 'AbstractLayer', owner: type = None) -> Any:
        if layer is None:
            return self

        def accessor(value: Any = _UNSET) -> Any:
            if value is _UNSET:
                return getattr(layer, self.attribute)
            setattr(layer, self.attribute, self.convert(value, self.name))
            return layer

        accessor.__name__ = self.name
        accessor.__doc__ = self.__doc__
        return accessor


def coerce_to(kind: Any) -> Callable[[Any, str], Any]:
    """Converter storing ``kind.coerce(value)``."""
    def convert(value: Any, name: str) -> Any:
        return kind.coerce(value)
    return convert


def positive_array(kind: Any) -> Callable[[Any, str], Any]:
    """Converter for array values whose every entry must be positive."""
    def convert(value: Any, name: str) -> Any:
        value = kind.coerce(value)
        for entry in value:
            ArgumentValidator.validate_positive_int(entry, name)
        return value
    return convert


def positive_int(value: Any, name: str) -> int:
    return ArgumentValidator.validate_positive_int(value, name)


def boolean(value: Any, name: str) -> bool:
    return ArgumentValidator.validate_bool(value, name)


def real(value: Any, name: str) -> float:
    return ArgumentValidator.validate_real(value, name)


def function(value: Any, name: str) -> Any:
    return ArgumentValidator.validate_callable(value, name)


class AbstractLayer(object):
    """
    Base class for all layers.

    Parameters
    ----------
    device : str, torch.device or None
        The device where the parameters of the layer are stored. Resolved
        with :func:`chianti.engine.resolve_device`.
    """

    def __init__(self, device: DeviceLike = None) -> None:
        self.device: torch.device = resolve_device(device)
        for option in self._options():
            option.reset(self)

    @classmethod
    def _options(cls) -> List[LayerOption]:
        options = {}
        for klass in reversed(cls.__mro__):
            for name, attribute in vars(klass).items():
                if isinstance(attribute, LayerOption):
                    options[name] = attribute
        return list(options.values())

    def build(self) -> Variable:
        """Convert the layer into a graph node."""
        raise NotImplementedError

    def __call__(self) -> Variable:
        """Alias of :meth:`build`, the implicit conversion to a graph node."""
        return self.build()

    def __repr__(self) -> str:
        options = ', '.join(
            f"{option.name}={getattr(self, option.attribute)!r}" for option in self._options()
        )
        return f"{type(self).__name__}({options})"


class AbstractSingleInputLayer(AbstractLayer):
    """
    Base class for all layers with a single input stream.

    Parameters
    ----------
    input_variable : Variable or AbstractLayer
        The layer's input. A layer is built on the spot.
    device : str, torch.device or None
        The device where the parameters of the layer are stored.
    """

    def __init__(self, input_variable: Any, device: DeviceLike = None) -> None:
        super(AbstractSingleInputLayer, self).__init__(device)
        self.input: Variable = as_variable(input_variable)


class AbstractNonDeterministicLayer(AbstractSingleInputLayer):
    """Base class for layers that behave differently while training."""

    deterministic = LayerOption(boolean, constants.DEFAULT_DETERMINISTIC,
                                "Whether the layer behaves as at inference time.")
