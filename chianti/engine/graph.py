"""
graph.py — Computation graph nodes on top of PyTorch

Layers are compiled against a symbolic input whose shape is known before any
data exists. Every node of the resulting graph is a ``Variable``: a
``torch.nn.Module`` with a static channels-last ``shape`` (without the batch
axis). Because nodes are modules, ``node.parameters()`` lists every trainable
parameter reachable from the node, and ``node.train(False)`` switches the
whole graph into inference mode.

Classes
-------
Variable
    Base class of all nodes.
InputVariable
    Placeholder fed with a batch of data at evaluation time.
Parameter
    Trainable tensor placed on a device.
Constant
    Non-trainable tensor placed on a device.
Function
    Node computed from other nodes; operators live in ``ops``.

Examples
--------
>>> import numpy as np
>>> from chianti.engine import InputVariable, relu
>>> x = InputVariable((2, 2, 1))
>>> y = relu(x)
>>> y.shape
(2, 2, 1)
>>> y.evaluate(np.full((1, 2, 2, 1), -1.0)).max()
0.0
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import torch
import torch.nn as nn

from ..exceptions import IllegalArgumentError
from .bridge import to_engine_value
from .initializers import ParameterInitializer

logger = logging.getLogger(__name__)

Arguments = Dict['InputVariable', torch.Tensor]


class Variable(nn.Module):
    """
    Base class of all graph nodes.

    Parameters
    ----------
    shape : sequence of int
        Static shape of the node, channels-last and without the batch axis.
    dtype : torch.dtype, optional
        Element type. Default is float32.
    name : str, optional
        Human readable name used in error messages and ``repr``.
    """

    def __init__(self, shape: Sequence[int], dtype: torch.dtype = torch.float32, name: str = '') -> None:
        super(Variable, self).__init__()
        self.shape = tuple(int(d) for d in shape)
        self.dtype = dtype
        self.name = name

    @property
    def rank(self) -> int:
        return len(self.shape)

    @property
    def arguments(self) -> List['InputVariable']:
        """Input variables this node depends on."""
        return [m for m in self.modules() if isinstance(m, InputVariable)]

    def _evaluate(self, arguments: Arguments, cache: Dict['Variable', torch.Tensor]) -> torch.Tensor:
        raise NotImplementedError

    def _default_device(self) -> torch.device:
        for tensor in self.parameters():
            return tensor.device
        for tensor in self.buffers():
            return tensor.device
        return torch.device('cpu')

    def _bind(self, arguments: Any, device: Optional[torch.device]) -> Arguments:
        device = device if device is not None else self._default_device()
        if arguments is None:
            arguments = {}
        elif not isinstance(arguments, dict):
            inputs = self.arguments
            if len(inputs) != 1:
                raise IllegalArgumentError(
                    f"A mapping of input variables to values is required; the node has {len(inputs)} inputs"
                )
            arguments = {inputs[0]: arguments}

        bound = {}
        for variable, value in arguments.items():
            if not isinstance(variable, InputVariable):
                raise IllegalArgumentError(f"Arguments must be keyed by InputVariable, got {type(variable).__name__}")
            bound[variable] = to_engine_value(value, device, variable.dtype)
        return bound

    def forward(self, arguments: Any = None, device: Optional[torch.device] = None) -> torch.Tensor:
        """
        Evaluate the node differentiably.

        Parameters
        ----------
        arguments : dict or array_like, optional
            Mapping of input variables to batches of data (batch axis first).
            If the node depends on a single input variable, the batch may be
            passed directly.
        device : torch.device, optional
            Device the data is copied to. Defaults to the device of the
            graph's parameters.

        Returns
        -------
        torch.Tensor
            The node's value.
        """
        return self._evaluate(self._bind(arguments, device), {})

    def evaluate(self, arguments: Any = None, device: Optional[torch.device] = None) -> np.ndarray:
        """Evaluate the node without gradients and return a numpy array."""
        with torch.no_grad():
            return self.forward(arguments, device).detach().cpu().numpy()

    def extra_repr(self) -> str:
        label = f"name={self.name!r}, " if self.name else ''
        return f"{label}shape={self.shape}"


class InputVariable(Variable):
    """Placeholder for data fed at evaluation time."""

    def _evaluate(self, arguments, cache):
        if self not in arguments:
            raise IllegalArgumentError(f"No value was bound to input variable {self.name or self.shape}")
        value = arguments[self]
        if tuple(value.shape[1:]) != self.shape:
            raise IllegalArgumentError(
                f"Input variable of shape {self.shape} was fed a batch of shape {tuple(value.shape)}"
            )
        return value


class Parameter(Variable):
    """
    Tensor-valued graph leaf that is optimized during training.

    Either ``value`` (a preallocated host or torch tensor) or both ``shape``
    and ``initializer`` have to be given.

    Parameters
    ----------
    shape : sequence of int, optional
        Shape of a freshly allocated parameter.
    initializer : ParameterInitializer, optional
        How to populate a freshly allocated parameter.
    device : torch.device, optional
        Where the parameter is stored.
    value : array_like or torch.Tensor, optional
        Preallocated data; it is copied.
    trainable : bool, optional
        Whether gradients are computed for the parameter. Default is True.
    """

    def __init__(self, shape: Optional[Sequence[int]] = None,
                 initializer: Optional[ParameterInitializer] = None,
                 device: Optional[torch.device] = None, value: Any = None,
                 dtype: torch.dtype = torch.float32, trainable: bool = True,
                 name: str = '') -> None:
        if value is not None:
            data = to_engine_value(value, device, dtype)
        elif shape is not None and initializer is not None:
            data = initializer.initialize(shape, dtype, device)
        else:
            raise IllegalArgumentError("Parameter requires either a value or a shape and an initializer")
        super(Parameter, self).__init__(data.shape, dtype, name)
        self.value = nn.Parameter(data, requires_grad=trainable)

    def _evaluate(self, arguments, cache):
        return self.value


class Constant(Variable):
    """Tensor-valued graph leaf that is never optimized."""

    def __init__(self, value: Any, device: Optional[torch.device] = None,
                 dtype: torch.dtype = torch.float32, name: str = '') -> None:
        data = to_engine_value(value, device, dtype)
        super(Constant, self).__init__(data.shape, dtype, name)
        self.register_buffer('value', data)

    def _evaluate(self, arguments, cache):
        return self.value


class Function(Variable):
    """
    Node computed from other nodes.

    Subclasses infer their output shape in ``__init__`` and implement
    ``_compute``, which receives the values of ``inputs`` in order.
    """

    def __init__(self, inputs: Sequence[Variable], shape: Sequence[int], name: str = '') -> None:
        super(Function, self).__init__(shape, inputs[0].dtype, name)
        self.inputs = nn.ModuleList(inputs)

    def _evaluate(self, arguments, cache):
        if self in cache:
            return cache[self]
        values = [v._evaluate(arguments, cache) for v in self.inputs]
        result = self._compute(*values)
        cache[self] = result
        return result

    def _compute(self, *values: torch.Tensor) -> torch.Tensor:
        raise NotImplementedError


def as_variable(x: Any) -> Variable:
    """
    Return ``x`` as a graph node.

    Layers (anything with a ``build()`` method) are built; nodes are returned
    unchanged.

    Raises
    ------
    IllegalArgumentError
        If ``x`` is neither a node nor buildable.
    """
    if isinstance(x, Variable):
        return x
    if hasattr(x, 'build'):
        node = x.build()
        if isinstance(node, Variable):
            return node
    raise IllegalArgumentError(f"Expected a graph node or a layer, got {type(x).__name__}")
