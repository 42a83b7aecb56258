"""
engine package — Computation graph bridge over PyTorch

This package is the runtime the layers compile to. It wraps PyTorch in a
small symbolic graph: nodes know their channels-last shape before any data
exists, parameters live on a ``torch.device``, and operators take the
explicit padding vectors the layers resolve.

Modules
-------
device
    ``resolve_device`` for ``'auto'``/``'cpu'``/``'cuda'`` device handles.
bridge
    Host tensor to engine value conversions and shape projection.
initializers
    Parameter initializers (He normal, Glorot uniform, constant, ...).
graph
    ``Variable``, ``InputVariable``, ``Parameter``, ``Constant``, ``Function``.
ops
    Operators: convolution, pooling, plus, relu, dropout, batch normalization.

Usage
-----
    import numpy as np
    from chianti.engine import InputVariable, Parameter, HeNormal, convolution

    x = InputVariable((5, 5, 1))
    w = Parameter(shape=(3, 3, 1, 8), initializer=HeNormal())
    y = convolution(w, x, strides=(1, 1, 1))
    y.shape            # (5, 5, 8)
    y.evaluate(np.zeros((2, 5, 5, 1)))

Notes
-----
- Values fed to ``InputVariable`` carry a leading batch axis.
- All graph nodes are ``torch.nn.Module`` instances; use ``parameters()``
  for optimization and ``train(False)`` for inference.
"""

from .device import resolve_device
from .bridge import to_engine_array, to_engine_value, shape_of
from .initializers import (
    ParameterInitializer,
    HeNormal,
    GlorotUniform,
    Normal,
    Uniform,
    ConstantInitializer,
)
from .graph import Variable, InputVariable, Parameter, Constant, Function, as_variable
from .ops import (
    PoolingType,
    convolution,
    pooling,
    plus,
    relu,
    sigmoid,
    tanh,
    dropout,
    batch_normalization,
)

__all__ = [
    'resolve_device',
    'to_engine_array',
    'to_engine_value',
    'shape_of',
    'ParameterInitializer',
    'HeNormal',
    'GlorotUniform',
    'Normal',
    'Uniform',
    'ConstantInitializer',
    'Variable',
    'InputVariable',
    'Parameter',
    'Constant',
    'Function',
    'as_variable',
    'PoolingType',
    'convolution',
    'pooling',
    'plus',
    'relu',
    'sigmoid',
    'tanh',
    'dropout',
    'batch_normalization',
]
