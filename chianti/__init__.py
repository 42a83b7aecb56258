"""
chianti — Fluent convolutional layer builder on top of PyTorch

chianti lets callers describe image-processing layers declaratively and
compiles each description into a node of a small PyTorch computation graph.
Options accept ergonomic shortcuts (string padding modes, scalar or pair
arguments, weights as tensors or initializers) which the layers resolve into
the explicit arguments of the engine operators.

Subpackages
-----------
values
    Atomic, array and composite option values.
engine
    Graph nodes, initializers and operators over PyTorch.
layers
    ``Conv2DLayer``, ``MaxPool2DLayer``, ``AveragePool2DLayer``,
    ``Upscale2DLayer``, ``DropOutLayer``, ``BatchNormLayer``.

Usage
-----
    import numpy as np
    from chianti import Conv2DLayer, InputVariable

    x = InputVariable((5, 5, 1))
    network = Conv2DLayer(x, 'cpu').filter_size((3, 3)).pad('valid').build()
    network.evaluate(np.ones((1, 5, 5, 1))).shape     # (1, 3, 3, 1)
"""

import logging

from . import constants
from . import nonlinearities
from .exceptions import ChiantiError, IllegalArgumentError, IllegalStateError
from .engine import InputVariable, Parameter, Constant, resolve_device
from .layers import (
    Conv2DLayer,
    MaxPool2DLayer,
    AveragePool2DLayer,
    Upscale2DLayer,
    DropOutLayer,
    BatchNormLayer,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    'constants',
    'nonlinearities',
    'ChiantiError',
    'IllegalArgumentError',
    'IllegalStateError',
    'InputVariable',
    'Parameter',
    'Constant',
    'resolve_device',
    'Conv2DLayer',
    'MaxPool2DLayer',
    'AveragePool2DLayer',
    'Upscale2DLayer',
    'DropOutLayer',
    'BatchNormLayer',
]

__version__ = '1.0.0'
