"""
layers package — Fluent convolutional layer builders

Each layer is constructed from an input node (or another layer) and a
device, configured through chained option accessors and compiled with
``build()`` into an engine graph node.

Modules
-------
base
    ``LayerOption`` and the abstract layer classes.
conv
    ``Conv2DLayer``: convolution, optional bias, non-linearity.
pool
    ``MaxPool2DLayer`` and ``AveragePool2DLayer``.
upscale
    ``Upscale2DLayer``: nearest-neighbour upscaling.
noise
    ``DropOutLayer``.
normalization
    ``BatchNormLayer``.

Usage
-----
    from chianti.engine import InputVariable
    from chianti.layers import Conv2DLayer, MaxPool2DLayer

    x = InputVariable((28, 28, 1))
    conv = Conv2DLayer(x, 'cpu').num_filters(16).filter_size((5, 5)).pad('same')
    network = MaxPool2DLayer(conv, 'cpu').pool_size((2, 2)).build()
    network.shape      # (14, 14, 16)

Notes
-----
- Every ``build()`` creates fresh parameters; pass an existing engine
  ``Parameter`` as ``W``/``b`` to share weights between layers.
- Options are validated when they are set; padding modes are validated by
  ``build()``.
"""

from .base import (
    LayerOption,
    AbstractLayer,
    AbstractSingleInputLayer,
    AbstractNonDeterministicLayer,
)
from .conv import Conv2DLayer
from .pool import AbstractPool2DLayer, MaxPool2DLayer, AveragePool2DLayer
from .upscale import Upscale2DLayer
from .noise import DropOutLayer
from .normalization import BatchNormLayer

__all__ = [
    'LayerOption',
    'AbstractLayer',
    'AbstractSingleInputLayer',
    'AbstractNonDeterministicLayer',
    'Conv2DLayer',
    'AbstractPool2DLayer',
    'MaxPool2DLayer',
    'AveragePool2DLayer',
    'Upscale2DLayer',
    'DropOutLayer',
    'BatchNormLayer',
]
