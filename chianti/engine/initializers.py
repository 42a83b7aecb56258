"""
initializers.py — Parameter initializers

An initializer tells the engine how to populate a freshly allocated
parameter. Initializers are plain descriptors; they produce a tensor only
when :meth:`ParameterInitializer.initialize` is called with a shape.

Classes
-------
ParameterInitializer
    Base class; subclasses implement ``_fill``.
HeNormal
    Gaussian with standard deviation ``scale * sqrt(2 / fan_in)``.
GlorotUniform
    Uniform in ``[-a, a]`` with ``a = scale * sqrt(6 / (fan_in + fan_out))``.
Normal, Uniform
    Gaussian / uniform with a fixed scale.
ConstantInitializer
    Every entry set to the same value.

Notes
-----
Shapes are channels-last: for a filter ``(kH, kW, C_in, C_out)`` the fan-in is
``kH * kW * C_in`` and the fan-out is ``C_out``.
"""

import math
from typing import Optional, Sequence, Tuple

import numpy as np
import torch


def _fans(shape: Tuple[int, ...]) -> Tuple[int, int]:
    if len(shape) == 0:
        return 1, 1
    if len(shape) == 1:
        return shape[0], shape[0]
    fan_in = int(np.prod(shape[:-1]))
    return fan_in, shape[-1]


class ParameterInitializer(object):
    """
    Base class for parameter initializers.

    Parameters
    ----------
    seed : int, optional
        Seed of the random generator used by random initializers. Without a
        seed the global torch generator is used.
    """

    def __init__(self, seed: Optional[int] = None) -> None:
        self.seed = seed

    def initialize(self, shape: Sequence[int], dtype: torch.dtype = torch.float32,
                   device: Optional[torch.device] = None) -> torch.Tensor:
        """Allocate a tensor of ``shape`` on ``device`` and fill it."""
        shape = tuple(int(d) for d in shape)
        data = torch.empty(shape, dtype=dtype)
        generator = None
        if self.seed is not None:
            generator = torch.Generator().manual_seed(self.seed)
        with torch.no_grad():
            self._fill(data, generator)
        return data.to(device) if device is not None else data

    def _fill(self, data: torch.Tensor, generator: Optional[torch.Generator]) -> None:
        raise NotImplementedError(f"{type(self).__name__} does not define how to fill a parameter")

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class HeNormal(ParameterInitializer):
    """He et al. (2015) normal initializer."""

    def __init__(self, scale: float = 1.0, seed: Optional[int] = None) -> None:
        super(HeNormal, self).__init__(seed)
        self.scale = scale

    def _fill(self, data, generator):
        fan_in, _ = _fans(tuple(data.shape))
        std = self.scale * math.sqrt(2.0 / max(fan_in, 1))
        data.normal_(0.0, std, generator=generator)

    def __repr__(self) -> str:
        return f"HeNormal(scale={self.scale})"


class GlorotUniform(ParameterInitializer):
    """Glorot & Bengio (2010) uniform initializer."""

    def __init__(self, scale: float = 1.0, seed: Optional[int] = None) -> None:
        super(GlorotUniform, self).__init__(seed)
        self.scale = scale

    def _fill(self, data, generator):
        fan_in, fan_out = _fans(tuple(data.shape))
        bound = self.scale * math.sqrt(6.0 / max(fan_in + fan_out, 1))
        data.uniform_(-bound, bound, generator=generator)

    def __repr__(self) -> str:
        return f"GlorotUniform(scale={self.scale})"


class Normal(ParameterInitializer):
    """Zero-mean Gaussian with standard deviation ``scale``."""

    def __init__(self, scale: float = 0.01, seed: Optional[int] = None) -> None:
        super(Normal, self).__init__(seed)
        self.scale = scale

    def _fill(self, data, generator):
        data.normal_(0.0, self.scale, generator=generator)

    def __repr__(self) -> str:
        return f"Normal(scale={self.scale})"


class Uniform(ParameterInitializer):
    """Uniform in ``[-scale, scale]``."""

    def __init__(self, scale: float = 0.01, seed: Optional[int] = None) -> None:
        super(Uniform, self).__init__(seed)
        self.scale = scale

    def _fill(self, data, generator):
        data.uniform_(-self.scale, self.scale, generator=generator)

    def __repr__(self) -> str:
        return f"Uniform(scale={self.scale})"


class ConstantInitializer(ParameterInitializer):
    """Sets every entry to ``value``."""

    def __init__(self, value: float = 0.0) -> None:
        super(ConstantInitializer, self).__init__()
        self.value = float(value)

    def _fill(self, data, generator):
        data.fill_(self.value)

    def __repr__(self) -> str:
        return f"ConstantInitializer({self.value})"
