"""
upscale.py — Nearest-neighbour upscaling layer

``Upscale2DLayer`` repeats every input cell ``scale_factor[0] x
scale_factor[1]`` times. It is compiled to a transposed convolution with a
constant kernel that is one on the channel diagonal and zero elsewhere, so
channels stay independent.
"""

import logging

import numpy as np

from .. import constants
from ..engine import Constant, Variable, convolution, shape_of
from ..values import ArrayValue, UInt64Value
from .base import AbstractSingleInputLayer, LayerOption, positive_array

logger = logging.getLogger(__name__)

Size2D = ArrayValue[UInt64Value, 2]


def upscale_kernel(scale_factor, channels: int) -> np.ndarray:
    """Return the ``(s0, s1, C, C)`` kernel that copies each channel into an ``s0 x s1`` block."""
    kernel = np.zeros((scale_factor[0], scale_factor[1], channels, channels), dtype=np.float32)
    for c in range(channels):
        kernel[:, :, c, c] = 1.0
    return kernel


class Upscale2DLayer(AbstractSingleInputLayer):
    """
    Nearest-neighbour 2D upscaling.

    Options
    -------
    scale_factor : (int, int)
        Repetitions along height and width. Default (2, 2).

    Examples
    --------
    >>> import numpy as np
    >>> from chianti.engine import InputVariable
    >>> x = InputVariable((1, 1, 1))
    >>> y = Upscale2DLayer(x).scale_factor((8, 8)).build()
    >>> y.shape
    (8, 8, 1)
    """

    scale_factor = LayerOption(positive_array(Size2D), constants.DEFAULT_SCALE_FACTOR,
                               "The upscaling factor along height and width.")

    def build(self) -> Variable:
        _, _, channels = shape_of(self.input, constants.IMAGE_RANK)
        scale_factor = self.scale_factor()

        kernel = Constant(upscale_kernel(scale_factor, channels), device=self.device)
        network = convolution(kernel, self.input,
                              strides=scale_factor.to_tuple() + (channels,),
                              sharing=(True,),
                              auto_padding=(False, False, False),
                              lower_pad=(0, 0, 0),
                              upper_pad=(0, 0, 0),
                              transpose=True)
        logger.debug('Built Upscale2DLayer: input=%s, output=%s', self.input.shape, network.shape)
        return network
