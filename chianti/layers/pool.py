"""
pool.py — 2D pooling layers

``MaxPool2DLayer`` and ``AveragePool2DLayer`` pool each channel of an
``(H, W, C)`` image. The ``pad`` option accepts a pair of integers, the modes
``'auto'`` (let the engine pad so that every input cell is covered) and
``'none'``, or a boolean standing for ``'auto'`` (True) and ``'none'``
(False).
"""

import logging

from .. import constants
from ..engine import PoolingType, Variable, pooling, shape_of
from ..exceptions import IllegalArgumentError
from ..values import ArrayValue, CompositeValue, UInt64Value
from .base import AbstractSingleInputLayer, LayerOption, coerce_to, positive_array
from .conv import Padding

logger = logging.getLogger(__name__)

Size2D = ArrayValue[UInt64Value, 2]
PoolPadValue = CompositeValue[Size2D, str, bool]

_AUTO_PADDING = ((True,), (0,), (0,))
_NO_PADDING = ((False, False, False), (0, 0, 0), (0, 0, 0))


class AbstractPool2DLayer(AbstractSingleInputLayer):
    """
    Base class of the 2D pooling layers.

    Options
    -------
    pool_size : (int, int)
        Pooling window. Default (2, 2).
    pad : (int, int), str or bool
        Padding per side, ``'auto'``/``'none'`` or True/False. Default ``'auto'``.
    stride : (int, int)
        Window stride. Default (2, 2).

    Parameters
    ----------
    input_variable : Variable or AbstractLayer
        The layer's input.
    device : str, torch.device or None
        The device of the layer.
    pooling_type : PoolingType
        The pooling reduction, fixed by the subclass.
    """

    pool_size = LayerOption(positive_array(Size2D), constants.DEFAULT_POOL_SIZE,
                            "The size of the pooling window.")
    pad = LayerOption(coerce_to(PoolPadValue), constants.DEFAULT_POOL_PAD,
                      "The amount of padding on each side, or a padding mode.")
    stride = LayerOption(positive_array(Size2D), constants.DEFAULT_POOL_STRIDE,
                         "The stride of the pooling window.")

    def __init__(self, input_variable, device, pooling_type: PoolingType) -> None:
        super(AbstractPool2DLayer, self).__init__(input_variable, device)
        self._pooling_type = pooling_type

    @property
    def pooling_type(self) -> PoolingType:
        return self._pooling_type

    def _resolve_padding(self) -> Padding:
        pad = self.pad()

        if pad.is_active(0):
            size = pad.get(0)
            return (False, False, False), (size[0], size[1], 0), (size[0], size[1], 0)

        if pad.is_active(1):
            mode = pad.get(1)
            if mode == constants.PAD_AUTO:
                return _AUTO_PADDING
            if mode == constants.PAD_NONE:
                return _NO_PADDING
            raise IllegalArgumentError(constants.MSG_ILLEGAL_POOL_PAD)

        if pad.is_active(2):
            return _AUTO_PADDING if pad.get(2) else _NO_PADDING

        raise IllegalArgumentError(constants.MSG_ILLEGAL_POOL_PAD)

    def build(self) -> Variable:
        """
        Compile the layer into a pooling node.

        Raises
        ------
        IllegalArgumentError
            If ``pad`` holds an unknown mode or the input is not an image.
        """
        shape_of(self.input, constants.IMAGE_RANK)
        auto_padding, lower_pad, upper_pad = self._resolve_padding()
        pool_size = self.pool_size()
        stride = self.stride()

        network = pooling(self.input, self._pooling_type,
                          pool_size.to_tuple(),
                          stride.to_tuple(),
                          auto_padding, lower_pad, upper_pad)
        logger.debug('Built %s: input=%s, output=%s',
                     type(self).__name__, self.input.shape, network.shape)
        return network


class MaxPool2DLayer(AbstractPool2DLayer):
    """2D max-pooling layer."""

    def __init__(self, input_variable, device=None) -> None:
        super(MaxPool2DLayer, self).__init__(input_variable, device, PoolingType.MAX)


class AveragePool2DLayer(AbstractPool2DLayer):
    """2D average-pooling layer; padded cells are not averaged."""

    def __init__(self, input_variable, device=None) -> None:
        super(AveragePool2DLayer, self).__init__(input_variable, device, PoolingType.AVERAGE)
