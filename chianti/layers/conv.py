"""
conv.py — 2D convolution layer

This module contains ``Conv2DLayer``, which compiles to a convolution
followed by an optional bias term and a non-linearity. Use it for processing
multi-channel images of shape ``(H, W, C)``.

The ``pad`` option accepts a pair of integers or one of the modes:

========  ==============================================================
``same``  let the engine pad so that (at stride 1) the output size equals
          the input size
``full``  pad by the filter size on every side
``valid`` no padding
========  ==============================================================
"""

import logging
from typing import Tuple

from .. import constants
from ..engine import ConstantInitializer, HeNormal, Parameter, ParameterInitializer, Variable
from ..engine import convolution, plus, shape_of
from ..exceptions import IllegalArgumentError, assert_argument
from ..nonlinearities import rectify
from ..parameters import EXPLICIT_TENSOR, FLAG, INITIALIZER, resolve_parameter
from ..values import ArrayValue, CompositeValue, RankedTensor, UInt64Value
from .base import AbstractSingleInputLayer, LayerOption, coerce_to, function, positive_array, positive_int

logger = logging.getLogger(__name__)

Size2D = ArrayValue[UInt64Value, 2]
ConvPadValue = CompositeValue[Size2D, str]
WeightValue = CompositeValue[RankedTensor[float, 4], ParameterInitializer]
BiasValue = CompositeValue[RankedTensor[float, 3], ParameterInitializer, bool]

Padding = Tuple[Tuple[bool, ...], Tuple[int, ...], Tuple[int, ...]]


class Conv2DLayer(AbstractSingleInputLayer):
    """
    2D convolution followed by an optional bias and a non-linearity.

    Options
    -------
    num_filters : int
        Number of filter kernels (output channels). Default 1.
    filter_size : (int, int)
        Kernel height and width. Default (3, 3).
    pad : (int, int) or str
        Padding per side or ``'same'``/``'full'``/``'valid'``. Default ``'same'``.
    stride : (int, int)
        Filter stride. Default (1, 1).
    W : tensor of shape (kH, kW, C_in, num_filters) or ParameterInitializer
        Filter kernels. Default ``HeNormal()``.
    b : tensor of shape (1, 1, num_filters), ParameterInitializer or bool
        Bias; ``False`` disables the bias and ``True`` requests a zero bias.
        Default ``ConstantInitializer(0)``.
    nonlinearity : callable
        Applied to the result. Default :func:`rectify`.

    Examples
    --------
    >>> from chianti.engine import InputVariable
    >>> x = InputVariable((5, 5, 1))
    >>> network = Conv2DLayer(x, 'cpu').filter_size((3, 3)).pad('full').num_filters(4).build()
    >>> network.shape
    (9, 9, 4)
    """

    num_filters = LayerOption(positive_int, constants.DEFAULT_NUM_FILTERS,
                              "The number of filter kernels.")
    filter_size = LayerOption(positive_array(Size2D), constants.DEFAULT_FILTER_SIZE,
                              "The size of the filters.")
    pad = LayerOption(coerce_to(ConvPadValue), constants.DEFAULT_CONV_PAD,
                      "The amount of padding on each side, or a padding mode.")
    stride = LayerOption(positive_array(Size2D), constants.DEFAULT_CONV_STRIDE,
                         "The filter stride.")
    W = LayerOption(coerce_to(WeightValue), HeNormal(),
                    "The filter kernels or their initializer.")
    b = LayerOption(coerce_to(BiasValue), ConstantInitializer(0.0),
                    "The bias, its initializer, or whether to use a bias at all.")
    nonlinearity = LayerOption(function, rectify,
                               "The non-linearity applied to the output.")

    def _resolve_padding(self) -> Padding:
        pad = self.pad()
        filter_size = self.filter_size()

        if pad.is_active(0):
            size = pad.get(0)
            return (False, False, False), (size[0], size[1], 0), (size[0], size[1], 0)

        if pad.is_active(1):
            mode = pad.get(1)
            if mode == constants.PAD_SAME:
                return (True,), (0,), (0,)
            if mode == constants.PAD_FULL:
                full = (filter_size[0], filter_size[1], 0)
                return (False, False, False), full, full
            if mode == constants.PAD_VALID:
                return (False, False, False), (0, 0, 0), (0, 0, 0)

        raise IllegalArgumentError(constants.MSG_ILLEGAL_CONV_PAD)

    def _build_bias(self, num_filters: int) -> Parameter:
        b = self.b()
        shape = (1, 1, num_filters)

        if b.is_active(FLAG) and not b.get(FLAG):
            return None

        if b.is_active(EXPLICIT_TENSOR):
            bias_shape = tuple(b.get(EXPLICIT_TENSOR).shape)
            assert_argument(bias_shape[0] == 1 and bias_shape[1] == 1 and bias_shape[2] == num_filters,
                            constants.MSG_ILLEGAL_BIAS_SHAPE)
            return resolve_parameter(b, shape, self.device)

        if b.is_active(INITIALIZER):
            return resolve_parameter(b, shape, self.device)

        return Parameter(shape=shape, initializer=ConstantInitializer(0.0), device=self.device)

    def build(self) -> Variable:
        """
        Compile the layer into a graph node.

        Returns
        -------
        Variable
            Node of shape ``(H', W', num_filters)``.

        Raises
        ------
        IllegalArgumentError
            If ``pad`` holds an unknown mode, the bias tensor does not have
            shape ``(1, 1, num_filters)``, or the input is not an image.
        """
        _, _, channels = shape_of(self.input, constants.IMAGE_RANK)
        auto_padding, lower_pad, upper_pad = self._resolve_padding()

        num_filters = self.num_filters()
        filter_size = self.filter_size()
        stride = self.stride()

        weight = resolve_parameter(self.W(), (filter_size[0], filter_size[1], channels, num_filters),
                                   self.device)
        network = convolution(weight, self.input,
                              strides=(stride[0], stride[1], channels),
                              sharing=(True,),
                              auto_padding=auto_padding,
                              lower_pad=lower_pad,
                              upper_pad=upper_pad)

        bias = self._build_bias(num_filters)
        if bias is not None:
            network = plus(network, bias)

        network = self.nonlinearity()(network)
        logger.debug('Built Conv2DLayer: input=%s, output=%s, filters=%d, bias=%s',
                     self.input.shape, network.shape, num_filters, bias is not None)
        return network
