"""
normalization.py — Batch normalization layer

``BatchNormLayer`` normalizes its input with batch statistics while the graph
trains and with running statistics at inference time. Inputs of rank above
one are normalized per channel (the last axis); rank-one inputs per entry.
"""

import logging

from .. import constants
from ..engine import ConstantInitializer, Parameter, Variable, batch_normalization
from ..exceptions import assert_argument
from .base import AbstractNonDeterministicLayer, LayerOption, boolean, real

logger = logging.getLogger(__name__)


class BatchNormLayer(AbstractNonDeterministicLayer):
    """
    Batch normalization.

    Options
    -------
    use_cudnn : bool
        Request the cuDNN implementation. Default False.
    normalization_time_constant : float
        Time constant of the running statistics, in samples. Default 5000.
    epsilon : float
        Added to the variance. Default 1e-5.
    deterministic : bool
        Always use the running statistics. Default False.
    """

    use_cudnn = LayerOption(boolean, constants.DEFAULT_USE_CUDNN,
                            "Whether to request the cuDNN implementation.")
    normalization_time_constant = LayerOption(real, constants.DEFAULT_NORMALIZATION_TIME_CONSTANT,
                                              "Time constant of the running statistics.")
    epsilon = LayerOption(real, constants.DEFAULT_BATCH_NORM_EPSILON,
                          "Added to the variance for numerical stability.")

    def build(self) -> Variable:
        shape = self.input.shape
        assert_argument(len(shape) > 0, "BatchNormLayer requires an input of rank 1 or more")
        spatial = len(shape) > 1
        parameter_shape = (shape[-1],) if spatial else (shape[0],)

        def make(value: float, trainable: bool) -> Parameter:
            return Parameter(shape=parameter_shape, initializer=ConstantInitializer(value),
                             device=self.device, trainable=trainable)

        network = batch_normalization(self.input,
                                      scale=make(1.0, True),
                                      bias=make(0.0, True),
                                      running_mean=make(0.0, False),
                                      running_inv_std=make(1.0, False),
                                      spatial=spatial,
                                      normalization_time_constant=self.normalization_time_constant(),
                                      blend_time_constant=constants.DEFAULT_BLEND_TIME_CONSTANT,
                                      epsilon=self.epsilon(),
                                      use_cudnn=self.use_cudnn(),
                                      deterministic=self.deterministic())
        logger.debug('Built BatchNormLayer: input=%s, parameters=%s, spatial=%s',
                     shape, parameter_shape, spatial)
        return network
