"""
ops.py — Engine operators

Every operator takes graph nodes, infers the output shape from the input
shapes and returns a ``Function`` node. Image tensors are channels-last
``(H, W, C)``; values carry a leading batch axis at evaluation time and are
permuted to torch's ``(N, C, H, W)`` layout only inside ``_compute``.

Padding and stride vectors are broadcast to the operand rank by repeating
their last element, so ``auto_padding=(True,)`` means "auto-pad every axis".

Functions
---------
convolution
    (Transposed) 2D convolution with a ``(kH, kW, C_in, C_out)`` kernel.
pooling
    Max or average pooling over the two spatial axes.
plus
    Broadcasting addition.
relu, sigmoid, tanh
    Element-wise non-linearities.
dropout
    Random zeroing, active in training mode only.
batch_normalization
    Batch normalization with running statistics.
"""

import enum
import logging
import math
from typing import Any, Sequence, Tuple

import torch
import torch.nn.functional as F

from .. import constants
from ..exceptions import IllegalArgumentError, assert_argument
from ..validators import ArgumentValidator
from .graph import Function, Variable, as_variable

logger = logging.getLogger(__name__)


class PoolingType(enum.Enum):
    """Pooling reduction."""
    MAX = 'max'
    AVERAGE = 'average'


def _broadcast(values: Any, rank: int, name: str) -> Tuple[Any, ...]:
    if isinstance(values, (str, bytes)) or not hasattr(values, '__iter__'):
        values = (values,)
    values = tuple(values)
    if not values or len(values) > rank:
        raise IllegalArgumentError(f"{name} must have between 1 and {rank} entries, got {len(values)}")
    return values + (values[-1],) * (rank - len(values))


def _padding(values: Any, rank: int, name: str) -> Tuple[int, ...]:
    return tuple(ArgumentValidator.validate_non_negative_int(v, name) for v in _broadcast(values, rank, name))


def _axis_padding(size: int, kernel: int, stride: int, auto: bool,
                  lower: int, upper: int) -> Tuple[int, int, int]:
    """Return ``(lower, upper, output_size)`` of a forward window operation."""
    if auto:
        out = -(-size // stride)
        total = max(0, (out - 1) * stride + kernel - size)
        return total // 2, total - total // 2, out
    padded = size + lower + upper
    if padded < kernel:
        raise IllegalArgumentError(
            f"Window of size {kernel} does not fit an axis of size {size} padded by ({lower}, {upper})"
        )
    return lower, upper, (padded - kernel) // stride + 1


def _transposed_axis_padding(size: int, kernel: int, stride: int, auto: bool,
                             lower: int, upper: int) -> Tuple[int, int, int]:
    """Return ``(lower, upper, output_size)`` of a transposed convolution."""
    full = (size - 1) * stride + kernel
    if auto:
        total = max(0, kernel - stride)
        lower, upper = total // 2, total - total // 2
    out = full - lower - upper
    if out < 1:
        raise IllegalArgumentError(
            f"Cropping ({lower}, {upper}) leaves no output for an axis of size {size}"
        )
    return lower, upper, out


def _to_nchw(x: torch.Tensor) -> Tuple[torch.Tensor, bool]:
    batched = x.dim() == 4
    if not batched:
        x = x.unsqueeze(0)
    return x.permute(0, 3, 1, 2), batched


def _from_nchw(y: torch.Tensor, batched: bool) -> torch.Tensor:
    y = y.permute(0, 2, 3, 1)
    return y if batched else y.squeeze(0)


class Convolution(Function):
    """2D convolution node; see :func:`convolution`."""

    def __init__(self, kernel: Variable, operand: Variable, strides, sharing, auto_padding,
                 lower_pad, upper_pad, transpose: bool, name: str = '') -> None:
        assert_argument(operand.rank == constants.IMAGE_RANK,
                        f"Convolution operand must have shape (H, W, C), got {operand.shape}")
        assert_argument(kernel.rank == constants.FILTER_RANK,
                        f"Convolution kernel must have shape (kH, kW, C_in, C_out), got {kernel.shape}")
        assert_argument(kernel.shape[2] == operand.shape[2],
                        f"Kernel expects {kernel.shape[2]} input channels, operand has {operand.shape[2]}")

        rank = operand.rank
        strides = _broadcast(strides, rank, 'strides')
        sharing = _broadcast(sharing, rank, 'sharing')
        auto_padding = _broadcast(auto_padding, rank, 'auto_padding')
        lower_pad = _padding(lower_pad, rank, 'lower_pad')
        upper_pad = _padding(upper_pad, rank, 'upper_pad')
        assert_argument(all(bool(s) for s in sharing), "Only shared convolution kernels are supported")
        assert_argument(all(int(s) > 0 for s in strides), f"Strides must be positive, got {strides}")

        resolve = _transposed_axis_padding if transpose else _axis_padding
        padding = []
        shape = []
        for axis in range(2):
            lo, hi, out = resolve(operand.shape[axis], kernel.shape[axis], int(strides[axis]),
                                  bool(auto_padding[axis]), int(lower_pad[axis]), int(upper_pad[axis]))
            padding.append((lo, hi))
            shape.append(out)
        shape.append(kernel.shape[3])

        super(Convolution, self).__init__([kernel, operand], shape, name)
        self.strides = (int(strides[0]), int(strides[1]))
        self.padding = tuple(padding)
        self.transpose = bool(transpose)

    def _compute(self, kernel, x):
        x, batched = _to_nchw(x)
        (lo0, hi0), (lo1, hi1) = self.padding
        if not self.transpose:
            x = F.pad(x, (lo1, hi1, lo0, hi0))
            y = F.conv2d(x, kernel.permute(3, 2, 0, 1), stride=self.strides)
        else:
            y = F.conv_transpose2d(x, kernel.permute(2, 3, 0, 1), stride=self.strides)
            y = y[:, :, lo0:y.shape[2] - hi0, lo1:y.shape[3] - hi1]
        return _from_nchw(y, batched)

    def extra_repr(self) -> str:
        return (f"{super(Convolution, self).extra_repr()}, strides={self.strides}, "
                f"padding={self.padding}, transpose={self.transpose}")


class Pooling(Function):
    """2D pooling node; see :func:`pooling`."""

    def __init__(self, operand: Variable, pooling_type: PoolingType, window_shape, strides,
                 auto_padding, lower_pad, upper_pad, name: str = '') -> None:
        assert_argument(operand.rank == constants.IMAGE_RANK,
                        f"Pooling operand must have shape (H, W, C), got {operand.shape}")
        assert_argument(isinstance(pooling_type, PoolingType),
                        f"pooling_type must be a PoolingType, got {pooling_type!r}")

        window_shape = _broadcast(window_shape, 2, 'pooling_window_shape')
        strides = _broadcast(strides, 2, 'strides')
        auto_padding = _broadcast(auto_padding, operand.rank, 'auto_padding')
        lower_pad = _padding(lower_pad, operand.rank, 'lower_pad')
        upper_pad = _padding(upper_pad, operand.rank, 'upper_pad')
        assert_argument(all(int(w) > 0 for w in window_shape), f"Window must be positive, got {window_shape}")
        assert_argument(all(int(s) > 0 for s in strides), f"Strides must be positive, got {strides}")

        padding = []
        shape = []
        for axis in range(2):
            lo, hi, out = _axis_padding(operand.shape[axis], int(window_shape[axis]), int(strides[axis]),
                                        bool(auto_padding[axis]), int(lower_pad[axis]), int(upper_pad[axis]))
            padding.append((lo, hi))
            shape.append(out)
        shape.append(operand.shape[2])

        super(Pooling, self).__init__([operand], shape, name)
        self.pooling_type = pooling_type
        self.window_shape = (int(window_shape[0]), int(window_shape[1]))
        self.strides = (int(strides[0]), int(strides[1]))
        self.padding = tuple(padding)

    def _compute(self, x):
        x, batched = _to_nchw(x)
        (lo0, hi0), (lo1, hi1) = self.padding
        pads = (lo1, hi1, lo0, hi0)
        if self.pooling_type is PoolingType.MAX:
            y = F.max_pool2d(F.pad(x, pads, value=float('-inf')), self.window_shape, self.strides)
        else:
            # padded cells do not count towards the average
            ones = F.pad(torch.ones_like(x[:, :1]), pads)
            sums = F.avg_pool2d(F.pad(x, pads), self.window_shape, self.strides)
            counts = F.avg_pool2d(ones, self.window_shape, self.strides)
            y = sums / counts
        return _from_nchw(y, batched)

    def extra_repr(self) -> str:
        return (f"{super(Pooling, self).extra_repr()}, type={self.pooling_type.value}, "
                f"window={self.window_shape}, strides={self.strides}, padding={self.padding}")


class Plus(Function):
    def __init__(self, left: Variable, right: Variable, name: str = '') -> None:
        try:
            shape = torch.broadcast_shapes(left.shape, right.shape)
        except RuntimeError:
            raise IllegalArgumentError(f"Cannot add shapes {left.shape} and {right.shape}")
        super(Plus, self).__init__([left, right], tuple(shape), name)

    def _compute(self, left, right):
        return left + right


class ElementWise(Function):
    """Shape preserving element-wise function."""

    def __init__(self, operand: Variable, fn, op_name: str, name: str = '') -> None:
        super(ElementWise, self).__init__([operand], operand.shape, name)
        self.fn = fn
        self.op_name = op_name

    def _compute(self, x):
        return self.fn(x)

    def extra_repr(self) -> str:
        return f"{self.op_name}, {super(ElementWise, self).extra_repr()}"


class Dropout(Function):
    def __init__(self, operand: Variable, p: float, name: str = '') -> None:
        p = ArgumentValidator.validate_range(p, 0.0, 1.0, "dropout_rate")
        super(Dropout, self).__init__([operand], operand.shape, name)
        self.p = float(p)

    def _compute(self, x):
        return F.dropout(x, self.p, training=self.training)

    def extra_repr(self) -> str:
        return f"{super(Dropout, self).extra_repr()}, p={self.p}"


class BatchNormalization(Function):
    """Batch normalization node; see :func:`batch_normalization`."""

    def __init__(self, operand: Variable, scale: Variable, bias: Variable, running_mean: Variable,
                 running_inv_std: Variable, spatial: bool, normalization_time_constant: float,
                 blend_time_constant: float, epsilon: float, use_cudnn: bool,
                 deterministic: bool = False, name: str = '') -> None:
        expected = (operand.shape[-1],) if spatial else operand.shape
        for label, parameter in (('scale', scale), ('bias', bias), ('running_mean', running_mean),
                                 ('running_inv_std', running_inv_std)):
            assert_argument(parameter.shape == expected,
                            f"{label} must have shape {expected}, got {parameter.shape}")
        normalization_time_constant = ArgumentValidator.validate_positive(
            normalization_time_constant, "normalization_time_constant", allow_zero=True)
        epsilon = ArgumentValidator.validate_positive(epsilon, "epsilon")

        super(BatchNormalization, self).__init__(
            [operand, scale, bias, running_mean, running_inv_std], operand.shape, name
        )
        self.spatial = bool(spatial)
        self.normalization_time_constant = float(normalization_time_constant)
        self.blend_time_constant = float(blend_time_constant)
        self.epsilon = float(epsilon)
        self.use_cudnn = bool(use_cudnn)
        self.deterministic = bool(deterministic)

    def _momentum(self, items: int) -> float:
        if self.normalization_time_constant == 0:
            return 1.0
        if math.isinf(self.normalization_time_constant):
            return 0.0
        return 1.0 - math.exp(-items / self.normalization_time_constant)

    def _compute(self, x, scale, bias, running_mean, running_inv_std):
        if x.dim() == self.rank:
            x = x.unsqueeze(0)
        dims = tuple(range(x.dim() - 1)) if self.spatial else (0,)

        if self.training and not self.deterministic:
            mean = x.mean(dim=dims)
            inv_std = torch.rsqrt(x.var(dim=dims, unbiased=False) + self.epsilon)
            momentum = self._momentum(x.numel() // mean.numel())
            with torch.no_grad():
                running_mean.mul_(1.0 - momentum).add_(momentum * mean)
                running_inv_std.mul_(1.0 - momentum).add_(momentum * inv_std)
        else:
            mean, inv_std = running_mean, running_inv_std

        return (x - mean) * inv_std * scale + bias

    def extra_repr(self) -> str:
        return (f"{super(BatchNormalization, self).extra_repr()}, spatial={self.spatial}, "
                f"epsilon={self.epsilon}, use_cudnn={self.use_cudnn}")


def convolution(convolution_map: Any, operand: Any, strides: Sequence[int] = (1,),
                sharing: Sequence[bool] = (True,), auto_padding: Sequence[bool] = (True,),
                lower_pad: Sequence[int] = (0,), upper_pad: Sequence[int] = (0,),
                transpose: bool = False, name: str = '') -> Convolution:
    """
    Convolve ``operand`` with ``convolution_map``.

    Parameters
    ----------
    convolution_map : Variable
        Kernel of shape ``(kH, kW, C_in, C_out)``.
    operand : Variable
        Image of shape ``(H, W, C_in)``.
    strides, sharing, auto_padding, lower_pad, upper_pad : sequence
        Per-axis settings over ``(H, W, C)``, broadcast by repeating the last
        entry. The channel axis is always fully reduced, so its entries have
        no effect.
    transpose : bool, optional
        Compute a transposed (fractionally strided) convolution.

    Returns
    -------
    Convolution
        Node of shape ``(H', W', C_out)``.

    Raises
    ------
    IllegalArgumentError
        If shapes do not fit together or the padded input is smaller than the
        kernel.
    """
    node = Convolution(as_variable(convolution_map), as_variable(operand), strides, sharing,
                       auto_padding, lower_pad, upper_pad, transpose, name)
    logger.debug('Convolution %s -> %s (strides=%s, padding=%s, transpose=%s)',
                 node.inputs[1].shape, node.shape, node.strides, node.padding, node.transpose)
    return node


def pooling(operand: Any, pooling_type: PoolingType, pooling_window_shape: Sequence[int],
            strides: Sequence[int] = (1,), auto_padding: Sequence[bool] = (False,),
            lower_pad: Sequence[int] = (0,), upper_pad: Sequence[int] = (0,),
            name: str = '') -> Pooling:
    """
    Pool ``operand`` over its two spatial axes.

    Max pooling pads with ``-inf``; average pooling ignores padded cells.

    Raises
    ------
    IllegalArgumentError
        If the window does not fit the padded input.
    """
    node = Pooling(as_variable(operand), pooling_type, pooling_window_shape, strides,
                   auto_padding, lower_pad, upper_pad, name)
    logger.debug('Pooling(%s) %s -> %s', pooling_type.value, node.inputs[0].shape, node.shape)
    return node


def plus(left: Any, right: Any, name: str = '') -> Plus:
    """Add two nodes with numpy broadcasting over the trailing axes."""
    return Plus(as_variable(left), as_variable(right), name)


def relu(x: Any, name: str = '') -> ElementWise:
    return ElementWise(as_variable(x), torch.relu, 'ReLU', name)


def sigmoid(x: Any, name: str = '') -> ElementWise:
    return ElementWise(as_variable(x), torch.sigmoid, 'Sigmoid', name)


def tanh(x: Any, name: str = '') -> ElementWise:
    return ElementWise(as_variable(x), torch.tanh, 'Tanh', name)


def dropout(x: Any, dropout_rate: float, name: str = '') -> Dropout:
    """Zero entries with probability ``dropout_rate`` while the graph is training."""
    return Dropout(as_variable(x), dropout_rate, name)


def batch_normalization(operand: Any, scale: Any, bias: Any, running_mean: Any,
                        running_inv_std: Any, spatial: bool,
                        normalization_time_constant: float = constants.DEFAULT_NORMALIZATION_TIME_CONSTANT,
                        blend_time_constant: float = constants.DEFAULT_BLEND_TIME_CONSTANT,
                        epsilon: float = constants.DEFAULT_BATCH_NORM_EPSILON,
                        use_cudnn: bool = constants.DEFAULT_USE_CUDNN,
                        deterministic: bool = False,
                        name: str = '') -> BatchNormalization:
    """
    Normalize ``operand`` with batch statistics.

    In training mode the batch mean and inverse standard deviation are used
    and the running statistics move towards them with momentum
    ``1 - exp(-items / normalization_time_constant)``. In inference mode the
    running statistics are used.

    Parameters
    ----------
    spatial : bool
        Share statistics over every axis but the last (channel) axis. The
        parameters then have shape ``(C,)``; otherwise they have the operand's
        shape.
    deterministic : bool, optional
        Always use (and never update) the running statistics.
    """
    return BatchNormalization(as_variable(operand), as_variable(scale), as_variable(bias),
                              as_variable(running_mean), as_variable(running_inv_std), spatial,
                              normalization_time_constant, blend_time_constant, epsilon,
                              use_cudnn, deterministic, name)
