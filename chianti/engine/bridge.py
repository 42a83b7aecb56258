"""
bridge.py — Host tensor to engine conversions

All conversions between host tensors (numpy arrays, nested sequences, torch
tensors) and engine values are localized here, together with the projection
of a node's shape onto a fixed rank.

Functions
---------
to_engine_value
    Copy a host tensor into a torch tensor on a device, keeping its shape.
to_engine_array
    Copy a host tensor into a torch tensor of a required shape.
shape_of
    Return a node's shape as a tuple of exactly ``rank`` entries.
"""

from typing import Any, Optional, Sequence, Tuple

import numpy as np
import torch

from ..exceptions import IllegalArgumentError


def to_engine_value(tensor: Any, device: Optional[torch.device] = None,
                    dtype: torch.dtype = torch.float32) -> torch.Tensor:
    """
    Create an engine value from a host tensor.

    Parameters
    ----------
    tensor : array_like or torch.Tensor
        The host data. Torch tensors are detached and copied.
    device : torch.device, optional
        Target device. Defaults to the CPU.
    dtype : torch.dtype, optional
        Target element type. Default is float32.

    Returns
    -------
    torch.Tensor
        A new tensor owning its storage.

    Raises
    ------
    IllegalArgumentError
        If the data is not numeric.
    """
    if isinstance(tensor, torch.Tensor):
        data = tensor.detach()
    else:
        try:
            array = np.asarray(tensor)
        except (TypeError, ValueError) as e:
            raise IllegalArgumentError(f"Cannot convert host tensor: {e}")
        if array.dtype.kind not in 'biuf':
            raise IllegalArgumentError(f"Host tensor must be numeric, got dtype {array.dtype}")
        data = torch.from_numpy(np.ascontiguousarray(array))
    return data.to(device=device, dtype=dtype, copy=True)


def to_engine_array(tensor: Any, shape: Sequence[int], device: Optional[torch.device] = None,
                    dtype: torch.dtype = torch.float32) -> torch.Tensor:
    """
    Copy a host tensor into an engine array of a given shape.

    The host data is read in row-major order and laid out in ``shape``. Only
    the element count has to agree.

    Raises
    ------
    IllegalArgumentError
        If the element count of ``tensor`` differs from the product of
        ``shape``.
    """
    shape = tuple(int(d) for d in shape)
    data = to_engine_value(tensor, device, dtype)
    expected = int(np.prod(shape)) if shape else 1
    if data.numel() != expected:
        raise IllegalArgumentError(
            f"Tensor with {data.numel()} elements cannot be copied into shape {shape}"
        )
    return data.reshape(shape)


def shape_of(variable: Any, rank: int) -> Tuple[int, ...]:
    """
    Project the shape of a node (or anything with a ``shape``) onto ``rank``.

    Raises
    ------
    IllegalArgumentError
        If the shape does not have exactly ``rank`` dimensions.
    """
    shape = tuple(int(d) for d in variable.shape)
    if len(shape) != rank:
        raise IllegalArgumentError(
            f"Expected a tensor of rank {rank}, got shape {shape}"
        )
    return shape
