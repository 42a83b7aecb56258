"""
device.py — Device handles for engine parameters

Layers forward a device handle to every parameter they create. A handle is a
``torch.device``; :func:`resolve_device` accepts the same spellings the
command line of a training script would (``'auto'``, ``'cpu'``, ``'cuda'``,
``'cuda:1'``) and normalizes them.
"""

import logging
from typing import Union

import torch

from .. import constants
from ..exceptions import IllegalArgumentError

logger = logging.getLogger(__name__)

DeviceLike = Union[None, str, torch.device]


def resolve_device(device: DeviceLike = None) -> torch.device:
    """
    Resolve a device specification to a ``torch.device``.

    Parameters
    ----------
    device : str, torch.device or None
        ``None`` and ``'cpu'`` select the CPU. ``'auto'`` selects CUDA when it
        is available and the CPU otherwise. Any other string is parsed by
        ``torch.device``.

    Returns
    -------
    torch.device
        The resolved device.

    Raises
    ------
    IllegalArgumentError
        If the string is not a device name, or CUDA is requested but not
        available.
    """
    if isinstance(device, torch.device):
        return device
    if device is None:
        return torch.device(constants.DEVICE_CPU)
    if not isinstance(device, str):
        raise IllegalArgumentError(f"device must be a string or torch.device, got {type(device).__name__}")

    if device == constants.DEVICE_AUTO:
        if torch.cuda.is_available():
            logger.debug('Auto-detected CUDA device')
            return torch.device(constants.DEVICE_CUDA)
        logger.warning('CUDA not available, falling back to CPU')
        return torch.device(constants.DEVICE_CPU)

    try:
        resolved = torch.device(device)
    except RuntimeError as e:
        raise IllegalArgumentError(f"Unknown device '{device}': {e}")

    if resolved.type == constants.DEVICE_CUDA and not torch.cuda.is_available():
        logger.error('CUDA device requested but not available')
        raise IllegalArgumentError(f"CUDA device '{device}' requested but not available")
    return resolved
