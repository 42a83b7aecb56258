"""
parameters.py — Resolution of parameter options into engine parameters

Layer options such as ``W`` and ``b`` accept either an explicit tensor or an
initializer (and, for ``b``, a boolean). :func:`resolve_parameter` turns such
a composite value into an engine parameter of the shape the layer needs.
"""

import logging
from typing import Optional, Sequence

import torch

from . import constants
from .engine import Constant, Parameter, to_engine_array
from .exceptions import IllegalArgumentError, terminate
from .values import CompositeValue

logger = logging.getLogger(__name__)

EXPLICIT_TENSOR = 0
INITIALIZER = 1
FLAG = 2


def resolve_parameter(value: CompositeValue, shape: Sequence[int],
                      device: Optional[torch.device] = None) -> Optional[Parameter]:
    """
    Create the engine parameter described by ``value``.

    Parameters
    ----------
    value : CompositeValue
        ``CompositeValue[RankedTensor, ParameterInitializer]`` or
        ``CompositeValue[RankedTensor, ParameterInitializer, bool]``.
    shape : sequence of int
        Shape of the parameter.
    device : torch.device, optional
        Where the parameter is stored.

    Returns
    -------
    Parameter or None
        A fresh parameter, the given engine node when an existing parameter
        was passed as the explicit tensor, or None when the boolean
        alternative is active.

    Raises
    ------
    IllegalArgumentError
        If an explicit tensor does not have as many elements as ``shape``,
        or an existing engine node has a different shape.
    SystemExit
        If no alternative is active.
    """
    shape = tuple(int(d) for d in shape)

    if value.is_active(EXPLICIT_TENSOR):
        tensor = value.get(EXPLICIT_TENSOR)
        if isinstance(tensor, (Parameter, Constant)):
            if tensor.shape != shape:
                raise IllegalArgumentError(
                    f"Shared parameter has shape {tensor.shape}, expected {shape}"
                )
            logger.debug('Reusing engine node of shape %s', shape)
            return tensor
        logger.debug('Copying explicit tensor into parameter of shape %s', shape)
        return Parameter(value=to_engine_array(tensor, shape, device), device=device)

    if value.is_active(INITIALIZER):
        initializer = value.get(INITIALIZER)
        logger.debug('Allocating parameter of shape %s with %r', shape, initializer)
        return Parameter(shape=shape, initializer=initializer, device=device)

    if len(value.alternatives) > FLAG:
        if value.is_active(FLAG):
            return None
        terminate("No alternative of the parameter value is active.",
                  constants.EXIT_ILLEGAL_COMPOSITE_VALUE_3)

    terminate("No alternative of the parameter value is active.",
              constants.EXIT_ILLEGAL_COMPOSITE_VALUE_2)
