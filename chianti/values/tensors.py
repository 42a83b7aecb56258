"""
tensors.py — Ranked tensor alternative for composite values

``RankedTensor[float, R]`` describes "an explicit tensor of rank R" inside a
composite value. It accepts numpy arrays (and nested sequences), torch
tensors and engine ``Parameter``/``Constant`` nodes. Host data is stored as a
float32 numpy array; torch tensors and engine nodes are stored unchanged so
that an existing parameter can be shared between layers.
"""

from typing import Any, Dict, Tuple

import numpy as np
import torch

from ..engine.graph import Constant, Parameter
from ..exceptions import IllegalArgumentError


class RankedTensor(object):
    """Marker type for an explicit tensor of a fixed rank."""

    element_type: Any = None
    rank: int = None
    _specializations: Dict[Tuple[Any, int], type] = {}

    def __class_getitem__(cls, params):
        element_type, rank = params
        key = (element_type, rank)
        if key not in RankedTensor._specializations:
            name = f"RankedTensor[{getattr(element_type, '__name__', element_type)}, {rank}]"
            RankedTensor._specializations[key] = type(
                name, (RankedTensor,), {'element_type': element_type, 'rank': rank}
            )
        return RankedTensor._specializations[key]

    def __init__(self) -> None:
        raise TypeError("RankedTensor is a type marker; use RankedTensor.coerce()")

    @classmethod
    def _numpy_dtype(cls) -> Any:
        return np.float32 if cls.element_type is float else np.dtype(cls.element_type)

    @classmethod
    def coerce(cls, v: Any) -> Any:
        """Convert ``v`` to the stored representation.

        Raises
        ------
        IllegalArgumentError
            If ``v`` is not numeric data of rank ``R``.
        """
        if isinstance(v, (Parameter, Constant)):
            shape = v.shape
        elif isinstance(v, torch.Tensor):
            if not (v.is_floating_point() or v.dtype in (torch.int32, torch.int64)):
                raise IllegalArgumentError(f"{cls.__name__} requires numeric data, got {v.dtype}")
            shape = tuple(v.shape)
        else:
            if isinstance(v, (str, bytes, bool, np.bool_)):
                raise IllegalArgumentError(f"{cls.__name__} requires numeric data, got {v!r}")
            try:
                v = np.asarray(v)
            except (TypeError, ValueError) as e:
                raise IllegalArgumentError(f"{cls.__name__} requires numeric data: {e}")
            if v.dtype.kind not in 'iuf':
                raise IllegalArgumentError(f"{cls.__name__} requires numeric data, got {v.dtype}")
            v = v.astype(cls._numpy_dtype())
            shape = v.shape
        if len(shape) != cls.rank:
            raise IllegalArgumentError(
                f"{cls.__name__} requires a tensor of rank {cls.rank}, got shape {tuple(shape)}"
            )
        return v

    @classmethod
    def accepts(cls, v: Any) -> bool:
        """Return whether ``v`` is a tensor of the required rank."""
        try:
            cls.coerce(v)
        except IllegalArgumentError:
            return False
        return True

    @classmethod
    def default(cls) -> np.ndarray:
        """Return an empty tensor of rank ``R``."""
        return np.zeros((0,) * cls.rank, dtype=cls._numpy_dtype())
