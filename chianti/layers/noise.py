"""
noise.py — Dropout layer
"""

import logging
from typing import Any

from .. import constants
from ..engine import Variable, dropout
from ..exceptions import IllegalArgumentError
from ..validators import ArgumentValidator
from .base import AbstractNonDeterministicLayer, LayerOption

logger = logging.getLogger(__name__)


def dropout_probability(value: Any, name: str) -> float:
    """Converter for the dropout probability; values of zero or below disable dropout."""
    value = ArgumentValidator.validate_real(value, name)
    if value > 1.0:
        raise IllegalArgumentError(f"{name} must be at most 1.0, got {value}")
    return value


class DropOutLayer(AbstractNonDeterministicLayer):
    """
    Sets input entries to zero with probability ``p`` while training.

    Options
    -------
    p : float
        Dropout probability, at most 1. Default 0.25. A value of zero or
        below passes the input through.
    deterministic : bool
        Pass the input through unchanged. Default False.
    """

    p = LayerOption(dropout_probability, constants.DEFAULT_DROPOUT_RATE, "The dropout probability.")

    def build(self) -> Variable:
        if self.deterministic() or self.p() <= 0.0:
            logger.debug('Built DropOutLayer as identity (deterministic=%s, p=%s)',
                         self.deterministic(), self.p())
            return self.input
        return dropout(self.input, self.p())
