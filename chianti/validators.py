"""
validators.py — Argument validation utilities for chianti

This module provides the validation helpers the layer options and engine
operators use to reject bad input before anything is compiled.

Classes
-------
ArgumentValidator
    Static methods for validating integers, reals, numeric ranges, booleans
    and callables.
"""

import logging
import numbers
from typing import Any, List

from .exceptions import IllegalArgumentError

logger = logging.getLogger(__name__)


class ArgumentValidator(object):
    """Argument validation helper class."""

    @staticmethod
    def validate_integer(value: Any, name: str) -> int:
        """Validate that a value is an integer (booleans are rejected).

        Parameters
        ----------
        value : Any
            Value to validate.
        name : str
            Name of the parameter for error messages.

        Returns
        -------
        int
            The value as a plain ``int``.

        Raises
        ------
        IllegalArgumentError
            If the value is not integral.
        """
        if isinstance(value, bool) or not isinstance(value, numbers.Integral):
            raise IllegalArgumentError(
                f"{name} must be an integer, got {type(value).__name__}"
            )
        return int(value)

    @staticmethod
    def validate_non_negative_int(value: Any, name: str) -> int:
        """Validate that a value is a non-negative integer.

        Raises
        ------
        IllegalArgumentError
            If the value is not integral or is negative.
        """
        value = ArgumentValidator.validate_integer(value, name)
        if value < 0:
            raise IllegalArgumentError(f"{name} must be non-negative, got {value}")
        return value

    @staticmethod
    def validate_positive_int(value: Any, name: str) -> int:
        """Validate that a value is a strictly positive integer.

        Raises
        ------
        IllegalArgumentError
            If the value is not integral or is not positive.
        """
        value = ArgumentValidator.validate_integer(value, name)
        if value <= 0:
            raise IllegalArgumentError(f"{name} must be positive, got {value}")
        return value

    @staticmethod
    def validate_real(value: Any, name: str) -> float:
        """Validate that a value is a real number (booleans are rejected).

        Raises
        ------
        IllegalArgumentError
            If the value is not a real number.
        """
        if isinstance(value, bool) or not isinstance(value, numbers.Real):
            raise IllegalArgumentError(
                f"{name} must be a number, got {type(value).__name__}"
            )
        return float(value)

    @staticmethod
    def validate_range(value: float, min_val: float, max_val: float,
                       name: str, inclusive: bool = True) -> float:
        """Validate that a value is within a specified range.

        Parameters
        ----------
        value : float
            Value to validate.
        min_val : float
            Minimum allowed value.
        max_val : float
            Maximum allowed value.
        name : str
            Name of the parameter for error messages.
        inclusive : bool, optional
            Whether range is inclusive. Default is True.

        Raises
        ------
        IllegalArgumentError
            If value is out of range.
        """
        value = ArgumentValidator.validate_real(value, name)
        if inclusive:
            if not (min_val <= value <= max_val):
                raise IllegalArgumentError(
                    f"{name} must be between {min_val} and {max_val} (inclusive), got {value}"
                )
        else:
            if not (min_val < value < max_val):
                raise IllegalArgumentError(
                    f"{name} must be between {min_val} and {max_val} (exclusive), got {value}"
                )
        return value

    @staticmethod
    def validate_positive(value: Any, name: str, allow_zero: bool = False) -> float:
        """Validate that a value is positive.

        Raises
        ------
        IllegalArgumentError
            If value is not positive.
        """
        value = ArgumentValidator.validate_real(value, name)
        if allow_zero:
            if value < 0:
                raise IllegalArgumentError(f"{name} must be non-negative, got {value}")
        else:
            if value <= 0:
                raise IllegalArgumentError(f"{name} must be positive, got {value}")
        return value

    @staticmethod
    def validate_bool(value: Any, name: str) -> bool:
        """Validate that a value is a boolean.

        Raises
        ------
        IllegalArgumentError
            If value is not a boolean.
        """
        if not isinstance(value, bool):
            raise IllegalArgumentError(
                f"{name} must be a boolean, got {type(value).__name__}"
            )
        return value

    @staticmethod
    def validate_callable(value: Any, name: str) -> Any:
        """Validate that a value can be called.

        Raises
        ------
        IllegalArgumentError
            If value is not callable.
        """
        if not callable(value):
            logger.debug('Rejected non-callable value for %s: %r', name, value)
            raise IllegalArgumentError(
                f"{name} must be callable, got {type(value).__name__}"
            )
        return value
