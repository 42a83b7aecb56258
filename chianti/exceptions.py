"""
exceptions.py — Exception classes and failure helpers for chianti

This module defines the exception classes used throughout the chianti layer
builder together with two small helpers: one that turns a violated argument
condition into an exception, and one that stops the process when the library
reaches a state that only a programming error can produce.
"""

import sys

from . import constants


class ChiantiError(Exception):
    """Base exception for all chianti errors.

    Catching this exception will catch all custom errors raised by the
    layer builder.
    """
    pass


class IllegalArgumentError(ChiantiError, ValueError):
    """Raised when an illegal argument has been provided.

    This exception is raised when:
    - A string option is outside of its vocabulary (e.g. an unknown ``pad`` mode)
    - A tensor does not have the shape a layer requires
    - An array value is indexed out of range or built from a sequence of the
      wrong length
    - A value fits none of the alternatives of a composite value
    """
    pass


class IllegalStateError(ChiantiError):
    """Describes a non-recoverable state of the layer builder.

    Instances are never raised to the caller; they carry the diagnostic of
    :func:`terminate`.
    """

    def __init__(self, message: str, exit_code: int) -> None:
        super(IllegalStateError, self).__init__(message)
        self.message = message
        self.exit_code = exit_code

    def __str__(self) -> str:
        return f"{constants.ILLEGAL_STATE_PREFIX}{self.message}"


def assert_argument(condition: bool, message: str) -> None:
    """Raise an :class:`IllegalArgumentError` if ``condition`` is violated.

    Parameters
    ----------
    condition : bool
        The condition to assert.
    message : str
        The exception message.

    Raises
    ------
    IllegalArgumentError
        If the condition is false.
    """
    if not condition:
        raise IllegalArgumentError(message)


def terminate(message: str, exit_code: int) -> None:
    """Terminate because a non-recoverable error occurred.

    The diagnostic is written to the standard error stream and the process
    exits with ``exit_code``.

    Parameters
    ----------
    message : str
        The message to show to the user.
    exit_code : int
        The process exit code.

    Raises
    ------
    SystemExit
        Always.
    """
    state = IllegalStateError(message, exit_code)
    print(str(state), file=sys.stderr)
    sys.exit(state.exit_code)
