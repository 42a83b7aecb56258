"""
nonlinearities.py — Non-linearities applied at the end of a layer

A non-linearity is any function from a graph node to a graph node.
"""

from .engine import Variable, relu, sigmoid as _sigmoid, tanh as _tanh


def rectify(x: Variable) -> Variable:
    """The ReLU non-linearity."""
    return relu(x)


def linear(x: Variable) -> Variable:
    """The identity; use it to disable the non-linearity of a layer."""
    return x


def sigmoid(x: Variable) -> Variable:
    """The logistic sigmoid."""
    return _sigmoid(x)


def tanh(x: Variable) -> Variable:
    return _tanh(x)
