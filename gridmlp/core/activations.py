"""Activation utilities for gridmlp."""

from __future__ import annotations

import numpy as np

from .types import Array


def sigmoid(x: Array) -> Array:
    """Return the logistic sigmoid ``1 / (1 + e^-x)``."""

    return 1.0 / (1.0 + np.exp(-x))


def sigmoid_deriv(activated: Array) -> Array:
    """Derivative of the sigmoid expressed through its output ``s``: ``s * (1 - s)``."""

    return activated * (1.0 - activated)
