"""Core numerical primitives for gridmlp."""

from . import activations, types
from .np_mlp import Network

__all__ = ["Network", "activations", "types"]
