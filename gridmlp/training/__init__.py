"""Training loops and evaluation for gridmlp."""

from .metrics import ModelReport, evaluate_network, mean_squared_error
from .trainer import EARLY_STOP_THRESHOLD, Trainer

__all__ = ["EARLY_STOP_THRESHOLD", "ModelReport", "Trainer", "evaluate_network", "mean_squared_error"]
