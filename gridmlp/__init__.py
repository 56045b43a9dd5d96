"""gridmlp public API."""

from . import persistence
from .config import TaskConfig, load_config
from .core import activations  # noqa: F401
from .core import types  # noqa: F401
from .core.np_mlp import Network
from .data import get_dataset, load_training_data, save_training_data
from .errors import ConfigError, FormatError, GridMLPError, ShapeMismatch
from .experiments import ExperimentReport, Orchestrator, build_grid
from .reporting import Dashboard
from .training import Trainer, evaluate_network

__all__ = [
    "ConfigError",
    "Dashboard",
    "ExperimentReport",
    "FormatError",
    "GridMLPError",
    "Network",
    "Orchestrator",
    "ShapeMismatch",
    "TaskConfig",
    "Trainer",
    "activations",
    "build_grid",
    "evaluate_network",
    "get_dataset",
    "load_config",
    "load_training_data",
    "persistence",
    "save_training_data",
    "types",
]
