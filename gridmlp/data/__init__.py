"""Training-set registry, generators and file helpers."""

# Ensure built-in generators register themselves when the package is imported.
from . import generators as _generators  # noqa: F401
from .files import load_training_data, save_training_data
from .registry import available_datasets, get_dataset, register_dataset

__all__ = [
    "available_datasets",
    "get_dataset",
    "load_training_data",
    "register_dataset",
    "save_training_data",
]
