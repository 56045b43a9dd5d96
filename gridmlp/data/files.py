"""Reading and writing training-data JSON files."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

from ..core.types import TrainingSet
from ..errors import FormatError, ShapeMismatch

_REQUIRED = ("inputSize", "outputSize", "inputs", "outputs")


def training_set_from_document(raw: Mapping[str, Any]) -> TrainingSet:
    """Validate a decoded ``{inputSize, outputSize, inputs, outputs}`` document."""

    if not isinstance(raw, Mapping):
        raise FormatError("Training data must be a JSON object")
    missing = [key for key in _REQUIRED if key not in raw]
    if missing:
        raise FormatError(f"Training data is missing fields: {', '.join(missing)}")
    input_size, output_size = raw["inputSize"], raw["outputSize"]
    for key, value in (("inputSize", input_size), ("outputSize", output_size)):
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise FormatError(f"{key} must be a positive integer, got {value!r}")
    inputs, outputs = raw["inputs"], raw["outputs"]
    if not isinstance(inputs, list) or not isinstance(outputs, list):
        raise FormatError("inputs and outputs must be lists of vectors")
    if len(inputs) != len(outputs):
        raise ShapeMismatch(f"{len(inputs)} inputs but {len(outputs)} outputs")
    try:
        return TrainingSet.from_pairs(zip(inputs, outputs), input_size, output_size)
    except ShapeMismatch:
        raise
    except (TypeError, ValueError) as exc:
        raise FormatError(f"Training vectors must be numeric: {exc}") from exc


def training_set_to_document(data: TrainingSet) -> dict[str, Any]:
    return {
        "inputSize": data.input_size,
        "outputSize": data.output_size,
        "inputs": data.inputs.tolist(),
        "outputs": data.targets.tolist(),
    }


def load_training_data(path: str | Path) -> TrainingSet:
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise FormatError(f"{path} is not valid JSON: {exc}") from exc
    return training_set_from_document(raw)


def save_training_data(data: TrainingSet, path: str | Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(training_set_to_document(data)), encoding="utf-8")
    return path


__all__ = [
    "load_training_data",
    "save_training_data",
    "training_set_from_document",
    "training_set_to_document",
]
