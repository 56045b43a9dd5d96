"""JSON snapshots of :class:`~gridmlp.core.np_mlp.Network` state."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

import numpy as np

from .core.np_mlp import Network
from .errors import FormatError, ShapeMismatch
from .utils import get_logger

logger = get_logger(__name__)

_REQUIRED = (
    "inputSize",
    "hiddenSize",
    "outputSize",
    "weightsIh",
    "biasesH",
    "weightsHo",
    "biasesO",
)


def to_state(network: Network) -> dict[str, Any]:
    """Return the serialisable snapshot of ``network``."""

    return {
        "inputSize": network.input_size,
        "hiddenSize": network.hidden_size,
        "outputSize": network.output_size,
        "weightsIh": network.weights_ih.tolist(),
        "biasesH": network.biases_h.tolist(),
        "weightsHo": network.weights_ho.tolist(),
        "biasesO": network.biases_o.tolist(),
    }


def _as_size(state: Mapping[str, Any], key: str) -> int:
    value = state[key]
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise FormatError(f"{key} must be a positive integer, got {value!r}")
    return value


def _as_array(state: Mapping[str, Any], key: str, shape: tuple[int, ...]) -> np.ndarray:
    try:
        array = np.array(state[key], dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise FormatError(f"{key} is not a numeric array") from exc
    if array.shape != shape:
        raise FormatError(f"{key} has shape {array.shape}, expected {shape}")
    return array


def from_state(state: Mapping[str, Any]) -> Network:
    """Rebuild a network from a snapshot produced by :func:`to_state`."""

    if not isinstance(state, Mapping):
        raise FormatError("Model snapshot must be a JSON object")
    missing = [key for key in _REQUIRED if key not in state]
    if missing:
        raise FormatError(f"Model snapshot is missing fields: {', '.join(missing)}")

    n_in = _as_size(state, "inputSize")
    n_hidden = _as_size(state, "hiddenSize")
    n_out = _as_size(state, "outputSize")
    try:
        return Network.from_state(
            weights_ih=_as_array(state, "weightsIh", (n_in, n_hidden)),
            biases_h=_as_array(state, "biasesH", (n_hidden,)),
            weights_ho=_as_array(state, "weightsHo", (n_hidden, n_out)),
            biases_o=_as_array(state, "biasesO", (n_out,)),
        )
    except ShapeMismatch as exc:  # pragma: no cover - shapes checked above
        raise FormatError(str(exc)) from exc


def dumps(network: Network) -> str:
    return json.dumps(to_state(network))


def loads(text: str) -> Network:
    try:
        state = json.loads(text)
    except json.JSONDecodeError as exc:
        raise FormatError(f"Model snapshot is not valid JSON: {exc}") from exc
    return from_state(state)


def save(network: Network, destination: str | Path) -> Path:
    """Write ``network`` to ``destination``, replacing any existing file."""

    path = Path(destination)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dumps(network), encoding="utf-8")
    logger.debug("Saved model to %s", path)
    return path


def load(source: str | Path) -> Network:
    """Read a network written by :func:`save`."""

    path = Path(source)
    network = loads(path.read_text(encoding="utf-8"))
    logger.debug("Loaded model from %s", path)
    return network


__all__ = ["dumps", "from_state", "load", "loads", "save", "to_state"]
