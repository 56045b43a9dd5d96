"""Evaluation helpers for trained networks."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, List, Sequence

import numpy as np

from ..core.np_mlp import Network
from ..core.types import Array, TrainingSet


@dataclass(frozen=True)
class BinaryValue:
    bits: List[float]
    decimal: int


@dataclass(frozen=True)
class ExampleResult:
    input: BinaryValue
    predicted: BinaryValue
    expected: BinaryValue
    correct: bool


@dataclass(frozen=True)
class ModelReport:
    """Per-example correctness of one model over a dataset."""

    model_name: str
    total_correct: int
    total_tested: int
    accuracy: float
    results: List[ExampleResult]

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


def bits_to_int(bits: Sequence[float] | Array) -> int:
    """Interpret a most-significant-first vector of (rounded) bits as an integer."""

    value = 0
    for bit in bits:
        value = (value << 1) | (1 if float(bit) > 0.5 else 0)
    return value


def int_to_bits(value: int, width: int) -> List[float]:
    """Left-pad the binary form of ``value`` to ``width`` bits."""

    if value < 0:
        raise ValueError("Only non-negative integers have a bit representation")
    return [float(ch) for ch in format(value, "b").zfill(width)]


def round_outputs(outputs: Array) -> Array:
    """Round activations half-up to 0.0/1.0."""

    return np.floor(np.asarray(outputs, dtype=np.float64) + 0.5)


def mean_squared_error(network: Network, data: TrainingSet) -> float:
    """Mean per-example squared error, matching the trainer's ``average_error``."""

    _, output = network.forward_batch(data.inputs)
    return float(np.sum((data.targets - output) ** 2) / max(1, len(data)))


def evaluate_network(network: Network, data: TrainingSet, model_name: str = "") -> ModelReport:
    """Round every output to 0/1 and compare it with the expected bits."""

    _, output = network.forward_batch(data.inputs)
    rounded = round_outputs(output)
    results: List[ExampleResult] = []
    for x, predicted, expected in zip(data.inputs, rounded, data.targets):
        correct = bool(np.array_equal(predicted, expected))
        results.append(
            ExampleResult(
                input=BinaryValue(x.tolist(), bits_to_int(x)),
                predicted=BinaryValue(predicted.tolist(), bits_to_int(predicted)),
                expected=BinaryValue(expected.tolist(), bits_to_int(expected)),
                correct=correct,
            )
        )
    total = len(results)
    correct_count = sum(1 for item in results if item.correct)
    return ModelReport(
        model_name=model_name,
        total_correct=correct_count,
        total_tested=total,
        accuracy=correct_count / total if total else 0.0,
        results=results,
    )


__all__ = [
    "BinaryValue",
    "ExampleResult",
    "ModelReport",
    "bits_to_int",
    "evaluate_network",
    "int_to_bits",
    "mean_squared_error",
    "round_outputs",
]
