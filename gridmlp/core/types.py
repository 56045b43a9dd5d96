"""Core typing contracts for gridmlp."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterable, Iterator, NamedTuple, Sequence

import numpy as np

from ..errors import ShapeMismatch

if TYPE_CHECKING:  # pragma: no cover
    from .np_mlp import Network

Array = np.ndarray


class TrainingExample(NamedTuple):
    """A single ``(inputs, targets)`` pair."""

    inputs: Array
    targets: Array


@dataclass(frozen=True)
class TrainingSet:
    """Immutable collection of training examples.

    Attributes
    ----------
    inputs:
        ``(n, input_size)`` float64 matrix, one example per row.
    targets:
        ``(n, output_size)`` float64 matrix aligned with ``inputs``.
    input_size, output_size:
        Declared vector widths.  Every row is validated against them and
        both matrices are frozen, so one set can be shared by concurrent
        training runs.
    """

    inputs: Array
    targets: Array
    input_size: int
    output_size: int

    def __post_init__(self) -> None:
        inputs = np.array(self.inputs, dtype=np.float64)
        targets = np.array(self.targets, dtype=np.float64)
        if inputs.size == 0 and targets.size == 0:
            inputs = inputs.reshape(0, self.input_size)
            targets = targets.reshape(0, self.output_size)
        if inputs.ndim != 2 or targets.ndim != 2:
            raise ShapeMismatch("Training inputs and targets must be 2-D matrices")
        if inputs.shape[0] != targets.shape[0]:
            raise ShapeMismatch(
                f"{inputs.shape[0]} input rows but {targets.shape[0]} target rows"
            )
        if inputs.shape[1] != self.input_size:
            raise ShapeMismatch(
                f"Input vectors have length {inputs.shape[1]}, expected {self.input_size}"
            )
        if targets.shape[1] != self.output_size:
            raise ShapeMismatch(
                f"Target vectors have length {targets.shape[1]}, expected {self.output_size}"
            )
        inputs.setflags(write=False)
        targets.setflags(write=False)
        object.__setattr__(self, "inputs", inputs)
        object.__setattr__(self, "targets", targets)

    @classmethod
    def from_pairs(
        cls,
        pairs: Iterable[tuple[Sequence[float], Sequence[float]]],
        input_size: int,
        output_size: int,
    ) -> "TrainingSet":
        """Build a set from ``(inputs, targets)`` sequences."""

        pairs = list(pairs)
        for idx, (x, y) in enumerate(pairs):
            if len(x) != input_size or len(y) != output_size:
                raise ShapeMismatch(
                    f"Example {idx} has sizes ({len(x)}, {len(y)}), "
                    f"expected ({input_size}, {output_size})"
                )
        inputs = np.array([list(x) for x, _ in pairs], dtype=np.float64)
        targets = np.array([list(y) for _, y in pairs], dtype=np.float64)
        return cls(
            inputs=inputs.reshape(len(pairs), input_size),
            targets=targets.reshape(len(pairs), output_size),
            input_size=input_size,
            output_size=output_size,
        )

    def __len__(self) -> int:
        return int(self.inputs.shape[0])

    def __iter__(self) -> Iterator[TrainingExample]:
        for x, y in zip(self.inputs, self.targets):
            yield TrainingExample(x, y)

    def batches(self, batch_size: int) -> Iterator[tuple[Array, Array]]:
        """Yield contiguous ``(inputs, targets)`` slices of ``batch_size`` rows."""

        if batch_size < 1:
            raise ValueError("batch_size must be positive")
        for start in range(0, len(self), batch_size):
            end = start + batch_size
            yield self.inputs[start:end], self.targets[start:end]


@dataclass(frozen=True)
class RunSpec:
    """One cell of an experiment grid."""

    hidden_size: int
    learning_rate: float
    variant: str
    total_epochs: int
    index: int = 0

    @property
    def run_id(self) -> str:
        return f"{self.hidden_size}-{self.learning_rate:.3f}-{self.variant}"


class RunStatus(str, Enum):
    QUEUED = "QUEUED"
    RUNNING = "RUNNING"
    CONVERGED = "CONVERGED"
    COMPLETED = "COMPLETED"

    @property
    def finished(self) -> bool:
        return self in (RunStatus.CONVERGED, RunStatus.COMPLETED)


_STATUS_ORDER = {
    RunStatus.QUEUED: 0,
    RunStatus.RUNNING: 1,
    RunStatus.CONVERGED: 2,
    RunStatus.COMPLETED: 2,
}


@dataclass
class ProgressSnapshot:
    """Live progress of one run.

    Status only moves forward: ``QUEUED -> RUNNING -> CONVERGED|COMPLETED``.
    """

    spec: RunSpec
    epoch: int = 0
    avg_error: float = math.inf
    previous_error: float = math.inf
    status: RunStatus = RunStatus.QUEUED

    @property
    def improvement(self) -> float:
        if math.isinf(self.previous_error):
            return 0.0
        return self.previous_error - self.avg_error

    def advance(self, status: RunStatus) -> None:
        if status == self.status:
            return
        if self.status.finished or _STATUS_ORDER[status] < _STATUS_ORDER[self.status]:
            raise ValueError(f"Run {self.spec.run_id} cannot move from {self.status.value} to {status.value}")
        self.status = status

    def record(self, epoch: int, error: float) -> None:
        """Store a progress reading and mark the run as running."""

        if self.status.finished:
            raise ValueError(f"Run {self.spec.run_id} already finished")
        self.epoch = epoch
        self.previous_error = self.avg_error
        self.avg_error = error
        self.advance(RunStatus.RUNNING)

    def finish(self, epochs_run: int, final_error: float, converged: bool) -> None:
        self.epoch = epochs_run
        self.previous_error = self.avg_error
        self.avg_error = final_error
        self.advance(RunStatus.CONVERGED if converged else RunStatus.COMPLETED)


@dataclass(frozen=True)
class TrainingResult:
    """Outcome of one finished run."""

    spec: RunSpec
    final_error: float
    epochs_run: int
    network: "Network"


__all__ = [
    "Array",
    "ProgressSnapshot",
    "RunSpec",
    "RunStatus",
    "TrainingExample",
    "TrainingResult",
    "TrainingSet",
]
