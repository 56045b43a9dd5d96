"""Batched backpropagation with per-epoch fan-out/fan-in."""

from __future__ import annotations

from concurrent.futures import Executor, ThreadPoolExecutor
from contextlib import nullcontext
from dataclasses import dataclass
from typing import Callable, Dict, List

import numpy as np

from ..core.activations import sigmoid_deriv
from ..core.np_mlp import Network
from ..core.types import Array, TrainingSet
from ..errors import ShapeMismatch

ProgressCallback = Callable[[int, int, float], None]

EARLY_STOP_THRESHOLD = 1e-8


@dataclass(frozen=True)
class BatchUpdate:
    """Squared-error total and un-normalised parameter updates of one batch."""

    total_error: float
    updates: Dict[str, Array]


def compute_batch_update(
    network: Network, inputs: Array, targets: Array, learning_rate: float
) -> BatchUpdate:
    """Accumulate ``learning_rate``-scaled updates over every row of a batch.

    Reads ``network`` without mutating it.
    """

    with np.errstate(over="ignore", invalid="ignore"):
        hidden, output = network.forward_batch(inputs)
        diff = targets - output
        total_error = float(np.sum(diff * diff))
        delta_o = diff * sigmoid_deriv(output)
        delta_h = (delta_o @ network.weights_ho.T) * sigmoid_deriv(hidden)
        updates = {
            "W_ih": learning_rate * (inputs.T @ delta_h),
            "b_h": learning_rate * delta_h.sum(axis=0),
            "W_ho": learning_rate * (hidden.T @ delta_o),
            "b_o": learning_rate * delta_o.sum(axis=0),
        }
    return BatchUpdate(total_error=total_error, updates=updates)


class Trainer:
    """Drive epochs of batched gradient descent on one :class:`Network`.

    Every batch of an epoch is computed concurrently on ``executor`` against
    the weights as they stood when the epoch began.  Updates are applied by
    the calling thread after all batches have been joined, in batch order,
    so training is reproducible for a fixed initialisation.
    """

    def __init__(
        self,
        network: Network,
        learning_rate: float = 0.1,
        epochs: int = 1000,
        *,
        executor: Executor | None = None,
        max_workers: int | None = None,
    ) -> None:
        if epochs < 1:
            raise ValueError("epochs must be at least 1")
        self.network = network
        self.learning_rate = float(learning_rate)
        self.epochs = int(epochs)
        self.executor = executor
        self.max_workers = max_workers

    def train(
        self,
        data: TrainingSet,
        progress_callback: ProgressCallback | None = None,
        report_every: int = 100,
        batch_size: int = 64,
    ) -> tuple[float, int]:
        """Train until convergence or the epoch budget is spent.

        Returns ``(average_error, epochs_run)`` where ``average_error`` is
        the mean per-example squared error of the last epoch.
        """

        if len(data) == 0:
            raise ValueError("Cannot train on an empty dataset")
        if data.input_size != self.network.input_size or (
            data.output_size != self.network.output_size
        ):
            raise ShapeMismatch(
                f"Dataset sizes ({data.input_size}, {data.output_size}) do not match "
                f"network sizes ({self.network.input_size}, {self.network.output_size})"
            )
        if report_every < 1:
            raise ValueError("report_every must be at least 1")

        batches = list(data.batches(batch_size))
        divisor = float(min(batch_size, len(data)))
        epochs_run = self.epochs
        average_error = 0.0

        pool = (
            nullcontext(self.executor)
            if self.executor is not None
            else ThreadPoolExecutor(
                max_workers=self.max_workers, thread_name_prefix="gridmlp-batch"
            )
        )
        with pool as executor:
            for epoch in range(1, self.epochs + 1):
                results = self._run_epoch(executor, batches)

                total_error = 0.0
                with np.errstate(over="ignore", invalid="ignore"):
                    for result in results:
                        total_error += result.total_error
                        self.network.apply(result.updates, divisor)
                average_error = total_error / len(data)

                if progress_callback is not None and (
                    epoch == 1 or epoch == self.epochs or epoch % report_every == 0
                ):
                    progress_callback(epoch, self.epochs, average_error)

                if average_error < EARLY_STOP_THRESHOLD:
                    if progress_callback is not None:
                        progress_callback(epoch, self.epochs, average_error)
                    epochs_run = epoch
                    break

        return average_error, epochs_run

    # ------------------------------------------------------------------
    # Internal helpers

    def _run_epoch(
        self, executor: Executor, batches: List[tuple[Array, Array]]
    ) -> List[BatchUpdate]:
        futures = [
            executor.submit(
                compute_batch_update, self.network, inputs, targets, self.learning_rate
            )
            for inputs, targets in batches
        ]
        return [future.result() for future in futures]


__all__ = ["BatchUpdate", "EARLY_STOP_THRESHOLD", "ProgressCallback", "Trainer", "compute_batch_update"]
