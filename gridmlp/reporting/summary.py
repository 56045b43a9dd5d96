"""Ranked experiment reports and model file naming."""

from __future__ import annotations

import math
from typing import Iterable, List, Sequence

from ..core.types import RunSpec, TrainingResult


def rank_results(results: Iterable[TrainingResult]) -> List[TrainingResult]:
    """Return ``results`` sorted ascending by final error (NaN last)."""

    def key(result: TrainingResult) -> tuple[float, int]:
        error = result.final_error
        return (math.inf if math.isnan(error) else error), result.spec.index

    return sorted(results, key=key)


def model_tag(spec: RunSpec) -> str:
    """Bracketed identifier embedded in model file names, e.g. ``[4-0.1-A]``."""

    return f"[{spec.hidden_size}-{spec.learning_rate}-{spec.variant}]"


def best_model_filename(result: TrainingResult) -> str:
    return f"best_model_{model_tag(result.spec)}.json"


def ranked_model_filename(rank: int, result: TrainingResult) -> str:
    return f"rank_{rank}_{model_tag(result.spec)}_err_{result.final_error}.json"


def format_best(result: TrainingResult) -> List[str]:
    return [
        "--- Best Performing Model ---",
        f"Model ID: [{result.spec.run_id}]",
        f"Epochs to Converge: {result.epochs_run}",
        f"Final Average Error: {result.final_error:.21f}",
        "-----------------------------",
    ]


def format_ranked_table(ranked: Sequence[TrainingResult]) -> List[str]:
    """Render ``rank | run id | final error | epochs`` rows for sorted results."""

    lines = [
        "Rank | Model ID          | Final Error          | Epochs",
        "-----|-------------------|----------------------|-------",
    ]
    for rank, result in enumerate(ranked, start=1):
        model_id = f"[{result.spec.run_id}]"
        lines.append(
            f"{rank:<4d} | {model_id:<17s} | {result.final_error:<20.16f} | {result.epochs_run}"
        )
    return lines


__all__ = [
    "best_model_filename",
    "format_best",
    "format_ranked_table",
    "model_tag",
    "rank_results",
    "ranked_model_filename",
]
