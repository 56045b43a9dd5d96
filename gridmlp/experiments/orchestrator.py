"""Concurrent hyper-parameter grid training."""

from __future__ import annotations

import itertools
import os
import threading
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence

from .. import persistence
from ..config import TaskConfig
from ..core.np_mlp import Network
from ..core.types import RunSpec, TrainingResult, TrainingSet
from ..errors import ConfigError
from ..reporting.dashboard import Dashboard, Renderer
from ..reporting.summary import (
    best_model_filename,
    format_best,
    format_ranked_table,
    rank_results,
    ranked_model_filename,
)
from ..training.trainer import Trainer
from ..utils import ensure_dir, get_logger, reset_dir

logger = get_logger(__name__)

CONVERGED_THRESHOLD = 1e-6


def build_grid(
    hidden_sizes: Sequence[int],
    learning_rates: Sequence[float],
    epochs: int,
    variants: Sequence[str] = ("A", "B"),
) -> List[RunSpec]:
    """Return one :class:`RunSpec` per ``hidden x lr x variant`` combination."""

    combinations = itertools.product(hidden_sizes, learning_rates, variants)
    return [
        RunSpec(
            hidden_size=int(hidden),
            learning_rate=float(lr),
            variant=str(variant),
            total_epochs=int(epochs),
            index=idx,
        )
        for idx, (hidden, lr, variant) in enumerate(combinations)
    ]


@dataclass(frozen=True)
class ExperimentReport:
    """Ranked outcome of :meth:`Orchestrator.run`."""

    ranked: List[TrainingResult]
    best_model_path: Path | None = None
    model_paths: List[Path] = field(default_factory=list)

    @property
    def best(self) -> TrainingResult | None:
        return self.ranked[0] if self.ranked else None


class Orchestrator:
    """Train every grid cell of ``config`` concurrently and persist the models.

    Each run owns its network and trainer; runs share only the read-only
    training set, the batch worker pool and the dashboard.
    """

    def __init__(
        self,
        config: TaskConfig,
        *,
        renderer: Renderer | None = None,
        best_model_dir: str | Path | None = None,
    ) -> None:
        self.config = config
        self.renderer = renderer
        models_dir = Path(config.models_dir)
        cwd = Path.cwd().resolve()
        resolved = models_dir.resolve()
        if resolved == cwd or resolved in cwd.parents:
            raise ConfigError(f"massAllModelPath {models_dir} would clear the working directory")
        self.best_model_dir = Path(best_model_dir) if best_model_dir is not None else models_dir.parent
        self.specs = build_grid(
            config.hidden_sizes, config.learning_rates, config.epochs, config.variants
        )
        self.dashboard: Dashboard | None = None

    def run_workers(self) -> int:
        if self.config.max_workers is not None:
            return self.config.max_workers
        if self.config.uses_io_dispatcher:
            return max(1, len(self.specs))
        return os.cpu_count() or 1

    def run(self, data: TrainingSet) -> ExperimentReport:
        config = self.config
        if data.input_size != config.input_bits or data.output_size != config.output_size:
            logger.warning(
                "Training data sizes (input=%d, output=%d) do not match config "
                "(input=%d, output=%d); runs use the data's sizes",
                data.input_size,
                data.output_size,
                config.input_bits,
                config.output_size,
            )

        print("--- Starting Mass Training Experiment ---")
        print(f"Training data loaded with {len(data)} samples.")
        print(f"Will perform {len(self.specs)} training runs in parallel.")
        print("-------------------------------------------------")

        dashboard = Dashboard(self.specs, status_file=config.status_file, renderer=self.renderer)
        self.dashboard = dashboard
        dashboard.start()

        results: List[TrainingResult] = []
        results_lock = threading.Lock()

        with ThreadPoolExecutor(
            max_workers=config.max_workers or os.cpu_count(), thread_name_prefix="gridmlp-batch"
        ) as batch_pool, ThreadPoolExecutor(
            max_workers=self.run_workers(), thread_name_prefix="gridmlp-run"
        ) as run_pool:
            futures = [
                run_pool.submit(
                    self._train_one, spec, data, batch_pool, dashboard, results, results_lock
                )
                for spec in self.specs
            ]
            for future in futures:
                future.result()

        print("")
        print("-------------------------------------------------")
        print("All training runs complete. Analyzing results...")
        return self._collect(results)

    # ------------------------------------------------------------------
    # Internal helpers

    def _seed_for(self, spec: RunSpec) -> int | None:
        if self.config.seed is None:
            return None
        return self.config.seed + spec.index

    def _train_one(
        self,
        spec: RunSpec,
        data: TrainingSet,
        batch_pool: Executor,
        dashboard: Dashboard,
        results: List[TrainingResult],
        results_lock: threading.Lock,
    ) -> TrainingResult:
        network = Network(
            input_size=data.input_size,
            hidden_size=spec.hidden_size,
            output_size=data.output_size,
            seed=self._seed_for(spec),
        )
        trainer = Trainer(network, spec.learning_rate, spec.total_epochs, executor=batch_pool)

        def progress(epoch: int, total_epochs: int, average_error: float) -> None:
            dashboard.report(spec.index, epoch, average_error)

        final_error, epochs_run = trainer.train(
            data,
            progress,
            report_every=self.config.report_every,
            batch_size=self.config.batch_size,
        )
        result = TrainingResult(spec=spec, final_error=final_error, epochs_run=epochs_run, network=network)
        with results_lock:
            results.append(result)

        converged = final_error < CONVERGED_THRESHOLD and epochs_run < spec.total_epochs
        dashboard.finish(spec.index, epochs_run, final_error, converged)
        return result

    def _collect(self, results: List[TrainingResult]) -> ExperimentReport:
        models_dir = reset_dir(self.config.models_dir)
        if not results:
            print("No results were generated.")
            return ExperimentReport(ranked=[])

        ranked = rank_results(results)
        best = ranked[0]
        print("")
        for line in format_best(best):
            print(line)
        best_path = persistence.save(
            best.network, ensure_dir(self.best_model_dir) / best_model_filename(best)
        )
        print(f"Saved best model to {best_path}")

        print("")
        print("--- Full Report (sorted by error) ---")
        for line in format_ranked_table(ranked):
            print(line)

        paths = [
            persistence.save(result.network, models_dir / ranked_model_filename(rank, result))
            for rank, result in enumerate(ranked, start=1)
        ]
        print("")
        print(f"Saved all models to '{models_dir}' directory.")
        logger.info("Best run %s finished with error %.3e", best.spec.run_id, best.final_error)
        return ExperimentReport(ranked=ranked, best_model_path=best_path, model_paths=paths)


__all__ = ["CONVERGED_THRESHOLD", "ExperimentReport", "Orchestrator", "build_grid"]
