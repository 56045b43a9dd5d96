"""Model evaluation artifacts."""

from __future__ import annotations

import json
import time
from pathlib import Path
from typing import List

from .. import persistence
from ..core.types import TrainingSet
from ..training.metrics import ModelReport, evaluate_network
from ..utils import ensure_dir, get_logger

logger = get_logger(__name__)


def write_report(path: str | Path, report: ModelReport) -> str:
    """Write ``report`` as JSON, stamped with its generation time."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = report.to_dict()
    payload["generated_at"] = time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return str(path)


def evaluate_directory(
    models_dir: str | Path,
    data: TrainingSet,
    out_dir: str | Path,
    *,
    pattern: str = "*.json",
) -> List[ModelReport]:
    """Evaluate every model file in ``models_dir`` and write one report per model."""

    out = ensure_dir(out_dir)
    reports: List[ModelReport] = []
    for model_path in sorted(Path(models_dir).glob(pattern)):
        if not model_path.is_file():
            continue
        network = persistence.load(model_path)
        report = evaluate_network(network, data, model_name=model_path.stem)
        write_report(out / f"{model_path.stem}_report.json", report)
        logger.info(
            "Evaluated %s: %d/%d correct",
            model_path.stem,
            report.total_correct,
            report.total_tested,
        )
        reports.append(report)
    return reports


__all__ = ["evaluate_directory", "write_report"]
