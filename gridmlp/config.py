"""Task configuration loading and validation."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from .errors import ConfigError

# camelCase file key -> dataclass attribute
_KEY_MAP: Dict[str, str] = {
    "inputBitAmount": "input_bits",
    "outputSize": "output_size",
    "epochs": "epochs",
    "learningRate": "learning_rate",
    "hiddenSize": "hidden_size",
    "modelFileName": "model_file",
    "trainingDataFileName": "training_data_file",
    "hiddenSizesToTest": "hidden_sizes",
    "learningRatesToTest": "learning_rates",
    "dispatchers": "dispatchers",
    "massAllModelPath": "models_dir",
    "statusFile": "status_file",
    "batchSize": "batch_size",
    "reportEvery": "report_every",
    "variants": "variants",
    "seed": "seed",
    "maxWorkers": "max_workers",
}

_REQUIRED = (
    "inputBitAmount",
    "outputSize",
    "modelFileName",
    "trainingDataFileName",
    "hiddenSizesToTest",
    "learningRatesToTest",
    "dispatchers",
    "massAllModelPath",
    "statusFile",
)


@dataclass(frozen=True)
class TaskConfig:
    """Immutable task description shared by every entry point.

    Built once by :func:`load_config` (or :meth:`from_mapping`) and passed
    explicitly to the trainer, orchestrator and CLI commands.
    """

    input_bits: int
    output_size: int
    model_file: str
    training_data_file: str
    hidden_sizes: Tuple[int, ...]
    learning_rates: Tuple[float, ...]
    dispatchers: str
    models_dir: str
    status_file: str
    epochs: int = 5000
    learning_rate: float = 0.1
    hidden_size: int = 6
    batch_size: int = 64
    report_every: int = 100
    variants: Tuple[str, ...] = field(default=("A", "B"))
    seed: Optional[int] = None
    max_workers: Optional[int] = None

    def __post_init__(self) -> None:
        for name in ("input_bits", "output_size", "epochs", "hidden_size", "batch_size", "report_every"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ConfigError(f"{name} must be a positive integer, got {value!r}")
        if not self.hidden_sizes:
            raise ConfigError("hiddenSizesToTest must not be empty")
        if any(isinstance(h, bool) or not isinstance(h, int) or h < 1 for h in self.hidden_sizes):
            raise ConfigError(f"hiddenSizesToTest must hold positive integers: {self.hidden_sizes!r}")
        if not self.learning_rates:
            raise ConfigError("learningRatesToTest must not be empty")
        if not self.variants:
            raise ConfigError("variants must not be empty")
        if len(set(self.variants)) != len(self.variants):
            raise ConfigError(f"variants must be unique: {self.variants!r}")
        if self.max_workers is not None and self.max_workers < 1:
            raise ConfigError("maxWorkers must be positive when given")

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "TaskConfig":
        """Validate a decoded config document (camelCase keys)."""

        if not isinstance(raw, Mapping):
            raise ConfigError("Config must decode to a mapping")
        missing = [key for key in _REQUIRED if key not in raw]
        if missing:
            raise ConfigError(f"Config is missing required keys: {', '.join(missing)}")

        kwargs: Dict[str, Any] = {}
        for key, attr in _KEY_MAP.items():
            if key in raw and raw[key] is not None:
                kwargs[attr] = raw[key]
        try:
            kwargs["learning_rate"] = float(kwargs.get("learning_rate", 0.1))
            kwargs["hidden_sizes"] = tuple(kwargs["hidden_sizes"])
            kwargs["learning_rates"] = tuple(float(lr) for lr in kwargs["learning_rates"])
            kwargs["variants"] = tuple(str(v) for v in kwargs.get("variants", ("A", "B")))
            for key in ("dispatchers", "model_file", "training_data_file", "models_dir", "status_file"):
                kwargs[key] = str(kwargs[key])
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid config value: {exc}") from exc
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Return the camelCase document form of this config."""

        values = asdict(self)
        reverse = {attr: key for key, attr in _KEY_MAP.items()}
        out: Dict[str, Any] = {}
        for item in fields(self):
            value = values[item.name]
            out[reverse[item.name]] = list(value) if isinstance(value, tuple) else value
        return out

    @property
    def uses_io_dispatcher(self) -> bool:
        return self.dispatchers.lower() == "io"


def _read_document(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        return yaml.safe_load(text) or {}
    return json.loads(text or "{}")


def load_config(path: str | Path) -> TaskConfig:
    """Load ``path`` (JSON, or YAML by extension) into a :class:`TaskConfig`."""

    path = Path(path)
    try:
        raw = _read_document(path)
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file not found: {path}") from exc
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(f"Could not parse config {path}: {exc}") from exc
    return TaskConfig.from_mapping(raw)


__all__ = ["TaskConfig", "load_config"]
