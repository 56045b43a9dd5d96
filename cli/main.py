"""Command line entry point for gridmlp."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Iterable, TextIO

from gridmlp import persistence
from gridmlp.config import TaskConfig, load_config
from gridmlp.core.np_mlp import Network
from gridmlp.core.types import TrainingSet
from gridmlp.data import available_datasets, get_dataset, load_training_data, save_training_data
from gridmlp.errors import ConfigError, FormatError, ShapeMismatch
from gridmlp.experiments import Orchestrator
from gridmlp.reporting import evaluate_directory
from gridmlp.training import Trainer
from gridmlp.training.metrics import int_to_bits, round_outputs
from gridmlp.utils import get_logger, setup_logging

logger = get_logger("cli")

EXIT_WORD = "e"


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--config", type=Path, default=Path("config.json"), help="JSON/YAML task config"
    )
    parser.add_argument("--log-level", default="INFO", help="Logging verbosity")
    parser.add_argument("--log-file", type=Path, help="Also append log records to this file")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("train", help="Train a single model and save it to modelFileName")
    sub.add_parser("mass-train", help="Train the full hidden-size x learning-rate grid")
    sub.add_parser("predict", help="Interactively query a model (trains one if missing)")

    generate = sub.add_parser("generate", help="Write a generated training-data file")
    generate.add_argument("dataset", choices=sorted(available_datasets()))
    generate.add_argument("--out", type=Path, help="Output path (defaults to trainingDataFileName)")

    evaluate = sub.add_parser("evaluate", help="Score every saved model against the training data")
    evaluate.add_argument("--models-dir", type=Path, help="Defaults to massAllModelPath")
    evaluate.add_argument("--out-dir", type=Path, default=Path("allTrainResults"))
    return parser.parse_args(argv)


# ----------------------------------------------------------------------
# Helpers


def _load_data(config: TaskConfig, *, strict: bool) -> TrainingSet:
    path = Path(config.training_data_file)
    if not path.exists():
        raise SystemExit(
            f"No training data found ({path}). Run the `generate` command first."
        )
    try:
        data = load_training_data(path)
    except (FormatError, ShapeMismatch) as exc:
        raise SystemExit(f"Error loading training data from {path}: {exc}") from exc
    print(
        f"Training data loaded successfully. Input size: {data.input_size}, "
        f"Output size: {data.output_size}."
    )
    if strict and (data.input_size != config.input_bits or data.output_size != config.output_size):
        raise SystemExit(
            "Training data input/output sizes "
            f"({data.input_size}, {data.output_size}) do not match the config "
            f"({config.input_bits}, {config.output_size}). Regenerate the training data."
        )
    return data


def _print_progress(epoch: int, total_epochs: int, average_error: float) -> None:
    print(f"Epoch {epoch}/{total_epochs}, Average Error: {average_error:.12f}")


def _train_single(config: TaskConfig) -> Network:
    data = _load_data(config, strict=True)
    network = Network(
        input_size=config.input_bits,
        hidden_size=config.hidden_size,
        output_size=config.output_size,
        seed=config.seed,
    )
    trainer = Trainer(
        network, config.learning_rate, config.epochs, max_workers=config.max_workers
    )
    print("Starting training...")
    final_error, epochs_run = trainer.train(
        data,
        _print_progress,
        report_every=config.report_every,
        batch_size=config.batch_size,
    )
    logger.info("Training finished after %d epochs with error %.3e", epochs_run, final_error)
    persistence.save(network, config.model_file)
    print(f"Model saved to {config.model_file}")
    return network


def interactive_loop(
    network: Network, input_bits: int, stream: TextIO | None = None
) -> None:
    """Read decimal numbers and print the network's prediction for each."""

    stream = stream or sys.stdin
    print(f"Input bit amount: {input_bits}, Output size: {network.output_size}")
    print(f"Type '{EXIT_WORD}' to exit.")
    for raw in stream:
        text = raw.strip()
        if text == EXIT_WORD:
            break
        if not text:
            continue
        try:
            number = int(text)
            bits = int_to_bits(number, input_bits)
        except ValueError:
            print(f"Not a non-negative integer: {text!r}")
            continue
        try:
            output = network.forward(bits)
        except ShapeMismatch as exc:
            print(f"Cannot predict {number}: {exc}")
            continue
        print(f"Input: {''.join(str(int(b)) for b in bits)}")
        print(f"Rounded: {', '.join(str(int(v)) for v in round_outputs(output))}")
        print(f"Raw: {', '.join(repr(float(v)) for v in output)}")


# ----------------------------------------------------------------------
# Commands


def _cmd_train(config: TaskConfig, args: argparse.Namespace) -> None:
    _train_single(config)


def _cmd_mass_train(config: TaskConfig, args: argparse.Namespace) -> None:
    data = _load_data(config, strict=False)
    Orchestrator(config).run(data)


def _cmd_predict(config: TaskConfig, args: argparse.Namespace) -> None:
    model_path = Path(config.model_file)
    if model_path.exists():
        print(f"Loading existing model from {model_path}...")
        try:
            network = persistence.load(model_path)
        except FormatError as exc:
            raise SystemExit(f"Could not load model {model_path}: {exc}") from exc
        if network.input_size != config.input_bits or network.output_size != config.output_size:
            logger.warning(
                "Loaded model sizes (input=%d, output=%d) do not match config "
                "(input=%d, output=%d); delete %s to retrain",
                network.input_size,
                network.output_size,
                config.input_bits,
                config.output_size,
                model_path,
            )
    else:
        network = _train_single(config)
    interactive_loop(network, network.input_size)


def _cmd_generate(config: TaskConfig, args: argparse.Namespace) -> None:
    data = get_dataset(args.dataset, bits=config.input_bits, output_size=config.output_size)
    out = args.out or Path(config.training_data_file)
    save_training_data(data, out)
    print(f"Training data generated and saved to {out}")
    print(f"Input size: {data.input_size}, Output size: {data.output_size}")
    print(f"Generated {len(data)} training examples.")


def _cmd_evaluate(config: TaskConfig, args: argparse.Namespace) -> None:
    data = _load_data(config, strict=False)
    models_dir = args.models_dir or Path(config.models_dir)
    reports = evaluate_directory(models_dir, data, args.out_dir)
    print(f"Found {len(reports)} models to evaluate.")
    for report in reports:
        print(
            f"{report.model_name}: {report.total_correct}/{report.total_tested} "
            f"({report.accuracy:.2%})"
        )


_COMMANDS = {
    "train": _cmd_train,
    "mass-train": _cmd_mass_train,
    "predict": _cmd_predict,
    "generate": _cmd_generate,
    "evaluate": _cmd_evaluate,
}


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.log_level, log_file=args.log_file)

    try:
        config = load_config(args.config)
    except ConfigError as exc:
        raise SystemExit(f"Error loading {args.config}: {exc}") from exc
    logger.debug("Loaded configuration: %s", config)

    try:
        _COMMANDS[args.command](config, args)
    except ConfigError as exc:
        raise SystemExit(str(exc)) from exc


if __name__ == "__main__":
    main()
