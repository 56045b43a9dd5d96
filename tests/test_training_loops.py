from __future__ import annotations

import math
from typing import List, Tuple

import pytest

from gridmlp.core.np_mlp import Network
from gridmlp.core.types import TrainingSet
from gridmlp.errors import ShapeMismatch
from gridmlp.training import trainer as trainer_module
from gridmlp.training.metrics import evaluate_network, mean_squared_error
from gridmlp.training.trainer import Trainer

XOR = TrainingSet.from_pairs(
    [([0, 0], [0]), ([0, 1], [1]), ([1, 0], [1]), ([1, 1], [0])], input_size=2, output_size=1
)
OR = TrainingSet.from_pairs(
    [([0, 0], [0]), ([0, 1], [1]), ([1, 0], [1]), ([1, 1], [1])], input_size=2, output_size=1
)


class _Capture:
    def __init__(self) -> None:
        self.history: List[Tuple[int, int, float]] = []

    def __call__(self, epoch: int, total: int, error: float) -> None:
        self.history.append((epoch, total, error))


def _mostly_decreasing(errors: List[float]) -> bool:
    drops = sum(1 for before, after in zip(errors, errors[1:]) if after < before)
    return drops >= 0.9 * (len(errors) - 1)


def test_xor_error_decreases():
    net = Network(2, 4, 1, seed=0)
    capture = _Capture()
    trainer = Trainer(net, learning_rate=0.5, epochs=1000, max_workers=2)
    final, epochs_run = trainer.train(XOR, capture, report_every=50, batch_size=4)

    assert epochs_run == 1000
    errors = [error for _, _, error in capture.history]
    assert errors[-1] < errors[0]
    assert _mostly_decreasing(errors)
    assert final == pytest.approx(errors[-1])


def test_seeded_xor_2_2_1_converges():
    # A 2-2-1 net can stall on XOR, so look for a seed that solves it
    # within the fixed budget; the search itself is deterministic.
    for seed in range(100):
        net = Network(2, 2, 1, seed=seed)
        capture = _Capture()
        final, _ = Trainer(net, learning_rate=0.5, epochs=1000).train(
            XOR, capture, report_every=50, batch_size=1
        )
        errors = [error for _, _, error in capture.history]
        if final < 0.05 and _mostly_decreasing(errors):
            break
    else:
        pytest.fail("no seed in range(100) trained XOR below 0.05 in 1000 epochs")

    again = Network(2, 2, 1, seed=seed)
    repeat, _ = Trainer(again, learning_rate=0.5, epochs=1000).train(XOR, batch_size=1)
    assert repeat == final
    assert evaluate_network(again, XOR).total_correct == 4


def test_or_is_learned_exactly():
    net = Network(2, 4, 1, seed=3)
    Trainer(net, learning_rate=2.0, epochs=2000).train(OR, batch_size=4)
    report = evaluate_network(net, OR)
    assert report.total_correct == 4
    assert mean_squared_error(net, OR) < 0.05


def test_progress_schedule():
    capture = _Capture()
    Trainer(Network(2, 2, 1, seed=0), epochs=250).train(OR, capture, report_every=100)
    assert [epoch for epoch, _, _ in capture.history] == [1, 100, 200, 250]
    assert {total for _, total, _ in capture.history} == {250}


def test_early_stop_reports_once_more_and_returns(monkeypatch):
    monkeypatch.setattr(trainer_module, "EARLY_STOP_THRESHOLD", math.inf)
    capture = _Capture()
    final, epochs_run = Trainer(Network(2, 2, 1, seed=0), epochs=500).train(OR, capture)
    assert epochs_run == 1
    assert [epoch for epoch, _, _ in capture.history] == [1, 1]
    assert capture.history[-1][2] == final


def test_early_stop_before_budget(monkeypatch):
    monkeypatch.setattr(trainer_module, "EARLY_STOP_THRESHOLD", 0.05)
    net = Network(2, 4, 1, seed=3)
    final, epochs_run = Trainer(net, learning_rate=2.0, epochs=5000).train(OR, batch_size=4)
    assert epochs_run < 5000
    assert final < 0.05


def test_empty_dataset_is_rejected():
    empty = TrainingSet.from_pairs([], input_size=2, output_size=1)
    with pytest.raises(ValueError):
        Trainer(Network(2, 2, 1, seed=0)).train(empty)


def test_dataset_size_mismatch_is_rejected():
    with pytest.raises(ShapeMismatch):
        Trainer(Network(3, 2, 1, seed=0)).train(OR)
