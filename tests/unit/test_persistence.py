import json

import numpy as np
import pytest

from gridmlp import persistence
from gridmlp.core.np_mlp import Network
from gridmlp.errors import FormatError


def test_save_and_load_restore_identical_network(tmp_path):
    net = Network(3, 4, 2, seed=9)
    path = persistence.save(net, tmp_path / "nested" / "model.json")
    assert path.exists()

    restored = persistence.load(path)
    assert restored == net
    probe = [1.0, 0.0, 1.0]
    np.testing.assert_array_equal(restored.forward(probe), net.forward(probe))


def test_snapshot_uses_camel_case_fields():
    state = persistence.to_state(Network(2, 3, 1, seed=0))
    assert set(state) == {
        "inputSize",
        "hiddenSize",
        "outputSize",
        "weightsIh",
        "biasesH",
        "weightsHo",
        "biasesO",
    }
    assert len(state["weightsIh"]) == 2 and len(state["weightsIh"][0]) == 3
    assert len(state["weightsHo"]) == 3 and len(state["weightsHo"][0]) == 1


def test_save_overwrites_existing_file(tmp_path):
    target = tmp_path / "model.json"
    persistence.save(Network(2, 2, 1, seed=1), target)
    second = Network(2, 2, 1, seed=2)
    persistence.save(second, target)
    assert persistence.load(target) == second


def test_missing_field_is_rejected():
    state = persistence.to_state(Network(2, 2, 1, seed=0))
    del state["biasesO"]
    with pytest.raises(FormatError):
        persistence.from_state(state)


def test_inconsistent_shapes_are_rejected():
    state = persistence.to_state(Network(2, 2, 1, seed=0))
    state["hiddenSize"] = 3
    with pytest.raises(FormatError):
        persistence.from_state(state)


@pytest.mark.parametrize("text", ["not json", "[1, 2, 3]", json.dumps({"inputSize": 2})])
def test_malformed_documents_are_rejected(text):
    with pytest.raises(FormatError):
        persistence.loads(text)
