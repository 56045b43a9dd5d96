import json

import numpy as np
import pytest

from gridmlp.data import available_datasets, get_dataset, load_training_data, save_training_data
from gridmlp.errors import FormatError, ShapeMismatch


def test_registry_lists_builtin_datasets():
    assert {"bit_count", "parity"} <= set(available_datasets())
    with pytest.raises(KeyError):
        get_dataset("does-not-exist", bits=2, output_size=1)


def test_bit_count_dataset():
    data = get_dataset("bit_count", bits=3, output_size=2)
    assert len(data) == 8
    assert data.input_size == 3 and data.output_size == 2
    # 0b111 has three set bits -> [1, 1]
    np.testing.assert_array_equal(data.inputs[7], [1.0, 1.0, 1.0])
    np.testing.assert_array_equal(data.targets[7], [1.0, 1.0])
    np.testing.assert_array_equal(data.targets[4], [0.0, 1.0])


def test_bit_count_rejects_too_narrow_output():
    with pytest.raises(ValueError):
        get_dataset("bit_count", bits=4, output_size=2)


def test_parity_dataset():
    data = get_dataset("parity", bits=2, output_size=1)
    assert data.inputs.tolist() == [[0.0, 0.0], [0.0, 1.0], [1.0, 0.0], [1.0, 1.0]]
    assert data.targets.ravel().tolist() == [0.0, 1.0, 0.0, 1.0]


def test_training_data_file_round_trip(tmp_path):
    data = get_dataset("parity", bits=3, output_size=1)
    path = save_training_data(data, tmp_path / "data" / "training.json")
    document = json.loads(path.read_text())
    assert document["inputSize"] == 3 and document["outputSize"] == 1
    assert len(document["inputs"]) == 8

    loaded = load_training_data(path)
    np.testing.assert_array_equal(loaded.inputs, data.inputs)
    np.testing.assert_array_equal(loaded.targets, data.targets)


def test_vector_length_mismatch_is_rejected(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(
        json.dumps({"inputSize": 2, "outputSize": 1, "inputs": [[0, 1, 1]], "outputs": [[1]]})
    )
    with pytest.raises(ShapeMismatch):
        load_training_data(path)


@pytest.mark.parametrize(
    "content",
    [
        "not json",
        json.dumps({"inputSize": 2, "outputSize": 1}),
        json.dumps({"inputSize": 0, "outputSize": 1, "inputs": [], "outputs": []}),
        json.dumps({"inputSize": 1, "outputSize": 1, "inputs": [["x"]], "outputs": [[1]]}),
    ],
)
def test_malformed_training_data_is_rejected(tmp_path, content):
    path = tmp_path / "bad.json"
    path.write_text(content)
    with pytest.raises(FormatError):
        load_training_data(path)
