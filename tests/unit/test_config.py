import json

import pytest
import yaml

from gridmlp.config import TaskConfig, load_config
from gridmlp.errors import ConfigError

BASE = {
    "inputBitAmount": 4,
    "outputSize": 3,
    "epochs": 200,
    "learningRate": 0.5,
    "hiddenSize": 6,
    "modelFileName": "model.json",
    "trainingDataFileName": "training_data.json",
    "hiddenSizesToTest": [2, 4],
    "learningRatesToTest": [0.1, 0.5],
    "dispatchers": "Default",
    "massAllModelPath": "models/all",
    "statusFile": "status.txt",
}


def test_load_json_config(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(BASE))
    config = load_config(path)
    assert config.input_bits == 4
    assert config.hidden_sizes == (2, 4)
    assert config.learning_rates == (0.1, 0.5)
    assert config.variants == ("A", "B")
    assert config.batch_size == 64
    assert not config.uses_io_dispatcher


def test_load_yaml_config(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({**BASE, "dispatchers": "IO", "seed": 3}))
    config = load_config(path)
    assert config.uses_io_dispatcher
    assert config.seed == 3


def test_round_trip_through_document_form():
    config = TaskConfig.from_mapping(BASE)
    assert TaskConfig.from_mapping(config.to_dict()) == config


def test_missing_file_raises_config_error(tmp_path):
    with pytest.raises(ConfigError):
        load_config(tmp_path / "absent.json")


def test_unparseable_file_raises_config_error(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")
    with pytest.raises(ConfigError):
        load_config(path)


def test_missing_required_key():
    raw = dict(BASE)
    del raw["statusFile"]
    with pytest.raises(ConfigError, match="statusFile"):
        TaskConfig.from_mapping(raw)


@pytest.mark.parametrize(
    "override",
    [
        {"hiddenSizesToTest": []},
        {"hiddenSizesToTest": [0]},
        {"learningRatesToTest": []},
        {"epochs": 0},
        {"batchSize": -1},
        {"variants": ["A", "A"]},
    ],
)
def test_invalid_values(override):
    with pytest.raises(ConfigError):
        TaskConfig.from_mapping({**BASE, **override})
