"""Test configuration and helpers."""

import logging
import math

import numpy as np
import pytest
import yaml

from mcts_extract.config import ExtractorConfig
from mcts_extract.errors import ConfigError
from mcts_extract.utils import load_config, make_rng, playout_rng, save_config, setup_logging
from mcts_extract.utils.seed import make_seed_sequence


def test_defaults():
    config = ExtractorConfig()
    assert config.exploration_constant == pytest.approx(math.sqrt(2))
    assert config.max_playouts == 1000
    assert config.value_transform == "reciprocal"
    assert config.rollout_policy == "uniform"
    assert config.num_workers == 1


@pytest.mark.parametrize("kwargs", [
    {"exploration_constant": -1.0},
    {"max_playouts": None, "time_limit": None},
    {"max_playouts": -1},
    {"time_limit": -0.5},
    {"rollouts_per_leaf": 0},
    {"playouts_per_round": 0},
    {"num_workers": 0},
    {"virtual_loss": -1.0},
    {"completion_attempts": -1},
    {"log_interval": 0},
])
def test_invalid_values(kwargs):
    with pytest.raises(ConfigError):
        ExtractorConfig(**kwargs)


def test_from_dict_rejects_unknown_keys():
    with pytest.raises(ConfigError):
        ExtractorConfig.from_dict({"max_playouts": 10, "temperature": 1.0})


def test_yaml_roundtrip(tmp_path):
    path = tmp_path / "extract.yaml"
    config = ExtractorConfig(max_playouts=64, seed=9, value_transform="negate")
    config.to_yaml(path)

    with open(path) as f:
        raw = yaml.safe_load(f)
    assert raw["extractor"]["max_playouts"] == 64

    loaded = ExtractorConfig.from_yaml(path)
    assert loaded == config


def test_load_config_without_section(tmp_path):
    path = tmp_path / "flat.yaml"
    path.write_text("max_playouts: 5\nseed: 1\n")
    assert load_config(path) == {"max_playouts": 5, "seed": 1}


def test_load_config_empty_and_invalid(tmp_path):
    empty = tmp_path / "empty.yaml"
    empty.write_text("")
    assert load_config(empty) == {}

    invalid = tmp_path / "list.yaml"
    invalid.write_text("- 1\n- 2\n")
    with pytest.raises(ConfigError):
        load_config(invalid)


def test_save_config(tmp_path):
    path = tmp_path / "out.yaml"
    save_config({"seed": 3}, path)
    assert load_config(path) == {"seed": 3}


def test_playout_rng_streams():
    root = make_seed_sequence(123)
    a = playout_rng(root, 5).integers(1 << 30, size=4)
    b = playout_rng(make_seed_sequence(123), 5).integers(1 << 30, size=4)
    c = playout_rng(root, 6).integers(1 << 30, size=4)
    d = playout_rng(root, 5, stream=1).integers(1 << 30, size=4)
    assert np.array_equal(a, b)
    assert not np.array_equal(a, c)
    assert not np.array_equal(a, d)


def test_make_rng_is_seeded():
    assert make_rng(1).random() == make_rng(1).random()


def test_setup_logging(tmp_path):
    log_file = tmp_path / "run.log"
    logger = setup_logging(level=logging.DEBUG, log_file=str(log_file))
    assert logger.name == "mcts_extract"
    logging.getLogger("mcts_extract.test").debug("hello")

    # A second call replaces the handlers and closes the file
    setup_logging(level=logging.WARNING)
    logging.getLogger("mcts_extract.test").debug("dropped")
    assert len(logger.handlers) == 1

    text = log_file.read_text()
    assert "hello" in text
    assert "dropped" not in text
    assert "mcts_extract.test - DEBUG" in text

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


def test_setup_logging_detaches_from_previous_logger():
    first = setup_logging(level=logging.INFO, name="mcts_extract.first")
    assert len(first.handlers) == 1
    second = setup_logging(level=logging.INFO, name="mcts_extract.second")
    assert first.handlers == []
    assert len(second.handlers) == 1

    for handler in list(second.handlers):
        second.removeHandler(handler)
    second.setLevel(logging.NOTSET)
    first.setLevel(logging.NOTSET)
