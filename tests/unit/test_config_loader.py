"""
Unit tests for observation data configuration loading.

Tests the config_loader module's handling of nested and flat YAML layouts,
aliases, environment overrides, type coercion and validation errors.
"""

import os

import pytest

from obsdata.core.config import load_config
from obsdata.core.config.config_loader import _coerce_value, _normalize_key
from obsdata.core.exceptions import ConfigurationError


pytestmark = [pytest.mark.unit, pytest.mark.quick]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("OBSDATA_"):
            monkeypatch.delenv(key)


def test_load_nested_layout(write_config):
    path = write_config({
        "analysis": {"global_std_scaling": 1.5, "random_seed": 4},
        "blocks": [
            {"key": "WOPR", "values": [1.0, 2.0], "std": [0.1, 0.2]},
        ],
    })
    config = load_config(path)
    assert config.analysis.global_std_scaling == 1.5
    assert config.analysis.random_seed == 4
    assert config.blocks[0].key == "WOPR"
    assert config.blocks[0].size == 2


def test_load_flat_layout(write_config):
    path = write_config({
        "OBS_CENTERED_PERTURBATIONS": False,
        "OBS_SCALE_MATRICES": False,
        "blocks": [],
    })
    config = load_config(path)
    assert config.analysis.centered_perturbations is False
    assert config.analysis.scale_matrices is False
    assert config.blocks == []


def test_aliases_and_case():
    assert _normalize_key("std_scaling") == "OBS_GLOBAL_STD_SCALING"
    assert _normalize_key("obs_centred_perturbations") == "OBS_CENTERED_PERTURBATIONS"
    assert _normalize_key("verbose_deactivation") == "OBS_VERBOSE_DEACTIVATION"
    assert _normalize_key("OBS_OUTPUT_DIR") == "OBS_OUTPUT_DIR"


def test_type_coercion():
    assert _coerce_value("true") is True
    assert _coerce_value("No") is False
    assert _coerce_value("None") is None
    assert _coerce_value("4") == 4
    assert _coerce_value("0.5") == 0.5
    assert _coerce_value("1e-3") == 0.001
    assert _coerce_value("out/dir") == "out/dir"
    assert _coerce_value(3) == 3


def test_env_overrides_file(write_config, monkeypatch):
    path = write_config({"analysis": {"global_std_scaling": 1.5}})
    monkeypatch.setenv("OBSDATA_GLOBAL_STD_SCALING", "2.5")
    monkeypatch.setenv("OBSDATA_OBS_RANDOM_SEED", "9")
    monkeypatch.setenv("OBSDATA_UNRELATED", "ignored")
    config = load_config(path)
    assert config.analysis.global_std_scaling == 2.5
    assert config.analysis.random_seed == 9


def test_env_disabled(write_config, monkeypatch):
    path = write_config({"analysis": {"global_std_scaling": 1.5}})
    monkeypatch.setenv("OBSDATA_GLOBAL_STD_SCALING", "2.5")
    config = load_config(path, use_env=False)
    assert config.analysis.global_std_scaling == 1.5


def test_overrides_take_precedence(write_config, monkeypatch):
    path = write_config({"analysis": {"random_seed": 1}})
    monkeypatch.setenv("OBSDATA_RANDOM_SEED", "2")
    config = load_config(path, overrides={"random_seed": 3})
    assert config.analysis.random_seed == 3


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")


def test_non_mapping_file(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n")
    with pytest.raises(ConfigurationError):
        load_config(path)


def test_invalid_yaml(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("analysis: [unclosed\n")
    with pytest.raises(ConfigurationError):
        load_config(path)


def test_validation_errors_are_listed(write_config):
    path = write_config({
        "analysis": {"global_std_scaling": 0},
        "blocks": [{"key": "WOPR", "values": [1.0], "std": [0.0]}],
    })
    with pytest.raises(ConfigurationError) as exc_info:
        load_config(path)
    message = str(exc_info.value)
    assert "Invalid observation data configuration" in message
    assert "OBS_GLOBAL_STD_SCALING" in message
    assert "blocks.0.std" in message
