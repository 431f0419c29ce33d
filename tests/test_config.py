"""Tests for configuration loading."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from smarthome_listener.config import load_config, validate_config
from smarthome_listener.exceptions import ConfigError


def _base_config(**overrides):
    """Create a minimal valid config dict with optional overrides."""
    cfg = {
        "audio": {"backend": "auto", "sample_rate": 16000, "block_size": 8196},
        "listener": {"wake_phrase": "hey smart home", "quiet_duration_sec": 0.2},
        "stt": {"model": "whisper-1", "language": "en"},
        "ai": {"host": "http://localhost:8000", "timeout": 30},
        "logging": {"level": "INFO", "file": "~/logs/listener.log"},
    }
    cfg.update(overrides)
    return cfg


def _write(tmp_path, config) -> Path:
    path = tmp_path / "config.yaml"
    with open(path, "w") as f:
        yaml.dump(config, f)
    return path


@pytest.fixture()
def config_file(tmp_path):
    """Create a temporary config file."""
    return _write(tmp_path, _base_config())


def test_load_config_returns_dict(config_file):
    """Config loads as a dictionary."""
    config = load_config(config_file)
    assert isinstance(config, dict)


def test_load_config_has_all_sections(config_file):
    """Config contains all expected top-level sections."""
    config = load_config(config_file)
    for section in ("audio", "listener", "stt", "ai", "logging"):
        assert section in config, f"Missing section: {section}"


def test_load_config_expands_home(config_file):
    """~ in the log file path is expanded to the home directory."""
    config = load_config(config_file)
    log_file = config["logging"]["file"]
    assert "~" not in log_file
    assert log_file.startswith(os.path.expanduser("~"))


def test_load_config_missing_file():
    """Loading a nonexistent file raises FileNotFoundError."""
    with pytest.raises(FileNotFoundError):
        load_config(Path("/nonexistent/config.yaml"))


def test_load_default_config():
    """The bundled default config can be loaded."""
    config = load_config()
    assert config["audio"]["sample_rate"] == 16000
    assert config["listener"]["wake_phrase"] == "hey smart home"


def test_empty_file_fails_validation(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("")

    with patch.dict("os.environ", {}, clear=False):
        os.environ.pop("SMARTHOME_AI_HOST", None)
        with pytest.raises(ConfigError, match="ai.host"):
            load_config(path)


# --- assistant host ---


def test_missing_ai_host_raises(tmp_path):
    path = _write(tmp_path, _base_config(ai={"timeout": 30}))

    with patch.dict("os.environ", {}, clear=False):
        os.environ.pop("SMARTHOME_AI_HOST", None)
        with pytest.raises(ConfigError, match="ai.host"):
            load_config(path)


def test_ai_host_from_env(tmp_path):
    """SMARTHOME_AI_HOST fills an empty ai.host."""
    path = _write(tmp_path, _base_config(ai={"host": ""}))

    with patch.dict("os.environ", {"SMARTHOME_AI_HOST": "http://assistant:9000"}):
        config = load_config(path)

    assert config["ai"]["host"] == "http://assistant:9000"


def test_file_ai_host_wins_over_env(config_file):
    with patch.dict("os.environ", {"SMARTHOME_AI_HOST": "http://assistant:9000"}):
        config = load_config(config_file)

    assert config["ai"]["host"] == "http://localhost:8000"


def test_validation_can_be_deferred(tmp_path):
    """validate=False leaves checking to the caller."""
    path = _write(tmp_path, _base_config(ai={}))

    with patch.dict("os.environ", {}, clear=False):
        os.environ.pop("SMARTHOME_AI_HOST", None)
        config = load_config(path, validate=False)

    assert config["ai"] == {}


# --- audio values ---


def test_unsupported_sample_rate_raises():
    config = _base_config(audio={"sample_rate": 44100})
    with pytest.raises(ConfigError, match="sample_rate"):
        validate_config(config)


@pytest.mark.parametrize("block_size", [0, -1, "8196", 1.5])
def test_invalid_block_size_raises(block_size):
    config = _base_config(audio={"block_size": block_size})
    with pytest.raises(ConfigError, match="block_size"):
        validate_config(config)


@pytest.mark.parametrize("pre_roll", [-4, 0, "8", 1.5, True])
def test_invalid_pre_roll_raises(pre_roll):
    config = _base_config(audio={"block_size": 4, "pre_roll_samples": pre_roll})
    with pytest.raises(ConfigError, match="pre_roll_samples"):
        validate_config(config)


def test_pre_roll_is_optional():
    validate_config(_base_config(audio={"block_size": 4, "pre_roll_samples": None}))
    validate_config(_base_config(audio={"block_size": 4, "pre_roll_samples": 16}))


def test_unknown_backend_raises():
    config = _base_config(audio={"backend": "alsa"})
    with pytest.raises(ConfigError, match="backend"):
        validate_config(config)


def test_audio_section_defaults_are_valid():
    """A config without an audio section uses the supported defaults."""
    config = _base_config()
    del config["audio"]
    validate_config(config)
