"""Configuration loader for the listener.

Loads settings from config.yaml and validates the values the listening
loop depends on.
"""

import os
from pathlib import Path

import yaml

from smarthome_listener.exceptions import ConfigError

_CONFIG_DIR = Path(__file__).parent
_DEFAULT_CONFIG_PATH = _CONFIG_DIR / "config.yaml"
_EXAMPLE_CONFIG_PATH = _CONFIG_DIR / "config.example.yaml"

SUPPORTED_SAMPLE_RATE = 16000


def load_config(path: Path | None = None, validate: bool = True) -> dict:
    """Load configuration from a YAML file.

    Args:
        path: Path to the config file. Defaults to smarthome_listener/config.yaml,
            falling back to the bundled config.example.yaml.
        validate: Check required values. Callers that merge command-line
            overrides first pass False and call ``validate_config`` themselves.

    Returns:
        Configuration dictionary.

    Raises:
        FileNotFoundError: If the config file does not exist.
        ConfigError: If required values are missing or invalid.
    """
    if path is not None:
        config_path = path
    elif _DEFAULT_CONFIG_PATH.exists():
        config_path = _DEFAULT_CONFIG_PATH
    elif _EXAMPLE_CONFIG_PATH.exists():
        config_path = _EXAMPLE_CONFIG_PATH
    else:
        raise FileNotFoundError(f"Config file not found: {_DEFAULT_CONFIG_PATH}")

    with open(config_path) as f:
        config = yaml.safe_load(f) or {}

    _expand_paths(config)
    _apply_env_overrides(config)
    if validate:
        validate_config(config)
    return config


def _expand_paths(config: dict) -> None:
    """Expand ~ in path-like config values."""
    path_keys = {("logging", "file")}
    for section_key, value_key in path_keys:
        section = config.get(section_key) or {}
        if value_key in section and isinstance(section[value_key], str):
            section[value_key] = os.path.expanduser(section[value_key])


def _apply_env_overrides(config: dict) -> None:
    """Fill ai.host from SMARTHOME_AI_HOST when the file leaves it empty."""
    ai = config.setdefault("ai", {})
    if not ai.get("host") and os.environ.get("SMARTHOME_AI_HOST"):
        ai["host"] = os.environ["SMARTHOME_AI_HOST"]


def validate_config(config: dict) -> None:
    """Check the values the listener cannot run without.

    Raises:
        ConfigError: If a required value is missing or out of range.
    """
    ai = config.get("ai") or {}
    if not ai.get("host"):
        raise ConfigError("ai.host is required (or set SMARTHOME_AI_HOST)")

    audio = config.get("audio") or {}
    rate = audio.get("sample_rate", SUPPORTED_SAMPLE_RATE)
    if rate != SUPPORTED_SAMPLE_RATE:
        raise ConfigError(f"audio.sample_rate must be {SUPPORTED_SAMPLE_RATE}, got {rate}")

    block_size = audio.get("block_size", 8196)
    if not isinstance(block_size, int) or block_size <= 0:
        raise ConfigError(f"audio.block_size must be a positive integer, got {block_size!r}")

    pre_roll = audio.get("pre_roll_samples")
    if pre_roll is not None and (
        isinstance(pre_roll, bool) or not isinstance(pre_roll, int) or pre_roll <= 0
    ):
        raise ConfigError(f"audio.pre_roll_samples must be a positive integer, got {pre_roll!r}")

    backend = audio.get("backend", "auto")
    if backend not in ("auto", "pyaudio", "sounddevice"):
        raise ConfigError(f"audio.backend must be auto, pyaudio or sounddevice, got {backend!r}")
