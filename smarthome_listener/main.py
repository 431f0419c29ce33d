"""Smart home listener - main process.

Opens the microphone, waits for "hey smart home", captures the following
command and forwards its text to the assistant service. SIGINT/SIGTERM end
the loop after the current block; the device is always released.
"""

from __future__ import annotations

import argparse
import contextlib
import logging
import signal
from pathlib import Path

from rich.console import Console
from rich.table import Table

from smarthome_listener.ai.prompt_client import HttpPromptClient
from smarthome_listener.config import load_config, validate_config
from smarthome_listener.exceptions import AudioError, ConfigError
from smarthome_listener.listener.state_machine import ListenStateMachine
from smarthome_listener.listener.wake_word import DEFAULT_WAKE_PHRASE, WakeWordMatcher
from smarthome_listener.platform.factory import create_audio_input, list_input_devices
from smarthome_listener.stt.whisper_api import WhisperTranscriber
from smarthome_listener.utils.logging import get_logger, setup_logging
from smarthome_listener.utils.terminal_ui import TerminalUI

log = get_logger("main")


def apply_overrides(config: dict, args: argparse.Namespace) -> dict:
    """Merge command-line flags over the loaded configuration."""
    if args.model:
        config.setdefault("stt", {})["model"] = args.model
    if args.device is not None:
        config.setdefault("audio", {})["device"] = args.device
    if args.ai_host:
        config.setdefault("ai", {})["host"] = args.ai_host
    if args.backend:
        config.setdefault("audio", {})["backend"] = args.backend
    if args.no_ui:
        config.setdefault("ui", {})["enabled"] = False
    return config


def create_components(config: dict) -> dict:
    """Create the listener's collaborators from config.

    Args:
        config: Application configuration dictionary.

    Returns:
        Dictionary with ``audio_input``, ``transcriber``, ``prompt_client``
        and ``wake_matcher``.
    """
    audio_cfg = config.get("audio", {})
    listener_cfg = config.get("listener", {})
    stt_cfg = config.get("stt", {})
    ai_cfg = config["ai"]

    return {
        "audio_input": create_audio_input(
            rate=audio_cfg.get("sample_rate", 16000),
            channels=1,
            block_size=audio_cfg.get("block_size", 8196),
            device=audio_cfg.get("device"),
            backend=audio_cfg.get("backend", "auto"),
            read_timeout=audio_cfg.get("read_timeout_sec", 5.0),
        ),
        "transcriber": WhisperTranscriber(
            model=stt_cfg.get("model", "whisper-1"),
            language=stt_cfg.get("language", "en"),
            filter_phrases=stt_cfg.get("filter_phrases", []),
        ),
        "prompt_client": HttpPromptClient(
            api_host=ai_cfg["host"],
            timeout=ai_cfg.get("timeout", 30),
        ),
        "wake_matcher": WakeWordMatcher(listener_cfg.get("wake_phrase", DEFAULT_WAKE_PHRASE)),
    }


def build_state_machine(config: dict, components: dict, ui=None) -> ListenStateMachine:
    """Wire the components into a state machine using the listener timings."""
    audio_cfg = config.get("audio", {})
    listener_cfg = config.get("listener", {})

    return ListenStateMachine(
        components["audio_input"],
        components["transcriber"],
        components["prompt_client"],
        components["wake_matcher"],
        quiet_duration=listener_cfg.get("quiet_duration_sec", 0.2),
        wake_max_duration=listener_cfg.get("wake_max_duration_sec", 0.5),
        command_max_duration=listener_cfg.get("command_max_duration_sec", 0),
        block_size=audio_cfg.get("block_size", 8196),
        pre_roll_samples=audio_cfg.get("pre_roll_samples"),
        loop_interval=listener_cfg.get("loop_interval_sec", 0.1),
        ui=ui,
    )


def install_signal_handlers(machine: ListenStateMachine) -> None:
    """Route SIGINT and SIGTERM to ``machine.stop``."""

    def _handle(signum, frame):  # noqa: ARG001
        log.info("Received signal %d, shutting down", signum)
        machine.stop()

    signal.signal(signal.SIGINT, _handle)
    signal.signal(signal.SIGTERM, _handle)


def print_devices(backend: str, console: Console | None = None) -> int:
    """Print the recording devices of ``backend`` as an index/name table.

    Returns:
        Process exit status.
    """
    try:
        devices = list_input_devices(backend)
    except Exception as e:
        log.error("Failed to list audio devices: %s", e)
        return 1

    table = Table(title=f"Input devices ({backend})")
    table.add_column("Index", justify="right")
    table.add_column("Name")
    for index, name in devices:
        table.add_row(str(index), name)
    (console or Console()).print(table)
    return 0


def run(config: dict) -> int:
    """Build everything from ``config`` and listen until stopped.

    Returns:
        Process exit status.
    """
    try:
        components = create_components(config)
    except Exception as e:
        log.error("Failed to initialize components: %s", e)
        return 1

    ui_enabled = config.get("ui", {}).get("enabled", True)
    wake_phrase = config.get("listener", {}).get("wake_phrase", DEFAULT_WAKE_PHRASE)
    ui_ctx = TerminalUI(wake_phrase=wake_phrase) if ui_enabled else contextlib.nullcontext()

    try:
        with ui_ctx as ui:
            machine = build_state_machine(config, components, ui=ui)
            install_signal_handlers(machine)
            machine.listen_loop()
    except ConfigError as e:
        log.error("Invalid listener configuration: %s", e)
        return 1
    except AudioError as e:
        log.error("Audio device error: %s", e)
        return 1
    finally:
        components["prompt_client"].close()

    return 0


def main() -> None:
    """Start the listener."""
    parser = argparse.ArgumentParser(description="Smart home wake-word and command listener")
    parser.add_argument("-c", "--config", type=Path, help="Path to a config.yaml file")
    parser.add_argument("-m", "--model", help="Whisper model name")
    parser.add_argument("-d", "--device", type=int, help="Input device index")
    parser.add_argument("-a", "--ai-host", help="Base URL of the assistant service")
    parser.add_argument(
        "--backend",
        choices=("auto", "pyaudio", "sounddevice"),
        help="Audio backend",
    )
    parser.add_argument("--no-ui", action="store_true", help="Disable the terminal status panel")
    parser.add_argument(
        "--list-devices",
        action="store_true",
        help="Print the input device indices usable with -d and exit",
    )
    args = parser.parse_args()

    # Load config first, then set up logging from config values.
    # If config loading fails, fall back to stderr logging.
    try:
        config = apply_overrides(load_config(args.config, validate=False), args)
        if not args.list_devices:
            validate_config(config)
    except Exception as e:
        setup_logging(level=logging.DEBUG)
        log.error("Failed to load config: %s", e)
        raise SystemExit(1) from e

    log_cfg = config.get("logging") or {}
    log_level_name = log_cfg.get("level") or "INFO"
    log_level = getattr(logging, log_level_name.upper(), logging.INFO)
    setup_logging(level=log_level, log_file=log_cfg.get("file"))

    if args.list_devices:
        raise SystemExit(print_devices((config.get("audio") or {}).get("backend") or "auto"))

    raise SystemExit(run(config))


if __name__ == "__main__":
    main()
