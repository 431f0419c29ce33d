"""Tests verifying the project structure."""

from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent
PACKAGE = PROJECT_ROOT / "smarthome_listener"


def test_package_exists():
    """The main package smarthome_listener/ must exist."""
    assert PACKAGE.is_dir()


def test_audio_module_exists():
    """The audio package holds the capture pipeline and both microphone backends."""
    for name in (
        "ring_buffer.py",
        "flux.py",
        "capture.py",
        "mailbox.py",
        "microphone.py",
        "callback_microphone.py",
    ):
        assert (PACKAGE / "audio" / name).is_file(), name


def test_listener_module_exists():
    for name in ("state_machine.py", "wake_word.py", "dispatch.py"):
        assert (PACKAGE / "listener" / name).is_file(), name


def test_stt_module_exists():
    assert (PACKAGE / "stt" / "whisper_api.py").is_file()


def test_ai_module_exists():
    assert (PACKAGE / "ai" / "prompt_client.py").is_file()


def test_platform_module_exists():
    assert (PACKAGE / "platform" / "factory.py").is_file()
    assert (PACKAGE / "platform" / "interfaces.py").is_file()


def test_example_config_exists():
    """The example configuration ships with the package."""
    assert (PACKAGE / "config.example.yaml").is_file()


def test_main_entry_point_exists():
    assert (PACKAGE / "main.py").is_file()
