"""Tests for the exception hierarchy."""

from smarthome_listener.exceptions import (
    AudioError,
    ConfigError,
    ListenerError,
    PromptError,
    TranscriptionError,
)


def test_all_exceptions_inherit_from_base():
    """All custom exceptions inherit from ListenerError."""
    for exc_class in (AudioError, TranscriptionError, PromptError, ConfigError):
        assert issubclass(exc_class, ListenerError)
        assert issubclass(exc_class, Exception)


def test_listener_error_is_catchable():
    """ListenerError can be caught as a base class."""
    try:
        raise AudioError("test")
    except ListenerError as e:
        assert str(e) == "test"


def test_each_exception_carries_message():
    """Each exception correctly stores its message."""
    assert str(AudioError("mic failed")) == "mic failed"
    assert str(TranscriptionError("api timeout")) == "api timeout"
    assert str(PromptError("connection refused")) == "connection refused"
    assert str(ConfigError("missing parameter: api_host")) == "missing parameter: api_host"
