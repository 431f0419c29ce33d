"""Custom exception hierarchy for the listener."""


class ListenerError(Exception):
    """Base exception for all listener errors."""


class AudioError(ListenerError):
    """Errors opening, starting, reading or stopping the audio device."""


class TranscriptionError(ListenerError):
    """Errors during speech-to-text transcription."""


class PromptError(ListenerError):
    """Errors dispatching command text to the assistant backend."""


class ConfigError(ListenerError):
    """Errors related to configuration or missing collaborators."""
