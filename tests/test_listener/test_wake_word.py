"""Tests for WakeWordMatcher."""

import pytest

from smarthome_listener.exceptions import ConfigError
from smarthome_listener.listener.wake_word import WakeWordMatcher, normalize
from smarthome_listener.stt.whisper_api import Segment


@pytest.mark.parametrize(
    "text",
    [
        "hey smart home",
        "Hey, Smart-Home!",
        "HEY SMART HOME",
        " ...hey   smart home, turn on the lights",
        "Okay. Hey smart home.",
    ],
)
def test_matches_case_and_punctuation_insensitive(text):
    assert WakeWordMatcher().matches(text) is True


@pytest.mark.parametrize(
    "text",
    [
        "heysmarthome",
        "hey smart",
        "hey smartphone",
        "",
        "(music)",
    ],
)
def test_rejects_non_matching_text(text):
    assert WakeWordMatcher().matches(text) is False


def test_normalize_keeps_letters_digits_and_single_spaces():
    assert normalize("Hey, Smart-Home! 42°") == "hey smart home 42"
    assert normalize("  Über   cool ") == "ber cool"


def test_custom_phrase_is_normalised():
    matcher = WakeWordMatcher("Hello, Computer")
    assert matcher.phrase == "hello computer"
    assert matcher.matches("hello computer, lights off")


def test_empty_phrase_raises_config_error():
    with pytest.raises(ConfigError):
        WakeWordMatcher("?!")


def test_find_match_returns_first_matching_segment():
    segments = [
        Segment(0.0, 0.4, "uh"),
        Segment(0.4, 1.0, "Hey smart home"),
        Segment(1.0, 1.5, "hey smart home again"),
    ]
    assert WakeWordMatcher().find_match(segments) is segments[1]


def test_find_match_without_match_returns_none():
    assert WakeWordMatcher().find_match([Segment(0.0, 1.0, "hello")]) is None
    assert WakeWordMatcher().find_match([]) is None
