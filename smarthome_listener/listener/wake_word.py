"""Wake-phrase matching on transcribed text.

Matching is case- and punctuation-insensitive but keeps word boundaries:
"Hey, Smart-Home!" matches "hey smart home", "heysmarthome" does not.
"""

import re
from collections.abc import Iterable

from smarthome_listener.exceptions import ConfigError
from smarthome_listener.stt.whisper_api import Segment

DEFAULT_WAKE_PHRASE = "hey smart home"

_SEPARATORS = re.compile(r"[^a-z0-9]+")


def normalize(text: str) -> str:
    """Reduce text to lowercase ASCII letters and digits separated by single spaces.

    Punctuation counts as a word separator, so "Smart-Home" becomes "smart home".
    """
    return _SEPARATORS.sub(" ", text.lower()).strip()


class WakeWordMatcher:
    """Tests transcribed text for the wake phrase.

    Args:
        phrase: Trigger phrase; normalised the same way as the text.
    """

    def __init__(self, phrase: str = DEFAULT_WAKE_PHRASE):
        self.phrase = normalize(phrase)
        if not self.phrase:
            raise ConfigError("wake phrase must contain letters or digits")

    def matches(self, text: str) -> bool:
        return self.phrase in normalize(text)

    def find_match(self, segments: Iterable[Segment]) -> Segment | None:
        """Return the first segment containing the wake phrase, if any."""
        for segment in segments:
            if self.matches(segment.text):
                return segment
        return None
