"""OpenAI Whisper API client for speech-to-text.

Sends a captured utterance to the Whisper API and returns timestamped
text segments.
"""

import io
import re
import wave
from dataclasses import dataclass

from openai import OpenAI

from smarthome_listener.audio.capture import Utterance
from smarthome_listener.exceptions import TranscriptionError
from smarthome_listener.utils.logging import get_logger

log = get_logger("stt.whisper")


@dataclass(frozen=True)
class Segment:
    """One transcribed span of an utterance (times in seconds)."""

    start: float
    end: float
    text: str


class WhisperTranscriber:
    """Transcribes utterances using the OpenAI Whisper API.

    Segments that are non-speech annotations (text starting with ``(`` or
    ``[``, or ending with ``)`` or ``]``) and segments repeating an earlier
    segment's text are dropped.

    Args:
        model: Whisper model name.
        language: ISO-639-1 language code (e.g., "en").
        client: Optional OpenAI client instance.
        filter_phrases: Known hallucination phrases removed from segment text.
    """

    def __init__(
        self,
        model: str = "whisper-1",
        language: str = "en",
        client: OpenAI | None = None,
        filter_phrases: list[str] | tuple[str, ...] = (),
    ):
        self.model = model
        self.language = language
        self._client = client or OpenAI()
        self._filter_phrases = list(filter_phrases)

    def transcribe(self, utterance: Utterance) -> list[Segment]:
        """Transcribe an utterance to text segments.

        Converts the samples to WAV in memory, then sends them to the API.

        Args:
            utterance: Captured mono 16-bit audio.

        Returns:
            Segments in order of appearance.

        Raises:
            ValueError: If the utterance is empty.
            TranscriptionError: If the API call fails.
        """
        if utterance.is_empty:
            raise ValueError("No audio data to transcribe.")

        log.info("Transcribing %.1fs of audio...", utterance.duration)

        wav_buffer = _pcm_to_wav(
            utterance.to_pcm_bytes(),
            utterance.sample_rate,
            utterance.channels,
            utterance.bit_depth // 8,
        )

        try:
            result = self._client.audio.transcriptions.create(
                model=self.model,
                file=wav_buffer,
                language=self.language,
                response_format="verbose_json",
                timestamp_granularities=["segment"],
            )
        except Exception as e:
            raise TranscriptionError(f"Whisper API error: {e}") from e

        raw_segments = getattr(result, "segments", None)
        if raw_segments:
            segments = [Segment(float(s.start), float(s.end), s.text) for s in raw_segments]
        else:
            segments = [Segment(0.0, utterance.duration, result.text or "")]

        segments = self.filter_segments(segments)
        for segment in segments:
            log.info("[%6.2fs->%6.2fs] %s", segment.start, segment.end, segment.text)
        return segments

    def filter_segments(self, segments: list[Segment]) -> list[Segment]:
        """Drop annotations, repeats and empty segments; clean the rest.

        Args:
            segments: Raw segments as returned by the API.

        Returns:
            Remaining segments with filtered, whitespace-normalised text.
        """
        seen: set[str] = set()
        kept = []
        for segment in segments:
            text = segment.text.strip()
            if text[:1] in ("(", "[") or text[-1:] in (")", "]"):
                continue
            if text in seen:
                continue
            seen.add(text)

            text = self.filter_transcript(text)
            if not text:
                continue
            kept.append(Segment(segment.start, segment.end, text))
        return kept

    def filter_transcript(self, text: str) -> str:
        """Remove known hallucination phrases and normalise whitespace.

        Args:
            text: Raw transcription text.

        Returns:
            Cleaned text (may be empty after filtering).
        """
        for phrase in self._filter_phrases:
            text = re.sub(re.escape(phrase), "", text, flags=re.IGNORECASE)
        text = re.sub(r"\s+", " ", text).strip()
        return text


def _pcm_to_wav(
    pcm_data: bytes,
    sample_rate: int,
    channels: int,
    sample_width: int,
) -> io.BytesIO:
    """Convert raw PCM bytes to a WAV file in memory.

    Args:
        pcm_data: Raw PCM audio bytes.
        sample_rate: Sample rate in Hz.
        channels: Number of channels.
        sample_width: Bytes per sample.

    Returns:
        BytesIO buffer containing a valid WAV file.
    """
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(sample_width)
        wf.setframerate(sample_rate)
        wf.writeframes(pcm_data)
    buf.seek(0)
    buf.name = "audio.wav"
    return buf
