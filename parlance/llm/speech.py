"""Text-to-speech service interface and implementations."""

from __future__ import annotations

import enum
import typing as t
from abc import abstractmethod

import pydantic as p
from openai import AsyncOpenAI

from .errors import SpeechError


class Voice(enum.Enum):
    """Available TTS voices."""

    Alloy = "alloy"
    Echo = "echo"
    Fable = "fable"
    Onyx = "onyx"
    Nova = "nova"
    Shimmer = "shimmer"


class SpeechFormat(enum.Enum):
    """Supported audio output formats."""

    MP3 = "mp3"
    Opus = "opus"
    AAC = "aac"
    FLAC = "flac"
    WAV = "wav"
    PCM = "pcm"


ContentTypes: dict[SpeechFormat, str] = {
    SpeechFormat.MP3: "audio/mpeg",
    SpeechFormat.Opus: "audio/opus",
    SpeechFormat.AAC: "audio/aac",
    SpeechFormat.FLAC: "audio/flac",
    SpeechFormat.WAV: "audio/wav",
    SpeechFormat.PCM: "audio/pcm",
}


class SpeechResult(t.NamedTuple):
    """Result of a TTS operation."""

    audio_data: bytes
    content_type: str
    format: SpeechFormat


class SpeechService(t.Protocol):
    """Protocol for text-to-speech synthesis services."""

    @property
    @abstractmethod
    def max_text_length(self) -> int:
        """Maximum text length in characters that this service accepts."""
        ...

    @abstractmethod
    async def synthesize(
        self,
        text: str,
        *,
        voice: Voice = Voice.Nova,
        format: SpeechFormat = SpeechFormat.MP3,
        speed: float = 1.0,
    ) -> SpeechResult:
        """Convert text to speech.

        Args:
            text: The text to convert to speech.
            voice: The voice to use for synthesis.
            format: The output audio format.
            speed: The speed of the generated audio (0.25 to 4.0).

        Returns:
            SpeechResult containing the audio data and metadata.

        Raises:
            SpeechError: If validation fails or synthesis fails.
        """
        ...


def validate_request(text: str, max_text_length: int, speed: float) -> None:
    if not text or not text.strip():
        raise SpeechError("Text cannot be empty", code="empty_text")

    if len(text) > max_text_length:
        raise SpeechError(
            f"Text length {len(text)} exceeds maximum {max_text_length} characters",
            code="text_too_long",
        )

    if not 0.25 <= speed <= 4.0:
        raise SpeechError("Speed must be between 0.25 and 4.0", code="invalid_speed")


class OpenAISpeechService(object):
    """Speech synthesis service using OpenAI TTS API."""

    MaxTextLength = 4096

    def __init__(self, api_key: p.Secret[str], model: str = "tts-1") -> None:
        self._client = AsyncOpenAI(api_key=api_key.get_secret_value())
        self.model = model

    @property
    def max_text_length(self) -> int:
        return self.MaxTextLength

    async def aclose(self) -> None:
        await self._client.close()

    async def synthesize(
        self,
        text: str,
        *,
        voice: Voice = Voice.Nova,
        format: SpeechFormat = SpeechFormat.MP3,
        speed: float = 1.0,
    ) -> SpeechResult:
        validate_request(text, self.max_text_length, speed)

        try:
            response = await self._client.audio.speech.create(
                model=self.model,
                voice=voice.value,
                input=text,
                response_format=format.value,
                speed=speed,
            )
            audio_data = response.read()
        except Exception as e:
            raise SpeechError(f"TTS synthesis failed: {e!s}", code="api_error") from e

        return SpeechResult(
            audio_data=audio_data,
            content_type=ContentTypes[format],
            format=format,
        )


class SilentSpeechService(object):
    """Text-only operation: validates like a real backend but produces no audio."""

    MaxTextLength = 4096

    @property
    def max_text_length(self) -> int:
        return self.MaxTextLength

    async def synthesize(
        self,
        text: str,
        *,
        voice: Voice = Voice.Nova,
        format: SpeechFormat = SpeechFormat.MP3,
        speed: float = 1.0,
    ) -> SpeechResult:
        validate_request(text, self.max_text_length, speed)
        return SpeechResult(audio_data=b"", content_type=ContentTypes[format], format=format)
