"""Speech-to-text transcription service interface and implementations."""

from __future__ import annotations

import io
import typing as t
from abc import abstractmethod

import pydantic as p
from openai import AsyncOpenAI
from openai.types.audio import Transcription

from .errors import TranscriptionError


class WordTiming(p.BaseModel):
    """Word-level timing from transcription."""

    word: str
    start: float  # seconds
    end: float  # seconds


class TranscriptionResult(p.BaseModel):
    """Result from transcription."""

    text: str
    duration: float | None = None
    language: str | None = None
    words: list[WordTiming] | None = None


class TranscriptionService(t.Protocol):
    """Protocol for speech-to-text transcription services.

    Implementations can use different backends while exposing a consistent
    interface. Failures raise `TranscriptionError`, never an empty result.
    """

    @property
    @abstractmethod
    def max_file_size(self) -> int:
        """Maximum file size in bytes that this service accepts."""
        ...

    @abstractmethod
    def supports_format(self, content_type: str) -> bool:
        """Check if a content type is supported.

        Args:
            content_type: MIME type, optionally with codec suffix
                (e.g., "audio/webm" or "audio/webm;codecs=opus")

        Returns:
            True if the format is supported, False otherwise.
        """
        ...

    @abstractmethod
    async def transcribe(
        self,
        audio_data: bytes,
        *,
        filename: str = "audio.webm",
        content_type: str = "audio/webm",
        language: str | None = None,
        include_word_timings: bool = False,
    ) -> TranscriptionResult:
        """Transcribe audio data to text.

        Args:
            audio_data: Raw audio bytes
            filename: Original filename (used for format detection)
            content_type: MIME type of the audio
            language: Optional ISO language code hint
            include_word_timings: If True, request word-level timing data

        Returns:
            TranscriptionResult with text and optional metadata

        Raises:
            TranscriptionError: If validation fails or transcription fails
        """
        ...


def base_content_type(content_type: str) -> str:
    """`audio/webm;codecs=opus` -> `audio/webm`"""
    return content_type.partition(";")[0].strip().lower()


def parse_verbose_response(data: dict[str, t.Any], include_word_timings: bool) -> TranscriptionResult:
    """Build a result from a `verbose_json` response body.

    Whisper pads transcripts with whitespace; word timings are kept only when asked for.
    """
    return TranscriptionResult.model_validate({
        "text": str(data.get("text") or "").strip(),
        "duration": data.get("duration"),
        "language": data.get("language"),
        "words": (data.get("words") or None) if include_word_timings else None,
    })


class WhisperTranscriptionService(object):
    """Transcription with the OpenAI Whisper API, which takes files of up to 25MB."""

    MaxFileSizeBytes = 25 * 1024 * 1024
    SupportedFormats = frozenset({
        "audio/m4a",
        "audio/mp3",
        "audio/mp4",
        "audio/mpeg",
        "audio/mpga",
        "audio/ogg",
        "audio/wav",
        "audio/webm",
        # browsers' MediaRecorder labels some audio-only recordings as video
        "video/webm",
    })

    def __init__(self, api_key: p.Secret[str], model: str = "whisper-1") -> None:
        self._client = AsyncOpenAI(api_key=api_key.get_secret_value())
        self.model = model

    @property
    def max_file_size(self) -> int:
        return self.MaxFileSizeBytes

    async def aclose(self) -> None:
        await self._client.close()

    def supports_format(self, content_type: str) -> bool:
        return base_content_type(content_type) in self.SupportedFormats

    def validate(self, audio_data: bytes, content_type: str) -> None:
        if not audio_data:
            raise TranscriptionError("no audio to transcribe", code="empty_audio")
        if len(audio_data) > self.max_file_size:
            raise TranscriptionError(
                f"audio of {len(audio_data)} bytes exceeds maximum of {self.max_file_size}", code="file_too_large"
            )
        if not self.supports_format(content_type):
            raise TranscriptionError(f"cannot transcribe {content_type}", code="unsupported_format")

    async def transcribe(
        self,
        audio_data: bytes,
        *,
        filename: str = "audio.webm",
        content_type: str = "audio/webm",
        language: str | None = None,
        include_word_timings: bool = False,
    ) -> TranscriptionResult:
        self.validate(audio_data, content_type)

        upload = io.BytesIO(audio_data)
        upload.name = filename
        options: dict[str, t.Any] = {}
        if language is not None:
            options["language"] = language
        if include_word_timings:
            options["timestamp_granularities"] = ["word"]

        try:
            response = await self._client.audio.transcriptions.create(
                model=self.model, file=upload, response_format="verbose_json", **options
            )
        except Exception as e:
            raise TranscriptionError(f"transcription failed: {e!s}", code="api_error") from e

        # fields beyond .text are only reachable through model_dump
        return parse_verbose_response(t.cast(Transcription, response).model_dump(), include_word_timings)
