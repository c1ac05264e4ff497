"""Unit tests for WhisperTranscriptionService."""

from __future__ import annotations

import typing as t
from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import SecretStr

from parlance.llm import TranscriptionError, WhisperTranscriptionService


class TestWhisperTranscriptionService(object):
    """Test WhisperTranscriptionService validation and behavior."""

    @pytest.fixture
    async def service(self) -> t.AsyncGenerator[WhisperTranscriptionService]:
        """Create a transcription service with a fake API key and a mocked client call."""
        svc = WhisperTranscriptionService(api_key=SecretStr("fake-api-key"))
        create = AsyncMock(side_effect=RuntimeError("401 unauthorized"))
        svc._client.audio.transcriptions.create = create  # type: ignore[method-assign]
        yield svc
        await svc.aclose()

    def test_max_file_size_is_25mb(self) -> None:
        """Whisper API accepts files up to 25MB."""
        svc = WhisperTranscriptionService(api_key=SecretStr("fake-api-key"))
        assert svc.max_file_size == 25 * 1024 * 1024

    def test_supports_format_with_codec_suffix(self) -> None:
        """supports_format handles codec suffixes correctly."""
        svc = WhisperTranscriptionService(api_key=SecretStr("fake-api-key"))
        assert svc.supports_format("video/webm;codecs=vp9,opus") is True
        assert svc.supports_format("audio/webm; codecs=opus") is True
        assert svc.supports_format("AUDIO/WAV") is True

    def test_supports_format_for_invalid_types(self) -> None:
        svc = WhisperTranscriptionService(api_key=SecretStr("fake-api-key"))
        assert svc.supports_format("audio/unknown") is False
        assert svc.supports_format("text/plain") is False

    @pytest.mark.anyio
    async def test_rejects_empty_audio(self, service: WhisperTranscriptionService) -> None:
        with pytest.raises(TranscriptionError) as exc_info:
            await service.transcribe(b"", content_type="audio/webm")
        assert exc_info.value.code == "empty_audio"

    @pytest.mark.anyio
    async def test_rejects_oversized_file(self, service: WhisperTranscriptionService) -> None:
        """Files exceeding 25MB should be rejected with file_too_large error."""
        large_data = b"x" * (25 * 1024 * 1024 + 1)

        with pytest.raises(TranscriptionError) as exc_info:
            await service.transcribe(large_data, content_type="audio/webm")

        assert exc_info.value.code == "file_too_large"
        assert "exceeds maximum" in str(exc_info.value)

    @pytest.mark.anyio
    async def test_rejects_unsupported_format(self, service: WhisperTranscriptionService) -> None:
        with pytest.raises(TranscriptionError) as exc_info:
            await service.transcribe(b"fake audio data", content_type="audio/unknown")

        assert exc_info.value.code == "unsupported_format"

    @pytest.mark.anyio
    async def test_api_failure_is_wrapped(self, service: WhisperTranscriptionService) -> None:
        """Valid input that fails at the API surfaces as api_error, never as an empty result."""
        with pytest.raises(TranscriptionError) as exc_info:
            await service.transcribe(b"fake audio data", content_type="video/webm;codecs=vp9,opus")
        assert exc_info.value.code == "api_error"

    @pytest.mark.anyio
    async def test_verbose_response_is_parsed(self, service: WhisperTranscriptionService) -> None:
        response = MagicMock()
        response.model_dump.return_value = {
            "text": "  hello there ",
            "duration": 1.5,
            "language": "english",
            "words": [{"word": "hello", "start": 0.0, "end": 0.4}, {"word": "there", "start": 0.5, "end": 0.9}],
        }
        create = AsyncMock(return_value=response)
        service._client.audio.transcriptions.create = create  # type: ignore[method-assign]

        result = await service.transcribe(b"audio", language="en", include_word_timings=True)

        assert result.text == "hello there"
        assert result.duration == 1.5
        assert result.words is not None and [w.word for w in result.words] == ["hello", "there"]
        kwargs = create.call_args.kwargs
        assert kwargs["language"] == "en"
        assert kwargs["timestamp_granularities"] == ["word"]
        assert kwargs["response_format"] == "verbose_json"
