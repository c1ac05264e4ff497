"""Unit tests for speech synthesis services."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import SecretStr

from parlance.llm import OpenAISpeechService, SilentSpeechService, SpeechError, SpeechFormat, Voice


class TestValidation(object):
    """Both backends validate requests the same way before doing any work."""

    @pytest.mark.anyio
    @pytest.mark.parametrize(
        ("text", "speed", "code"),
        [
            ("", 1.0, "empty_text"),
            ("   ", 1.0, "empty_text"),
            ("x" * 4097, 1.0, "text_too_long"),
            ("hello", 0.2, "invalid_speed"),
            ("hello", 4.5, "invalid_speed"),
        ],
    )
    async def test_rejects_invalid_requests(self, text: str, speed: float, code: str) -> None:
        with pytest.raises(SpeechError) as exc_info:
            await SilentSpeechService().synthesize(text, speed=speed)
        assert exc_info.value.code == code


class TestSilentSpeechService(object):
    @pytest.mark.anyio
    async def test_produces_no_audio(self) -> None:
        result = await SilentSpeechService().synthesize("hello", format=SpeechFormat.WAV)
        assert result.audio_data == b""
        assert result.content_type == "audio/wav"
        assert result.format is SpeechFormat.WAV


class TestOpenAISpeechService(object):
    @pytest.mark.anyio
    async def test_synthesize(self) -> None:
        svc = OpenAISpeechService(api_key=SecretStr("fake-api-key"))
        response = MagicMock()
        response.read.return_value = b"mp3 bytes"
        create = AsyncMock(return_value=response)
        svc._client.audio.speech.create = create  # type: ignore[method-assign]

        result = await svc.synthesize("hello", voice=Voice.Onyx, speed=1.25)

        assert result.audio_data == b"mp3 bytes"
        assert result.content_type == "audio/mpeg"
        assert create.call_args.kwargs == {
            "model": "tts-1",
            "voice": "onyx",
            "input": "hello",
            "response_format": "mp3",
            "speed": 1.25,
        }
        await svc.aclose()

    @pytest.mark.anyio
    async def test_api_failure_is_wrapped(self) -> None:
        svc = OpenAISpeechService(api_key=SecretStr("fake-api-key"))
        svc._client.audio.speech.create = AsyncMock(side_effect=RuntimeError("rate limited"))  # type: ignore

        with pytest.raises(SpeechError) as exc_info:
            await svc.synthesize("hello")
        assert exc_info.value.code == "api_error"
        await svc.aclose()
