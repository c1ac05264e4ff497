from __future__ import annotations

import asyncio

import pytest

from parlance.llm import ScoringError, SpeechError, TranscriptionError, with_timeout


class TestWithTimeout(object):
    @pytest.mark.anyio
    async def test_passes_result_through(self) -> None:
        async def quick() -> str:
            return "done"

        assert await with_timeout(quick(), 1.0, SpeechError, "synthesis") == "done"

    @pytest.mark.anyio
    async def test_no_deadline(self) -> None:
        async def quick() -> int:
            await asyncio.sleep(0)
            return 7

        assert await with_timeout(quick(), None, ScoringError, "scoring") == 7

    @pytest.mark.anyio
    async def test_expired_deadline(self) -> None:
        with pytest.raises(TranscriptionError) as exc_info:
            await with_timeout(asyncio.sleep(1.0), 0.01, TranscriptionError, "transcription")

        assert exc_info.value.code == "timeout"
        assert "transcription timed out" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, TimeoutError)

    @pytest.mark.anyio
    async def test_other_errors_propagate(self) -> None:
        async def broken() -> None:
            raise SpeechError("boom", code="api_error")

        with pytest.raises(SpeechError) as exc_info:
            await with_timeout(broken(), 1.0, SpeechError, "synthesis")
        assert exc_info.value.code == "api_error"

    def test_repr(self) -> None:
        assert repr(ScoringError("bad json", code="invalid_response")) == (
            "ScoringError('bad json', code='invalid_response')"
        )
