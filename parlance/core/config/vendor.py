from __future__ import annotations

import typing as t

import annotated_types as ant

from parlance.llm.speech import SpeechFormat, Voice

from .base import BaseSettings


class SpeechSettings(BaseSettings):
    backend: t.Literal["openai", "silent"] = "openai"
    voice: Voice = Voice.Nova
    format: SpeechFormat = SpeechFormat.MP3
    speed: t.Annotated[float, ant.Ge(0.25), ant.Le(4.0)] = 1.0
    model: str = "tts-1"


class TranscriptionSettings(BaseSettings):
    language: str | None = "en"
    model: str = "whisper-1"
    include_word_timings: bool = False


class VendorSettings(BaseSettings):
    speech: SpeechSettings = SpeechSettings()
    transcription: TranscriptionSettings = TranscriptionSettings()
