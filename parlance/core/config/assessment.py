from __future__ import annotations

import types
import typing as t

import annotated_types as ant
import pydantic as p

from parlance.model import CEFRLevel, Phase

from .base import BaseSettings

NonNegativeInt = t.Annotated[int, ant.Ge(0)]
PositiveFloat = t.Annotated[float, ant.Gt(0)]


def default_phase_durations() -> dict[Phase, int]:
    return {
        Phase.Init: 45_000,
        Phase.Warmup: 30_000,
        Phase.InterviewQ1: 60_000,
        Phase.InterviewQ2: 60_000,
        Phase.Task: 90_000,
        Phase.Listening: 60_000,
        Phase.Wrap: 15_000,
        Phase.Complete: 0,
    }


DefaultCEFRThresholds: t.Final[t.Mapping[CEFRLevel, int]] = types.MappingProxyType({
    CEFRLevel.A2: 6,
    CEFRLevel.B1: 11,
    CEFRLevel.B2: 16,
    CEFRLevel.C1: 21,
    CEFRLevel.C2: 26,
})
DefaultFillerWords: t.Final[tuple[str, ...]] = ("uh", "um", "like", "you know", "i mean")
DefaultSilenceRatio: t.Final[float] = 0.15
DefaultWarmupKeywords: t.Final[tuple[str, ...]] = ("name", "call", "from")
DefaultWarmupMinLength: t.Final[int] = 10


def default_cefr_thresholds() -> dict[CEFRLevel, int]:
    return dict(DefaultCEFRThresholds)


class SessionSettings(BaseSettings):
    """Idle expiry of stored sessions."""

    idle_timeout_ms: NonNegativeInt = 300_000
    sweep_interval_seconds: PositiveFloat = 60.0


class TimeoutSettings(BaseSettings):
    """Upper bounds, in seconds, on calls to external collaborators."""

    transcription: PositiveFloat = 30.0
    speech: PositiveFloat = 30.0
    scoring: PositiveFloat = 60.0


class SignalSettings(BaseSettings):
    filler_words: tuple[str, ...] = DefaultFillerWords
    silence_ratio: float = DefaultSilenceRatio


class WarmupSettings(BaseSettings):
    keywords: tuple[str, ...] = DefaultWarmupKeywords
    min_transcript_length: NonNegativeInt = DefaultWarmupMinLength


class AssessmentSettings(BaseSettings):
    phases: dict[Phase, NonNegativeInt] = p.Field(default_factory=default_phase_durations)
    cefr_thresholds: dict[CEFRLevel, NonNegativeInt] = p.Field(default_factory=default_cefr_thresholds)
    session: SessionSettings = SessionSettings()
    timeouts: TimeoutSettings = TimeoutSettings()
    signals: SignalSettings = SignalSettings()
    warmup: WarmupSettings = WarmupSettings()

    @p.field_validator("phases")
    @classmethod
    def validate_phases(cls, v: dict[Phase, int]) -> dict[Phase, int]:
        missing = [ph.value for ph in Phase if ph not in v]
        if missing:
            raise ValueError(f"missing durations for phases: {', '.join(missing)}")
        return v

    @p.field_validator("cefr_thresholds")
    @classmethod
    def validate_thresholds(cls, v: dict[CEFRLevel, int]) -> dict[CEFRLevel, int]:
        ordered = sorted(v.items())
        if any(a[1] >= b[1] for a, b in zip(ordered, ordered[1:])):
            raise ValueError("CEFR thresholds must increase with level")
        return v
