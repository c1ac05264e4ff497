"""Pytest fixtures for Parlance tests.

Collaborators are replaced with in-process fakes and time is driven by a
manual clock, so every test is deterministic and needs no network access.

Usage:
    @pytest.mark.anyio
    async def test_turn(engine: AssessmentEngine, clock: FakeClock):
        session = await engine.start()
        clock.advance(ms=1000)
        await engine.submit_turn(session.session_id, "hello")
"""

from __future__ import annotations

import asyncio
import datetime
import json
import os
import typing as t
from pathlib import Path

import jinja2
import pydantic as p
import pytest

import parlance
from parlance.assessment import AssessmentEngine, PhaseTable, Scorer, SessionStateManager, SignalAggregator, \
    TurnProcessor
from parlance.core.config.assessment import default_phase_durations
from parlance.core.container import ParlanceContainer
from parlance.core.container.template import provide_llm_env
from parlance.llm import ContentTypes, SpeechFormat, SpeechResult, TranscriptionError, \
    TranscriptionResult, Voice
from parlance.model import DeploymentEnvironment, TaskVariant
from parlance.storage.session import InMemorySessionStore


class FakeClock(object):
    """A TimestampProvider that only moves when told to."""

    def __init__(self, start: datetime.datetime | None = None) -> None:
        self.now = start or datetime.datetime(2025, 3, 1, 9, 0, tzinfo=datetime.UTC)

    def __call__(self) -> datetime.datetime:
        return self.now

    def advance(self, ms: int = 0, seconds: float = 0) -> datetime.datetime:
        self.now += datetime.timedelta(milliseconds=ms, seconds=seconds)
        return self.now


class FakeSpeechService(object):
    """Echo the prompt back as audio bytes, optionally failing or stalling."""

    MaxTextLength = 4096

    def __init__(self, clock: FakeClock | None = None) -> None:
        self.clock = clock
        self.calls: list[str] = []
        self.fail_with: Exception | None = None
        self.delay: float = 0.0
        self.elapsed_ms: int = 0

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
        self.calls.append(text)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_with is not None:
            raise self.fail_with
        if self.clock is not None and self.elapsed_ms:
            self.clock.advance(ms=self.elapsed_ms)
        return SpeechResult(audio_data=f"tts:{text}".encode(), content_type=ContentTypes[format], format=format)


class FakeTranscriptionService(object):
    def __init__(self) -> None:
        self.text = "my name is Ana and I am calling from Lisbon"
        self.fail_with: TranscriptionError | None = None
        self.calls: list[dict[str, t.Any]] = []

    @property
    def max_file_size(self) -> int:
        return 1024

    def supports_format(self, content_type: str) -> bool:
        return content_type.startswith("audio/")

    async def transcribe(
        self,
        audio_data: bytes,
        *,
        filename: str = "audio.webm",
        content_type: str = "audio/webm",
        language: str | None = None,
        include_word_timings: bool = False,
    ) -> TranscriptionResult:
        self.calls.append({"audio": audio_data, "content_type": content_type, "language": language})
        if self.fail_with is not None:
            raise self.fail_with
        return TranscriptionResult(text=self.text, language=language)


def rubric_response(
    scores: dict[str, t.Any] | None = None, rationale: str = "clear and mostly accurate", confidence: float = 0.8
) -> str:
    body = {
        "scores": scores
        or {
            "fluency": 3,
            "pronunciation": 3,
            "grammar": 3,
            "vocabulary": 3,
            "comprehension": 3,
            "task_completion": 3,
        },
        "rationale": rationale,
        "confidence": confidence,
    }
    return json.dumps(body)


class FakeScoringService(object):
    def __init__(self) -> None:
        self.response = rubric_response()
        self.delay: float = 0.0
        self.calls: list[tuple[str, dict[str, t.Any]]] = []

    async def score(self, transcript: str, context: dict[str, t.Any], rubric: t.Mapping[str, str]) -> str:
        self.calls.append((transcript, context))
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.response


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def phases() -> PhaseTable:
    return PhaseTable(default_phase_durations())


@pytest.fixture
def states(phases: PhaseTable, clock: FakeClock) -> SessionStateManager:
    return SessionStateManager(phases, clock)


@pytest.fixture
def speech(clock: FakeClock) -> FakeSpeechService:
    return FakeSpeechService(clock)


@pytest.fixture
def transcription() -> FakeTranscriptionService:
    return FakeTranscriptionService()


@pytest.fixture
def make_rubric_response() -> t.Callable[..., str]:
    return rubric_response


@pytest.fixture
def scoring() -> FakeScoringService:
    return FakeScoringService()


@pytest.fixture
def store(clock: FakeClock) -> InMemorySessionStore:
    return InMemorySessionStore(clock=clock)


@pytest.fixture
def signals() -> SignalAggregator:
    return SignalAggregator()


@pytest.fixture
def turns(states: SessionStateManager, speech: FakeSpeechService, clock: FakeClock) -> TurnProcessor:
    return TurnProcessor(states, speech, clock, choose_variant=lambda variants: TaskVariant.Roleplay)


@pytest.fixture
def scorer(signals: SignalAggregator, scoring: FakeScoringService) -> Scorer:
    return Scorer(signals, scoring)


@pytest.fixture
def engine(
    states: SessionStateManager,
    turns: TurnProcessor,
    signals: SignalAggregator,
    scorer: Scorer,
    store: InMemorySessionStore,
    transcription: FakeTranscriptionService,
    clock: FakeClock,
) -> AssessmentEngine:
    return AssessmentEngine(states, turns, signals, scorer, store, transcription, clock)


@pytest.fixture(scope="session")
def root() -> Path:
    return Path(os.path.dirname(parlance.__file__)).parent


@pytest.fixture(scope="session")
def llm_env(root: Path) -> jinja2.Environment:
    """The LLM prompt template environment, configured as the container builds it."""
    return provide_llm_env("parlance/templates/llm", root)


@pytest.fixture
def container(root: Path, tmp_path: Path) -> t.Generator[ParlanceContainer]:
    """Boot the DI container against the repository config in the Test environment.

    Secrets are read from an empty directory, so no vendor client is ever built.
    """
    ct = ParlanceContainer()
    ParlanceContainer.boot(
        ct,
        debug=False,
        env=DeploymentEnvironment.Test,
        config_root=p.FileUrl(f"file://{root}/config"),
        secrets_path=p.FileUrl(f"file://{tmp_path}"),
        override=(),
    )

    yield ct

    ct.shutdown_resources()
