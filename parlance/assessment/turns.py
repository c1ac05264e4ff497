"""One cycle of the assessment: take an utterance, answer it, maybe advance."""

from __future__ import annotations

import logging
import random
import typing as t

from parlance.core.config.assessment import DefaultWarmupKeywords, DefaultWarmupMinLength
from parlance.core.provider import TimestampProvider
from parlance.llm import SpeechError, SpeechFormat, SpeechResult, SpeechService, Voice, with_timeout
from parlance.model import Phase, Session, TaskVariant, Turn

from .prompts import next_prompt, PromptContext
from .state import Millisecond, SessionStateManager

logger = logging.getLogger(__name__)

TaskVariantChooser = t.Callable[[t.Sequence[TaskVariant]], TaskVariant]


class TurnResult(t.NamedTuple):
    prompt: str
    audio: bytes
    phase: Phase
    time_remaining: int
    advanced: bool
    timed_out: bool
    turn: Turn


class VoiceOptions(t.NamedTuple):
    voice: Voice = Voice.Nova
    format: SpeechFormat = SpeechFormat.MP3
    speed: float = 1.0


class TurnProcessor(object):
    """Drive a session through one turn.

    The session passed in is mutated in place; callers hand in a private copy
    and discard it if `process` raises, so a failed turn leaves no trace.
    """

    def __init__(
        self,
        states: SessionStateManager,
        speech: SpeechService,
        clock: TimestampProvider,
        choose_variant: TaskVariantChooser = random.choice,
        voice: VoiceOptions = VoiceOptions(),
        speech_timeout: float | None = None,
        warmup_keywords: t.Sequence[str] = DefaultWarmupKeywords,
        warmup_min_length: int = DefaultWarmupMinLength,
    ) -> None:
        self.states = states
        self.speech = speech
        self.clock = clock
        self.choose_variant = choose_variant
        self.voice = voice
        self.speech_timeout = speech_timeout
        self.warmup_keywords = tuple(warmup_keywords)
        self.warmup_min_length = warmup_min_length

    def context(self, session: Session) -> PromptContext:
        last = session.last_turn
        return PromptContext(
            phase=session.phase,
            turn_index=session.turn_index,
            last_transcript=last.user_transcript if last else None,
            time_remaining=self.states.time_remaining(session),
            metadata=session.metadata,
        )

    def ensure_task_variant(self, session: Session) -> None:
        if session.phase is not Phase.Task or session.metadata.task_variant is not None:
            return
        session.metadata.task_variant = self.choose_variant(tuple(TaskVariant))
        logger.debug(
            "task variant chosen",
            extra={
                "session_id": session.session_id,
                "task_variant": session.metadata.task_variant,
            },
        )

    def should_advance(self, session: Session, turn: Turn) -> bool:
        """Evaluated after the turn has been appended and `turn_index` incremented."""
        index = session.turn_index
        match session.phase:
            case Phase.Init:
                return session.metadata.consent_recorded and session.metadata.mic_test_completed
            case Phase.Warmup:
                return index > 0 and len(turn.user_transcript or "") > self.warmup_min_length
            case Phase.InterviewQ1 | Phase.InterviewQ2 | Phase.Task | Phase.Listening | Phase.Wrap:
                return index > 0
            case Phase.Complete:
                return False

    async def synthesize(self, prompt: str) -> SpeechResult:
        return await with_timeout(
            self.speech.synthesize(prompt, voice=self.voice.voice, format=self.voice.format, speed=self.voice.speed),
            self.speech_timeout,
            SpeechError,
            "speech synthesis",
        )

    async def process(self, session: Session, transcript: str | None, audio: bytes | None = None) -> TurnResult:
        timed_out = False
        if self.states.has_timed_out(session):
            expired = session.phase
            timed_out = self.states.advance(session) is not expired
            logger.info(
                "phase timed out",
                extra={
                    "session_id": session.session_id,
                    "phase": expired,
                },
            )

        started = self.clock()
        self.ensure_task_variant(session)
        prompt = next_prompt(self.context(session), self.warmup_keywords)
        speech = await self.synthesize(prompt)

        turn = Turn(
            index=session.turn_index,
            phase=session.phase,
            timestamp=started,
            user_transcript=transcript,
            ai_response=prompt,
            duration=max(0, (self.clock() - started) // Millisecond),
            user_audio=audio,
            ai_audio=speech.audio_data or None,
        )
        session.turns.append(turn)
        session.turn_index += 1
        logger.debug(
            "turn appended",
            extra={
                "session_id": session.session_id,
                "phase": turn.phase,
                "index": turn.index,
                "duration": turn.duration,
            },
        )

        advanced = False
        if self.should_advance(session, turn):
            before = session.phase
            advanced = self.states.advance(session) is not before

        return TurnResult(
            prompt=prompt,
            audio=speech.audio_data,
            phase=session.phase,
            time_remaining=self.states.time_remaining(session),
            advanced=advanced,
            timed_out=timed_out,
            turn=turn,
        )
