"""Session lifecycle facade: create, turn loop, finalize, plus operator controls."""

from __future__ import annotations

import contextlib
import datetime
import logging
import typing as t

import pydantic as p
import typing_extensions as te

from parlance.core.provider import TimestampProvider
from parlance.lib.util import deep_update, round_half_up
from parlance.llm import TranscriptionError, TranscriptionService, with_timeout
from parlance.model import FinalScore, Phase, Session, SessionID, SessionMetadata, SessionStatus
from parlance.storage.session import SessionStore, StoreStats

from .errors import InvalidMetadataError, InvalidSessionStateError, SessionNotFoundError, TurnNotFoundError
from .locks import SessionLocks
from .scorer import Scorer
from .signals import PhaseBreakdown, SignalAggregator, SpeakingMetrics
from .state import Millisecond, SessionStateManager
from .turns import TurnProcessor, TurnResult

logger = logging.getLogger(__name__)

FinalizablePhases: t.Final[frozenset[Phase]] = frozenset({Phase.Wrap, Phase.Complete})


class StatusReport(te.TypedDict):
    session_id: SessionID
    phase: Phase
    status: SessionStatus
    turn_index: int
    time_remaining: int
    metadata: SessionMetadata
    finalized: bool


class ProgressReport(te.TypedDict):
    current_phase: Phase
    phase_number: int
    total_phases: int
    progress_percentage: int
    turns_completed: int
    time_elapsed: int
    estimated_time_remaining: int


class ResponseTimes(te.TypedDict, total=False):
    average_response_time: int
    total_responses: int
    response_times: list[int]


class AnalyticsReport(te.TypedDict):
    session_duration: int
    total_turns: int
    phase_breakdown: dict[Phase, PhaseBreakdown]
    speaking_metrics: SpeakingMetrics
    response_times: ResponseTimes


class TranscriptEntry(te.TypedDict):
    phase: Phase
    turn_index: int
    timestamp: datetime.datetime
    transcript: str
    ai_response: str


class TurnAudio(te.TypedDict):
    position: int
    user_audio: bytes | None
    ai_audio: bytes | None


class TranscriptionOptions(t.NamedTuple):
    language: str | None = None
    include_word_timings: bool = False


class AssessmentEngine(object):
    """Compose phase timing, turn processing and scoring over a session store.

    Every operation that changes a session runs under that session's lock, on a
    private copy loaded from the store. The copy is written back only when the
    operation succeeds, so a failure leaves the stored session exactly as it was.
    """

    def __init__(
        self,
        states: SessionStateManager,
        turns: TurnProcessor,
        signals: SignalAggregator,
        scorer: Scorer,
        store: SessionStore,
        transcription: TranscriptionService | None,
        clock: TimestampProvider,
        locks: SessionLocks | None = None,
        idle_timeout: int = 300_000,
        transcription_timeout: float | None = None,
        transcription_options: TranscriptionOptions = TranscriptionOptions(),
    ) -> None:
        self.states = states
        self.turns = turns
        self.signals = signals
        self.scorer = scorer
        self.store = store
        self.transcription = transcription
        self.clock = clock
        self.locks = locks or SessionLocks()
        self.idle_timeout = idle_timeout
        self.transcription_timeout = transcription_timeout
        self.transcription_options = transcription_options

    @property
    def phases(self):
        return self.states.phases

    async def _load(self, session_id: SessionID) -> Session:
        session = await self.store.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    @contextlib.asynccontextmanager
    async def _checkout(self, session_id: SessionID) -> t.AsyncIterator[Session]:
        """Lock the session and lend out a private copy, stored back only if the block succeeds."""
        async with self.locks.hold(session_id):
            session = await self._load(session_id)
            yield session
            await self.store.put(session_id, session)

    @staticmethod
    def _require_active(session: Session) -> None:
        if not session.is_active:
            raise InvalidSessionStateError(f"session is {session.status.value}", session.session_id)

    async def start(self) -> Session:
        session = self.states.create()
        await self.store.put(session.session_id, session)
        logger.info(
            "session created",
            extra={
                "session_id": session.session_id,
                "phase": session.phase,
            },
        )
        return session.model_copy(deep=True)

    async def get(self, session_id: SessionID) -> Session:
        return await self._load(session_id)

    async def submit_turn(self, session_id: SessionID, transcript: str | None, audio: bytes | None = None) -> TurnResult:
        async with self._checkout(session_id) as session:
            self._require_active(session)
            return await self.turns.process(session, transcript, audio)

    async def submit_audio(
        self,
        session_id: SessionID,
        audio: bytes,
        *,
        filename: str = "audio.webm",
        content_type: str = "audio/webm",
        language: str | None = None,
    ) -> TurnResult:
        """Transcribe the candidate's recording, then process it as a turn."""
        async with self._checkout(session_id) as session:
            self._require_active(session)
            if self.transcription is None:
                raise TranscriptionError("no transcription service is configured", code="unavailable")
            result = await with_timeout(
                self.transcription.transcribe(
                    audio,
                    filename=filename,
                    content_type=content_type,
                    language=language or self.transcription_options.language,
                    include_word_timings=self.transcription_options.include_word_timings,
                ),
                self.transcription_timeout,
                TranscriptionError,
                "transcription",
            )
            return await self.turns.process(session, result.text, audio)

    async def finalize(self, session_id: SessionID) -> FinalScore:
        async with self._checkout(session_id) as session:
            if session.phase not in FinalizablePhases:
                raise InvalidSessionStateError(
                    f"assessment not yet completed, phase is {session.phase.value}", session_id
                )
            return await self.scorer.finalize(session)

    async def status(self, session_id: SessionID) -> StatusReport:
        """Report the session's position, first applying any pending phase timeout."""
        async with self._checkout(session_id) as session:
            if session.is_active and self.states.has_timed_out(session):
                expired = session.phase
                self.states.advance(session)
                logger.info(
                    "phase timed out",
                    extra={
                        "session_id": session_id,
                        "phase": expired,
                    },
                )
            return StatusReport(
                session_id=session.session_id,
                phase=session.phase,
                status=session.status,
                turn_index=session.turn_index,
                time_remaining=self.states.time_remaining(session),
                metadata=session.metadata.model_copy(deep=True),
                finalized=session.scores is not None,
            )

    async def update_metadata(self, session_id: SessionID, updates: t.Mapping[str, t.Any]) -> SessionMetadata:
        """Merge `updates` into the session's metadata; nested mappings merge key by key.

        The task variant is fixed once chosen; changing it raises `InvalidMetadataError`.
        """
        async with self._checkout(session_id) as session:
            merged = deep_update(session.metadata.model_dump(), updates)
            try:
                metadata = SessionMetadata.model_validate(merged)
            except p.ValidationError as e:
                raise InvalidMetadataError(f"invalid metadata update: {e.error_count()} error(s)", session_id) from e
            chosen = session.metadata.task_variant
            if chosen is not None and metadata.task_variant != chosen:
                raise InvalidMetadataError(f"task variant already chosen: {chosen.value}", session_id)
            session.metadata = metadata
            logger.debug(
                "metadata updated",
                extra={
                    "session_id": session_id,
                    "keys": sorted(updates),
                },
            )
            return session.metadata.model_copy(deep=True)

    async def advance(self, session_id: SessionID, target: Phase | None = None) -> Phase:
        """Operator-forced advance: one phase, or forward until `target`."""
        async with self._checkout(session_id) as session:
            if target is None:
                return self.states.advance(session)
            self.states.advance_to(session, target)
            return session.phase

    async def end(self, session_id: SessionID) -> Session:
        """Mark the session ended and move it to the terminal phase in one step."""
        async with self._checkout(session_id) as session:
            session.status = SessionStatus.Ended
            self.states.advance_to(session, Phase.Complete)
            logger.info("session ended", extra={"session_id": session_id})
            return session.model_copy(deep=True)

    async def reset(self, session_id: SessionID) -> Session:
        """Return the session to its initial state, keeping its id and creation time."""
        async with self._checkout(session_id) as session:
            fresh = self.states.create(session_id)
            fresh.create_time = session.create_time
            for name in Session.model_fields:
                setattr(session, name, getattr(fresh, name))
            logger.info("session reset", extra={"session_id": session_id})
            return session.model_copy(deep=True)

    async def progress(self, session_id: SessionID) -> ProgressReport:
        session = await self._load(session_id)
        total = len(self.phases.phases) - 1
        number = min(session.phase.position + 1, total)
        if session.phase.is_terminal:
            remaining = 0
        else:
            remaining = self.states.time_remaining(session) + self.phases.remaining_after(session.phase)
        return ProgressReport(
            current_phase=session.phase,
            phase_number=number,
            total_phases=total,
            progress_percentage=100 if session.phase.is_terminal else round_half_up(number / total * 100),
            turns_completed=session.turn_index,
            time_elapsed=max(0, (self.clock() - session.create_time) // Millisecond),
            estimated_time_remaining=remaining,
        )

    async def analytics(self, session_id: SessionID) -> AnalyticsReport:
        session = await self._load(session_id)
        times = self.signals.response_times(session)
        response_times = ResponseTimes()
        if times:
            response_times = ResponseTimes(
                average_response_time=round_half_up(sum(times) / len(times)),
                total_responses=len(times),
                response_times=times,
            )
        return AnalyticsReport(
            session_duration=max(0, (self.clock() - session.create_time) // Millisecond),
            total_turns=len(session.turns),
            phase_breakdown=self.signals.phase_breakdown(session),
            speaking_metrics=self.signals.speaking_metrics(session),
            response_times=response_times,
        )

    async def transcript(self, session_id: SessionID) -> list[TranscriptEntry]:
        session = await self._load(session_id)
        return [
            TranscriptEntry(
                phase=turn.phase,
                turn_index=turn.index,
                timestamp=turn.timestamp,
                transcript=turn.user_transcript,
                ai_response=turn.ai_response,
            )
            for turn in session.turns
            if turn.user_transcript
        ]

    async def turn_audio(self, session_id: SessionID, position: int) -> TurnAudio:
        """Audio of the turn at `position` in the whole-session turn log."""
        session = await self._load(session_id)
        if not 0 <= position < len(session.turns):
            raise TurnNotFoundError(session_id, position)
        turn = session.turns[position]
        return TurnAudio(position=position, user_audio=turn.user_audio, ai_audio=turn.ai_audio)

    async def sweep_expired(self) -> list[SessionID]:
        """Evict sessions idle past the timeout, sparing any with an operation in flight."""
        expired = await self.store.sweep(self.idle_timeout, exclude=self.locks.busy())
        if expired:
            logger.info(
                "expired sessions swept",
                extra={
                    "count": len(expired),
                    "session_ids": expired,
                },
            )
        return expired

    async def stats(self) -> StoreStats:
        return await self.store.stats()
