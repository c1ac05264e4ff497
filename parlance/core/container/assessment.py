from __future__ import annotations

from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import Configuration, Factory, Object, Provider, Singleton

from parlance.assessment import AssessmentEngine, PhaseTable, Scorer, SessionLocks, SessionStateManager, \
    SessionSweeper, SignalAggregator, TranscriptionOptions, TurnProcessor, VoiceOptions
from parlance.llm import RubricScoringService, SpeechService, TranscriptionService
from parlance.storage.session import SessionStore

from ..config.assessment import AssessmentSettings
from ..config.vendor import VendorSettings
from ..provider import TimestampProvider


def provide_phase_table(settings: AssessmentSettings) -> PhaseTable:
    return PhaseTable(settings.phases)


def provide_turn_processor(
    settings: AssessmentSettings,
    vendor: VendorSettings,
    states: SessionStateManager,
    speech: SpeechService,
    clock: TimestampProvider,
) -> TurnProcessor:
    return TurnProcessor(
        states,
        speech,
        clock,
        voice=VoiceOptions(voice=vendor.speech.voice, format=vendor.speech.format, speed=vendor.speech.speed),
        speech_timeout=settings.timeouts.speech,
        warmup_keywords=settings.warmup.keywords,
        warmup_min_length=settings.warmup.min_transcript_length,
    )


def provide_engine(
    settings: AssessmentSettings,
    vendor: VendorSettings,
    states: SessionStateManager,
    turns: TurnProcessor,
    signals: SignalAggregator,
    scorer: Scorer,
    store: SessionStore,
    transcription: TranscriptionService | None,
    clock: TimestampProvider,
    locks: SessionLocks,
) -> AssessmentEngine:
    return AssessmentEngine(
        states,
        turns,
        signals,
        scorer,
        store,
        transcription,
        clock,
        locks=locks,
        idle_timeout=settings.session.idle_timeout_ms,
        transcription_timeout=settings.timeouts.transcription,
        transcription_options=TranscriptionOptions(
            language=vendor.transcription.language,
            include_word_timings=vendor.transcription.include_word_timings,
        ),
    )


class AssessmentContainer(DeclarativeContainer):
    config: Configuration = Configuration()
    vendor: Configuration = Configuration()
    clock: Provider[TimestampProvider] = Object()
    store: Provider[SessionStore] = Provider()
    speech: Provider[SpeechService] = Provider()
    transcription: Provider[TranscriptionService | None] = Provider()
    scoring: Provider[RubricScoringService | None] = Provider()

    settings: Provider[AssessmentSettings] = Singleton(AssessmentSettings, config)
    vendor_settings: Provider[VendorSettings] = Singleton(VendorSettings, vendor)

    phases: Provider[PhaseTable] = Singleton(provide_phase_table, settings=settings)
    states: Provider[SessionStateManager] = Singleton(SessionStateManager, phases=phases, clock=clock)
    signals: Provider[SignalAggregator] = Singleton(
        SignalAggregator,
        filler_words=settings.provided.signals.filler_words,
        silence_ratio=settings.provided.signals.silence_ratio,
    )
    scorer: Provider[Scorer] = Singleton(
        Scorer,
        signals=signals,
        scoring=scoring,
        cefr_thresholds=settings.provided.cefr_thresholds,
        scoring_timeout=settings.provided.timeouts.scoring,
    )
    turns: Provider[TurnProcessor] = Singleton(
        provide_turn_processor,
        settings=settings,
        vendor=vendor_settings,
        states=states,
        speech=speech,
        clock=clock,
    )
    locks: Provider[SessionLocks] = Singleton(SessionLocks)

    engine: Provider[AssessmentEngine] = Singleton(
        provide_engine,
        settings=settings,
        vendor=vendor_settings,
        states=states,
        turns=turns,
        signals=signals,
        scorer=scorer,
        store=store,
        transcription=transcription,
        clock=clock,
        locks=locks,
    )
    sweeper: Provider[SessionSweeper] = Factory(
        SessionSweeper, engine=engine, interval=settings.provided.session.sweep_interval_seconds
    )
