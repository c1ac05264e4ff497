"""LLM and speech vendor container for dependency injection."""

from __future__ import annotations

import jinja2
from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import Configuration, Object, Provider, Resource, Singleton

from parlance.llm import api_key_for, ChatModelRubricScoringService, create_model, OpenAISpeechService, \
    RubricScoringService, SilentSpeechService, SpeechService, TranscriptionService, WhisperTranscriptionService

from ..config.llm import LLMSettings
from ..config.secrets import LLMSecrets
from ..config.vendor import SpeechSettings, TranscriptionSettings
from ..provider import LoggingProvider


def provide_scoring(
    settings: LLMSettings, secrets: LLMSecrets, env: jinja2.Environment, logging: LoggingProvider
) -> RubricScoringService | None:
    """Rubric scoring backed by the configured chat model; None when no key is configured for its provider."""
    model_settings = settings.models.scoring
    if api_key_for(model_settings.provider, secrets) is None:
        logging.get_logger().warning(
            "no API key for scoring model, rubric scoring is unavailable",
            extra={
                "provider": model_settings.provider,
                "model": model_settings.model,
            },
        )
        return None
    return ChatModelRubricScoringService(create_model(model_settings, secrets), env)


def provide_transcription(
    settings: TranscriptionSettings, secrets: LLMSecrets, logging: LoggingProvider
) -> TranscriptionService | None:
    if secrets.openai is None:
        logging.get_logger().warning("no OpenAI key, audio transcription is unavailable")
        return None
    return WhisperTranscriptionService(api_key=secrets.openai.secret_key, model=settings.model)


def provide_speech(settings: SpeechSettings, secrets: LLMSecrets) -> SpeechService:
    match settings.backend:
        case "silent":
            return SilentSpeechService()
        case "openai":
            if secrets.openai is None:
                raise ValueError("OpenAI API key required for the openai speech backend")
            return OpenAISpeechService(api_key=secrets.openai.secret_key, model=settings.model)


class LLMContainer(DeclarativeContainer):
    """Container for LLM and speech services."""

    config: Configuration = Configuration()
    vendor: Configuration = Configuration()
    secrets: Configuration = Configuration()
    logging: Provider[LoggingProvider] = Resource()
    template: Provider[jinja2.Environment] = Object()

    settings: Provider[LLMSettings] = Singleton(LLMSettings, config)
    llm_secrets: Provider[LLMSecrets] = Singleton(LLMSecrets, secrets)
    speech_settings: Provider[SpeechSettings] = Singleton(SpeechSettings, vendor.speech)
    transcription_settings: Provider[TranscriptionSettings] = Singleton(TranscriptionSettings, vendor.transcription)

    scoring: Provider[RubricScoringService | None] = Singleton(
        provide_scoring, settings=settings, secrets=llm_secrets, env=template, logging=logging
    )
    transcription: Provider[TranscriptionService | None] = Singleton(
        provide_transcription, settings=transcription_settings, secrets=llm_secrets, logging=logging
    )
    speech: Provider[SpeechService] = Singleton(provide_speech, settings=speech_settings, secrets=llm_secrets)
