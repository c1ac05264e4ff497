"""Clients for the external speech and language services used by assessments."""

__all__ = [
    # Errors
    "CollaboratorError",
    "ScoringError",
    "SpeechError",
    "TranscriptionError",
    "with_timeout",
    # Provider
    "ProviderType",
    "api_key_for",
    "create_model",
    # Transcription
    "TranscriptionService",
    "TranscriptionResult",
    "WhisperTranscriptionService",
    "WordTiming",
    # Speech synthesis
    "ContentTypes",
    "OpenAISpeechService",
    "SilentSpeechService",
    "SpeechFormat",
    "SpeechResult",
    "SpeechService",
    "Voice",
    # Scoring
    "ChatModelRubricScoringService",
    "RubricScoringService",
]

from .errors import CollaboratorError, ScoringError, SpeechError, TranscriptionError, with_timeout
from .provider import api_key_for, create_model, ProviderType
from .scoring import ChatModelRubricScoringService, RubricScoringService
from .speech import ContentTypes, OpenAISpeechService, SilentSpeechService, SpeechFormat, SpeechResult, \
    SpeechService, Voice
from .transcription import TranscriptionResult, TranscriptionService, WhisperTranscriptionService, WordTiming
