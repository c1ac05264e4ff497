"""Phase-timed conversational English assessment."""

__all__ = [
    # Engine
    "AssessmentEngine",
    "AnalyticsReport",
    "ProgressReport",
    "StatusReport",
    "TranscriptEntry",
    "TranscriptionOptions",
    "TurnAudio",
    "SessionSweeper",
    # Components
    "PhaseTable",
    "Prompts",
    "PromptContext",
    "next_prompt",
    "Scorer",
    "SessionLocks",
    "SessionStateManager",
    "SignalAggregator",
    "TurnProcessor",
    "TurnResult",
    "VoiceOptions",
    "map_to_cefr",
    # Errors
    "AssessmentError",
    "InvalidMetadataError",
    "InvalidSessionStateError",
    "InvariantViolation",
    "PhaseTableError",
    "SessionNotFoundError",
    "TurnNotFoundError",
]

from .engine import AnalyticsReport, AssessmentEngine, ProgressReport, StatusReport, TranscriptEntry, \
    TranscriptionOptions, TurnAudio
from .errors import AssessmentError, InvalidMetadataError, InvalidSessionStateError, InvariantViolation, \
    PhaseTableError, SessionNotFoundError, TurnNotFoundError
from .locks import SessionLocks
from .phases import PhaseTable
from .prompts import next_prompt, PromptContext, Prompts
from .scorer import map_to_cefr, Scorer
from .signals import SignalAggregator
from .state import SessionStateManager
from .sweeper import SessionSweeper
from .turns import TurnProcessor, TurnResult, VoiceOptions
