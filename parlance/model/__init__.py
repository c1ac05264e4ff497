__all__ = [
    # Base
    "BaseModel",
    "DeploymentEnvironment",
    # ID Types
    "SessionID",
    # Phases
    "Phase",
    "TaskVariant",
    # Sessions
    "Session",
    "SessionMetadata",
    "SessionStatus",
    "Turn",
    # Scores
    "CEFRLevel",
    "DimensionScores",
    "FinalScore",
    "RubricDimensions",
    "SpeechSignals",
]

from .base import BaseModel, DeploymentEnvironment
from .id import SessionID
from .phase import Phase, TaskVariant
from .score import CEFRLevel, DimensionScores, FinalScore, RubricDimensions, SpeechSignals
from .session import Session, SessionMetadata, SessionStatus, Turn
