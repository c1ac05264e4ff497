import datetime
import enum
import typing as t

import pydantic as p

from .base import BaseModel
from .id import SessionID
from .phase import Phase, TaskVariant
from .score import FinalScore


class SessionStatus(enum.Enum):
    Active = "active"
    Ended = "ended"


class SessionMetadata(BaseModel):
    """Cross-cutting facts about a session, consulted by phase advancement."""

    model_config = p.ConfigDict(extra="allow")

    consent_recorded: bool = False
    mic_test_completed: bool = False
    device_info: dict[str, t.Any] = p.Field(default_factory=dict)
    speaking_rate: float | None = None
    interruptions: int = 0
    task_variant: TaskVariant | None = None


class Turn(BaseModel):
    """One user utterance and the prompt produced in response to it.

    `duration` is the time, in milliseconds, spent producing the response
    (prompt generation plus speech synthesis), not the learner's speaking time.
    """

    model_config = p.ConfigDict(frozen=True, ser_json_bytes="base64", val_json_bytes="base64")

    index: int
    phase: Phase
    timestamp: datetime.datetime
    user_transcript: str | None = None
    ai_response: str
    duration: int
    user_audio: bytes | None = None
    ai_audio: bytes | None = None


class Session(BaseModel):
    session_id: SessionID
    create_time: datetime.datetime
    phase: Phase = Phase.Init
    phase_start_time: datetime.datetime
    turn_index: int = 0
    turns: list[Turn] = p.Field(default_factory=list)
    metadata: SessionMetadata = p.Field(default_factory=SessionMetadata)
    scores: FinalScore | None = None
    status: SessionStatus = SessionStatus.Active

    @property
    def is_active(self) -> bool:
        return self.status is SessionStatus.Active

    @property
    def last_turn(self) -> Turn | None:
        return self.turns[-1] if self.turns else None
