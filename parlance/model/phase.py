from __future__ import annotations

import enum


class Phase(enum.Enum):
    """Stages of the assessment, in the order they are taken."""

    Init = "init"
    Warmup = "warmup"
    InterviewQ1 = "interview_q1"
    InterviewQ2 = "interview_q2"
    Task = "task"
    Listening = "listening"
    Wrap = "wrap"
    Complete = "complete"

    @property
    def position(self) -> int:
        return list(Phase).index(self)

    @property
    def is_terminal(self) -> bool:
        return self is Phase.Complete


class TaskVariant(enum.Enum):
    Picture = "picture"
    Roleplay = "roleplay"
